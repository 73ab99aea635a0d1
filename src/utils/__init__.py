"""
Utility functions for the GPIO simulator
"""

from .enum_helper import EnumHelper
from .serialization import Serializer

__all__ = [
    'EnumHelper',
    'Serializer',
]
