"""
Models package - Data models for the GPIO simulator
"""

from .enums import PinMode, StepAction, LogSeverity, EngineState, StopReason, LogLevel, LogCategory
from .errors import SimulatorError, ValidationError, NotFoundError, TransportError

__all__ = [
    'PinMode',
    'StepAction',
    'LogSeverity',
    'EngineState',
    'StopReason',
    'LogLevel',
    'LogCategory',
    'SimulatorError',
    'ValidationError',
    'NotFoundError',
    'TransportError',
]
