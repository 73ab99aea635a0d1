"""
Managers for configuration
"""

from .config_manager import ConfigManager, RuntimeSettings

__all__ = ['ConfigManager', 'RuntimeSettings']
