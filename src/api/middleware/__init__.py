"""
API Middleware - Request/response processing

Exception handlers turn simulator errors into the standard ErrorResponse.
"""

from api.middleware.error_handler import register_exception_handlers

__all__ = ["register_exception_handlers"]
