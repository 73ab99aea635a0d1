"""
Error handling middleware for API

FastAPI calls the handler registered for the raised exception type and
returns its response. Simulator errors map to status codes by kind:
- ValidationError -> 422
- NotFoundError   -> 404
- TransportError  -> 400
Request body validation failures are 422 and anything unexpected is 500.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import json
import uuid

from api.schemas.error import ErrorResponse, ErrorDetail, ValidationErrorResponse
from models.errors import SimulatorError, ValidationError, NotFoundError, TransportError
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    TransportError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: SimulatorError) -> int:
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    # Handle validation errors (bad request format)
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors (bad JSON structure)"""
        request_id = str(uuid.uuid4())
        errors = exc.errors()

        log.warn(f"Validation error ({request_id}): {len(errors)} errors", path=request.url.path)

        # Convert Pydantic errors to readable format
        validation_errors = []
        for error in errors:
            field = ".".join(str(x) for x in error["loc"][1:])  # Skip "body"
            validation_errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"]
            })

        response = ValidationErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"error_count": len(errors)},
            ),
            validation_errors=validation_errors,
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=json.loads(response.model_dump_json())
        )

    # Handle simulator errors (our own taxonomy)
    @app.exception_handler(SimulatorError)
    async def simulator_exception_handler(request: Request, exc: SimulatorError):
        """Handle validation, not-found and transport errors raised by services"""
        request_id = str(uuid.uuid4())

        log.warn(f"Simulator error ({request_id}): {exc.code} - {exc.message}", path=request.url.path)

        response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=status_for(exc),
            content=json.loads(response.model_dump_json())
        )

    # Handle unexpected errors (server errors)
    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        request_id = str(uuid.uuid4())

        log.error(
            f"Unexpected error ({request_id}): {type(exc).__name__}: {str(exc)}",
            exception_type=type(exc).__name__,
            path=request.url.path
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred. Please try again.",
                details={"request_id": request_id},
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=json.loads(response.model_dump_json())
        )
