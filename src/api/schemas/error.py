"""
Error schemas - Pydantic models for error responses

Every error the API returns uses the same envelope, so a client can handle
validation, not-found and transport failures the same way.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context (field names, valid values, etc.)"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the error occurred"
    )


class ErrorResponse(BaseModel):
    """API error response - standardized format"""
    error: ErrorDetail = Field(description="Error information")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")

    class Config:
        json_schema_extra = {
            "example": {
                "error": {
                    "code": "NOT_FOUND",
                    "message": "Pin '99' not found",
                    "details": {"kind": "Pin", "id": 99},
                    "timestamp": "2026-03-02T10:30:00Z"
                },
                "request_id": "req-12345"
            }
        }


class ValidationErrorResponse(BaseModel):
    """Validation error - when request body is invalid"""
    error: ErrorDetail = Field(description="Error information")
    validation_errors: list[Dict[str, Any]] = Field(
        description="Per-field validation errors"
    )
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")

    class Config:
        json_schema_extra = {
            "example": {
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": {"error_count": 1},
                    "timestamp": "2026-03-02T10:30:00Z"
                },
                "validation_errors": [
                    {
                        "field": "duty_cycle",
                        "message": "Input should be less than or equal to 100",
                        "type": "less_than_equal"
                    }
                ],
                "request_id": "req-12345"
            }
        }
