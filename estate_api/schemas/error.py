"""
Error response schemas for API documentation and consistent error formatting.
Provides standardized error response models for OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["price"])
    message: str = Field(..., description="Human-readable error message", examples=["Field required"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["missing"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["NOT_FOUND"])
    message: str = Field(..., description="Human-readable error message", examples=["Property not found"])
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(None, description="Field errors for validation failures")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": "2024-01-01T00:00:00Z",
            "request_id": "abc12345"
        }
    }


COMMON_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {
        "description": "Bad Request - missing field, malformed value or duplicate favorite",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("VALIDATION_ERROR", "Request validation failed")}},
    },
    401: {
        "description": "Unauthorized - missing or invalid bearer token",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("UNAUTHORIZED", "Authentication token required")}},
    },
    403: {
        "description": "Forbidden - role or ownership check failed",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("FORBIDDEN", "Insufficient permissions to manage properties")}},
    },
    404: {
        "description": "Not Found",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("NOT_FOUND", "Property not found with ID: 42")}},
    },
    409: {
        "description": "Conflict - unique value already in use",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("CONFLICT", "Email agent@example.com is already registered")}},
    },
    500: {
        "description": "Internal Server Error",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example("INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later.")}},
    },
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for authenticated CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 500)
