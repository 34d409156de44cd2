"""
Catalog API — Shared Pydantic Schemas
=====================================

What:  Base model configuration plus the error and health response contracts.
Why:   Every resource schema serializes to camelCase JSON (`productImage`,
       `createdAt`, ...) while the Python side keeps snake_case attributes.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for resource schemas.

    - alias_generator: fields are emitted and accepted as camelCase
    - populate_by_name: snake_case keys are accepted on input as well
    - from_attributes: instances can be built straight from ORM objects
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "price", "message": "Price must be numeric", "value": "abc"}],
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="Ordered field violations (validation errors only)"
    )
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    image_store: str = Field(description="Image store credentials: configured, not_configured")
    email: str = Field(description="Mail provider credentials: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
