"""Core schemas for the application."""

from pydantic import BaseModel, Field


MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str


class SuccessResponse(BaseModel):
    """Schema for delete-style responses."""
    success: bool = True


class ErrorResponse(BaseModel):
    """Schema for domain error responses."""
    detail: str = Field(..., description="Human readable reason")
