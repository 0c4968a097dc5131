"""Pydantic schemas for health API."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Service health status")
    storage_connected: bool = Field(..., description="Storage bucket reachability")
    version: str = Field(default="0.1.0", description="API version")
