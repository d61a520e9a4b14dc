"""
Common API response models.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Standardized health check response.

    This provides a consistent format for health check endpoints.
    """

    status: str = Field(
        ...,
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"],
    )
    service: str = Field(..., description="Service name", examples=["ProcessHub API"])
    version: str = Field(..., description="Service version", examples=["0.1.0"])
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Check timestamp",
    )
    components: Optional[Dict[str, str]] = Field(
        None,
        description="Component health status",
        examples=[{"api": "healthy", "database": "healthy", "redis": "unhealthy"}],
    )
    metrics: Optional[Dict[str, Any]] = Field(
        None,
        description="Health metrics",
        examples=[{"response_time_ms": 4.1, "uptime_seconds": 3600}],
    )
