"""
Schemas module - Response schemas for API endpoints.
"""

from app.schemas.schemas import (
    HealthResponse,
    DatabaseTestResponse,
    DatabaseStatusResponse,
    UploadFilesResponse,
    ErrorResponse,
)

__all__ = [
    "HealthResponse",
    "DatabaseTestResponse",
    "DatabaseStatusResponse",
    "UploadFilesResponse",
    "ErrorResponse",
]
