"""
Pydantic Schemas - Request/Response Validation

All API response schemas in one file for simplicity.
Field names follow the JSON the frontend already consumes (camelCase).
"""

from pydantic import BaseModel
from typing import Optional, List, Any, Dict, Union


# ============================================================
# HEALTH / DIAGNOSTIC SCHEMAS
# ============================================================

class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Campus Recruitment API is running"
    timestamp: str
    dbConnected: bool
    readyState: str
    uptime: float
    memory: Dict[str, int]


class DatabaseTestInfo(BaseModel):
    status: str
    readyState: str
    collections: List[str]
    totalCollections: int


class DatabaseTestResponse(BaseModel):
    success: bool = True
    database: DatabaseTestInfo
    timestamp: str


class DatabaseStatusInfo(BaseModel):
    status: str
    readyState: str
    connected: bool
    hosts: List[str] = []
    name: str
    attempts: int
    lastError: Optional[Dict[str, Any]] = None


class DatabaseStatusResponse(BaseModel):
    success: bool = True
    timestamp: str
    database: DatabaseStatusInfo
    connectionPool: Union[Dict[str, int], str] = "Not available"
    databaseStats: Optional[Dict[str, Any]] = None
    environment: str
    uptime: float
    memory: Dict[str, int]


# ============================================================
# UPLOAD SCHEMAS
# ============================================================

class UploadFilesInfo(BaseModel):
    resumeFiles: List[str]
    coverLetterFiles: List[str]
    resumeDir: str
    coverLetterDir: str
    resumeUrls: List[str]
    coverLetterUrls: List[str]


class UploadFilesResponse(BaseModel):
    success: bool = True
    data: UploadFilesInfo


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
