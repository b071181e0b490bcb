"""
Upload Routes

GET /test-files - List uploaded resumes and cover letters with public URLs
POST /upload - Placeholder; uploads go through the feature-specific endpoints
"""

import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_app_settings
from app.core.config import Settings
from app.schemas.schemas import UploadFilesResponse, UploadFilesInfo, ErrorResponse

router = APIRouter(tags=["Uploads"])

# public mount -> directory under settings.upload_dir
UPLOAD_MOUNTS = {
    "/upload/idcard": "idcards",
    "/upload/profile": "profiles",
    "/upload/resume": "resumes",
    "/upload/coverletter": "coverletters",
    "/upload/misc": "misc",
}


def _list_files(directory: str) -> list:
    if not os.path.isdir(directory):
        return []
    return sorted(
        name for name in os.listdir(directory)
        if os.path.isfile(os.path.join(directory, name))
    )


@router.get("/test-files", response_model=UploadFilesResponse)
async def test_files(settings: Settings = Depends(get_app_settings)):
    """List files available under the resume and cover letter mounts."""
    resume_dir = os.path.abspath(os.path.join(settings.upload_dir, "resumes"))
    cover_letter_dir = os.path.abspath(os.path.join(settings.upload_dir, "coverletters"))

    resume_files = _list_files(resume_dir)
    cover_letter_files = _list_files(cover_letter_dir)

    return UploadFilesResponse(
        data=UploadFilesInfo(
            resumeFiles=resume_files,
            coverLetterFiles=cover_letter_files,
            resumeDir=resume_dir,
            coverLetterDir=cover_letter_dir,
            resumeUrls=[f"/upload/resume/{f}" for f in resume_files],
            coverLetterUrls=[f"/upload/coverletter/{f}" for f in cover_letter_files],
        )
    )


@router.post("/upload", status_code=501)
async def upload_placeholder():
    return JSONResponse(
        status_code=501,
        content=ErrorResponse(
            message="Upload endpoint not implemented yet. Use specific upload endpoints."
        ).model_dump(exclude_none=True),
    )
