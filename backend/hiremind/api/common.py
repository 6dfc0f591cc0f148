import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..errors import FileParseError, ValidationError
from ..file_parser import ALLOWED_TYPES, extract_text
from ..schemas import UserProfile
from ..session_store import ResumeSessionStore

SESSION_KEY = "sid"


def ok(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": True, "data": data}


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def require_profile(profile: Optional[UserProfile], what: str = "Name and email") -> UserProfile:
    if profile is None or not (profile.name or "").strip() or not (profile.email or "").strip():
        raise ValidationError(f"{what} are required fields")
    return profile


def require_text(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message)
    return value.strip()


def get_session_store(request: Request) -> ResumeSessionStore:
    return request.app.state.resume_store


def session_id(request: Request, create: bool = False) -> Optional[str]:
    """Opaque id kept in the signed session cookie."""
    sid = request.session.get(SESSION_KEY)
    if sid is None and create:
        sid = request.session[SESSION_KEY] = uuid.uuid4().hex
    return sid


async def read_upload_text(request: Request, file: Optional[UploadFile]) -> str:
    """Validate an uploaded file's type and size, then extract its text."""
    if file is None or not file.filename:
        raise FileParseError("No file uploaded")
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_TYPES:
        raise FileParseError("Invalid file type. Only PDF, DOCX, and TXT files are allowed.")

    limit = request.app.state.settings.max_upload_bytes
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise FileParseError(f"File too large. Maximum size is {limit // (1024 * 1024)}MB.")
    # pdfplumber parsing is CPU bound
    return await run_in_threadpool(extract_text, content, content_type)
