import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from ..ai_services import CareerAIService, get_ai_service
from ..errors import ValidationError
from ..schemas import CompareRequest, ResumeRequest, SessionResumeRecord, TailoredResumeRequest
from ..session_store import ResumeSessionStore
from ..templates_service import get_template_info, list_templates, render_resume
from .common import (
    get_session_store, now_iso, ok, read_upload_text, require_profile, require_text, session_id,
)


router = APIRouter(prefix="/resume", tags=["resume"])

JD_REQUIRED = "Job description is required"


@router.get("/templates")
def get_templates():
    return ok({"templates": list_templates()})


@router.post("")
async def create_resume(body: ResumeRequest, ai: CareerAIService = Depends(get_ai_service)):
    profile = require_profile(body)
    if body.template:
        info = get_template_info(body.template)
        html = render_resume(profile, info.id)
        return ok({"resume": html, "format": "html", "template": info.model_dump(), "generatedAt": now_iso()})

    resume = await ai.generate_resume(profile)
    return ok({"resume": resume, "format": "markdown", "generatedAt": now_iso()})


@router.post("/tailored")
async def create_tailored_resume(body: TailoredResumeRequest, ai: CareerAIService = Depends(get_ai_service)):
    profile = require_profile(body)
    job_description = require_text(body.jobDescription, JD_REQUIRED)

    if body.template:
        info = get_template_info(body.template)
        suggestions = await ai.compare_resume_with_jd(profile, job_description)
        html = render_resume(profile, info.id)
        return ok({
            "resume": html,
            "format": "html",
            "template": info.model_dump(),
            "tailoredSuggestions": suggestions.model_dump(),
            "generatedAt": now_iso(),
        })

    resume = await ai.generate_tailored_resume(profile, job_description)
    return ok({"resume": resume, "format": "markdown", "generatedAt": now_iso()})


@router.post("/parse")
async def parse_resume(
    request: Request,
    file: UploadFile = File(None),
    ai: CareerAIService = Depends(get_ai_service),
    store: ResumeSessionStore = Depends(get_session_store),
):
    raw_text = await read_upload_text(request, file)
    profile = await ai.parse_resume_text(raw_text)

    extracted_at = datetime.now(timezone.utc)
    record = SessionResumeRecord(data=profile, filename=file.filename, uploadedAt=extracted_at, rawText=raw_text)
    await run_in_threadpool(store.set, session_id(request, create=True), record)

    return ok({**profile.model_dump(), "filename": file.filename, "extractedAt": extracted_at.isoformat()})


@router.post("/analyze-jd")
async def analyze_jd(request: Request, ai: CareerAIService = Depends(get_ai_service)):
    """Accepts either a JSON body with ``jobDescription`` or a multipart upload field ``file``."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if isinstance(upload, StarletteUploadFile):
            job_description = await read_upload_text(request, upload)
        else:
            job_description = form.get("jobDescription")
    else:
        try:
            body = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Request body must be JSON or a file upload") from None
        job_description = body.get("jobDescription") if isinstance(body, dict) else None

    job_description = require_text(job_description, "Job description is required (text or file)")
    analysis = await ai.analyze_job_description(job_description)
    return ok({"analysis": analysis.model_dump(), "originalText": job_description})


@router.post("/compare")
async def compare_with_jd(
    body: CompareRequest,
    request: Request,
    ai: CareerAIService = Depends(get_ai_service),
    store: ResumeSessionStore = Depends(get_session_store),
):
    job_description = require_text(body.jobDescription, JD_REQUIRED)

    profile = body.resumeData
    used_uploaded = False
    if profile is None:
        sid = session_id(request)
        record = await run_in_threadpool(store.get, sid) if sid else None
        if record is None:
            raise ValidationError("No resume data provided. Please upload a resume or fill in the form first.")
        profile = record.data
        used_uploaded = True

    suggestions = await ai.compare_resume_with_jd(profile, job_description)
    return ok({"suggestions": suggestions.model_dump(), "usedUploadedResume": used_uploaded})


@router.get("/session")
def get_session_resume(request: Request, store: ResumeSessionStore = Depends(get_session_store)):
    sid = session_id(request)
    record = store.get(sid) if sid else None
    if record is None:
        return ok({"hasResume": False})
    resume_data = {
        **record.data.model_dump(),
        "filename": record.filename,
        "uploadedAt": record.uploadedAt.isoformat(),
    }
    return ok({"hasResume": True, "resumeData": resume_data})


@router.delete("/session")
def clear_session_resume(request: Request, store: ResumeSessionStore = Depends(get_session_store)):
    sid = session_id(request)
    if sid:
        store.clear(sid)
    return ok({"message": "Resume data cleared from session"})
