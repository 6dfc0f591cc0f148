from fastapi import APIRouter, Depends

from ..ai_services import CareerAIService, get_ai_service
from ..errors import ValidationError
from ..schemas import CoverLetterRequest, JobInfo, UserProfile
from .common import now_iso, ok, require_profile

router = APIRouter(tags=["documents"])


@router.post("/cover-letter")
async def create_cover_letter(body: CoverLetterRequest, ai: CareerAIService = Depends(get_ai_service)):
    profile = require_profile(body.userInfo, "User name and email")
    job = body.jobInfo or JobInfo()
    if not (job.position or "").strip() or not (job.company or "").strip():
        raise ValidationError("Job position and company are required")

    cover_letter = await ai.generate_cover_letter(profile, job)
    return ok({"coverLetter": cover_letter, "generatedAt": now_iso()})


@router.post("/portfolio")
async def create_portfolio(body: UserProfile, ai: CareerAIService = Depends(get_ai_service)):
    profile = require_profile(body)
    portfolio = await ai.generate_portfolio(profile)
    return ok({"portfolio": portfolio, "generatedAt": now_iso()})
