"""
AI Services Module for HireMind
Builds prompts for every career document and routes them through the
provider fallback engine. Analytical results are parsed with the JSON repair
adapter and validated against their response models.
"""
import logging
import re

from fastapi import Request
from pydantic import ValidationError as ModelValidationError

from . import prompts
from .errors import EmptyExtraction, MalformedResponse
from .fallback import FallbackEngine
from .json_repair_adapter import parse_model_json, strip_code_fence
from .schemas import ComparisonResult, JobDescriptionAnalysis, JobInfo, UserProfile

logger = logging.getLogger(__name__)

MAX_RESUME_TEXT_CHARS = 12000
_HTML_START = re.compile(r"<!DOCTYPE html|<html", re.IGNORECASE)


class CareerAIService:
    """Stateless document generators on top of a FallbackEngine."""

    def __init__(self, engine: FallbackEngine):
        self.engine = engine

    async def _call_llm(self, prompt: str, instruction: str) -> str:
        return await self.engine.generate(prompt, instruction)

    async def _call_llm_json(self, prompt: str, instruction: str, context: str):
        response_text = await self._call_llm(prompt, instruction)
        return parse_model_json(response_text, context)

    async def generate_resume(self, profile: UserProfile) -> str:
        return await self._call_llm(prompts.resume_prompt(profile), prompts.RESUME_INSTRUCTION)

    async def generate_cover_letter(self, profile: UserProfile, job_info: JobInfo) -> str:
        return await self._call_llm(
            prompts.cover_letter_prompt(profile, job_info), prompts.COVER_LETTER_INSTRUCTION
        )

    async def generate_portfolio(self, profile: UserProfile) -> str:
        html = await self._call_llm(prompts.portfolio_prompt(profile), prompts.PORTFOLIO_INSTRUCTION)
        html = strip_code_fence(html)
        # Drop any chatter the model put before the document itself
        match = _HTML_START.search(html)
        return html[match.start():] if match else html

    async def generate_tailored_resume(self, profile: UserProfile, job_description: str) -> str:
        return await self._call_llm(
            prompts.tailored_resume_prompt(profile, job_description),
            prompts.TAILORED_RESUME_INSTRUCTION,
        )

    async def analyze_job_description(self, job_description: str) -> JobDescriptionAnalysis:
        context = "job description analysis"
        data = await self._call_llm_json(
            prompts.jd_analysis_prompt(job_description), prompts.JD_ANALYSIS_INSTRUCTION, context
        )
        return self._validate(JobDescriptionAnalysis, data, context)

    async def compare_resume_with_jd(self, profile: UserProfile, job_description: str) -> ComparisonResult:
        context = "resume comparison"
        data = await self._call_llm_json(
            prompts.comparison_prompt(profile, job_description), prompts.COMPARISON_INSTRUCTION, context
        )
        return self._validate(ComparisonResult, data, context)

    async def parse_resume_text(self, raw_text: str) -> UserProfile:
        text = (raw_text or "").strip()
        if not text:
            raise EmptyExtraction("The uploaded file does not contain any text.")
        if len(text) > MAX_RESUME_TEXT_CHARS:
            text = text[:MAX_RESUME_TEXT_CHARS]

        context = "resume parsing"
        data = await self._call_llm_json(
            prompts.resume_parse_prompt(text), prompts.RESUME_PARSE_INSTRUCTION, context
        )
        profile = self._validate(UserProfile, data, context)
        if not profile.is_meaningful():
            logger.warning("Resume parse returned no name, email, skills or experience")
            raise EmptyExtraction()
        return profile

    @staticmethod
    def _validate(model, data, context: str):
        if not isinstance(data, dict):
            logger.error(f"Expected a JSON object for {context}, got {type(data).__name__}")
            raise MalformedResponse(context)
        try:
            return model.model_validate(data)
        except ModelValidationError as e:
            logger.error(f"AI response for {context} has the wrong shape: {e}")
            raise MalformedResponse(context) from e


def get_ai_service(request: Request) -> CareerAIService:
    """FastAPI dependency returning the service built at app start-up."""
    return request.app.state.ai_service
