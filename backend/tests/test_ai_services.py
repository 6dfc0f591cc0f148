import asyncio
import json

import pytest

from conftest import FakeProvider
from hiremind import prompts
from hiremind.ai_services import CareerAIService
from hiremind.errors import EmptyExtraction, MalformedResponse
from hiremind.fallback import FallbackEngine
from hiremind.schemas import JobInfo, UserProfile


def service_with(*replies):
    provider = FakeProvider("openai", replies=list(replies))
    return CareerAIService(FallbackEngine({"openai": provider}, ["openai"])), provider


def run(coro):
    return asyncio.run(coro)


def test_resume_prompt_marks_missing_fields():
    prompt = prompts.resume_prompt(UserProfile(name="Jane Doe", email="jane@x.com", skills=["Go", "SQL"]))
    assert "Name: Jane Doe" in prompt
    assert "Skills: Go, SQL" in prompt
    assert "Phone: Not provided" in prompt
    assert "Professional Summary: Not provided" in prompt
    assert "Work Experience:\nNot provided" in prompt


def test_resume_prompt_is_deterministic():
    profile = UserProfile(name="A", email="a@b.c", experience=[{"position": "Dev", "company": "X"}])
    assert prompts.resume_prompt(profile) == prompts.resume_prompt(profile)
    assert "Position: Dev" in prompts.resume_prompt(profile)


def test_cover_letter_prompt_substitutes_missing_job_info():
    prompt = prompts.cover_letter_prompt(UserProfile(name="A", email="a@b.c"), JobInfo())
    assert "Target Position: Not specified" in prompt
    assert "Company: Not specified" in prompt


def test_generate_resume_passes_instruction():
    service, provider = service_with("# Jane Doe")
    profile = UserProfile(name="Jane Doe", email="jane@x.com")
    assert run(service.generate_resume(profile)) == "# Jane Doe"
    assert provider.calls[0][1] == prompts.RESUME_INSTRUCTION


def test_portfolio_strips_fence_and_preamble():
    service, _ = service_with("```html\nHere is your page:\n<!DOCTYPE html><html><body>Hi</body></html>\n```")
    html = run(service.generate_portfolio(UserProfile(name="A", email="a@b.c")))
    assert html.startswith("<!DOCTYPE html>")
    assert html.endswith("</html>")


def test_analyze_job_description_repairs_trailing_commas():
    service, _ = service_with('```json\n{"requiredSkills": ["Python", "SQL",], "experienceLevel": "senior",}\n```')
    analysis = run(service.analyze_job_description("We need Python"))
    assert analysis.requiredSkills == ["Python", "SQL"]
    assert analysis.experienceLevel == "senior"
    assert analysis.preferredSkills == []


def test_analysis_with_wrong_shape_is_malformed():
    service, _ = service_with('{"requiredSkills": "Python"}')
    with pytest.raises(MalformedResponse):
        run(service.analyze_job_description("jd"))


def test_analysis_that_is_a_list_is_malformed():
    service, _ = service_with('["Python"]')
    with pytest.raises(MalformedResponse):
        run(service.analyze_job_description("jd"))


def test_compare_rounds_and_clamps_score():
    service, _ = service_with(json.dumps({"matchScore": 104.6, "missingSkills": ["Docker"]}))
    result = run(service.compare_resume_with_jd(UserProfile(name="A"), "jd"))
    assert result.matchScore == 100
    assert result.missingSkills == ["Docker"]


def test_parse_resume_text_returns_profile():
    reply = json.dumps({
        "name": "Jane Doe",
        "email": "jane@x.com",
        "skills": ["Go", "SQL"],
        "experience": [{"position": "Engineer", "company": "Acme", "duration": "2020 - 2023", "description": "APIs"}],
        "education": [{"degree": "BSc", "institution": "MIT", "year": 2019}],
    })
    service, _ = service_with(reply)
    profile = run(service.parse_resume_text("Jane Doe\njane@x.com\nGo, SQL"))
    assert profile.name == "Jane Doe"
    assert profile.experience[0].company == "Acme"
    assert profile.education[0].year == "2019"


def test_parse_resume_text_rejects_empty_extraction():
    service, _ = service_with('{"name": "", "email": "", "skills": [], "experience": [], "summary": "text"}')
    with pytest.raises(EmptyExtraction):
        run(service.parse_resume_text("some unrelated text"))


def test_parse_resume_text_rejects_blank_input_without_calling_provider():
    service, provider = service_with("{}")
    with pytest.raises(EmptyExtraction):
        run(service.parse_resume_text("   \n "))
    assert provider.calls == []


def test_parse_resume_text_rejects_whitespace_only_fields():
    service, _ = service_with('{"name": "   ", "email": " ", "skills": ["", "  "], "experience": []}')
    with pytest.raises(EmptyExtraction):
        run(service.parse_resume_text("some unrelated text"))


def test_blank_skills_are_dropped():
    profile = UserProfile(name="Jane", skills=["Go", " ", ""])
    assert profile.skills == ["Go"]
    assert not UserProfile(name="  ", email="\t").is_meaningful()
