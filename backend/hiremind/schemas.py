from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ExperienceItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    position: Optional[str] = None
    company: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None


class EducationItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    degree: Optional[str] = None
    institution: Optional[str] = None
    year: Optional[str] = None

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, v: Any):
        # models and forms both send graduation years as numbers sometimes
        return str(v) if isinstance(v, int) else v


class ProjectItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    technologies: Optional[str] = None
    link: Optional[str] = None

    @field_validator("technologies", mode="before")
    @classmethod
    def _join_technologies(cls, v: Any):
        if isinstance(v, list):
            return ", ".join(str(t) for t in v)
        return v


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    bio: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    skills: List[str] = []
    experience: List[ExperienceItem] = []
    education: List[EducationItem] = []
    projects: List[ProjectItem] = []

    @field_validator("skills", mode="before")
    @classmethod
    def _split_skills(cls, v: Any):
        if v is None:
            return []
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        if isinstance(v, list):
            return [s for s in v if not isinstance(s, str) or s.strip()]
        return v

    @field_validator("experience", "education", "projects", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any):
        return [] if v is None else v

    def is_meaningful(self) -> bool:
        def filled(v: Optional[str]) -> bool:
            return bool(v and v.strip())

        return (
            filled(self.name)
            or filled(self.email)
            or any(filled(s) for s in self.skills)
            or bool(self.experience)
        )


class JobInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    position: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None


class JobDescriptionAnalysis(BaseModel):
    requiredSkills: List[str] = []
    preferredSkills: List[str] = []
    keywords: List[str] = []
    experienceLevel: str = ""
    responsibilities: List[str] = []
    qualifications: List[str] = []


class ComparisonResult(BaseModel):
    matchScore: int = 0
    missingSkills: List[str] = []
    suggestedSkills: List[str] = []
    summaryImprovements: str = ""
    experienceImprovements: List[str] = []
    keywordsToAdd: List[str] = []
    strengths: List[str] = []
    overallFeedback: str = ""

    @field_validator("matchScore", mode="before")
    @classmethod
    def _score_range(cls, v: Any):
        if isinstance(v, str):
            v = v.strip().rstrip("%")
            v = float(v) if v else 0
        if isinstance(v, float):
            v = round(v)
        if isinstance(v, int) and not isinstance(v, bool):
            return max(0, min(100, v))
        return v


class SessionResumeRecord(BaseModel):
    data: UserProfile
    filename: str
    uploadedAt: datetime
    rawText: str = ""


# ----- Request bodies -----

class CoverLetterRequest(BaseModel):
    userInfo: Optional[UserProfile] = None
    jobInfo: Optional[JobInfo] = None


class CompareRequest(BaseModel):
    resumeData: Optional[UserProfile] = None
    jobDescription: Optional[str] = None


class TemplateInfo(BaseModel):
    id: str
    name: str
    description: str
    preview: str
    atsScore: int
    recommended: bool


class ResumeRequest(UserProfile):
    template: Optional[str] = None


class TailoredResumeRequest(UserProfile):
    jobDescription: Optional[str] = None
    template: Optional[str] = None
