"""
Prompt builders for every generation task.

All builders are pure: the same profile always yields the same prompt, and
missing fields are written out as placeholders rather than dropped.
"""
from typing import List, Optional

from .schemas import JobInfo, UserProfile

NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"

RESUME_INSTRUCTION = (
    "You are an expert resume writer. Create professional, ATS-friendly resumes "
    "that highlight the candidate's strengths."
)
COVER_LETTER_INSTRUCTION = (
    "You are an expert cover letter writer. Create personalized, engaging cover letters "
    "that connect the candidate's experience to the job requirements."
)
PORTFOLIO_INSTRUCTION = (
    "You are a web designer specialized in creating professional portfolio webpages. "
    "Generate clean, modern, self-contained HTML with inline CSS only: no external "
    "stylesheets, scripts, fonts or images."
)
JD_ANALYSIS_INSTRUCTION = (
    "You are an expert at analyzing job descriptions and extracting key requirements. "
    "Always respond with valid JSON only, no additional text."
)
COMPARISON_INSTRUCTION = (
    "You are an expert resume coach and ATS optimization specialist. Provide actionable, "
    "specific suggestions. Always respond with valid JSON only."
)
TAILORED_RESUME_INSTRUCTION = (
    "You are an expert resume writer specializing in ATS optimization and job-specific "
    "tailoring. Create compelling, keyword-rich resumes."
)
RESUME_PARSE_INSTRUCTION = (
    "You are an expert resume parser. Extract information exactly as written. "
    "Always respond with valid JSON only, no additional text."
)


def _or(value: Optional[str], placeholder: str = NOT_PROVIDED) -> str:
    return value.strip() if value and value.strip() else placeholder


def _skills(profile: UserProfile, placeholder: str = NOT_PROVIDED) -> str:
    return ", ".join(profile.skills) if profile.skills else placeholder


def _experience_block(profile: UserProfile) -> str:
    if not profile.experience:
        return NOT_PROVIDED
    lines: List[str] = []
    for exp in profile.experience:
        lines.append(
            f"- Position: {_or(exp.position)}\n"
            f"  Company: {_or(exp.company)}\n"
            f"  Duration: {_or(exp.duration)}\n"
            f"  Description: {_or(exp.description)}"
        )
    return "\n".join(lines)


def _education_block(profile: UserProfile) -> str:
    if not profile.education:
        return NOT_PROVIDED
    return "\n".join(
        f"- Degree: {_or(edu.degree)}\n"
        f"  Institution: {_or(edu.institution)}\n"
        f"  Year: {_or(edu.year)}"
        for edu in profile.education
    )


def _contact_block(profile: UserProfile) -> str:
    return (
        f"Name: {_or(profile.name)}\n"
        f"Email: {_or(profile.email)}\n"
        f"Phone: {_or(profile.phone)}\n"
        f"Location: {_or(profile.location)}\n"
        f"LinkedIn: {_or(profile.linkedin)}\n"
        f"GitHub: {_or(profile.github)}\n"
        f"Portfolio: {_or(profile.portfolio)}"
    )


def resume_prompt(profile: UserProfile) -> str:
    return f"""Create a professional resume based on the following information:

{_contact_block(profile)}

Professional Summary: {_or(profile.summary)}

Skills: {_skills(profile)}

Work Experience:
{_experience_block(profile)}

Education:
{_education_block(profile)}

Generate a well-formatted, professional resume in markdown format."""


def cover_letter_prompt(profile: UserProfile, job: JobInfo) -> str:
    return f"""Create a professional cover letter for the following:

Applicant Information:
Name: {_or(profile.name)}
Email: {_or(profile.email)}
Phone: {_or(profile.phone)}
Location: {_or(profile.location)}

Target Position: {_or(job.position, NOT_SPECIFIED)}
Company: {_or(job.company, NOT_SPECIFIED)}
Job Description: {_or(job.description)}

Applicant's Background:
{_or(profile.summary)}

Key Skills: {_skills(profile)}

Relevant Experience:
{_experience_block(profile)}

Generate a compelling cover letter that highlights relevant experience and shows enthusiasm for the position."""


def portfolio_prompt(profile: UserProfile) -> str:
    if profile.projects:
        projects = "\n".join(
            f"- Name: {_or(p.name)}\n"
            f"  Description: {_or(p.description)}\n"
            f"  Technologies: {_or(p.technologies, NOT_SPECIFIED)}\n"
            f"  Link: {_or(p.link)}"
            for p in profile.projects
        )
    else:
        projects = NOT_PROVIDED
    bio = profile.bio or profile.summary
    return f"""Create HTML content for a professional portfolio webpage based on:

Name: {_or(profile.name)}
Title: {_or(profile.title, "Professional")}
Email: {_or(profile.email)}
Bio: {_or(bio)}
LinkedIn: {_or(profile.linkedin)}
GitHub: {_or(profile.github)}

Skills: {_skills(profile)}

Projects:
{projects}

Generate a modern, professional HTML portfolio page with inline CSS styling. Include sections for About, Skills, and Projects.
Return only the HTML document."""


def jd_analysis_prompt(job_description: str) -> str:
    return f"""Analyze the following job description and extract key information in JSON format:

Job Description:
{job_description}

Please provide a JSON response with the following structure:
{{
  "requiredSkills": ["skill1", "skill2"],
  "preferredSkills": ["skill1", "skill2"],
  "keywords": ["keyword1", "keyword2"],
  "experienceLevel": "entry/mid/senior",
  "responsibilities": ["responsibility1", "responsibility2"],
  "qualifications": ["qualification1", "qualification2"]
}}

Focus on technical skills, tools, and relevant keywords that should appear in a resume."""


def comparison_prompt(profile: UserProfile, job_description: str) -> str:
    experience = ", ".join(
        f"{_or(e.position)} at {_or(e.company)}" for e in profile.experience
    ) or "None listed"
    return f"""Compare the following resume with the job description and provide improvement suggestions:

Resume:
Name: {_or(profile.name)}
Skills: {_skills(profile, "None listed")}
Experience: {experience}
Summary: {_or(profile.summary, "No summary")}

Job Description:
{job_description}

Provide a JSON response with:
{{
  "matchScore": <number 0-100>,
  "missingSkills": ["skill1", "skill2"],
  "suggestedSkills": ["skill1", "skill2"],
  "summaryImprovements": "Suggested improvements for professional summary",
  "experienceImprovements": ["suggestion1", "suggestion2"],
  "keywordsToAdd": ["keyword1", "keyword2"],
  "strengths": ["strength1", "strength2"],
  "overallFeedback": "Brief overall assessment"
}}"""


def tailored_resume_prompt(profile: UserProfile, job_description: str) -> str:
    return f"""Create an optimized resume tailored for the following job description:

Job Description:
{job_description}

User's Information:
{_contact_block(profile)}
Summary: {_or(profile.summary)}
Skills: {_skills(profile)}

Work Experience:
{_experience_block(profile)}

Education:
{_education_block(profile)}

Tailor the resume to highlight relevant skills and experience that match the job description.
Include keywords from the job description naturally throughout the resume.
Provide the complete resume content in markdown format."""


def resume_parse_prompt(raw_text: str) -> str:
    return f"""Extract structured resume information from the text below.

Resume Text:
{raw_text}

Provide a JSON response with this structure (use "" or [] when a field is absent):
{{
  "name": "Full name",
  "email": "Email address",
  "phone": "Phone number",
  "location": "City, Country",
  "linkedin": "LinkedIn URL",
  "github": "GitHub URL",
  "portfolio": "Portfolio URL",
  "summary": "Professional summary",
  "skills": ["skill1", "skill2"],
  "experience": [
    {{"position": "Job title", "company": "Company", "duration": "Start - End", "description": "What they did"}}
  ],
  "education": [
    {{"degree": "Degree", "institution": "School", "year": "Graduation year"}}
  ]
}}"""
