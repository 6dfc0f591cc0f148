"""Resume templates: metadata plus Jinja2 rendering of a profile to HTML."""
from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .errors import ValidationError
from .schemas import TemplateInfo, UserProfile

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
DEFAULT_TEMPLATE = "modern"

TEMPLATES: Dict[str, TemplateInfo] = {
    "modern": TemplateInfo(
        id="modern",
        name="Modern Professional",
        description="A modern resume with gradient header and clean layout, perfect for tech and creative roles",
        preview="Modern design with purple gradient header, elegant typography",
        atsScore=9,
        recommended=True,
    ),
    "classic": TemplateInfo(
        id="classic",
        name="Classic ATS",
        description="Traditional black and white design optimized for Applicant Tracking Systems",
        preview="Professional black and white layout with clear sections",
        atsScore=10,
        recommended=True,
    ),
    "minimal": TemplateInfo(
        id="minimal",
        name="Minimal Sidebar",
        description="Clean two-column layout with sidebar, great for highlighting key information",
        preview="Two-column design with dark sidebar for contact and skills",
        atsScore=8,
        recommended=False,
    ),
}

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def list_templates() -> List[dict]:
    return [t.model_dump() for t in TEMPLATES.values()]


def get_template_info(template_id: str) -> TemplateInfo:
    info = TEMPLATES.get(template_id)
    if info is None:
        raise ValidationError(
            f'Template "{template_id}" not found. Available templates: {", ".join(TEMPLATES)}'
        )
    return info


def render_resume(profile: UserProfile, template_id: str = DEFAULT_TEMPLATE) -> str:
    get_template_info(template_id)
    tpl = env.get_template(f"{template_id}.html")
    return tpl.render(r=profile)
