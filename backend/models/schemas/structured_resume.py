"""Canonical structured resume produced by the parsing pipeline.

Models are permissive on construction: every field has an empty default so
partially-extracted candidates can always be built. Structural rules (unique
ids, non-empty date years, no end date on current roles) are checked by
services.validator, not here.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DateInfo(CamelModel):
    year: str = ""
    month: str | None = None


class Contact(CamelModel):
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""
    location: str = ""


class Bullet(CamelModel):
    id: str = ""
    text: str = ""
    keywords: list[str] = []
    has_metrics: bool = False


class Experience(CamelModel):
    id: str = ""
    company: str = ""
    title: str = ""
    location: str = ""
    start_date: DateInfo | None = None
    end_date: DateInfo | None = None
    current: bool = False
    bullets: list[Bullet] = []
    description: str = ""
    technologies: list[str] = []


class Education(CamelModel):
    id: str = ""
    institution: str = ""
    degree: str = ""
    field: str = ""
    location: str = ""
    start_date: DateInfo | None = None
    end_date: DateInfo | None = None
    gpa: str = ""
    coursework: list[str] = []
    achievements: list[str] = []


class SkillGroup(CamelModel):
    id: str = ""
    category: str = ""
    items: list[str] = []


class Project(CamelModel):
    id: str = ""
    name: str = ""
    description: str = ""
    link: str = ""
    github: str = ""
    bullets: list[Bullet] = []
    technologies: list[str] = []
    start_date: DateInfo | None = None
    end_date: DateInfo | None = None


class Certification(CamelModel):
    id: str = ""
    name: str = ""
    issuer: str = ""
    date: DateInfo | None = None
    url: str = ""


class Achievement(CamelModel):
    id: str = ""
    title: str = ""
    description: str = ""
    date: DateInfo | None = None
    organization: str = ""


class CustomSection(CamelModel):
    """A headed section with no dedicated field (languages, publications, ...)."""
    id: str = ""
    title: str = ""
    content: str = ""


class StructuredResume(CamelModel):
    name: str = ""
    title: str = ""
    summary: str = ""
    contact: Contact = Contact()
    experiences: list[Experience] = []
    education: list[Education] = []
    skills: list[SkillGroup] = []
    projects: list[Project] = []
    certifications: list[Certification] = []
    achievements: list[Achievement] = []
    custom_sections: list[CustomSection] = []
