"""Segmenter output: heading-delimited chunks with a semantic type."""

from enum import Enum

from pydantic import BaseModel


class SectionType(str, Enum):
    PERSONAL = "personal"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    PROJECTS = "projects"
    CERTIFICATIONS = "certifications"
    ACHIEVEMENTS = "achievements"
    OTHER = "other"


class Section(BaseModel):
    type: SectionType = SectionType.OTHER
    heading: str = ""
    content: str = ""
    confidence: float = 0.0  # 0-1
