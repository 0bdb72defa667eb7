"""Prompt template for the AI resume parsing call."""

import json

from models.schemas.candidate import ExtractionCandidate
from models.schemas.raw_document import RawDocument
from services.prompt_executor import ChatMessage

RESUME_SCHEMA = """{
  "name": "string",
  "title": "string (current or target professional title)",
  "summary": "string (professional summary / objective)",
  "contact": {
    "email": "string",
    "phone": "string",
    "linkedin": "string (full URL)",
    "github": "string (full URL)",
    "website": "string (full URL)",
    "location": "string"
  },
  "experiences": [
    {
      "id": "string",
      "company": "string",
      "title": "string",
      "location": "string",
      "startDate": {"month": "string", "year": "string"} | null,
      "endDate": {"month": "string", "year": "string"} | null (null when current),
      "current": boolean,
      "description": "string",
      "technologies": ["string"],
      "bullets": [{"id": "string", "text": "string", "keywords": ["string"], "hasMetrics": boolean}]
    }
  ],
  "education": [
    {
      "id": "string",
      "institution": "string",
      "degree": "string",
      "field": "string",
      "location": "string",
      "startDate": {"month": "string", "year": "string"} | null,
      "endDate": {"month": "string", "year": "string"} | null,
      "gpa": "string",
      "coursework": ["string"],
      "achievements": ["string"]
    }
  ],
  "skills": [{"id": "string", "category": "string", "items": ["string"]}],
  "projects": [
    {
      "id": "string",
      "name": "string",
      "description": "string",
      "link": "string",
      "github": "string",
      "technologies": ["string"],
      "bullets": [{"id": "string", "text": "string", "keywords": ["string"], "hasMetrics": boolean}]
    }
  ],
  "certifications": [{"id": "string", "name": "string", "issuer": "string", "date": {"month": "string", "year": "string"} | null, "url": "string"}],
  "achievements": [{"id": "string", "title": "string", "description": "string", "date": {"month": "string", "year": "string"} | null, "organization": "string"}]
}"""


def build_parse_prompt(doc: RawDocument, baseline: ExtractionCandidate) -> list[ChatMessage]:
    """Ask the model to improve the heuristic baseline into schema-shaped JSON."""
    system = f"""You are a professional resume parser. Convert extracted resume text into structured JSON.

INSTRUCTIONS:
1. Read the resume text carefully; it may come from a PDF and contain broken lines or columns.
2. A pattern-matching parser already produced a BASELINE. Improve it: fix mis-split entries, fill
   missing fields, and keep values that are already correct. Do not start from scratch.
3. Copy bullet points as written. Do not invent employers, dates, degrees or contact details.
4. Dates use {{"month": "Jan", "year": "2020"}}; omit the month when unknown. Use null for a
   missing date and for the end date of a current role.
5. Group skills into logical categories.
6. Use empty strings and empty lists for missing information.
7. Return ONLY a JSON object matching the schema below, with no markdown and no commentary.

SCHEMA:
{RESUME_SCHEMA}"""

    baseline_json = json.dumps(
        baseline.resume.model_dump(by_alias=True, mode="json"), indent=2, ensure_ascii=False
    )
    headings = ""
    if doc.sections:
        headings = "\nSECTION HEADINGS DETECTED BY LAYOUT ANALYSIS: " + ", ".join(
            s.heading for s in doc.sections if s.heading
        ) + "\n"

    user = f"""RESUME TEXT:
---
{doc.text}
---
{headings}
BASELINE (heuristic parse, confidence {baseline.confidence:.2f}):
{baseline_json}

Return only the improved JSON object."""

    return [
        ChatMessage(role="system", content=system),
        ChatMessage(role="user", content=user),
    ]
