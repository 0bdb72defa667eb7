"""Structural validation of a merged resume.

Shape conformance only: types, non-empty unique ids, dates with a year,
and no end date on a current role. Content is never judged here.
"""

import logging

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from models.schemas.result import Err, Ok, Result
from models.schemas.structured_resume import StructuredResume
from services.errors import FieldIssue, SchemaValidationError

logger = logging.getLogger(__name__)

_ENTRY_LISTS = (
    "experiences", "education", "skills", "projects",
    "certifications", "achievements", "custom_sections",
)
_DATE_FIELDS = ("start_date", "end_date", "date")


def validate(resume: StructuredResume) -> Result[StructuredResume, SchemaValidationError]:
    try:
        checked = StructuredResume.model_validate(resume.model_dump(by_alias=True, warnings=False))
    except ValidationError as e:
        issues = [
            FieldIssue(".".join(str(part) for part in err["loc"]), err["msg"])
            for err in e.errors()
        ]
        logger.warning("Resume failed schema validation with %d issue(s)", len(issues))
        return Err(SchemaValidationError(issues))

    issues = _structural_issues(checked)
    if issues:
        logger.warning("Resume failed structural validation with %d issue(s)", len(issues))
        return Err(SchemaValidationError(issues))
    return Ok(resume)


def _structural_issues(resume: StructuredResume) -> list[FieldIssue]:
    issues: list[FieldIssue] = []
    seen: dict[str, str] = {}

    def check_id(path: str, ident: str) -> None:
        if not ident.strip():
            issues.append(FieldIssue(f"{path}.id", "Identifier must be a non-empty string"))
        elif ident in seen:
            issues.append(FieldIssue(f"{path}.id", f"Duplicate identifier '{ident}' (first used at {seen[ident]})"))
        else:
            seen[ident] = path

    for field in _ENTRY_LISTS:
        for index, entry in enumerate(getattr(resume, field)):
            path = f"{to_camel(field)}.{index}"
            check_id(path, entry.id)

            for bullet_index, bullet in enumerate(getattr(entry, "bullets", [])):
                check_id(f"{path}.bullets.{bullet_index}", bullet.id)

            for date_field in _DATE_FIELDS:
                date = getattr(entry, date_field, None)
                if date is not None and not date.year.strip():
                    issues.append(FieldIssue(f"{path}.{to_camel(date_field)}.year", "Date must have a year"))

            if getattr(entry, "current", False) and entry.end_date is not None:
                issues.append(FieldIssue(f"{path}.endDate", "Current role must not have an end date"))
    return issues
