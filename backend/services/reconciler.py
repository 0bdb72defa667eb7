"""Reconciler: deterministic merge of the heuristic and AI candidates.

Every field has its own merge function returning a FieldMerge. The
heuristic resume is the starting point; an AI value only wins when its rule
fires, and each firing rule contributes one human-readable improvement.
No I/O happens here.
"""

import logging
from typing import Any, Callable, NamedTuple, Sequence, TypeVar

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from models.schemas.candidate import ExtractionCandidate
from models.schemas.structured_resume import (
    Contact,
    Education,
    Experience,
    SkillGroup,
    StructuredResume,
)
from models.schemas.tuning import DEFAULT_TUNING, ParserTuning
from services.ids import IdGenerator, uuid_ids
from services.similarity import category_similarity, similarity

logger = logging.getLogger(__name__)

AI_UNAVAILABLE_WARNING = "AI candidate unavailable"

_http_url = TypeAdapter(AnyHttpUrl)

_ENTRY_LISTS = (
    "experiences", "education", "skills", "projects",
    "certifications", "achievements", "custom_sections",
)

EntryT = TypeVar("EntryT")


class FieldMerge(NamedTuple):
    value: Any
    changed: bool
    reason: str = ""


class MergeOutcome(NamedTuple):
    resume: StructuredResume
    improvements: list[str]
    warnings: list[str]


def reconcile(
    heuristic: ExtractionCandidate,
    ai: ExtractionCandidate | None,
    tuning: ParserTuning = DEFAULT_TUNING,
    id_generator: IdGenerator = uuid_ids,
) -> MergeOutcome:
    base = heuristic.resume.model_copy(deep=True)
    if ai is None:
        return MergeOutcome(base, [], [AI_UNAVAILABLE_WARNING])

    other = ai.resume.model_copy(deep=True)
    merges: dict[str, FieldMerge] = {
        "name": merge_name(base.name, other.name),
        "title": merge_title(base.title, other.title, tuning),
        "summary": merge_summary(base.summary, other.summary),
        "contact": merge_contact(base.contact, other.contact),
        "experiences": merge_experiences(base.experiences, other.experiences, tuning),
        "education": merge_education(base.education, other.education),
        "skills": merge_skills(base.skills, other.skills, tuning),
        "projects": merge_wholesale(
            base.projects, other.projects, lambda p: bool(p.name and p.description),
            "Improved projects parsing",
        ),
        "certifications": merge_wholesale(
            base.certifications, other.certifications, lambda c: bool(c.name),
            "Added certifications",
        ),
        "achievements": merge_wholesale(
            base.achievements, other.achievements, lambda a: bool(a.title),
            "Added achievements",
        ),
    }

    updates = {}
    improvements = []
    for field, merge in merges.items():
        if merge.changed:
            updates[field] = merge.value
            improvements.append(merge.reason)

    merged = base.model_copy(update=updates)
    reassigned = assign_unique_ids(merged, id_generator)
    if reassigned:
        logger.info("Reassigned %d colliding identifier(s) after merge", reassigned)
    logger.info("Reconciled candidates: %d improvement(s)", len(improvements))
    return MergeOutcome(merged, improvements, list(ai.warnings))


def assign_unique_ids(resume: StructuredResume, new_id: IdGenerator) -> int:
    """Give a fresh id to every entry or bullet whose id is blank or already taken.

    Earlier entries keep their ids, so heuristic entries win over AI entries
    appended after them. Returns the number of ids replaced.
    """
    seen: set[str] = set()
    replaced = 0

    def claim(item) -> None:
        nonlocal replaced
        if item.id.strip() and item.id not in seen:
            seen.add(item.id)
            return
        ident = new_id()
        while ident in seen:
            ident = new_id()
        item.id = ident
        seen.add(ident)
        replaced += 1

    for field in _ENTRY_LISTS:
        for entry in getattr(resume, field):
            claim(entry)
            for bullet in getattr(entry, "bullets", []):
                claim(bullet)
    return replaced


# ---------------------------------------------------------------------------
# Scalar fields
# ---------------------------------------------------------------------------

def merge_name(current: str, proposed: str) -> FieldMerge:
    if len(proposed.split()) >= 2 and len(current.split()) < 2:
        return FieldMerge(proposed.strip(), True, "Improved name extraction")
    return FieldMerge(current, False)


def merge_title(current: str, proposed: str, tuning: ParserTuning = DEFAULT_TUNING) -> FieldMerge:
    proposed = proposed.strip()
    if proposed and len(proposed) < tuning.title_max_length and proposed != current:
        return FieldMerge(proposed, True, "Added professional title")
    return FieldMerge(current, False)


def merge_summary(current: str, proposed: str) -> FieldMerge:
    if len(proposed) > len(current):
        return FieldMerge(proposed, True, "Enhanced professional summary")
    return FieldMerge(current, False)


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

def is_valid_email(value: str) -> bool:
    at = value.find("@")
    return at > 0 and "." in value[at + 1:] and not value.endswith(".")


def is_valid_url(value: str) -> bool:
    try:
        _http_url.validate_python(value)
    except ValidationError:
        return False
    return True


def is_valid_phone(value: str) -> bool:
    return sum(ch.isdigit() for ch in value) >= 7


CONTACT_CHECKS: dict[str, tuple[Callable[[str], bool], str]] = {
    "email": (is_valid_email, "Added email address"),
    "phone": (is_valid_phone, "Added phone number"),
    "linkedin": (is_valid_url, "Added LinkedIn profile"),
    "github": (is_valid_url, "Added GitHub profile"),
    "website": (is_valid_url, "Added personal website"),
    "location": (lambda value: bool(value.strip()), "Added location"),
}


def merge_contact_field(field: str, current: str, proposed: str) -> FieldMerge:
    """Fill an empty contact field with a well-formed AI value; never overwrite."""
    check, reason = CONTACT_CHECKS[field]
    proposed = proposed.strip()
    if not current and proposed and check(proposed):
        return FieldMerge(proposed, True, reason)
    return FieldMerge(current, False)


def merge_contact(current: Contact, proposed: Contact) -> FieldMerge:
    updates = {}
    reasons = []
    for field in CONTACT_CHECKS:
        merge = merge_contact_field(field, getattr(current, field), getattr(proposed, field))
        if merge.changed:
            updates[field] = merge.value
            reasons.append(merge.reason)
    if not updates:
        return FieldMerge(current, False)
    return FieldMerge(current.model_copy(update=updates), True, "; ".join(reasons))


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def merge_experiences(
    current: list[Experience],
    proposed: list[Experience],
    tuning: ParserTuning = DEFAULT_TUNING,
) -> FieldMerge:
    if not proposed:
        return FieldMerge(current, False)
    if not current or all(e.company and e.title for e in proposed):
        return FieldMerge(list(proposed), True, "Improved work experience parsing")

    merged = list(current)
    reasons = []
    for candidate in proposed:
        index = _find_matching_experience(merged, candidate, tuning.experience_match_similarity)
        if index is None:
            merged.append(candidate)
            reasons.append("Added missing work experience")
        elif len(candidate.bullets) > len(merged[index].bullets):
            merged[index] = merged[index].model_copy(update={"bullets": candidate.bullets})
            reasons.append("Enhanced experience bullets")

    if not reasons:
        return FieldMerge(current, False)
    return FieldMerge(merged, True, "; ".join(reasons))


def _find_matching_experience(
    entries: Sequence[Experience], candidate: Experience, threshold: float
) -> int | None:
    for index, entry in enumerate(entries):
        if candidate.company and entry.company and similarity(candidate.company, entry.company) > threshold:
            return index
        if candidate.title and entry.title and similarity(candidate.title, entry.title) > threshold:
            return index
    return None


def merge_education(current: list[Education], proposed: list[Education]) -> FieldMerge:
    if proposed and (not current or all(e.institution and e.degree for e in proposed)):
        return FieldMerge(list(proposed), True, "Improved education parsing")
    return FieldMerge(current, False)


def merge_skills(
    current: list[SkillGroup],
    proposed: list[SkillGroup],
    tuning: ParserTuning = DEFAULT_TUNING,
) -> FieldMerge:
    merged = [group.model_copy(deep=True) for group in current]
    reasons = []
    for group in proposed:
        target = next(
            (g for g in merged
             if category_similarity(g.category, group.category) > tuning.skill_category_similarity),
            None,
        )
        if target is None:
            if group.items:
                merged.append(group)
                reasons.append(f"Added {group.category} skills category")
            continue

        added = []
        for item in group.items:
            known = target.items + added
            if not any(similarity(item, existing) > tuning.skill_item_duplicate_similarity for existing in known):
                added.append(item)
        if added:
            target.items.extend(added)
            reasons.append(f"Added skills to {target.category}")

    if not reasons:
        return FieldMerge(current, False)
    return FieldMerge(merged, True, "; ".join(reasons))


def merge_wholesale(
    current: list[EntryT],
    proposed: list[EntryT],
    well_formed: Callable[[EntryT], bool],
    reason: str,
) -> FieldMerge:
    """Adopt the AI list outright when it is non-empty and every entry is well formed."""
    if proposed and all(well_formed(entry) for entry in proposed):
        return FieldMerge(list(proposed), True, reason)
    return FieldMerge(current, False)
