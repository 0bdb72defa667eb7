"""Resume section segmentation and heading classification."""

import logging
import re
from statistics import median

from models.schemas.raw_document import LayoutBlock, RawDocument, RawSection
from models.schemas.section import Section, SectionType
from models.schemas.tuning import DEFAULT_TUNING, ParserTuning

logger = logging.getLogger(__name__)

# Canonical heading phrases; a short line matching one of these (with an
# optional trailing colon) opens a new section.
HEADING_PATTERNS: list[str] = [
    r"(?:professional|executive|career)?\s*(?:summary|profile|objective)",
    r"about\s+me",
    r"(?:work|professional|relevant)?\s*experience",
    r"employment(?:\s+history)?",
    r"(?:work|career)\s+history",
    r"education(?:al)?(?:\s+background)?",
    r"academic\s+(?:background|qualifications)",
    r"qualifications",
    r"(?:technical|core|key)?\s*(?:skills|competencies|expertise)",
    r"(?:key|personal|selected|notable)?\s*projects?",
    r"(?:licen[sc]es\s+(?:&|and)\s+)?certifications?",
    r"achievements?",
    r"awards?(?:\s+(?:&|and)\s+honou?rs?)?",
    r"honou?rs?",
    r"contact(?:\s+(?:information|info|details))?",
    r"languages?",
    r"publications?",
    r"volunteer(?:ing|\s+experience|\s+work)?",
    r"interests",
]

_HEADING_RE = re.compile(
    r"^\s*(?:" + "|".join(f"(?:{p})" for p in HEADING_PATTERNS) + r")\s*:?\s*$",
    re.IGNORECASE,
)

# Upper-case headings: letters, spaces, "&" and "/" only, so lines such as
# "AWS, GCP" or "SQL 2019" are not mistaken for headings.
_UPPER_HEADING_RE = re.compile(r"^[A-Z][A-Z &/]*[A-Z]:?$")

# Order matters: the first matching type wins. "other" headings come first
# so "Volunteer Experience" is not classified as experience.
CLASSIFICATION_PATTERNS: list[tuple[SectionType, str]] = [
    (SectionType.OTHER, r"(?<!programming )languages?|publications?|volunteer\w*|interests|hobbies|references"),
    (SectionType.PERSONAL, r"contact|e-?mail|phone|address|linkedin|github"),
    (SectionType.SUMMARY, r"summary|profile|objective|about\s+me"),
    (SectionType.EXPERIENCE, r"experience|employment|work\s+history|career\s+history"),
    (SectionType.EDUCATION, r"education\w*|academic|degree|university|college|qualifications"),
    (SectionType.SKILLS, r"skills?|technical|competencies|expertise|technologies|programming\s+languages"),
    (SectionType.PROJECTS, r"projects?|portfolio"),
    (SectionType.CERTIFICATIONS, r"certifications?|certificates?|licen[sc]es?"),
    (SectionType.ACHIEVEMENTS, r"achievements?|awards?|honou?rs?"),
]

_CLASSIFIERS: list[tuple[SectionType, re.Pattern]] = [
    (section_type, re.compile(rf"\b(?:{pattern})\b", re.IGNORECASE))
    for section_type, pattern in CLASSIFICATION_PATTERNS
]

_DEGRADED_CONFIDENCE = 0.3


def is_canonical_heading(line: str) -> bool:
    return bool(_HEADING_RE.match(line))


def is_heading(line: str, tuning: ParserTuning = DEFAULT_TUNING) -> bool:
    """Short line that is fully upper-case or a canonical heading phrase."""
    stripped = line.strip()
    if not stripped or len(stripped) >= tuning.heading_max_length:
        return False
    return is_canonical_heading(stripped) or _is_upper_heading(stripped)


def _is_upper_heading(line: str) -> bool:
    return len(line) > 2 and bool(_UPPER_HEADING_RE.match(line))


def heading_confidence(heading: str, tuning: ParserTuning = DEFAULT_TUNING) -> float:
    stripped = heading.strip()
    confidence = 0.5
    if is_canonical_heading(stripped):
        confidence += 0.3
    if len(stripped) < tuning.heading_max_length:
        confidence += 0.1
    if stripped and stripped == stripped.upper():
        confidence += 0.1
    return round(min(confidence, 1.0), 2)


def classify_section(text: str) -> SectionType:
    """Map a heading (or a content sample) to a section type."""
    for section_type, pattern in _CLASSIFIERS:
        if pattern.search(text):
            return section_type
    return SectionType.OTHER


def segment(doc: RawDocument, tuning: ParserTuning = DEFAULT_TUNING) -> list[Section]:
    """Split a raw document into typed sections.

    Upstream sections are classified and passed through. Otherwise lines
    (from layout blocks when available, else from the text) are split on
    heading lines; anything before the first heading is the personal header.
    A document without any heading becomes a single "other" section.
    """
    if doc.sections:
        sections = [_classify_upstream(raw, tuning) for raw in doc.sections]
        logger.info("Using %d upstream sections", len(sections))
        return sections

    emphasized: set[int] = set()
    if doc.layout_blocks:
        lines, emphasized = _lines_from_layout(doc.layout_blocks, tuning)
    else:
        lines = doc.text.split("\n")

    sections, headings_found = _split_on_headings(lines, emphasized, tuning)
    if headings_found == 0:
        whole = "\n".join(lines).strip()
        if not whole:
            return []
        logger.warning("No section headings detected; treating document as one section")
        return [Section(type=SectionType.OTHER, content=whole, confidence=_DEGRADED_CONFIDENCE)]

    logger.info(
        "Segmented %d sections: %s",
        len(sections),
        ", ".join(s.type.value for s in sections),
    )
    return sections


def _classify_upstream(raw: RawSection, tuning: ParserTuning) -> Section:
    heading = raw.heading.strip()
    sample = heading or raw.content[:50]
    confidence = raw.confidence if raw.confidence is not None else tuning.default_section_confidence
    return Section(
        type=classify_section(sample),
        heading=heading,
        content=raw.content.strip(),
        confidence=confidence,
    )


def _split_on_headings(
    lines: list[str], emphasized: set[int], tuning: ParserTuning
) -> tuple[list[Section], int]:
    sections: list[Section] = []
    heading: str | None = None
    current: list[str] = []
    headings_found = 0
    seen_content = False

    def flush() -> None:
        content = "\n".join(current).strip()
        if not content:
            return
        if heading is None:
            sections.append(Section(
                type=SectionType.PERSONAL,
                content=content,
                confidence=tuning.default_section_confidence,
            ))
        else:
            sections.append(Section(
                type=classify_section(heading),
                heading=heading,
                content=content,
                confidence=heading_confidence(heading, tuning),
            ))

    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped and _opens_section(stripped, index in emphasized, not seen_content, tuning):
            flush()
            heading = stripped.rstrip(":").strip()
            current = []
            headings_found += 1
        else:
            current.append(line)
        if stripped:
            seen_content = True

    flush()
    return sections, headings_found


def _opens_section(line: str, emphasized: bool, is_first_line: bool, tuning: ParserTuning) -> bool:
    if len(line) >= tuning.heading_max_length:
        return False
    if is_canonical_heading(line):
        return True
    # An upper-case or large-font first line is the candidate's name.
    if is_first_line:
        return False
    return _is_upper_heading(line) or emphasized


def _lines_from_layout(
    blocks: list[LayoutBlock], tuning: ParserTuning
) -> tuple[list[str], set[int]]:
    """Rebuild text lines from positioned blocks.

    Large vertical gaps become blank lines so entries stay block-separated;
    lines set noticeably larger than the body font are heading candidates.
    """
    ordered = sorted(
        (b for b in blocks if b.text.strip()),
        key=lambda b: (b.page, round(b.y, 1), b.x),
    )
    sizes = [b.font_size for b in ordered if b.font_size > 0]
    body_size = median(sizes) if sizes else 0.0

    lines: list[str] = []
    emphasized: set[int] = set()
    previous: LayoutBlock | None = None
    for block in ordered:
        if previous is not None:
            line_height = max(previous.font_size, 1.0) * 1.8
            if block.page != previous.page or block.y - previous.y > line_height:
                lines.append("")
        if body_size and block.font_size >= body_size * tuning.layout_heading_font_ratio:
            emphasized.add(len(lines))
        lines.append(block.text.strip())
        previous = block
    return lines, emphasized
