"""Pattern-based extraction of a structured resume from typed sections.

Every parser here degrades to empty output on text it does not recognise;
the extractor always returns a candidate, possibly a mostly-empty one.
"""

import logging
import re
from typing import Callable

from models.schemas.candidate import ExtractionCandidate, SourceMethod
from models.schemas.section import Section, SectionType
from models.schemas.structured_resume import (
    Achievement,
    Bullet,
    Certification,
    Contact,
    CustomSection,
    DateInfo,
    Education,
    Experience,
    Project,
    SkillGroup,
    StructuredResume,
)
from models.schemas.tuning import DEFAULT_TUNING, ParserTuning
from services.ids import IdGenerator, uuid_ids
from services.pdf_parser import is_bullet_line, strip_bullet
from services.section_parser import is_canonical_heading

logger = logging.getLogger(__name__)

# Contact info patterns
EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"(?<!\d)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")
LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+", re.IGNORECASE)
GITHUB_RE = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[\w-]+", re.IGNORECASE)
URL_RE = re.compile(r"(?:https?://|www\.)[^\s|,;]+", re.IGNORECASE)
LOCATION_RE = re.compile(r"\b[A-Z][a-zA-Z]+(?: [A-Z][a-zA-Z]+)*, *(?:[A-Z]{2}\b|[A-Z][a-z]+)")
NAME_SHAPE_RE = re.compile(r"^[A-Z][A-Za-z'.-]*(?:\s+[A-Z][A-Za-z'.-]*)+$")

# Date ranges: "Jan 2019 - Present", "2020 - 2023", "03/2018 – 11/2022"
_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|"
    r"Jul(?:y)?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_DATE = rf"(?:{_MONTHS}\.?\s+\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"
DATE_RANGE_RE = re.compile(
    rf"(?P<start>{_DATE})\s*(?:-|–|—|to)\s*(?P<end>{_DATE}|present|current|now)",
    re.IGNORECASE,
)
YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
GPA_RE = re.compile(r"\bGPA\s*:?\s*(\d(?:\.\d{1,2})?(?:\s*/\s*\d(?:\.\d{1,2})?)?)", re.IGNORECASE)

# Degree detection, used to catch "degree first, institution second" blocks
_DEGREE_RE = re.compile(
    r"\b(?:ph\.?d|doctorate|master(?:'?s)?|bachelor(?:'?s)?|associate(?:'?s)?|mba|"
    r"b\.?s\.?c?|m\.?s\.?c?|b\.?a|m\.?a|b\.?tech|m\.?tech|b\.?eng|m\.?eng|diploma)\b",
    re.IGNORECASE,
)
_INSTITUTION_RE = re.compile(r"\b(?:university|college|institute|school|academy)\b", re.IGNORECASE)

_TITLE_COMPANY_SEPARATORS = (" at ", " @ ", " | ", " - ", " – ", " — ")
_NAME_DETAIL_SEPARATORS = (" - ", " – ", " — ", " | ")
_SKILL_ITEM_SPLIT_RE = re.compile(r"[,;|•·▪]")
_TECH_LINE_RE = re.compile(r"^(?:technologies|tech(?:\s+stack)?|stack|tools)\s*:\s*(.+)$", re.IGNORECASE)
_COURSEWORK_RE = re.compile(r"^(?:relevant\s+)?coursework\s*:\s*(.+)$", re.IGNORECASE)
_EDGE_SEPARATORS = " \t|,;-–—"

IMPLICIT_SKILL_CATEGORY = "Skills"


def extract_heuristic(
    sections: list[Section],
    id_generator: IdGenerator = uuid_ids,
    tuning: ParserTuning = DEFAULT_TUNING,
) -> ExtractionCandidate:
    """Build a heuristic candidate from segmented sections."""
    resume = StructuredResume()
    warnings: list[str] = []

    personal_text = "\n".join(s.content for s in sections if s.type == SectionType.PERSONAL)
    document_text = "\n".join(s.content for s in sections)
    header_lines = _non_empty_lines(document_text)[: tuning.header_fallback_lines]
    resume.name, resume.contact = _extract_personal(personal_text, header_lines)

    summaries: list[str] = []
    for section in sections:
        try:
            if section.type == SectionType.SUMMARY:
                summaries.append(" ".join(_non_empty_lines(section.content)))
            elif section.type in _LIST_PARSERS:
                field, parser = _LIST_PARSERS[section.type]
                getattr(resume, field).extend(parser(section.content, id_generator))
            elif section.type == SectionType.OTHER:
                resume.custom_sections.append(CustomSection(
                    id=id_generator(),
                    title=section.heading or "Other",
                    content=section.content,
                ))
        except Exception as e:
            logger.warning("Failed to parse %s section: %s", section.type.value, e, exc_info=True)
            warnings.append(f"Failed to parse {section.type.value} section: {e}")
    resume.summary = " ".join(s for s in summaries if s)

    confidence = heuristic_confidence(resume, tuning)
    logger.info(
        "Heuristic extraction: %d experiences, %d education, %d skill groups (confidence %.2f)",
        len(resume.experiences), len(resume.education), len(resume.skills), confidence,
    )
    return ExtractionCandidate(
        resume=resume,
        confidence=confidence,
        source_method=SourceMethod.HEURISTIC,
        warnings=warnings,
    )


def heuristic_confidence(resume: StructuredResume, tuning: ParserTuning = DEFAULT_TUNING) -> float:
    confidence = tuning.heuristic_base_confidence
    for value in (resume.name, resume.contact.email, resume.contact.phone):
        if value:
            confidence += tuning.personal_field_weight
    if resume.experiences:
        confidence += tuning.experience_weight
    if resume.education:
        confidence += tuning.education_weight
    if resume.skills:
        confidence += tuning.skills_weight
    return round(min(confidence, tuning.heuristic_confidence_cap), 4)


# ---------------------------------------------------------------------------
# Personal info
# ---------------------------------------------------------------------------

def _extract_personal(personal_text: str, header_lines: list[str]) -> tuple[str, Contact]:
    """Match contact fields in the personal section, then in the document header."""
    sources = [personal_text, "\n".join(header_lines)]

    def first(pattern: re.Pattern) -> str:
        for source in sources:
            match = pattern.search(source)
            if match:
                return match.group().strip()
        return ""

    linkedin = first(LINKEDIN_RE)
    github = first(GITHUB_RE)
    contact = Contact(
        email=first(EMAIL_RE),
        phone=first(PHONE_RE),
        linkedin=_as_url(linkedin) if linkedin else "",
        github=_as_url(github) if github else "",
        website=_find_website(sources),
        location=first(LOCATION_RE),
    )

    name = _guess_name(_non_empty_lines(personal_text)) or _guess_name(header_lines)
    return name, contact


def _as_url(value: str) -> str:
    value = value.rstrip("/")
    return value if value.lower().startswith(("http://", "https://")) else f"https://{value}"


def _find_website(sources: list[str]) -> str:
    for source in sources:
        for match in URL_RE.finditer(source):
            url = match.group().rstrip(".")
            if "linkedin.com" not in url.lower() and "github.com" not in url.lower():
                return _as_url(url)
    return ""


def _could_be_name(line: str) -> bool:
    return (
        2 <= len(line) <= 50
        and not EMAIL_RE.search(line)
        and not PHONE_RE.search(line)
        and not URL_RE.search(line)
        and "/" not in line
        and not any(ch.isdigit() for ch in line)
        and not is_canonical_heading(line)
    )


def _guess_name(lines: list[str]) -> str:
    candidates = [line for line in lines if _could_be_name(line)]
    for line in candidates:
        if NAME_SHAPE_RE.match(line):
            return line
    return candidates[0] if candidates else ""


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

def parse_experience(content: str, new_id: IdGenerator) -> list[Experience]:
    experiences = []
    for block in _split_blocks(content):
        lines = _non_empty_lines(block)
        # Bullets split off by a blank line belong to the job above.
        if lines and is_bullet_line(lines[0]):
            if experiences:
                experiences[-1].bullets.extend(_collect_bullets(lines, new_id, []))
            continue
        if len(lines) < 2:
            continue

        header, rest = lines[0], lines[1:]
        date_match = DATE_RANGE_RE.search(header)
        title, company = _split_title_company(_remove_match(header, date_match))
        location = ""
        description: list[str] = []

        if not is_bullet_line(rest[0]):
            detail = rest.pop(0)
            detail_date = DATE_RANGE_RE.search(detail)
            if detail_date and date_match is None:
                date_match = detail_date
                location = _trim_edges(_remove_match(detail, detail_date))
            elif not company:
                company = _trim_edges(_remove_match(detail, detail_date))
            else:
                description.append(detail)

        start_date, end_date, current = _parse_range(date_match)
        bullets = _collect_bullets(rest, new_id, description)
        experiences.append(Experience(
            id=new_id(),
            company=company,
            title=title,
            location=location,
            start_date=start_date,
            end_date=end_date,
            current=current,
            bullets=bullets,
            description=" ".join(description),
        ))
    return experiences


def _split_title_company(line: str) -> tuple[str, str]:
    line = _trim_edges(line)
    for separator in _TITLE_COMPANY_SEPARATORS:
        if separator in line:
            title, company = line.split(separator, 1)
            return _trim_edges(title), _trim_edges(company)
    return line, ""


def _collect_bullets(lines: list[str], new_id: IdGenerator, overflow: list[str]) -> list[Bullet]:
    """Bullet lines become bullets; wrapped lines continue the previous bullet."""
    bullets: list[Bullet] = []
    for line in lines:
        if is_bullet_line(line):
            text = strip_bullet(line)
            if text:
                bullets.append(_make_bullet(text, new_id))
        elif bullets:
            last = bullets[-1]
            last.text = f"{last.text} {line}"
            last.has_metrics = _has_metrics(last.text)
        else:
            overflow.append(line)
    return bullets


def _make_bullet(text: str, new_id: IdGenerator) -> Bullet:
    return Bullet(id=new_id(), text=text, has_metrics=_has_metrics(text))


def _has_metrics(text: str) -> bool:
    return any(ch.isdigit() for ch in text)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def parse_date(value: str) -> DateInfo | None:
    """Parse "Jan 2020", "01/2020" or "2020" into a DateInfo."""
    value = value.strip()
    month_year = re.match(rf"^({_MONTHS})\.?\s+(\d{{4}})$", value, re.IGNORECASE)
    if month_year:
        return DateInfo(month=month_year.group(1), year=month_year.group(2))
    numeric = re.match(r"^(\d{1,2})/(\d{4})$", value)
    if numeric:
        return DateInfo(month=numeric.group(1), year=numeric.group(2))
    year = YEAR_RE.search(value) or re.search(r"\d{4}", value)
    return DateInfo(year=year.group()) if year else None


def _parse_range(match: re.Match | None) -> tuple[DateInfo | None, DateInfo | None, bool]:
    if match is None:
        return None, None, False
    start = parse_date(match.group("start"))
    end_text = match.group("end")
    if end_text.lower() in ("present", "current", "now"):
        return start, None, True
    return start, parse_date(end_text), False


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------

def parse_education(content: str, new_id: IdGenerator) -> list[Education]:
    entries = []
    for block in _split_blocks(content):
        lines = _non_empty_lines(block)
        if len(lines) < 2:
            continue

        institution_line, degree_line = lines[0], lines[1]
        if _DEGREE_RE.search(institution_line) and _INSTITUTION_RE.search(degree_line):
            institution_line, degree_line = degree_line, institution_line

        range_match = DATE_RANGE_RE.search(block)
        if range_match:
            start_date, end_date, _ = _parse_range(range_match)
        else:
            year = YEAR_RE.search(block)
            start_date, end_date = None, DateInfo(year=year.group()) if year else None

        degree, field = _split_degree(_strip_dates(degree_line))
        gpa = GPA_RE.search(block)
        coursework: list[str] = []
        for line in lines[2:]:
            course_match = _COURSEWORK_RE.match(strip_bullet(line))
            if course_match:
                coursework.extend(_split_items(course_match.group(1)))

        entries.append(Education(
            id=new_id(),
            institution=_strip_dates(institution_line),
            degree=degree,
            field=field,
            start_date=start_date,
            end_date=end_date,
            gpa=gpa.group(1).replace(" ", "") if gpa else "",
            coursework=coursework,
        ))
    return entries


def _split_degree(line: str) -> tuple[str, str]:
    """"Bachelor of Science in Computer Science" -> (degree, field)."""
    line = GPA_RE.sub("", line)
    degree, separator, field = line.partition(" in ")
    if separator:
        return _trim_edges(degree), _trim_edges(field)
    return _trim_edges(line), ""


def _strip_dates(line: str) -> str:
    return _trim_edges(YEAR_RE.sub("", DATE_RANGE_RE.sub("", line)))


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

def parse_skills(content: str, new_id: IdGenerator) -> list[SkillGroup]:
    """"Category: a, b, c" lines open a category; bare lines add to the current one."""
    groups: list[SkillGroup] = []
    current: SkillGroup | None = None
    for raw in _non_empty_lines(content):
        line = strip_bullet(raw) if is_bullet_line(raw) else raw
        category, separator, items = line.partition(":")
        if separator and category.strip():
            current = SkillGroup(id=new_id(), category=category.strip(), items=_split_items(items))
            groups.append(current)
            continue
        if current is None:
            current = SkillGroup(id=new_id(), category=IMPLICIT_SKILL_CATEGORY)
            groups.append(current)
        current.items.extend(_split_items(line))
    return [group for group in groups if group.items]


def _split_items(text: str) -> list[str]:
    return [item.strip() for item in _SKILL_ITEM_SPLIT_RE.split(text) if item.strip()]


# ---------------------------------------------------------------------------
# Projects, certifications, achievements
# ---------------------------------------------------------------------------

def parse_projects(content: str, new_id: IdGenerator) -> list[Project]:
    projects = []
    for block in _split_blocks(content):
        lines = _non_empty_lines(block)
        if not lines:
            continue
        name, description = _split_name_detail(strip_bullet(lines[0]))
        technologies: list[str] = []
        body: list[str] = []
        for line in lines[1:]:
            tech_match = _TECH_LINE_RE.match(strip_bullet(line))
            if tech_match:
                technologies.extend(_split_items(tech_match.group(1)))
            else:
                body.append(line)
        overflow: list[str] = []
        bullets = _collect_bullets(body, new_id, overflow)
        if overflow:
            description = " ".join([description, *overflow]).strip()

        link, github = "", ""
        for match in URL_RE.finditer(block):
            url = _as_url(match.group().rstrip("."))
            if "github.com" in url.lower():
                github = github or url
            else:
                link = link or url

        projects.append(Project(
            id=new_id(),
            name=name,
            description=description,
            link=link,
            github=github,
            bullets=bullets,
            technologies=technologies,
        ))
    return projects


def parse_certifications(content: str, new_id: IdGenerator) -> list[Certification]:
    certifications = []
    for line in _non_empty_lines(content):
        year = YEAR_RE.search(line)
        name, issuer = _split_name_detail(_strip_dates(strip_bullet(line)))
        if name:
            certifications.append(Certification(
                id=new_id(),
                name=name,
                issuer=issuer,
                date=DateInfo(year=year.group()) if year else None,
            ))
    return certifications


def parse_achievements(content: str, new_id: IdGenerator) -> list[Achievement]:
    achievements = []
    for line in _non_empty_lines(content):
        year = YEAR_RE.search(line)
        title, description = _split_name_detail(_strip_dates(strip_bullet(line)))
        if title:
            achievements.append(Achievement(
                id=new_id(),
                title=title,
                description=description,
                date=DateInfo(year=year.group()) if year else None,
            ))
    return achievements


def _split_name_detail(line: str) -> tuple[str, str]:
    for separator in _NAME_DETAIL_SEPARATORS:
        if separator in line:
            name, detail = line.split(separator, 1)
            return _trim_edges(name), _trim_edges(detail)
    return _trim_edges(line), ""


_LIST_PARSERS: dict[SectionType, tuple[str, Callable[[str, IdGenerator], list]]] = {
    SectionType.EXPERIENCE: ("experiences", parse_experience),
    SectionType.EDUCATION: ("education", parse_education),
    SectionType.SKILLS: ("skills", parse_skills),
    SectionType.PROJECTS: ("projects", parse_projects),
    SectionType.CERTIFICATIONS: ("certifications", parse_certifications),
    SectionType.ACHIEVEMENTS: ("achievements", parse_achievements),
}


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def _split_blocks(content: str) -> list[str]:
    return [block for block in re.split(r"\n\s*\n", content) if block.strip()]


def _non_empty_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def _remove_match(text: str, match: re.Match | None) -> str:
    if match is None or match.string != text:
        return text
    return text[: match.start()] + " " + text[match.end():]


def _trim_edges(text: str) -> str:
    return text.strip(_EDGE_SEPARATORS).strip()
