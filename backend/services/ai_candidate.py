"""AI candidate generation: prompt the model, then coerce its JSON reply.

The generator knows nothing about vendors; it talks to an injected
PromptExecutor. Failures come back as Err values so the pipeline can fall
back to the heuristic candidate.
"""

import asyncio
import json
import logging
import re
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from models.schemas.candidate import ExtractionCandidate, SourceMethod
from models.schemas.raw_document import RawDocument
from models.schemas.result import Err, Ok, Result
from models.schemas.structured_resume import StructuredResume
from services import prompt_builder
from services.errors import AIGenerationError, AIProviderError, AIResponseParseError
from services.heuristic_extractor import parse_date
from services.ids import IdGenerator, uuid_ids
from services.prompt_executor import ChatMessage, PromptExecutor, PromptOptions, PromptResponse

logger = logging.getLogger(__name__)

_LIST_FIELDS = (
    "experiences", "education", "skills", "projects",
    "certifications", "achievements", "customSections",
)
_STRING_LIST_FIELDS: dict[str, tuple[str, ...]] = {
    "experiences": ("technologies",),
    "education": ("coursework", "achievements"),
    "skills": ("items",),
    "projects": ("technologies",),
}
_BULLET_FIELDS = ("experiences", "projects")
_STRING_ENTRY_KEY = {"projects": "name", "certifications": "name", "achievements": "title"}
_DATE_KEYS = ("startDate", "start_date", "endDate", "end_date", "date")
_PRESENT_WORDS = ("present", "current", "now", "ongoing")
_ISO_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})(?:-\d{1,2})?$")


async def generate_ai_candidate(
    doc: RawDocument,
    baseline: ExtractionCandidate,
    executor: PromptExecutor,
    options: PromptOptions = PromptOptions(),
    id_generator: IdGenerator = uuid_ids,
) -> Result[ExtractionCandidate, AIGenerationError]:
    """Ask the model to improve the baseline; confidence is left to the pipeline."""
    messages = prompt_builder.build_parse_prompt(doc, baseline)
    try:
        response = await _execute_cancellable(executor, messages, options)
    except AIProviderError as e:
        logger.warning("AI provider failed: %s", e)
        return Err(e)

    try:
        payload = extract_json_object(response.text)
        resume = StructuredResume.model_validate(coerce_payload(payload, id_generator))
    except AIResponseParseError as e:
        logger.warning("AI response unusable: %s", e)
        return Err(e)
    except ValidationError as e:
        logger.warning("AI response does not match resume schema: %s", e)
        return Err(AIResponseParseError(
            f"AI response does not match resume schema ({e.error_count()} error(s))"
        ))

    if response.usage:
        logger.info("AI parse used %d input / %d output tokens", response.usage.input, response.usage.output)
    return Ok(ExtractionCandidate(resume=resume, source_method=SourceMethod.AI, warnings=[]))


async def _execute_cancellable(
    executor: PromptExecutor, messages: Sequence[ChatMessage], options: PromptOptions
) -> PromptResponse:
    """Race the executor call against the cancel event and the timeout."""
    call = asyncio.ensure_future(executor.execute(messages, options))
    cancel_wait = (
        asyncio.ensure_future(options.cancel_event.wait())
        if options.cancel_event is not None
        else None
    )
    waiters = {call} if cancel_wait is None else {call, cancel_wait}
    try:
        done, _ = await asyncio.wait(
            waiters, timeout=options.timeout_seconds, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        if cancel_wait is not None:
            cancel_wait.cancel()
        if not call.done():
            call.cancel()

    if call in done:
        try:
            return call.result()
        except AIProviderError:
            raise
        except asyncio.CancelledError as e:
            logger.warning("AI executor cancelled its own request")
            raise AIProviderError("AI request cancelled by executor") from e
        except Exception as e:
            logger.warning("AI executor raised %s: %s", type(e).__name__, e)
            raise AIProviderError(f"AI request failed: {str(e) or type(e).__name__}") from e
    if cancel_wait is not None and cancel_wait in done:
        raise AIProviderError("AI request cancelled")
    raise AIProviderError(f"AI request timed out after {options.timeout_seconds}s")


def extract_json_object(text: str) -> dict:
    """Decode the first JSON object in text, ignoring surrounding prose and stray braces."""
    decoder = json.JSONDecoder()
    first_error = None
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
            return obj
        except json.JSONDecodeError as e:
            first_error = first_error or e
            # Unterminated object: later braces are nested inside it.
            if e.pos >= len(text.rstrip()):
                break
        start = text.find("{", start + 1)
    if first_error is None:
        raise AIResponseParseError("No JSON object found in AI response")
    raise AIResponseParseError(f"Invalid JSON in AI response: {first_error.msg}") from first_error


# ---------------------------------------------------------------------------
# Payload coercion
# ---------------------------------------------------------------------------

def coerce_payload(payload: dict, new_id: IdGenerator) -> dict:
    """Normalize model output so every entry has a unique id and every list exists."""
    data = dict(payload)
    for key in ("name", "title", "summary"):
        data[key] = _text(data.get(key))

    contact = data.get("contact")
    data["contact"] = (
        {k: _text(v) for k, v in contact.items()} if isinstance(contact, dict) else {}
    )

    seen: set[str] = set()

    def assign_id(entry: dict) -> None:
        ident = _text(entry.get("id"))
        if not isinstance(ident, str) or not ident or ident in seen:
            ident = new_id()
        seen.add(ident)
        entry["id"] = ident

    for field in _LIST_FIELDS:
        entries = _as_list(data.pop(field, None) or data.pop(_snake(field), None))
        if field == "skills":
            entries = _group_loose_skills(entries)
        coerced = []
        for entry in entries:
            if isinstance(entry, str) and field in _STRING_ENTRY_KEY:
                entry = {_STRING_ENTRY_KEY[field]: entry}
            if not isinstance(entry, dict):
                continue
            coerced.append(_coerce_entry(field, entry, assign_id))
        data[field] = coerced
    return data


def _coerce_entry(field: str, raw: dict, assign_id: Callable[[dict], None]) -> dict:
    entry = {k: v for k, v in raw.items() if v is not None or k in _DATE_KEYS}
    assign_id(entry)

    for key in _STRING_LIST_FIELDS.get(field, ()):
        entry[key] = _string_list(entry.get(key))

    if field in _BULLET_FIELDS:
        bullets = []
        for item in _as_list(entry.get("bullets")):
            bullet = _coerce_bullet(item)
            if bullet is not None:
                assign_id(bullet)
                bullets.append(bullet)
        entry["bullets"] = bullets

    end_value = entry.get("endDate", entry.get("end_date"))
    if isinstance(end_value, str) and end_value.strip().lower() in _PRESENT_WORDS:
        entry["current"] = True

    for key in _DATE_KEYS:
        if key in entry:
            entry[key] = _coerce_date(entry[key])

    if _truthy(entry.get("current")):
        entry.pop("end_date", None)
        entry["endDate"] = None
    return entry


def _coerce_bullet(item: Any) -> dict | None:
    if isinstance(item, str):
        bullet: dict = {"text": item}
    elif isinstance(item, dict):
        bullet = {k: v for k, v in item.items() if v is not None}
    else:
        return None
    bullet["text"] = _text(bullet.get("text"))
    bullet["keywords"] = _string_list(bullet.get("keywords"))
    metrics = bullet.pop("metrics", None)
    if "hasMetrics" not in bullet and "has_metrics" not in bullet:
        if isinstance(metrics, dict) and "hasMetrics" in metrics:
            bullet["hasMetrics"] = bool(metrics["hasMetrics"])
        elif isinstance(bullet["text"], str):
            bullet["hasMetrics"] = any(ch.isdigit() for ch in bullet["text"])
    return bullet


def _coerce_date(value: Any) -> dict | None:
    """Accept {"month", "year"}, "2020-01", "Jan 2020", "2020" or a bare int year."""
    if isinstance(value, dict):
        year = _text(value.get("year"))
        if isinstance(year, str) and year:
            month = _text(value.get("month"))
            return {"year": year, "month": month or None}
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return {"year": str(value)}
    if isinstance(value, str):
        value = value.strip()
        if not value or value.lower() in _PRESENT_WORDS:
            return None
        iso = _ISO_MONTH_RE.match(value)
        if iso:
            return {"year": iso.group(1), "month": iso.group(2)}
        parsed = parse_date(value)
        return parsed.model_dump() if parsed else None
    return None


def _group_loose_skills(entries: list) -> list:
    """A flat list of skill strings becomes one "Skills" group."""
    loose = [e.strip() for e in entries if isinstance(e, str) and e.strip()]
    grouped = [e for e in entries if not isinstance(e, str)]
    if loose:
        grouped.append({"category": "Skills", "items": loose})
    return grouped


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _string_list(value: Any) -> list:
    items = []
    for item in _as_list(value):
        text = _text(item)
        if isinstance(text, str):
            if text:
                items.append(text)
        else:
            items.append(item)
    return items


def _text(value: Any) -> Any:
    """None -> "", numbers -> str, strings stripped; other shapes left for validation."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)([A-Z])", r"_\1", name).lower()
