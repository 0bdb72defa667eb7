"""Pipeline orchestrator: the single public parse() entry point.

Flow:
    RawDocument
      ├─ segment()                  → list[Section]
      ├─ extract_heuristic()        → ExtractionCandidate (heuristic)
      │       ↓  (use_ai and an executor is configured)
      ├─ generate_ai_candidate()    → Ok(ExtractionCandidate) | Err(AIGenerationError)
      │       ↓
      ├─ reconcile()                → merged resume + improvements
      ├─ validate()                 → Ok | Err(SchemaValidationError) → demotion
      └─ score()                    → ReconciliationResult

parse() never raises for degraded paths; everything is reported through
warnings, validation_errors and confidence on the result.
"""

import logging
import time
from dataclasses import dataclass, field

from models.responses import ParseMetadata, ParseMethod, ReconciliationResult
from models.schemas.candidate import ExtractionCandidate
from models.schemas.raw_document import RawDocument
from models.schemas.result import Err
from models.schemas.structured_resume import Contact, StructuredResume
from models.schemas.tuning import DEFAULT_TUNING, ParserTuning
from services import confidence
from services.ai_candidate import generate_ai_candidate
from services.errors import CatastrophicExtractionFailure
from services.heuristic_extractor import EMAIL_RE, extract_heuristic
from services.ids import IdGenerator, uuid_ids
from services.prompt_executor import PromptExecutor, PromptOptions
from services.reconciler import reconcile
from services.section_parser import segment
from services.validator import validate

logger = logging.getLogger(__name__)

LOW_TEXT_THRESHOLD = 100
LOW_TEXT_WARNING = "Very little text extracted"
NO_EXECUTOR_WARNING = "AI enhancement skipped: no prompt executor configured"
DEMOTION_WARNING = "AI-enhanced resume failed validation; using heuristic result"
FALLBACK_VALIDATION_ERROR = "Failed to parse resume structure"


@dataclass(frozen=True)
class ParseOptions:
    use_ai: bool = True
    prompt_executor: PromptExecutor | None = None
    prompt_options: PromptOptions = field(default_factory=PromptOptions)
    id_generator: IdGenerator = uuid_ids
    tuning: ParserTuning = field(default_factory=lambda: DEFAULT_TUNING)


async def parse(doc: RawDocument, options: ParseOptions = ParseOptions()) -> ReconciliationResult:
    started = time.perf_counter()
    tuning = options.tuning
    metadata = document_metadata(doc)
    warnings: list[str] = []
    if len("".join(doc.text.split())) < LOW_TEXT_THRESHOLD:
        warnings.append(LOW_TEXT_WARNING)

    # --- Stage 1: Heuristic baseline (always runs) ---
    try:
        heuristic = _run_heuristics(doc, options)
    except CatastrophicExtractionFailure as e:
        warnings.append(f"Parsing failed: {e}")
        return ReconciliationResult(
            resume=fallback_resume(doc.text),
            confidence=tuning.min_confidence,
            method=ParseMethod.FALLBACK,
            warnings=warnings,
            validation_errors=[FALLBACK_VALIDATION_ERROR],
            processing_time_ms=_elapsed_ms(started),
            metadata=metadata,
        )
    warnings.extend(heuristic.warnings)

    def heuristic_result(extra_warnings: list[str]) -> ReconciliationResult:
        return ReconciliationResult(
            resume=heuristic.resume,
            confidence=confidence.score(heuristic.confidence, False, 0, 0, tuning),
            method=ParseMethod.HEURISTIC,
            warnings=warnings + extra_warnings,
            processing_time_ms=_elapsed_ms(started),
            metadata=metadata,
        )

    if not options.use_ai:
        return _logged(heuristic_result([]))
    if options.prompt_executor is None:
        logger.warning("AI requested but no prompt executor is configured")
        return _logged(heuristic_result([NO_EXECUTOR_WARNING]))

    # --- Stage 2: AI candidate (single attempt, no retries) ---
    generated = await generate_ai_candidate(
        doc, heuristic, options.prompt_executor, options.prompt_options, options.id_generator
    )
    if isinstance(generated, Err):
        outcome = reconcile(heuristic, None, tuning)
        return _logged(heuristic_result([f"AI enhancement failed: {generated.error}"] + outcome.warnings))

    # --- Stage 3: Merge, validate, score ---
    outcome = reconcile(heuristic, generated.value, tuning, options.id_generator)
    warnings.extend(outcome.warnings)

    checked = validate(outcome.resume)
    if isinstance(checked, Err):
        errors = checked.error.errors
        logger.warning("Demoting to heuristic result: %s", "; ".join(errors))
        return _logged(ReconciliationResult(
            resume=heuristic.resume,
            confidence=confidence.score(heuristic.confidence, True, len(errors), 0, tuning),
            method=ParseMethod.HEURISTIC,
            warnings=warnings + [DEMOTION_WARNING],
            validation_errors=errors,
            processing_time_ms=_elapsed_ms(started),
            metadata=metadata,
        ))

    return _logged(ReconciliationResult(
        resume=checked.value,
        confidence=confidence.score(heuristic.confidence, True, 0, len(outcome.improvements), tuning),
        method=ParseMethod.AI_ENHANCED,
        improvements=outcome.improvements,
        warnings=warnings,
        processing_time_ms=_elapsed_ms(started),
        metadata=metadata,
    ))


def _run_heuristics(doc: RawDocument, options: ParseOptions) -> ExtractionCandidate:
    try:
        sections = segment(doc, options.tuning)
        return extract_heuristic(sections, options.id_generator, options.tuning)
    except Exception as e:
        logger.exception("Heuristic extraction failed")
        raise CatastrophicExtractionFailure(str(e) or type(e).__name__) from e


def fallback_resume(text: str) -> StructuredResume:
    """Minimal resume kept when the heuristic path breaks: a name guess and the first email."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    email = EMAIL_RE.search(text)
    return StructuredResume(
        name=lines[0] if lines else "",
        contact=Contact(email=email.group(0) if email else ""),
    )


def document_metadata(doc: RawDocument) -> ParseMetadata:
    pages = {block.page for block in doc.layout_blocks or []}
    return ParseMetadata(
        word_count=len(doc.text.split()),
        char_count=len(doc.text),
        page_count=max(pages) if pages else 1,
    )


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def _logged(result: ReconciliationResult) -> ReconciliationResult:
    logger.info(
        "Parsed resume: method=%s confidence=%.2f improvements=%d warnings=%d (%d ms)",
        result.method.value, result.confidence, len(result.improvements),
        len(result.warnings), result.processing_time_ms,
    )
    return result
