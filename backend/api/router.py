import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_prompt_executor
from config import settings
from models.requests import ParseTextRequest
from models.responses import ParseReview, ReconciliationResult
from models.schemas.raw_document import RawDocument
from services import pdf_parser
from services.pipeline.orchestrator import ParseOptions, parse
from services.prompt_executor import PromptExecutor, PromptOptions
from services.review import review_result

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

_EXTRACTORS = {
    ".pdf": ("PDF", pdf_parser.extract_document),
    ".docx": ("DOCX", pdf_parser.extract_document_docx),
}


def _parse_options(use_ai: bool | None, executor: PromptExecutor | None) -> ParseOptions:
    return ParseOptions(
        use_ai=settings.use_ai_by_default if use_ai is None else use_ai,
        prompt_executor=executor,
        prompt_options=PromptOptions(
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            timeout_seconds=settings.ai_timeout_seconds,
        ),
        tuning=settings.tuning,
    )


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "ai_configured": bool(settings.gemini_api_key),
    }


@router.post("/parse", response_model=ReconciliationResult)
@limiter.limit("10/minute")
async def parse_file(
    request: Request,
    resume_file: UploadFile = File(...),
    use_ai: bool | None = Form(None),
    executor: PromptExecutor | None = Depends(get_prompt_executor),
):
    # Validate file type
    filename = (resume_file.filename or "").lower()
    extension = next((ext for ext in _EXTRACTORS if filename.endswith(ext)), None)
    if extension is None:
        raise HTTPException(status_code=400, detail="Only PDF and DOCX files are accepted")
    kind, extract = _EXTRACTORS[extension]

    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    try:
        doc = extract(content)
    except Exception as e:
        logger.warning("Text extraction failed for %s: %s", resume_file.filename, e)
        raise HTTPException(status_code=400, detail=f"Could not parse {kind} file")

    if not doc.text.strip():
        raise HTTPException(status_code=400, detail=f"No text could be extracted from {kind}")

    return await parse(doc, _parse_options(use_ai, executor))


@router.post("/parse/text", response_model=ReconciliationResult)
@limiter.limit("10/minute")
async def parse_text(
    request: Request,
    body: ParseTextRequest,
    executor: PromptExecutor | None = Depends(get_prompt_executor),
):
    if len(body.text) > settings.max_text_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Resume text too long (max {settings.max_text_chars} chars)",
        )
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Resume text is empty")
    return await parse(RawDocument(text=body.text.strip()), _parse_options(body.use_ai, executor))


@router.post("/parse/review", response_model=ParseReview)
async def review(body: ReconciliationResult):
    return review_result(body)
