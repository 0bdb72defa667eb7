"""Pydantic contracts shared by the parsing pipeline stages."""

from models.schemas.candidate import ExtractionCandidate, SourceMethod
from models.schemas.raw_document import LayoutBlock, RawDocument, RawSection
from models.schemas.result import Err, Ok, Result
from models.schemas.section import Section, SectionType
from models.schemas.structured_resume import StructuredResume
from models.schemas.tuning import DEFAULT_TUNING, ParserTuning

__all__ = [
    "DEFAULT_TUNING",
    "Err",
    "ExtractionCandidate",
    "LayoutBlock",
    "Ok",
    "ParserTuning",
    "RawDocument",
    "RawSection",
    "Result",
    "Section",
    "SectionType",
    "SourceMethod",
    "StructuredResume",
]
