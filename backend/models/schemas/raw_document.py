"""Pipeline input: flattened document text plus optional layout hints."""

from pydantic import ConfigDict

from models.schemas.structured_resume import CamelModel


class LayoutBlock(CamelModel):
    """One positioned line of text as reported by the PDF extractor."""
    model_config = ConfigDict(frozen=True)

    text: str
    x: float = 0.0
    y: float = 0.0
    font_size: float = 0.0
    page: int = 1


class RawSection(CamelModel):
    """A section already split out by upstream layout analysis."""
    model_config = ConfigDict(frozen=True)

    heading: str = ""
    content: str = ""
    confidence: float | None = None


class RawDocument(CamelModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    layout_blocks: list[LayoutBlock] | None = None
    sections: list[RawSection] | None = None
