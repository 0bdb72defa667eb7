from pydantic import Field

from models.schemas.structured_resume import CamelModel


class ParseTextRequest(CamelModel):
    text: str = Field(..., min_length=1, max_length=50000, description="Plain text resume content")
    use_ai: bool | None = Field(None, alias="useAI", description="Override the server default for AI enhancement")
