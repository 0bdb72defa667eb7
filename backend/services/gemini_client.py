"""Google Gemini implementation of the PromptExecutor capability."""

import logging
from typing import Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import settings
from services.errors import AIProviderError
from services.prompt_executor import ChatMessage, PromptOptions, PromptResponse, TokenUsage

logger = logging.getLogger(__name__)

_executor: "GeminiPromptExecutor | None" = None


class GeminiPromptExecutor:
    def __init__(self, api_key: str = "", model: str = "gemini-2.5-flash", client=None) -> None:
        self.model = model
        self._client = client if client is not None else genai.Client(api_key=api_key)

    async def execute(self, messages: Sequence[ChatMessage], options: PromptOptions) -> PromptResponse:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        contents = [
            types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[types.Part.from_text(text=m.content)],
            )
            for m in messages
            if m.role != "system"
        ]
        config = types.GenerateContentConfig(
            system_instruction=system or None,
            temperature=options.temperature,
            max_output_tokens=options.max_tokens,
            response_mime_type="application/json",
        )

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            logger.error("Gemini API error %s: %s", e.code, e.message)
            raise AIProviderError(f"Gemini API error {e.code}: {e.message}") from e
        except Exception as e:
            logger.error("Gemini request failed: %s", e)
            raise AIProviderError(f"Gemini request failed: {e}") from e

        text = response.text or ""
        if not text.strip():
            raise AIProviderError("Gemini returned an empty response")

        usage = None
        if response.usage_metadata is not None:
            usage = TokenUsage(
                input=response.usage_metadata.prompt_token_count or 0,
                output=response.usage_metadata.candidates_token_count or 0,
            )
        return PromptResponse(text=text, usage=usage)


def get_executor() -> GeminiPromptExecutor | None:
    global _executor
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - AI enhancement disabled")
        return None
    if _executor is None:
        _executor = GeminiPromptExecutor(api_key=settings.gemini_api_key, model=settings.gemini_model)
    return _executor
