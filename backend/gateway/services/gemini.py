"""
Gemini integration service.

Transport only: turns go out, text comes back. Prompt assembly lives in
ChatRelayService.
"""

from google import genai
from google.genai import types

from gateway.config import settings
from gateway.logging import get_logger
from gateway.models import ChatTurn, GenerationResult

logger = get_logger('services.gemini')


def to_contents(turns: list[ChatTurn]) -> list[types.Content]:
    return [
        types.Content(role=turn.role.value, parts=[types.Part(text=text) for text in turn.parts])
        for turn in turns
    ]


class GeminiService:
    """Service for calling the Gemini content generation API."""

    def __init__(self, model: str | None = None):
        self.client = None
        self.model = model or settings.GEMINI_MODEL
        self._initialized = False

    async def initialize(self):
        if not settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY not set - chat relay will fail every request")
            return

        timeout_ms = int(settings.GEMINI_TIMEOUT_SECONDS * 1000)
        try:
            self.client = genai.Client(
                api_key=settings.GEMINI_API_KEY,
                http_options=types.HttpOptions(timeout=timeout_ms) if timeout_ms > 0 else None,
            )
            self._initialized = True
            logger.info(f"Gemini client initialized (model={self.model})")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini: {e}")

    @property
    def is_available(self) -> bool:
        return self._initialized and self.client is not None

    async def generate(
        self,
        turns: list[ChatTurn],
        max_output_tokens: int,
        system_instruction: str | None = None,
    ) -> GenerationResult:
        if not self.is_available:
            return GenerationResult(success=False, error="Gemini service unavailable")

        config = types.GenerateContentConfig(
            max_output_tokens=max_output_tokens,
            system_instruction=system_instruction,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=to_contents(turns),
                config=config,
            )
        except Exception as e:
            logger.error(f"Generation failed (model={self.model}, turns={len(turns)}): {e}")
            return GenerationResult(success=False, error=str(e))

        usage = getattr(response, "usage_metadata", None)
        input_tokens = getattr(usage, "prompt_token_count", None)
        output_tokens = getattr(usage, "candidates_token_count", None)
        finish_reason = None
        if response.candidates:
            reason = getattr(response.candidates[0], "finish_reason", None)
            finish_reason = str(getattr(reason, "value", reason)) if reason else None

        logger.info(
            "Gemini usage model=%s turns=%d finish=%s tokens=%s/%s",
            self.model,
            len(turns),
            finish_reason or "(unknown)",
            input_tokens if input_tokens is not None else "?",
            output_tokens if output_tokens is not None else "?",
        )

        text = response.text
        if not text:
            return GenerationResult(
                success=False,
                error=f"Empty response from model (finish reason: {finish_reason or 'unknown'})",
                model_name=self.model,
                finish_reason=finish_reason,
            )

        return GenerationResult(
            success=True,
            response=text,
            model_name=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason,
        )
