"""Google Gemini API wrapper with error handling."""

import json
import logging

from google import genai
from google.genai import types

from config import settings

logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```), if any."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


class GeminiClient:
    """Lazily-connected Gemini client. Disabled when no API key is configured."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ) -> None:
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.temperature = settings.gemini_temperature if temperature is None else temperature
        self._client: genai.Client | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def get_client(self) -> genai.Client | None:
        if not self.api_key:
            logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
            return None
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_text(self, prompt: str, max_output_tokens: int = 1024) -> str | None:
        """Send a prompt and return the raw response text, or None on failure."""
        client = self.get_client()
        if client is None:
            return None

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
            return (response.text or "").strip()
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            return None

    async def generate_json(self, prompt: str, max_output_tokens: int = 4096) -> dict | list | None:
        """Send a prompt to Gemini and parse the JSON response."""
        text = await self.generate_text(prompt, max_output_tokens=max_output_tokens)
        if text is None:
            return None

        try:
            return json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            logger.error("Failed to parse Gemini response as JSON: %s", e)
            return None
