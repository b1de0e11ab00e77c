import logging
from typing import Optional, Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import AI_MODEL, GOOGLE_API_KEY, SYSTEM_INSTRUCTION
from planhaus.exceptions import AIServiceError


class TextGenerator(Protocol):
    """Prompt in, text out. Anything with this coroutine can back the AI endpoints."""

    async def generate(self, prompt: str) -> str:
        ...


class GeminiTextGenerator:
    def __init__(self, api_key: str, model: str = AI_MODEL, system_instruction: str = SYSTEM_INSTRUCTION):
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.system_instruction = system_instruction

    async def generate(self, prompt: str) -> str:
        logging.debug(f"Sending prompt to {self.model} ({len(prompt)} chars)")
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(system_instruction=self.system_instruction),
            )
        except genai_errors.APIError as e:
            logging.error(f"Text generation with {self.model} failed: {e}")
            raise AIServiceError(f"AI provider error: {e}") from e
        return response.text or ""


def build_text_generator(api_key: Optional[str] = GOOGLE_API_KEY) -> Optional[TextGenerator]:
    """A Gemini-backed generator, or None when no API key is configured."""
    if not api_key:
        logging.warning("GOOGLE_API_KEY is not set; AI endpoints will report 503.")
        return None
    return GeminiTextGenerator(api_key)
