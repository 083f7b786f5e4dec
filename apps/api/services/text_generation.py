"""
Text Generation Collaborator

The weekly report and the daily feedback ask a language model for text.
Callers depend on the small TextGenerator interface:

    generate(prompt, response_hint) -> str

The output is untrusted: it may be empty, wrapped in markdown, or not JSON
at all. Validation lives with the callers.

A generator is built per request from settings and handed down explicitly;
there is no module-level client.
"""
import logging
import time
from typing import Optional

from google import genai
from google.genai import types as genai_types

from core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

RESPONSE_JSON = "json"
RESPONSE_TEXT = "text"

DEFAULT_TEMPERATURE = 0.6
DEFAULT_MAX_TOKENS = 500


class TextGenerationError(RuntimeError):
    """The generator could not produce any text."""


class TextGenerator:
    def generate(
        self,
        prompt: str,
        response_hint: str = RESPONSE_TEXT,
        system_instruction: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        raise NotImplementedError


class GeminiTextGenerator(TextGenerator):
    """
    TextGenerator backed by google.genai.

    Usage:
        generator = GeminiTextGenerator(genai.Client(api_key=key))
        text = generator.generate(prompt, RESPONSE_JSON)
    """

    def __init__(self, client, model: str = "gemini-2.5-flash"):
        self.client = client
        self.model = model

    def generate(
        self,
        prompt: str,
        response_hint: str = RESPONSE_TEXT,
        system_instruction: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        config = genai_types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=max_output_tokens or DEFAULT_MAX_TOKENS,
            temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
            response_mime_type="application/json" if response_hint == RESPONSE_JSON else "text/plain",
        )

        start = time.monotonic()
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        latency_ms = int((time.monotonic() - start) * 1000)

        text = response.text or ""
        logger.info(
            f"Text generation complete (model={self.model}, hint={response_hint}, "
            f"latency_ms={latency_ms}, chars={len(text)})"
        )
        if not text.strip():
            raise TextGenerationError("Text generator returned an empty response")
        return text


def build_text_generator(config: Optional[Settings] = None) -> Optional[TextGenerator]:
    """
    Construct a generator from settings, or None when AI is disabled or no
    API key is configured (callers then use their deterministic fallback).
    """
    config = config or default_settings
    if not config.USE_AI:
        return None
    if not config.GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set; text generation disabled")
        return None

    client = genai.Client(
        api_key=config.GOOGLE_API_KEY,
        http_options=genai_types.HttpOptions(timeout=config.EXTERNAL_API_TIMEOUT * 1000),
    )
    return GeminiTextGenerator(client, model=config.GEMINI_MODEL)


def get_text_generator() -> Optional[TextGenerator]:
    """FastAPI dependency; overridden in tests."""
    return build_text_generator()
