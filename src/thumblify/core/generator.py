"""Gemini image generation for Thumblify.

This module provides :class:`ThumbnailGenerator`, the single point of contact
with the Google GenAI image model.  It turns a compiled prompt into raw image
bytes.

Key Responsibilities
--------------------
- **Lazy client creation** - the ``genai.Client`` is only created when
  ``generate()`` is first called, so the application can start (and tests
  can run) without provider credentials.
- **Request configuration** - image-only response modality, the configured
  image size and sampling settings, and a single block threshold applied to
  every harm category.
- **Response parsing** - the first inline image payload of the first
  candidate is returned; anything else is a :class:`ProviderError`.

There is no retry and no timeout handling beyond the SDK defaults.  SDK
errors (``google.genai.errors.APIError``) propagate unchanged.

Usage
-----
::

    from thumblify.core.config import config
    from thumblify.core.generator import ThumbnailGenerator

    generator = ThumbnailGenerator(config)
    png_bytes = generator.generate("Create a minimalist thumbnail ...", "16:9")
"""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

from thumblify.core.config import ThumblifyConfig

logger = logging.getLogger(__name__)

_HARM_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
)


class ProviderError(Exception):
    """Raised when the provider response does not contain an image."""


def extract_image_bytes(response) -> bytes:
    """Return the first inline image payload from a provider response.

    Args:
        response: A ``GenerateContentResponse`` (or any object with the same
            ``candidates[0].content.parts`` shape).

    Returns:
        The raw image bytes.

    Raises:
        ProviderError: If the response has no parts, or no part carries
            inline image data.
    """
    candidates = getattr(response, "candidates", None) or []
    content = getattr(candidates[0], "content", None) if candidates else None
    parts = getattr(content, "parts", None) if content else None
    if not parts:
        raise ProviderError("Invalid AI response")

    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and inline_data.data:
            return inline_data.data

    raise ProviderError("No image returned from AI")


class ThumbnailGenerator:
    """Generates thumbnail images through the Gemini API.

    Attributes:
        _config (ThumblifyConfig):
            Application configuration - API key, model and sampling settings.
        _client:
            The ``genai.Client`` instance, or ``None`` until first use.
    """

    def __init__(self, config: ThumblifyConfig) -> None:
        self._config = config
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        """The GenAI client, created on first access."""
        if self._client is None:
            logger.info("Creating GenAI client for model %s", self._config.gemini_model)
            self._client = genai.Client(api_key=self._config.gemini_api_key)
        return self._client

    def build_config(self, aspect_ratio: str) -> types.GenerateContentConfig:
        """Build the request configuration for one generation call.

        Args:
            aspect_ratio: Aspect ratio string such as ``"16:9"``.

        Returns:
            A ``GenerateContentConfig`` requesting a single image.
        """
        threshold = types.HarmBlockThreshold[self._config.safety_threshold]
        return types.GenerateContentConfig(
            max_output_tokens=self._config.max_output_tokens,
            temperature=self._config.temperature,
            top_p=self._config.top_p,
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(
                aspect_ratio=aspect_ratio,
                image_size=self._config.image_size,
            ),
            safety_settings=[
                types.SafetySetting(category=category, threshold=threshold)
                for category in _HARM_CATEGORIES
            ],
        )

    def generate(self, prompt: str, aspect_ratio: str) -> bytes:
        """Generate one image from a compiled prompt.

        Args:
            prompt: The compiled prompt text.
            aspect_ratio: Aspect ratio string such as ``"16:9"``.

        Returns:
            Raw image bytes as returned by the provider.

        Raises:
            ProviderError: If the response contains no image.
        """
        logger.info(
            "Requesting %s thumbnail from %s (%d prompt chars)",
            aspect_ratio,
            self._config.gemini_model,
            len(prompt),
        )
        response = self.client.models.generate_content(
            model=self._config.gemini_model,
            contents=[prompt],
            config=self.build_config(aspect_ratio),
        )
        image_bytes = extract_image_bytes(response)
        logger.info("Provider returned %d image bytes", len(image_bytes))
        return image_bytes
