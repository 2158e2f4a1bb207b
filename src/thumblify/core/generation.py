"""The generate lifecycle: record, provider call, upload, completion.

:func:`generate_thumbnail` runs the whole flow for one request, linearly:

1. Compile the prompt from the chosen presets.
2. Create the record in the generating state, so the caller has an id to
   poll before the provider answers.
3. Ask the provider for image bytes.
4. Upload the bytes to the media host.
5. Complete the record with the delivery URL and return it.

A provider or upload error moves the record to the ``failed`` state with
the error message and is re-raised as :class:`GenerationFailed`.  So is a
completion that arrives after the record was swept as stale or deleted by
its owner; the uploaded image is then not attached to anything.  The owner
id is an explicit argument; no request or session state is read here.
"""

from __future__ import annotations

import logging
from typing import Protocol

from thumblify.core.prompt_builder import build_prompt
from thumblify.core.styles import AspectRatio, ColorScheme, ThumbnailStyle
from thumblify.core.thumbnail_store import TIMED_OUT_MESSAGE, ThumbnailStore

logger = logging.getLogger(__name__)


class ImageProvider(Protocol):
    def generate(self, prompt: str, aspect_ratio: str) -> bytes: ...


class ImageHost(Protocol):
    def upload(self, image_bytes: bytes) -> str: ...


class GenerationFailed(Exception):
    """Raised when a record could not be completed.

    Attributes:
        record_id: Identifier of the record that ended without an image.
        message: Error message for the caller.
    """

    def __init__(self, record_id: str, message: str):
        super().__init__(message)
        self.record_id = record_id
        self.message = message


DELETED_MESSAGE = "Thumbnail was deleted during generation"


def generate_thumbnail(
    owner_id: str,
    *,
    title: str,
    style: ThumbnailStyle | str,
    aspect_ratio: AspectRatio | str = AspectRatio.LANDSCAPE,
    color_scheme: ColorScheme | str | None = None,
    user_prompt: str | None = None,
    text_overlay: bool = False,
    store: ThumbnailStore,
    generator: ImageProvider,
    media_host: ImageHost,
) -> dict:
    """Generate, upload and record one thumbnail for ``owner_id``.

    Args:
        owner_id: Identifier of the authenticated user.
        title: Video title the thumbnail is for.
        style: Visual style preset.
        aspect_ratio: Output aspect ratio.
        color_scheme: Optional colour scheme preset.
        user_prompt: Optional free-text details.
        text_overlay: Stored flag; it does not alter the prompt.
        store: Record store.
        generator: Image provider (``ThumbnailGenerator`` in production).
        media_host: Media host (``MediaHost`` in production).

    Returns:
        The completed record.

    Raises:
        GenerationFailed: If the provider or the upload failed, or the record
            stopped generating before the image arrived.
    """
    style = ThumbnailStyle(style)
    aspect_ratio = AspectRatio(aspect_ratio)
    color_scheme = ColorScheme(color_scheme) if color_scheme else None

    compiled_prompt = build_prompt(
        title,
        style,
        aspect_ratio,
        color_scheme=color_scheme,
        user_prompt=user_prompt,
    )

    record = store.create(
        owner_id,
        title=title,
        style=style.value,
        aspect_ratio=aspect_ratio.value,
        color_scheme=color_scheme.value if color_scheme else None,
        user_prompt=user_prompt,
        prompt_used=compiled_prompt,
        text_overlay=text_overlay,
    )
    record_id = record["_id"]

    try:
        image_bytes = generator.generate(compiled_prompt, aspect_ratio.value)
        image_url = media_host.upload(image_bytes)
    except Exception as exc:
        message = str(exc) or "Failed to generate thumbnail"
        logger.exception("Thumbnail generation failed for record %s", record_id)
        store.fail(record_id, message)
        raise GenerationFailed(record_id, message) from exc

    if not store.complete(record_id, image_url):
        current = store.get(owner_id, record_id)
        if current is None:
            message = DELETED_MESSAGE
        else:
            message = current["error"] or TIMED_OUT_MESSAGE
        logger.warning("Discarding upload %s for record %s: %s", image_url, record_id, message)
        raise GenerationFailed(record_id, message)

    logger.info("Thumbnail %s completed", record_id)
    return store.get(owner_id, record_id)
