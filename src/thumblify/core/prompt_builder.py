"""Prompt compilation for thumbnail generation.

The provider receives a single natural-language prompt assembled from the
user's selections.  Sections appear in a fixed order and optional sections
are omitted entirely rather than left blank.

Template Structure::

    Create a [style text] thumbnail for "[title]".
    Use a [colour scheme text] color scheme.          (optional)
    Additional details: [user prompt].                (optional)
    The thumbnail should be [ratio], visually stunning, bold, professional,
    and optimized for maximum click-through rate.

Sections are separated by a single space.

Usage
-----
::

    compiled = build_prompt(
        title="10 sleep tips",
        style=ThumbnailStyle.MINIMALIST,
        aspect_ratio=AspectRatio.SQUARE,
        color_scheme=ColorScheme.PASTEL,
    )
"""

from __future__ import annotations

from thumblify.core.styles import (
    COLOR_SCHEME_DESCRIPTIONS,
    STYLE_PROMPTS,
    AspectRatio,
    ColorScheme,
    ThumbnailStyle,
)

_CLOSING_TEMPLATE = (
    "The thumbnail should be {ratio}, visually stunning, bold, professional, "
    "and optimized for maximum click-through rate."
)


def build_prompt(
    title: str,
    style: ThumbnailStyle,
    aspect_ratio: AspectRatio,
    color_scheme: ColorScheme | None = None,
    user_prompt: str | None = None,
) -> str:
    """Compile the provider prompt from the user's selections.

    Args:
        title: Video title the thumbnail is for.
        style: Visual style preset.  Its descriptive text opens the prompt.
        aspect_ratio: Output aspect ratio, interpolated into the closing
            sentence.
        color_scheme: Optional colour scheme preset.
        user_prompt: Optional free-text details.  Blank values are omitted.

    Returns:
        The compiled prompt string.
    """
    style = ThumbnailStyle(style)
    aspect_ratio = AspectRatio(aspect_ratio)

    parts: list[str] = [f'Create a {STYLE_PROMPTS[style]} thumbnail for "{title}".']

    if color_scheme:
        scheme_text = COLOR_SCHEME_DESCRIPTIONS[ColorScheme(color_scheme)]
        parts.append(f"Use a {scheme_text} color scheme.")

    details = (user_prompt or "").strip()
    if details:
        parts.append(f"Additional details: {details}.")

    parts.append(_CLOSING_TEMPLATE.format(ratio=aspect_ratio.value))

    return " ".join(parts)
