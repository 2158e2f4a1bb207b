"""Closed option tables for thumbnail generation.

Every user-selectable option is a member of a ``str`` enum, so request
models reject unknown values before a prompt is ever built.  The descriptive
text for each style and colour scheme lives in the lookup tables below;
every enum member has an entry.
"""

from __future__ import annotations

from enum import Enum


class ThumbnailStyle(str, Enum):
    """Visual style presets."""

    BOLD_GRAPHIC = "Bold & Graphic"
    TECH_FUTURISTIC = "Tech/Futuristic"
    MINIMALIST = "Minimalist"
    PHOTOREALISTIC = "Photorealistic"
    ILLUSTRATED = "Illustrated"


class AspectRatio(str, Enum):
    """Output aspect ratios supported by the provider."""

    LANDSCAPE = "16:9"
    SQUARE = "1:1"
    PORTRAIT = "9:16"


class ColorScheme(str, Enum):
    """Colour scheme presets."""

    VIBRANT = "vibrant"
    SUNSET = "sunset"
    FOREST = "forest"
    NEON = "neon"
    PURPLE = "purple"
    MONOCHROME = "monochrome"
    OCEAN = "ocean"
    PASTEL = "pastel"


STYLE_PROMPTS: dict[ThumbnailStyle, str] = {
    ThumbnailStyle.BOLD_GRAPHIC: (
        "eye-catching thumbnail, bold typography, vibrant colors, expressive facial "
        "reaction, dramatic lighting, high contrast, click-worthy composition, "
        "professional style"
    ),
    ThumbnailStyle.TECH_FUTURISTIC: (
        "futuristic thumbnail, sleek modern design, digital UI elements, glowing "
        "accents, holographic effects, cyber-tech aesthetic, sharp lighting, "
        "high-tech atmosphere"
    ),
    ThumbnailStyle.MINIMALIST: (
        "minimalist thumbnail, clean layout, simple shapes, limited color palette, "
        "plenty of negative space, modern flat design, clear focal point"
    ),
    ThumbnailStyle.PHOTOREALISTIC: (
        "photorealistic thumbnail, ultra-realistic lighting, natural skin tones, "
        "candid moment, DSLR-style photography, lifestyle realism, shallow depth "
        "of field"
    ),
    ThumbnailStyle.ILLUSTRATED: (
        "illustrated thumbnail, custom digital illustration, stylized characters, "
        "bold outlines, vibrant colors, creative cartoon or vector art style"
    ),
}

COLOR_SCHEME_DESCRIPTIONS: dict[ColorScheme, str] = {
    ColorScheme.VIBRANT: (
        "vibrant and energetic colors, high saturation, bold contrasts, "
        "eye-catching palette"
    ),
    ColorScheme.SUNSET: (
        "warm sunset tones, orange pink and purple hues, soft gradients, cinematic glow"
    ),
    ColorScheme.FOREST: (
        "natural green tones, earthy colors, calm and organic palette, fresh atmosphere"
    ),
    ColorScheme.NEON: (
        "neon glow effects, electric blues and pinks, cyberpunk lighting, "
        "high contrast glow"
    ),
    ColorScheme.PURPLE: (
        "purple-dominant color palette, magenta and violet tones, modern and "
        "stylish mood"
    ),
    ColorScheme.MONOCHROME: (
        "black and white color scheme, high contrast, dramatic lighting, "
        "timeless aesthetic"
    ),
    ColorScheme.OCEAN: (
        "cool blue and teal tones, aquatic color palette, fresh and clean atmosphere"
    ),
    ColorScheme.PASTEL: (
        "soft pastel colors, low saturation, gentle tones, calm and friendly aesthetic"
    ),
}
