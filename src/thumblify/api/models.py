"""Pydantic request models for the Thumblify API.

These models define the JSON schema for every API endpoint that accepts a
body.  FastAPI uses them for automatic request validation and OpenAPI
documentation generation.  Style, aspect ratio and colour scheme are closed
enums, so unknown values are rejected with a 422 response that names the
offending field.

Models
------
GenerateRequest
    Payload for ``POST /api/thumbnail/generate``.
RegisterRequest
    Payload for ``POST /api/auth/register``.
LoginRequest
    Payload for ``POST /api/auth/login``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from thumblify.core.styles import AspectRatio, ColorScheme, ThumbnailStyle


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/thumbnail/generate`` endpoint.

    Attributes:
        title: Video title.  Must contain at least one non-space character.
        prompt: Optional free-text details appended to the compiled prompt.
        style: Visual style preset.
        aspect_ratio: Output aspect ratio.  Defaults to ``"16:9"``.
        color_scheme: Optional colour scheme preset.
        text_overlay: Whether the client asked for text on the image.
            Stored with the record.
    """

    title: str = Field(..., description="Video title the thumbnail is for.")
    prompt: str | None = Field(
        default=None,
        description="Optional additional details for the image.",
    )
    style: ThumbnailStyle = Field(..., description="Visual style preset.")
    aspect_ratio: AspectRatio = Field(
        default=AspectRatio.LANDSCAPE,
        description="Output aspect ratio ('16:9', '1:1' or '9:16').",
    )
    color_scheme: ColorScheme | None = Field(
        default=None,
        description="Optional colour scheme preset.",
    )
    text_overlay: bool = Field(default=False)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value.strip()


class RegisterRequest(BaseModel):
    """Request body for ``POST /api/auth/register``."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    """Request body for ``POST /api/auth/login``."""

    email: str
    password: str
