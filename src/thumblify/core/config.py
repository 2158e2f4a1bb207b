"""Configuration management for Thumblify.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the THUMBLIFY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (THUMBLIFY_* prefix)
2. .env file in the project root
3. Default values defined in ThumblifyConfig

Example .env file:
    THUMBLIFY_ENVIRONMENT=production
    THUMBLIFY_GEMINI_API_KEY=...
    THUMBLIFY_CLOUDINARY_CLOUD_NAME=my-cloud
    THUMBLIFY_CLOUDINARY_API_KEY=...
    THUMBLIFY_CLOUDINARY_API_SECRET=...
    THUMBLIFY_DATA_DIR=data

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from thumblify.core.config import config

    print(config.gemini_model)
    print(config.database_path)

Cross-Origin Sessions
---------------------
The frontend is deployed on a different origin than the API, so the session
cookie must be sent cross-site in production.  Browsers only allow that for
cookies marked ``Secure`` with ``SameSite=None``.  During local development
the API runs over plain HTTP, where ``Secure`` cookies are dropped, so
``SameSite=Lax`` is used instead.  Both attributes are derived from
``environment`` (see :attr:`ThumblifyConfig.cookie_secure` and
:attr:`ThumblifyConfig.cookie_samesite`).
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThumblifyConfig(BaseSettings):
    """Main configuration for Thumblify.

    Values are loaded from environment variables with the THUMBLIFY_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Deployment:
        environment : Literal["development", "production"]
            Controls cookie security attributes.

    Generation Provider (Gemini):
        gemini_api_key : str
            API key for the Google GenAI client
        gemini_model : str
            Image-capable Gemini model identifier
        image_size : str
            Requested output size ("1K", "2K", "4K")
        temperature, top_p, max_output_tokens
            Sampling settings passed through to the provider
        safety_threshold : str
            Block threshold applied to every harm category

    Media Host (Cloudinary):
        cloudinary_cloud_name, cloudinary_api_key, cloudinary_api_secret
            Account credentials
        cloudinary_folder : str
            Folder that receives every uploaded thumbnail

    Storage:
        data_dir : Path
            Directory holding the SQLite database

    Sessions:
        session_cookie_name : str
        session_max_age_seconds : int
            Lifetime of a login session (default one week)

    Server:
        cors_origins : list[str]
        server_host : str
        server_port : int
        log_level : str

    Notes
    -----
    - ``data_dir`` is created automatically if it doesn't exist
    - Configuration is immutable after initialization
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="THUMBLIFY_",
        case_sensitive=False,
    )

    environment: Literal["development", "production"] = Field(
        default="development",
        description="Deployment environment (controls cookie attributes)",
    )

    # Gemini settings
    gemini_api_key: str = Field(default="", description="Google GenAI API key")
    gemini_model: str = Field(
        default="gemini-3-pro-image-preview",
        description="Gemini model used for image generation",
    )
    image_size: Literal["1K", "2K", "4K"] = Field(default="1K")
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    top_p: float = Field(default=0.95, ge=0.0, le=1.0)
    max_output_tokens: int = Field(default=32768, ge=1)
    safety_threshold: Literal[
        "OFF",
        "BLOCK_NONE",
        "BLOCK_ONLY_HIGH",
        "BLOCK_MEDIUM_AND_ABOVE",
        "BLOCK_LOW_AND_ABOVE",
    ] = Field(
        default="OFF",
        description="Harm block threshold applied to all safety categories",
    )

    # Cloudinary settings
    cloudinary_cloud_name: str = Field(default="")
    cloudinary_api_key: str = Field(default="")
    cloudinary_api_secret: str = Field(default="")
    cloudinary_folder: str = Field(
        default="thumbnails",
        description="Folder that receives uploaded thumbnails",
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the SQLite database",
    )

    # Sessions
    session_cookie_name: str = Field(default="thumblify.sid")
    session_max_age_seconds: int = Field(
        default=60 * 60 * 24 * 7,
        description="Session lifetime in seconds",
        ge=60,
    )

    # Records left in progress longer than this are marked as failed.
    generation_timeout_seconds: int = Field(default=300, ge=1)

    # Server settings
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:5173",
            "http://localhost:3000",
            "https://thumblify-nine.vercel.app",
        ],
    )
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=3000, ge=1024, le=65535)
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(
        default="info",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Path to the SQLite database file."""
        return self.data_dir / "thumblify.db"

    @property
    def cookie_secure(self) -> bool:
        """Whether the session cookie is restricted to HTTPS."""
        return self.environment == "production"

    @property
    def cookie_samesite(self) -> Literal["lax", "none"]:
        """SameSite attribute for the session cookie."""
        return "none" if self.environment == "production" else "lax"


# Global configuration instance
# Loads values from environment variables (THUMBLIFY_* prefix) and .env file.
config = ThumblifyConfig()
