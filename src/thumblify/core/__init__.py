"""Core functionality for thumbnail generation.

- **config**: Configuration management using Pydantic Settings
- **styles**: Closed style, aspect ratio and colour scheme tables
- **prompt_builder**: Prompt compilation from the style, colour and ratio presets
- **generator**: Gemini image generation
- **media_host**: Cloudinary uploads and download URLs
- **thumbnail_store**: SQLite persistence for generation records
- **auth_store**: SQLite users and server-side sessions
- **generation**: The generate lifecycle tying the above together
"""
