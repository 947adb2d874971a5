"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    google_api_key: str = ""
    perspective_api_key: str = ""

    # Toxicity scoring (Perspective)
    perspective_url: str = "https://commentanalyzer.googleapis.com/v1alpha1/comments:analyze"
    perspective_timeout_seconds: float = 10.0
    perspective_languages: str = "en"  # comma-separated

    # LLM / Gemini
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.2
    gemini_max_tokens: int = 1024

    # Contextual analysis retry policy
    contextual_max_attempts: int = 3
    contextual_backoff_seconds: float = 1.0
    contextual_timeout_seconds: float = 30.0

    # Extraction
    ocr_language: str = "eng"

    # Storage paths
    sqlite_db_path: str = "data/moderation.db"
    blob_storage_dir: str = "data/uploads"

    # Pipeline
    max_concurrent_pipelines: int = 8

    # Listings
    recent_submissions_limit: int = 10
    text_preview_chars: int = 50

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_prefix": "MODERATION_"}

    @property
    def languages(self) -> list[str]:
        return [lang.strip() for lang in self.perspective_languages.split(",") if lang.strip()]
