from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the health tracking backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("HEALTHTRACK_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("HEALTHTRACK_DB_PATH") or (self.data_root / "healthtrack.db")
        ).expanduser()
        # In production you MUST set HEALTHTRACK_JWT_SECRET. The dev secret only keeps local demos easy.
        self.jwt_secret: str = os.environ.get("HEALTHTRACK_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("HEALTHTRACK_TOKEN_TTL_DAYS") or "7")
        self.cookie_secure: bool = (os.environ.get("HEALTHTRACK_COOKIE_SECURE") or "").strip() in {"1", "true", "True"}
        self.max_upload_mb: int = int(os.environ.get("HEALTHTRACK_MAX_UPLOAD_MB") or "10")
        self.log_level: str = (os.environ.get("HEALTHTRACK_LOG_LEVEL") or "INFO").upper()

        # ---- LLM gateway (OpenAI-compatible chat completions) ----
        self.ai_api_key: str | None = os.environ.get("AI_GATEWAY_API_KEY")
        self.ai_base_url: str = os.environ.get(
            "AI_GATEWAY_BASE_URL", "https://ai.gateway.lovable.dev/v1"
        )
        self.ai_model: str = os.environ.get("AI_GATEWAY_MODEL", "google/gemini-2.5-flash")
        self.ai_timeout: float = float(os.environ.get("AI_GATEWAY_TIMEOUT", "60"))
        self.ai_temperature: float = float(os.environ.get("AI_GATEWAY_TEMPERATURE", "0.7"))
        self.ai_locale: str = os.environ.get("AI_LOCALE", "pt-BR")

        cors = os.environ.get("HEALTHTRACK_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb) * 1024 * 1024


settings = Settings()
