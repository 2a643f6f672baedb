"""
Application configuration.

Values come from the environment (a local .env file is loaded first).
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _list_env(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    # Vision model (Ollama-compatible chat API)
    ollama_base_url: str = "http://localhost:11434"
    ollama_vision_model: Optional[str] = None

    # OCR
    tesseract_cmd: Optional[str] = None
    ocr_timeout_seconds: float = 20.0
    vision_timeout_seconds: float = 60.0

    # Uploads
    max_upload_mb: float = 6.0

    # Logging
    log_level: str = "INFO"
    monitoring_log_dir: str = "logs"

    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            ollama_vision_model=os.getenv("OLLAMA_VISION_MODEL") or None,
            tesseract_cmd=os.getenv("TESSERACT_CMD") or None,
            ocr_timeout_seconds=_float_env("OCR_TIMEOUT_SECONDS", 20.0),
            vision_timeout_seconds=_float_env("VISION_TIMEOUT_SECONDS", 60.0),
            max_upload_mb=_float_env("MAX_UPLOAD_MB", 6.0),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            monitoring_log_dir=os.getenv("MONITORING_LOG_DIR", "logs"),
            cors_origins=_list_env("CORS_ORIGINS", "*"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings read once per process."""
    return Settings.from_env()
