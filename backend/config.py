import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# OpenAI
OPENAI_MODEL = "gpt-4o"

# Uploads are capped at 10 MiB
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

PRODUCTION_ENVIRONMENTS = {"production", "prod"}


def get_api_key():
    key = os.environ.get("OPENAI_API_KEY")
    if key:
        return key
    env_path = Path(__file__).parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                if line.startswith("OPENAI_API_KEY="):
                    key = line.split("=", 1)[1].strip()
                    if key:
                        return key
    home_config = Path.home() / ".openai" / "api_key"
    if home_config.exists():
        return home_config.read_text().strip()
    return None


class AnalyzerSettings(BaseModel):
    """Process-wide configuration, read once and passed into the pipeline."""

    shared_secret: Optional[str] = None
    openai_api_key: Optional[str] = None
    model: str = OPENAI_MODEL
    max_output_tokens: int = 2000
    temperature: float = 0.7
    request_timeout: float = 60.0
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    environment: str = "development"
    log_level: str = "INFO"
    mock_mode: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS


def load_settings() -> AnalyzerSettings:
    """Build settings from the environment (and .env, loaded above)."""
    return AnalyzerSettings(
        shared_secret=os.environ.get("API_KEY") or None,
        openai_api_key=get_api_key(),
        model=os.environ.get("OPENAI_MODEL", OPENAI_MODEL),
        max_output_tokens=int(os.environ.get("OPENAI_MAX_TOKENS", "2000")),
        temperature=float(os.environ.get("OPENAI_TEMPERATURE", "0.7")),
        request_timeout=float(os.environ.get("OPENAI_TIMEOUT", "60")),
        max_upload_bytes=int(os.environ.get("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))),
        environment=os.environ.get("APP_ENV", "development"),
        log_level=os.environ.get("APP_LOG_LEVEL", "INFO"),
        # Mock mode (for testing without API key)
        mock_mode=os.environ.get("MOCK_MODE", "false").lower() == "true",
    )


@lru_cache()
def get_settings() -> AnalyzerSettings:
    return load_settings()
