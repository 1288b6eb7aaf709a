# app/config.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# app/config.py → parent = project root
ENV_FILE = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    # ---- App / Infra ----
    APP_NAME: str = "tech-signals-agent"
    APP_VERSION: str = "1.0.0"
    PORT: int = 3000
    # Externally visible base URL; falls back to localhost:PORT
    PUBLIC_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # ---- Upstream HTTP ----
    HTTP_TIMEOUT_MS: int = Field(default=10_000, gt=0)
    USER_AGENT: str = "tech-signals-agent/1.0"

    HN_API_BASE: str = "https://hacker-news.firebaseio.com/v0"
    HN_SEARCH_API_BASE: str = "https://hn.algolia.com/api/v1"
    GITHUB_API_BASE: str = "https://api.github.com"
    LOBSTERS_BASE: str = "https://lobste.rs"

    # ---- Payments ----
    # Prices are declared in base units of this currency
    PAYMENTS_CURRENCY: str = "USDC"
    PAYMENTS_DECIMALS: int = 6

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def public_base_url(self) -> str:
        if self.PUBLIC_URL:
            return self.PUBLIC_URL.rstrip("/")
        return f"http://localhost:{self.PORT}"


settings = Settings()
