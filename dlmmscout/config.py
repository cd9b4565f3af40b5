from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# wSOL, JUP, 27G8…idD4, CLOUD
DEFAULT_TOKENS = (
    "So11111111111111111111111111111111111111112",
    "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
    "27G8MtK7VtTcCHkpASjSDdkWWYfoqT6ggEuKidVJidD4",
    "CLoUDKc4Ane7HeQcPpE3YHnznRxhMimJ4MyaUqyHFzAu",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Tokens ────────────────────────────────────────────────────────────────
    # Env value is a JSON array: TOKENS='["mintA", "mintB", ...]'
    tokens: list[str] = Field(default_factory=lambda: list(DEFAULT_TOKENS))

    # ── Meteora DLMM API ──────────────────────────────────────────────────────
    dlmm_api_url: str = "https://dlmm-api.meteora.ag"
    http_timeout_seconds: float = 15.0

    # ── Scan behavior ─────────────────────────────────────────────────────────
    # 0 = single scan, then exit
    scan_interval_minutes: int = 0
    log_level: str = "INFO"

    @field_validator("tokens")
    @classmethod
    def check_tokens(cls, v: list[str]) -> list[str]:
        tokens = [t.strip() for t in v]
        if any(not t for t in tokens):
            raise ValueError("token addresses must be non-empty")
        if len(tokens) < 2:
            raise ValueError("at least 2 token addresses are required")
        if len(set(tokens)) != len(tokens):
            raise ValueError("token addresses must be unique")
        return tokens

    @field_validator("dlmm_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("scan_interval_minutes")
    @classmethod
    def check_interval(cls, v: int) -> int:
        if v < 0:
            raise ValueError("scan_interval_minutes must be >= 0")
        return v

    @property
    def pair_count(self) -> int:
        n = len(self.tokens)
        return n * (n - 1) // 2


# Singleton: import and use `settings` everywhere
settings = Settings()
