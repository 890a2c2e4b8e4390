

# settings.py
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -----------------------
    # Runtime
    # -----------------------
    ENV: str = "dev"  # "dev" | "staging" | "prod"
    LOG_LEVEL: str = "INFO"
    PORT: int = 8001

    # When true, generated signatures and received payloads are echoed back.
    # Ignored in prod.
    IS_DEBUG: bool = False

    # -----------------------
    # Pay302 gateway
    # -----------------------
    PAY302_APP_ID: str = ""
    PAY302_SECRET: str = ""
    PAY302_API_URL: str = ""
    PAY302_HTTP_TIMEOUT_S: float = Field(default=20.0, gt=0)

    # Replay window for incoming webhooks (seconds). Unset disables the check.
    PAY302_TIMESTAMP_TOLERANCE_S: Optional[int] = Field(default=None, ge=0)


settings = Settings()


def get_settings() -> Settings:
    """
    Fresh read of the environment. Used by the app factory and per request so
    env changes (tests, reloads) are picked up.
    """
    return Settings()


def env_name(cfg: Settings | None = None) -> str:
    cfg = cfg or get_settings()
    return (cfg.ENV or "dev").strip().lower()


def is_debug(cfg: Settings | None = None) -> bool:
    cfg = cfg or get_settings()
    if env_name(cfg) == "prod":
        return False
    return bool(cfg.IS_DEBUG)


def validate_env_settings(cfg: Settings | None = None) -> None:
    cfg = cfg or settings
    env = env_name(cfg)
    if env not in ("staging", "prod"):
        return

    missing: list[str] = []
    if not (cfg.PAY302_APP_ID or "").strip():
        missing.append("PAY302_APP_ID")
    if not (cfg.PAY302_SECRET or "").strip():
        missing.append("PAY302_SECRET")
    if not (cfg.PAY302_API_URL or "").strip():
        missing.append("PAY302_API_URL")

    problems = [f"missing {name}" for name in missing]
    if env == "prod" and cfg.IS_DEBUG:
        problems.append("IS_DEBUG must be false in prod")

    if problems:
        raise RuntimeError(f"Invalid {env} configuration: " + ", ".join(problems))
