from __future__ import annotations

import os

from fastapi import APIRouter, Depends

from settings import Settings, env_name, get_settings

router = APIRouter(tags=["health"])


def _resolve_git_sha() -> str | None:
    return (os.getenv("GIT_SHA") or "").strip() or None


@router.get("/health")
def health(cfg: Settings = Depends(get_settings)):
    return {
        "ok": True,
        "env": env_name(cfg),
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "git_sha": _resolve_git_sha(),
        "app_id_configured": bool((cfg.PAY302_APP_ID or "").strip()),
        "secret_configured": bool((cfg.PAY302_SECRET or "").strip()),
    }
