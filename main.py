
#main.py
import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from middleware import RequestContextMiddleware
from routes.health import router as health_router
from routes.metrics import router as metrics_router
from routes.payments import router as payments_router
from routes.webhooks import router as webhooks_router
from services.observability import configure_logging
from settings import get_settings, validate_env_settings

logger = logging.getLogger("pay302")


def _resolve_port() -> int:
    raw = (os.getenv("PORT") or "").strip()
    try:
        return int(raw) if raw else 8001
    except ValueError:
        return 8001


def create_app() -> FastAPI:
    cfg = get_settings()
    configure_logging(cfg.LOG_LEVEL)
    # staging/prod refuse to start half-configured
    validate_env_settings(cfg)

    app = FastAPI(title="Pay302 Signing API", version="1.0.0")
    app.add_middleware(RequestContextMiddleware)

    # -----------------------------
    # ROUTERS
    # -----------------------------
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(payments_router)
    app.include_router(webhooks_router)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=_resolve_port())
