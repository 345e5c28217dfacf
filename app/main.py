from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import db
from app.config import AppInfo, Settings, get_settings
from app.core.logging import setup_logging
import app.models  # enregistre les tables
from app.routers import get_api_router
from app.utils.errors import InsufficientFundsError, error_response

logger = logging.getLogger(__name__)
app_info = AppInfo()

# create_all() n'est toléré que hors production; sinon Alembic.
SCHEMA_BOOTSTRAP_ENVS = {"dev", "local", "test"}


def _bootstrap_schema(settings: Settings) -> None:
    if settings.ALLOW_DB_CREATE_ALL and settings.app_env.lower() in SCHEMA_BOOTSTRAP_ENVS:
        logger.warning("Creating caisse tables with create_all()", extra={"env": settings.app_env})
        db.create_all()
        return
    logger.info(
        "Schema managed by Alembic",
        extra={"env": settings.app_env, "allow_create_all": settings.ALLOW_DB_CREATE_ALL},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, service=app_info.name, env=settings.app_env)
    db.init_engine()
    _bootstrap_schema(settings)
    logger.info(
        "Caisse backend started",
        extra={"currency": settings.CURRENCY_LABEL, "period_budget_enforced": settings.ENFORCE_PERIOD_BUDGET},
    )
    try:
        yield
    finally:
        db.close_engine()
        logger.info("Caisse backend stopped")


def _install_middlewares(fastapi_app: FastAPI, settings: Settings) -> None:
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    if settings.PROMETHEUS_ENABLED:
        from starlette_exporter import PrometheusMiddleware, handle_metrics

        fastapi_app.add_middleware(PrometheusMiddleware, app_name=app_info.name, group_paths=True)
        fastapi_app.add_route("/metrics", handle_metrics)

    if settings.SENTRY_DSN:
        import sentry_sdk

        sentry_sdk.init(dsn=settings.SENTRY_DSN, environment=settings.app_env, traces_sample_rate=0.2)


def _install_exception_handlers(fastapi_app: FastAPI) -> None:
    @fastapi_app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(request: Request, exc: InsufficientFundsError) -> JSONResponse:
        # Le message est déjà formaté pour l'affichage: le client l'affiche tel quel.
        logger.info("Cash operation refused", extra={"code": exc.code, "path": request.url.path})
        return JSONResponse(status_code=400, content=exc.to_payload())

    @fastapi_app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            content: dict[str, Any] = detail
        else:
            content = error_response("HTTP_ERROR", str(detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @fastapi_app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", exc_info=exc, extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content=error_response("INTERNAL_SERVER_ERROR", "Une erreur inattendue est survenue."),
        )


app = FastAPI(title=app_info.name, version=app_info.version, lifespan=lifespan)
_install_middlewares(app, get_settings())
_install_exception_handlers(app)
app.include_router(get_api_router())


__all__ = ["app"]
