"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.apm_agent.api.router import router as agent_router
from src.apm_common.database import engine
from src.apm_common.errors import AppError, InternalError, InvalidArgumentError
from src.apm_common.logging_config import configure_logging
from src.apm_common.redis_client import close_redis, get_redis
from src.apm_common.response import error_response
from src.apm_forum.api.router import router as forum_router
from src.apm_gateway.middleware.request_log import RequestLogMiddleware
from src.apm_market.api.router import router as market_router
from src.apm_resolution.api.router import router as admin_router
from src.apm_trading.api.router import router as trade_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when rate limiting is on). Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await get_redis()
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["x-api-key", "authorization", "content-type", "x-admin-key"],
)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details, _request_id(request))
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


def _describe_validation_errors(errors: list[dict[str, Any]]) -> tuple[str, list[dict[str, str]]]:
    items = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
        items.append({"field": loc, "message": msg})
    if not items:
        return "Invalid request", items
    first = items[0]
    summary = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
    return summary, items


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    summary, items = _describe_validation_errors(list(exc.errors()))
    return _error_json(request, InvalidArgumentError(summary, {"errors": items}))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_json(request, InternalError("Database error"))


app.include_router(agent_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(trade_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(forum_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
