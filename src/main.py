"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.ms_account.api.dependencies import get_account_repository
from src.ms_account.api.router import router as account_router
from src.ms_common.database import engine
from src.ms_common.errors import AppError
from src.ms_common.response import error_response
from src.ms_gateway.api.router import router as auth_router
from src.ms_gateway.middleware.request_log import RequestLogMiddleware
from src.ms_integrity.api.router import router as integrity_router
from src.ms_integrity.application.checker import ConsistencyChecker
from src.ms_integrity.application.scheduler import run_periodic_scan
from src.ms_order.api.dependencies import get_order_repository
from src.ms_order.api.router import router as order_router
from src.ms_product.api.dependencies import get_product_repository
from src.ms_product.api.router import router as product_router
from src.ms_sync.api.router import router as sync_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB, start the periodic scan. Shutdown: stop it, dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    scan_task: asyncio.Task[None] | None = None
    if settings.INTEGRITY_SCAN_INTERVAL_SECONDS > 0:
        checker = ConsistencyChecker(
            get_account_repository(), get_product_repository(), get_order_repository()
        )
        scan_task = asyncio.create_task(
            run_periodic_scan(checker, settings.INTEGRITY_SCAN_INTERVAL_SECONDS)
        )
        logger.info(
            "Integrity scan scheduled every %ds", settings.INTEGRITY_SCAN_INTERVAL_SECONDS
        )
    yield
    if scan_task is not None:
        scan_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scan_task
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(product_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(sync_router, prefix="/api/v1")
app.include_router(integrity_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
