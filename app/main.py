import asyncio
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

import app.models.registry  # noqa: F401  (registers every mapper)
from app.api.v1.api_router import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.startup import ensure_default_admin, ensure_tables

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Built web client, served from the same origin when present
STATIC_DIR = Path(__file__).resolve().parent / "static"

app = FastAPI(
    title="FleetSync Pro API",
    description="Fleet rental management for rideshare vehicles: compliance, drivers, rentals and weekly billing",
    version="1.0.0",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def client_route_fallback(request: Request, call_next):
    """Client-side routes (/fleet, /onboarding/<token>, ...) 404 on the server; answer them with index.html."""
    response = await call_next(request)
    if response.status_code != 404 or request.method != "GET" or request.url.path.startswith("/api"):
        return response
    index_file = STATIC_DIR / "index.html"
    if index_file.is_file():
        return FileResponse(str(index_file))
    return response


app.add_middleware(BaseHTTPMiddleware, dispatch=client_route_fallback)
register_exception_handlers(app)

# /api must be routed before the static mount at /
app.include_router(api_router, prefix="/api")
if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


@app.on_event("startup")
async def on_startup():
    if settings.AUTO_CREATE_TABLES:
        await ensure_tables()
    await ensure_default_admin()
    if settings.FLEET_JOBS_ENABLED:
        from app.core.cron_runner import run_fleet_jobs_loop

        app.state.fleet_jobs_task = asyncio.create_task(run_fleet_jobs_loop())
        logger.info("Fleet jobs scheduled every %.1f hours", settings.FLEET_JOBS_INTERVAL_HOURS)


@app.on_event("shutdown")
async def on_shutdown():
    task = getattr(app.state, "fleet_jobs_task", None)
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
