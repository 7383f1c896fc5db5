# app/main.py
"""
FastAPI application entry point.
Includes middleware, error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import admin, health, lookup, session
from app.config import settings
from app.database import store
from app.errors import AppError
from app.services.access_gate import service_window, watch_service_window
from app.utils.logger import get_logger
import time
import asyncio

logger = get_logger(__name__)

app = FastAPI(
    title="Installation Lookup API",
    description="Staff lookup of customer installations, device-bound logins and admin console.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (browser front-end is served from another origin) ──────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.info(f"{request.url.path} → {exc.status_code} {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(session.router, prefix="/api/v1", tags=["🔑 Session"])
app.include_router(lookup.router,  prefix="/api/v1", tags=["🔍 Lookup"])
app.include_router(admin.router,   prefix="/api/v1", tags=["🛠  Admin"])
app.include_router(health.router,  prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Installation Lookup starting up...")
    if not settings.REMOTE_CONFIGURED:
        logger.error("❌ Remote datastore not configured: set SUPABASE_URL and SUPABASE_KEY in .env")
    if not settings.ADMIN_PASSWORD:
        logger.warning("⚠️  ADMIN_PASSWORD not set — admin console login disabled")

    app.state.window_watcher = asyncio.create_task(watch_service_window(service_window), name="service-window")
    logger.info(f"🕗 Service window currently {'open' if service_window.refresh() else 'closed'} ({settings.TIMEZONE})")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Installation Lookup shutting down...")
    watcher = getattr(app.state, "window_watcher", None)
    if watcher:
        watcher.cancel()
    await store.close()
