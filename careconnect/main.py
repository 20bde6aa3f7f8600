import time
from pathlib import Path

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, FileResponse, RedirectResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from careconnect.config import get_settings
from careconnect.database import init_db, ping_db, close_db
from careconnect.utils.logger import get_logger
from careconnect.rate_limit import limiter

logger = get_logger("main")
settings = get_settings()

# Routers
from careconnect.routers import auth as auth_router
from careconnect.routers import vital as vital_router
from careconnect.routers import bookings as bookings_router
from careconnect.routers import reviews as reviews_router
from careconnect.routers import guardians as guardians_router
from careconnect.routers import guardian as guardian_router
from careconnect.routers import vitals as vitals_router
from careconnect.routers import chat as chat_router
from careconnect.routers import notifications as notifications_router
from careconnect.routers import upload as upload_router
from careconnect.services.socket_service import get_socket_app
from careconnect.services.reminder_service import build_scheduler

app = FastAPI(
    title="CareConnect API",
    debug=settings.APP_DEBUG,
)

# Real-time chat + notifications
app.mount("/socket.io", get_socket_app())

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(vital_router.router)
app.include_router(bookings_router.router)
app.include_router(reviews_router.router)
app.include_router(guardians_router.router)
app.include_router(guardian_router.router)
app.include_router(vitals_router.router)
app.include_router(chat_router.router)
app.include_router(notifications_router.router)
app.include_router(upload_router.router)


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "status_code": exc.status_code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()} - Path: {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors()), "status_code": 422},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "status_code": 500},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.3f}s"
    )
    return response


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/readyz")
async def readyz():
    if not await ping_db():
        raise HTTPException(status_code=503, detail="Database not ready")
    return {"status": "ok", "database": "up"}


@app.get("/media/{file_path:path}")
async def serve_media(file_path: str):
    """Locally stored uploads; falls back to the R2 public URL when the file isn't here."""
    media_root = Path(settings.MEDIA_ROOT).resolve()
    target = (media_root / file_path).resolve()
    if not target.is_relative_to(media_root):
        raise HTTPException(status_code=400, detail="Invalid file path")

    if target.is_file():
        return FileResponse(str(target))
    if settings.R2_PUBLIC_BASE:
        return RedirectResponse(url=f"{settings.R2_PUBLIC_BASE.rstrip('/')}/{file_path}")

    logger.warning(f"Media file not found: {file_path}")
    raise HTTPException(status_code=404, detail="Media file not found")


scheduler = None


@app.on_event("startup")
async def on_startup():
    global scheduler
    logger.info("🚀 Starting application...")
    await init_db()
    logger.info("✅ Database initialized")

    if settings.SCHEDULER_ENABLED:
        try:
            scheduler = build_scheduler()
            scheduler.start()
            logger.info("✅ Booking reminder scheduler started (runs every hour)")
        except Exception as e:
            logger.error(f"Failed to start booking reminder scheduler: {e}", exc_info=True)


@app.on_event("shutdown")
async def on_shutdown():
    global scheduler
    if scheduler:
        try:
            scheduler.shutdown()
            logger.info("Booking reminder scheduler stopped")
        except Exception as e:
            logger.error(f"Error stopping scheduler: {e}")
        scheduler = None
    await close_db()
    logger.info("Shutting down application...")
