import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.core.errors import TaskflowError, InvalidRoleError
from app.modules.auth import routes as auth_routes
from app.modules.teams import routes as teams_routes
from app.modules.tasks import routes as tasks_routes
from app.modules.comments import routes as comments_routes
from app.modules.history import routes as history_routes
from app.modules.reminders import routes as reminders_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(TaskflowError)
async def taskflow_exception_handler(request: Request, exc: TaskflowError):
    if isinstance(exc, InvalidRoleError):
        logger.error("Corrupt team role data: %s", exc.detail)
        detail = "Internal server error" if settings.is_production else exc.detail
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(teams_routes.router, prefix="/api/v1")
app.include_router(tasks_routes.router, prefix="/api/v1")
app.include_router(comments_routes.router, prefix="/api/v1")
app.include_router(history_routes.router, prefix="/api/v1")
app.include_router(reminders_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")

    if settings.reminder_scheduler_enabled:
        from app.modules.reminders.scheduler import reminder_scheduler_loop
        app.state.reminder_task = asyncio.create_task(reminder_scheduler_loop())
        logger.info(f"Reminder scheduler started - will run every {settings.reminder_interval_sec} seconds")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "reminder_task", None)
    if task is not None:
        task.cancel()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check: extend here with Supabase checks if needed."""
    return {"status": "ready"}
