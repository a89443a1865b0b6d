import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .db import SessionDep, create_db_and_tables
from .errors import AuthError, TimerAppError
from .auth.router import router as auth_router
from .timers.router import router as timers_router
from .stats.router import router as stats_router

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Application startup (%s)...", settings.environment)
    create_db_and_tables()
    yield
    logger.info("Application shutdown.")


app = FastAPI(
    title="Productivity Timer API",
    description="Track time spent on tagged tasks with start/stop/reset timers and view statistics.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TimerAppError)
async def timer_app_error_handler(request: Request, exc: TimerAppError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=headers
    )


app.include_router(auth_router)
app.include_router(timers_router)
app.include_router(stats_router)


@app.get("/health", tags=["Health"])
def health(db: SessionDep):
    try:
        db.exec(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "down", "message": str(e)},
        )
    return {"status": "up", "message": "It's healthy"}
