import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from .database.session import AsyncSessionLocal, init_db
from .dependencies import build_services
from .exceptions import GeometryUnavailable
from .routers import daily, game, highscores, leaderboard, profile, stats
from .config import get_settings
from .utils.logging import setup_logging

settings = get_settings()
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the process-wide services; geometry loads on first use."""
    await init_db()
    app.state.services = build_services(settings, AsyncSessionLocal)
    logger.info("Pinpoint services ready")
    yield


app = FastAPI(
    title="Pinpoint",
    description="Location-guessing game with a shared daily puzzle",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GeometryUnavailable)
async def geometry_unavailable_handler(request: Request, exc: GeometryUnavailable):
    """Any endpoint that needs the world shapes answers 503 while they cannot be loaded."""
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": exc.user_message},
    )


app.include_router(game.router, prefix="/api")
app.include_router(stats.router, prefix="/api")
app.include_router(daily.router, prefix="/api")
app.include_router(profile.router, prefix="/api")
app.include_router(leaderboard.router, prefix="/api")
# The leaderboard store lives at the root path the client expects
app.include_router(highscores.router)


@app.get("/")
async def root():
    return {
        "message": "Welcome to the Pinpoint API",
        "docs": "/docs",
        "daily": "/api/daily",
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
