"""
ProjectPilot - AI Project Consultant

FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import init_db, close_db
from .config import settings
from .api import project_router, chat_router, events_router
from .engine.session import get_consultancy_session
from .events import get_event_publisher
from .tracer import setup_follow_through_logging

NOISY_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "httpx", "openai", "google")


def configure_logging() -> None:
    """DEBUG with DEBUG=true, WARNING under follow-through so traces stand out, else INFO."""
    if settings.debug:
        level = logging.DEBUG
    elif settings.follow_through:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not settings.debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    setup_follow_through_logging()


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting ProjectPilot...")

    try:
        settings.validate_provider_key()
        logger.info(f"Using LLM provider: {settings.llm_provider}")
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    await init_db()
    await get_consultancy_session().restore()
    logger.info("Session restored")

    yield

    logger.info("Shutting down ProjectPilot...")
    await get_event_publisher().close_all()
    await close_db()


app = FastAPI(
    title="ProjectPilot",
    description="""
    AI project consultant for a single software project.

    Create a project, then talk about your progress. After every message the
    consultant updates the plan: progress, tasks, blockers, priorities and
    suggested next steps.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(project_router)
app.include_router(chat_router)
app.include_router(events_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "ProjectPilot",
        "version": "1.0.0",
        "description": "AI project consultant",
        "provider": settings.llm_provider,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
