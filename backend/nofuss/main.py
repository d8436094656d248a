"""
NoFuss - Guided Website Builder

FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .database import init_db, close_db
from .config import settings
from .errors import NoFussError, UpstreamUnavailable
from .api import projects_router, idea_router, build_router, deploy_router, memory_router
from .tracer import setup_follow_through_logging


def configure_logging() -> None:
    """Root logging level follows DEBUG / FOLLOW_THROUGH."""
    if settings.debug:
        level = logging.DEBUG
    elif settings.follow_through:
        # Tracer output replaces the normal INFO stream
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if not settings.debug:
        for noisy in ("aiosqlite", "sqlalchemy.engine", "httpx", "openai"):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    setup_follow_through_logging()


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting NoFuss...")

    # Validate provider key
    try:
        settings.validate_provider_key()
        logger.info(f"Using LLM provider: {settings.llm_provider}")
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down NoFuss...")
    await close_db()


app = FastAPI(
    title="NoFuss",
    description="""
    Guided website builder for non-technical users.

    A project moves through three stages:
    - **Idea**: a consultant chat clarifies the website, then a structured
      specification is extracted from the conversation
    - **Build**: the specification seeds an external build environment
    - **Deploy**: deployment options, instructions and status tracking

    Everything that happens is recorded in an append-only project history,
    surfaced as a filterable, pinnable memory bank.
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


@app.exception_handler(NoFussError)
async def nofuss_error_handler(request: Request, exc: NoFussError):
    if isinstance(exc, UpstreamUnavailable):
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
        message = exc.public_message
    else:
        message = exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    location = ".".join(str(part) for part in errors[0].get("loc", ())) if errors else ""
    message = f"{location}: {detail}" if location else detail
    return JSONResponse(
        status_code=400,
        content={"error": message, "code": "invalid_input"},
    )


app.include_router(projects_router)
app.include_router(idea_router)
app.include_router(build_router)
app.include_router(deploy_router)
app.include_router(memory_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "NoFuss",
        "version": "1.0.0",
        "description": "Guided website builder",
        "provider": settings.llm_provider,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
