import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from focusboard.api import board
from focusboard.core.config import settings
from focusboard.services.board_registry import board_registry

# Load environment variables
load_dotenv()

logger = logging.getLogger("focusboard")


def configure_logging() -> None:
    """Configure root logging from settings.log_level."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.project_name} on port {os.getenv('BACKEND_PORT', '8000')}...")
    logger.info(f"Row store backend: {settings.store_backend}")
    logger.info(f"Persistence failure policy: {settings.persistence_failure_policy}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.project_name}...")
    try:
        await board_registry.aclose()
    except Exception as e:
        logger.error(f"Error closing row store: {e}")


app = FastAPI(
    title="Focusboard - Task Prioritization API",
    description="Smart scoring and Eisenhower matrix board for personal tasks",
    version="0.1.0",
    lifespan=lifespan
)

# CORS configuration
frontend_port = os.getenv("FRONTEND_PORT", "5173")

allowed_origins = [
    settings.frontend_url,
    f"http://localhost:{frontend_port}",
    f"http://127.0.0.1:{frontend_port}",
    *settings.allowed_origins,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(board.router)


class HealthResponse(BaseModel):
    status: str
    store_backend: str
    boards_loaded: int


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health"""
    return HealthResponse(
        status="ok",
        store_backend=settings.store_backend,
        boards_loaded=len(board_registry.boards),
    )
