"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.config import settings
from app.db.session import engine
from app.services.simulation_service import wait_for_pending_writes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting policy decision engine ({settings.ENVIRONMENT})")
    yield
    # Let detached simulation writes settle before the pool goes away
    await wait_for_pending_writes()
    await engine.dispose()


app = FastAPI(
    title="Policy Decision Engine API",
    description="Eligibility, scoring and decision-tree simulation for underwriting policies",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict:
    """Service banner with the docs location."""
    return {
        "message": "Policy Decision Engine API",
        "version": "1.0.0",
        "docs": "/api/docs",
    }
