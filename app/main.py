"""
Survey Report Engine — FastAPI Application Factory.

Registers the report controller router and configures CORS,
logging, and lifespan events (report font warm-up on startup).
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.controllers.report_controller import router as report_router
from app.services.font_service import resolve_font_family

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

log_level = os.getenv("LOG_LEVEL", "info").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
)
logger = logging.getLogger("survey_report")


# ---------------------------------------------------------------------------
# Lifespan (startup / shutdown)
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - **Startup**: Register the report font so the first request doesn't
      pay for CID font setup.
    - **Shutdown**: Nothing to release.
    """
    logger.info("Survey Report Engine starting up …")
    logger.info("Report font family: %s", resolve_font_family())
    yield
    logger.info("Survey Report Engine shutting down")


# ---------------------------------------------------------------------------
# App instance
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Survey Report Engine",
    description=(
        "Lays out printable site survey reports. "
        "Post a survey with its annotated photos and comments and receive a PDF "
        "with an information page and a paginated photo grid."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# CORS – allow all origins during development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(report_router)


# Root redirect to docs
@app.get("/", include_in_schema=False)
async def root():
    return {"message": "Survey Report Engine v1.0.0", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=log_level.lower(),
    )
