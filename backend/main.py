"""
PharmaTrack Backend — FastAPI Application Entry Point

This is the main entry point for the PharmaTrack backend API server.
It configures logging and the FastAPI application, includes all routers,
sets up CORS, and initializes the database on startup.

Architecture:
    - FastAPI application with auto-generated OpenAPI docs at /docs
    - CORS enabled for Streamlit frontend
    - All routers mounted under /api prefix
    - kv_slots table created on startup via lifespan event; the project
      collection itself is seeded lazily on first read

Usage:
    python -m uvicorn backend.main:app --host 127.0.0.1 --port 8050
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import init_db
from .routers import dashboard, projects, reports

logging.basicConfig(
    level=os.environ.get("PHARMATRACK_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("pharmatrack")

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - On startup: create the kv_slots table if it doesn't exist
    - On shutdown: nothing special needed (SQLite handles cleanup)
    """
    init_db()
    logger.info("PharmaTrack API started")
    yield


# Create FastAPI application
app = FastAPI(
    title="PharmaTrack Project Dashboard",
    description=(
        "REST API for tracking pharmaceutical manufacturer partnerships. "
        "Supports project CRUD, monthly sales records, dashboard aggregates, "
        "and AI-generated monthly reports."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

# Configure CORS — allow Streamlit frontend on common ports
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8501",    # Streamlit default
        "http://127.0.0.1:8501",
        "http://localhost:8502",    # Streamlit alternate
        "http://127.0.0.1:8502",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount all routers
app.include_router(projects.router)    # /api/projects
app.include_router(reports.router)     # /api/projects/{id}/report
app.include_router(dashboard.router)   # /api/dashboard


@app.get("/")
def root():
    """Health check and API information endpoint."""
    return {
        "name": "PharmaTrack API",
        "version": API_VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "projects": "/api/projects",
            "monthly_data": "/api/projects/{project_id}/monthly-data",
            "report": "/api/projects/{project_id}/report",
            "summary": "/api/dashboard/summary",
            "top_projects": "/api/dashboard/top-projects",
        },
    }


@app.get("/health")
def health_check():
    """Simple health check for monitoring."""
    return {"status": "healthy"}
