"""
FastAPI dependencies shared by the routers.

The repository and report service are process-wide singletons so that the
repository write lock and the report in-flight guard cover every request.
Tests replace them with app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import HTTPException

from .database import SessionLocal
from .errors import (
    ConcurrentModification, InvalidInput, NotFound, PharmaTrackError,
    ReportInProgress, StorageError,
)
from .reporting.report import ReportService
from .repository import ProjectRepository
from .storage import ProjectStorage, SqlKeyValueStore

_STATUS_CODES = {
    InvalidInput: 422,
    NotFound: 404,
    ConcurrentModification: 409,
    ReportInProgress: 409,
    StorageError: 503,
}


@lru_cache(maxsize=1)
def get_repository() -> ProjectRepository:
    """Repository over the kv_slots table of the configured database."""
    return ProjectRepository(ProjectStorage(SqlKeyValueStore(SessionLocal)))


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    return ReportService()


def to_http_exception(exc: PharmaTrackError) -> HTTPException:
    """Map a domain fault to an HTTPException with a structured detail body."""
    status_code = next(
        (code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)), 500
    )
    return HTTPException(
        status_code=status_code,
        detail={
            "detail": exc.message,
            "error_code": exc.error_code,
            "context": exc.context,
        },
    )
