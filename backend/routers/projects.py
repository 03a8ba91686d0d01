"""
Project Router — /api/projects

Endpoints:
    GET    /api/projects                       — List projects (search + status filter)
    POST   /api/projects                       — Create a new project
    GET    /api/projects/{id}                  — Get one project
    PUT    /api/projects/{id}                  — Replace (or add) a project
    PATCH  /api/projects/{id}                  — Edit project details
    POST   /api/projects/{id}/monthly-data     — Record one month of data
    GET    /api/projects/{id}/metrics          — Latest-month card figures
    GET    /api/projects/{id}/history          — Monthly history with achievement rates
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_repository, to_http_exception
from ..engines.aggregation import monthly_metrics, project_metrics
from ..engines.filtering import filter_projects
from ..errors import PharmaTrackError
from ..repository import ProjectRepository
from ..schemas import (
    MonthlyMetrics, MonthlyRecord, Project, ProjectCreate, ProjectMetrics, ProjectUpdate,
    STATUS_ALL,
)

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("", response_model=list[Project])
def list_projects(
    search: Optional[str] = Query("", description="Case-insensitive match on name, manufacturer or products"),
    status: Optional[str] = Query(STATUS_ALL, description="Exact status, or 'All'"),
    repo: ProjectRepository = Depends(get_repository),
):
    """List projects in collection order, narrowed by the optional filters."""
    try:
        projects = repo.get_all()
    except PharmaTrackError as e:
        raise to_http_exception(e)
    return filter_projects(projects, search or "", status or STATUS_ALL)


@router.post("", response_model=Project, status_code=201)
def create_project(data: ProjectCreate, repo: ProjectRepository = Depends(get_repository)):
    """Create an Active project starting today with no monthly data."""
    try:
        return repo.create(data.name, data.manufacturer, data.products, data.description)
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.get("/{project_id}", response_model=Project)
def get_project(project_id: str, repo: ProjectRepository = Depends(get_repository)):
    try:
        return repo.get(project_id)
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.put("/{project_id}", response_model=Project)
def replace_project(project_id: str, project: Project, repo: ProjectRepository = Depends(get_repository)):
    """
    Upsert a full project record by id.

    The id in the body must match the path.
    """
    if project.id != project_id:
        raise HTTPException(
            status_code=422,
            detail={
                "detail": f"Body id {project.id} does not match path id {project_id}",
                "error_code": "ID_MISMATCH",
                "context": {"path_id": project_id, "body_id": project.id},
            },
        )
    try:
        return repo.update(project)
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.patch("/{project_id}", response_model=Project)
def edit_project(project_id: str, changes: ProjectUpdate, repo: ProjectRepository = Depends(get_repository)):
    """Edit name, manufacturer, products, description or status. Only provided fields change."""
    try:
        return repo.edit(project_id, changes)
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.post("/{project_id}/monthly-data", response_model=Project)
def record_month(project_id: str, record: MonthlyRecord, repo: ProjectRepository = Depends(get_repository)):
    """
    Record one month of sales/coverage data.

    An existing entry for the same month is overwritten; returns 404 for an
    unknown project.
    """
    try:
        return repo.record_month(project_id, record)
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.get("/{project_id}/metrics", response_model=ProjectMetrics)
def get_project_metrics(project_id: str, repo: ProjectRepository = Depends(get_repository)):
    try:
        return project_metrics(repo.get(project_id))
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.get("/{project_id}/history", response_model=list[MonthlyMetrics])
def get_project_history(project_id: str, repo: ProjectRepository = Depends(get_repository)):
    """Recorded months, oldest first, each with its achievement rate and band."""
    try:
        return monthly_metrics(repo.get(project_id))
    except PharmaTrackError as e:
        raise to_http_exception(e)
