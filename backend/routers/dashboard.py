"""
Dashboard Router — /api/dashboard

Aggregates over the whole collection. Search/status filters never apply here.

Endpoints:
    GET /api/dashboard/summary        — KPI figures
    GET /api/dashboard/top-projects   — Top-N projects by latest sales
    GET /api/dashboard/project-metrics — Card figures for every project
"""

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_repository, to_http_exception
from ..engines.aggregation import dashboard_summary, project_metrics, top_sales_chart_rows
from ..errors import PharmaTrackError
from ..repository import ProjectRepository
from ..schemas import DashboardSummary, ProjectMetrics, TopProjectRow

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
def get_summary(repo: ProjectRepository = Depends(get_repository)):
    try:
        return dashboard_summary(repo.get_all())
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.get("/top-projects", response_model=list[TopProjectRow])
def get_top_projects(
    n: int = Query(5, ge=1, le=50, description="Number of projects to return"),
    repo: ProjectRepository = Depends(get_repository),
):
    """Projects ranked by latest actual sales; ties keep collection order."""
    try:
        return top_sales_chart_rows(repo.get_all(), n)
    except PharmaTrackError as e:
        raise to_http_exception(e)


@router.get("/project-metrics", response_model=list[ProjectMetrics])
def get_all_project_metrics(repo: ProjectRepository = Depends(get_repository)):
    """Latest-month figures for every project, in collection order."""
    try:
        return [project_metrics(p) for p in repo.get_all()]
    except PharmaTrackError as e:
        raise to_http_exception(e)
