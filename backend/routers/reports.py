"""
AI Report Router — /api/projects/{id}/report

Collaborator failures come back as a 200 with the fallback text; only an
unknown project (404) or a report already running for the project (409)
are errors.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_report_service, get_repository, to_http_exception
from ..errors import PharmaTrackError
from ..reporting.report import ReportService
from ..repository import ProjectRepository
from ..schemas import ReportResponse

router = APIRouter(prefix="/api/projects", tags=["AI Reports"])


@router.post("/{project_id}/report", response_model=ReportResponse)
def generate_report(
    project_id: str,
    repo: ProjectRepository = Depends(get_repository),
    reports: ReportService = Depends(get_report_service),
):
    """Summarize the project's last three months into a Markdown report."""
    try:
        project = repo.get(project_id)
        return reports.generate(project)
    except PharmaTrackError as e:
        raise to_http_exception(e)
