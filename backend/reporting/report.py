"""
PharmaTrack — AI Monthly Report

Turns a project's last three months of data into a prompt, sends it to the
configured LLM provider, and returns Markdown text. Failures never escape:
a missing credential, a transport/auth error or an empty answer all yield
a fixed, displayable message.

ReportService adds an in-flight guard: at most one outstanding report per
project. A second request for the same project while the first is running
raises ReportInProgress.
"""

import logging
import threading
from typing import Callable

from ..errors import ReportInProgress
from ..schemas import Project, ReportResponse
from .llm_provider import LLMProvider, get_provider

logger = logging.getLogger("pharmatrack.report")

RECENT_MONTHS = 3

NO_DATA_MESSAGE = "暂无数据可用于生成报告，请先添加月度销售数据。"
EMPTY_REPORT_MESSAGE = "Unable to generate report."
FALLBACK_MESSAGE = "Error generating report. Please check your API key or network connection."

SYSTEM_PROMPT = "You are a senior Pharmaceutical Project Manager writing internal monthly reports."


def _amount(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"


def build_report_prompt(project: Project) -> str:
    """Prompt covering the project identity and its most recent months."""
    recent = project.monthly_data[-RECENT_MONTHS:]
    data_summary = "\n".join(
        f"Month: {d.month}, Actual Sales: {_amount(d.actual_sales)}, "
        f"Target: {_amount(d.target_sales)}, "
        f"Coverage: {d.hospital_coverage}, Activities: {d.activities}"
        for d in recent
    )

    return (
        "Act as a senior Pharmaceutical Project Manager.\n"
        f'Analyze the following data for the project "{project.name}" '
        f"(Manufacturer: {project.manufacturer}).\n\n"
        "Recent Data:\n"
        f"{data_summary}\n\n"
        "Please provide a concise monthly progress report in Chinese (Professional Tone).\n"
        "Structure:\n"
        "1. Sales Performance Analysis (Achievement rate, Trend).\n"
        "2. Key Highlights (Based on activities).\n"
        "3. Strategic Suggestions for next month.\n\n"
        "Keep it brief (under 200 words) and professional. Format the answer as Markdown."
    )


def generate_project_report(
    project: Project,
    provider_factory: Callable[[], LLMProvider] = get_provider,
) -> ReportResponse:
    """Generate the report text for one project. Never raises for collaborator faults."""
    if not project.monthly_data:
        return ReportResponse(project_id=project.id, report=NO_DATA_MESSAGE, provider="none")

    try:
        provider = provider_factory()
    except (ValueError, ImportError) as e:
        logger.error(f"AI provider unavailable for project {project.id}: {e}")
        return ReportResponse(project_id=project.id, report=FALLBACK_MESSAGE, provider="unavailable")

    response = provider.chat(
        [{"role": "user", "content": build_report_prompt(project)}],
        system_prompt=SYSTEM_PROMPT,
    )
    if response.is_error:
        logger.error(f"AI report failed for project {project.id}: {response.content}")
        report = FALLBACK_MESSAGE
    elif not response.content.strip():
        logger.warning(f"AI report for project {project.id} came back empty")
        report = EMPTY_REPORT_MESSAGE
    else:
        report = response.content

    return ReportResponse(project_id=project.id, report=report, provider=provider.get_name())


class ReportService:
    """Serializes report generation per project."""

    def __init__(self, provider_factory: Callable[[], LLMProvider] = get_provider):
        self.provider_factory = provider_factory
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    def is_running(self, project_id: str) -> bool:
        with self._lock:
            return project_id in self._in_flight

    def generate(self, project: Project) -> ReportResponse:
        with self._lock:
            if project.id in self._in_flight:
                raise ReportInProgress(
                    f"A report for project {project.id} is already being generated",
                    project_id=project.id,
                )
            self._in_flight.add(project.id)

        try:
            return generate_project_report(project, self.provider_factory)
        finally:
            with self._lock:
                self._in_flight.discard(project.id)
