"""
PharmaTrack — Aggregation Engine

Pure functions deriving dashboard and per-project figures from a project
collection. No I/O, no mutation of the inputs.

Aggregates are computed from each project's latest month only:
    - total sales / total target:  sum of latest actual / target sales
    - overall achievement:         total sales / total target * 100
    - Top-N ranking:               latest actual sales, descending

Aggregations always take the whole collection; list filters are applied
separately (filtering.py) and never change these figures.
"""

from typing import Optional

from ..schemas import (
    DashboardSummary, MonthlyMetrics, MonthlyRecord, Project, ProjectMetrics,
    ProjectStatus, TopProjectRow, status_label,
)

# Achievement-rate thresholds for the performance band
ON_TARGET_RATE = 100.0
NEAR_TARGET_RATE = 80.0

CHART_LABEL_MAX_CHARS = 8


# ---------------------------------------------------------------------------
# PER-RECORD / PER-PROJECT
# ---------------------------------------------------------------------------

def latest_record(project: Project) -> Optional[MonthlyRecord]:
    """Most recent month of data, or None for a project with no history."""
    if not project.monthly_data:
        return None
    return project.monthly_data[-1]


def achievement_rate(record: Optional[MonthlyRecord]) -> float:
    """Actual / target as a percentage. Zero target (or no record) gives 0."""
    if record is None or record.target_sales <= 0:
        return 0.0
    return record.actual_sales / record.target_sales * 100


def performance_band(rate: float) -> str:
    """Classify an achievement rate for colour coding."""
    if rate >= ON_TARGET_RATE:
        return "on_target"
    if rate >= NEAR_TARGET_RATE:
        return "near_target"
    return "below_target"


def project_metrics(project: Project) -> ProjectMetrics:
    """Figures shown on a project card, based on the latest month."""
    last = latest_record(project)
    rate = achievement_rate(last)
    return ProjectMetrics(
        project_id=project.id,
        latest_month=last.month if last else None,
        actual_sales=last.actual_sales if last else 0,
        target_sales=last.target_sales if last else 0,
        achievement_rate=rate,
        achievement_rate_rounded=round(rate),
        progress_pct=min(rate, 100.0),
        band=performance_band(rate) if last else None,
        status_label=status_label(project.status),
    )


def monthly_metrics(project: Project) -> list[MonthlyMetrics]:
    """Every recorded month with its achievement rate and band, oldest first."""
    rows = []
    for record in project.monthly_data:
        rate = achievement_rate(record)
        rows.append(MonthlyMetrics(
            **record.model_dump(),
            achievement_rate=rate,
            band=performance_band(rate),
        ))
    return rows


# ---------------------------------------------------------------------------
# COLLECTION AGGREGATES
# ---------------------------------------------------------------------------

def _latest_sales(project: Project) -> float:
    last = latest_record(project)
    return last.actual_sales if last else 0


def total_sales(projects: list[Project]) -> float:
    return sum(_latest_sales(p) for p in projects)


def total_target(projects: list[Project]) -> float:
    total = 0
    for p in projects:
        last = latest_record(p)
        total += last.target_sales if last else 0
    return total


def overall_achievement(projects: list[Project]) -> float:
    target = total_target(projects)
    if target <= 0:
        return 0.0
    return total_sales(projects) / target * 100


def distinct_manufacturers(projects: list[Project]) -> int:
    """Number of distinct manufacturer strings (exact, case-sensitive)."""
    return len({p.manufacturer for p in projects})


def top_by_latest_sales(projects: list[Project], n: int) -> list[Project]:
    """
    Projects ranked by latest actual sales, highest first.

    sorted() is stable, so equal sales keep their collection order.
    """
    if n <= 0:
        return []
    ranked = sorted(projects, key=_latest_sales, reverse=True)
    return ranked[:n]


def _chart_label(name: str) -> str:
    if len(name) > CHART_LABEL_MAX_CHARS:
        return name[:CHART_LABEL_MAX_CHARS] + "..."
    return name


def top_sales_chart_rows(projects: list[Project], n: int = 5) -> list[TopProjectRow]:
    """Rows for the Top-N sales vs target bar chart."""
    rows = []
    for p in top_by_latest_sales(projects, n):
        last = latest_record(p)
        rows.append(TopProjectRow(
            project_id=p.id,
            label=_chart_label(p.name),
            sales=last.actual_sales if last else 0,
            target=last.target_sales if last else 0,
        ))
    return rows


def dashboard_summary(projects: list[Project]) -> DashboardSummary:
    return DashboardSummary(
        project_count=len(projects),
        active_projects=sum(1 for p in projects if p.status_kind is ProjectStatus.ACTIVE),
        total_sales=total_sales(projects),
        total_target=total_target(projects),
        achievement_rate=overall_achievement(projects),
        manufacturer_count=distinct_manufacturers(projects),
    )
