"""
PharmaTrack Pydantic Schemas

Defines the domain records, the persisted envelope, and the request/response
models for the FastAPI REST API.

Architecture:
    - Domain records: MonthlyRecord, Project (also the API response shape)
    - Persisted envelope: StoredCollection (versioned JSON in the kv slot)
    - Create/Update schemas: request bodies
    - Metrics schemas: derived, read-only figures

Naming convention:
    - XxxCreate: request body for creating Xxx
    - XxxUpdate: request body for updating Xxx (all fields optional)
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

CURRENT_SCHEMA_VERSION = 1


# ---------------------------------------------------------------------------
# STATUS
# ---------------------------------------------------------------------------

class ProjectStatus(str, Enum):
    """Lifecycle of a manufacturer partnership."""
    ACTIVE = "Active"
    PENDING = "Pending"
    COMPLETED = "Completed"


# Sentinel accepted by the status filter meaning "no constraint"
STATUS_ALL = "All"

STATUS_LABELS = {
    ProjectStatus.ACTIVE.value: "进行中",
    ProjectStatus.PENDING.value: "待定",
    ProjectStatus.COMPLETED.value: "已完成",
}


def parse_status(value: str) -> Optional[ProjectStatus]:
    """Return the ProjectStatus for a raw value, or None when unrecognized."""
    try:
        return ProjectStatus(value)
    except ValueError:
        return None


def status_label(value: str) -> str:
    """
    Display label for a status value.

    Known statuses map to their Chinese label; anything else is shown verbatim.
    """
    status = parse_status(value)
    if status is None:
        return value
    return STATUS_LABELS[status.value]


# ---------------------------------------------------------------------------
# DOMAIN RECORDS
# ---------------------------------------------------------------------------

class MonthlyRecord(BaseModel):
    """One month's sales/coverage/activity snapshot for a project."""
    month: str = Field(..., pattern=MONTH_PATTERN, description="YYYY-MM")
    actual_sales: float = Field(..., ge=0, allow_inf_nan=False)
    target_sales: float = Field(..., ge=0, allow_inf_nan=False)
    hospital_coverage: int = Field(..., ge=0)
    activities: str = ""


class Project(BaseModel):
    """
    A tracked manufacturer partnership.

    `status` is kept as a plain string so that a stored value outside
    ProjectStatus still loads; the repository only accepts known statuses
    on write.
    """
    id: str = Field(..., min_length=1)
    name: str
    manufacturer: str
    products: str = ""
    start_date: date
    status: str = ProjectStatus.ACTIVE.value
    description: str = ""
    monthly_data: list[MonthlyRecord] = Field(default_factory=list)

    @property
    def status_kind(self) -> Optional[ProjectStatus]:
        return parse_status(self.status)


class StoredCollection(BaseModel):
    """Versioned envelope written to the key/value slot."""
    schema_version: int
    projects: list[Project]

    @model_validator(mode="after")
    def check_unique_ids(self):
        ids = [p.id for p in self.projects]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate project ids in stored collection")
        return self


# ---------------------------------------------------------------------------
# REQUEST SCHEMAS
# ---------------------------------------------------------------------------

def _not_blank(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError("must not be empty")
    return v


class ProjectCreate(BaseModel):
    """Request body for creating a new project."""
    name: str = Field(..., min_length=1, max_length=200)
    manufacturer: str = Field(..., min_length=1, max_length=200)
    products: str = ""
    description: str = ""

    @field_validator("name", "manufacturer")
    @classmethod
    def validate_required(cls, v):
        return _not_blank(v)


class ProjectUpdate(BaseModel):
    """Request body for editing project details. All fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    manufacturer: Optional[str] = Field(None, min_length=1, max_length=200)
    products: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None

    @field_validator("name", "manufacturer")
    @classmethod
    def validate_required(cls, v):
        return _not_blank(v)


# ---------------------------------------------------------------------------
# DERIVED METRICS
# ---------------------------------------------------------------------------

class ProjectMetrics(BaseModel):
    """Per-project figures shown on the project card."""
    project_id: str
    latest_month: Optional[str] = None
    actual_sales: float = 0
    target_sales: float = 0
    achievement_rate: float = 0
    achievement_rate_rounded: int = 0
    progress_pct: float = 0
    band: Optional[str] = None
    status_label: str


class MonthlyMetrics(BaseModel):
    """One row of the project history table."""
    month: str
    actual_sales: float
    target_sales: float
    hospital_coverage: int
    activities: str = ""
    achievement_rate: float
    band: str


class DashboardSummary(BaseModel):
    """Aggregate figures over the whole collection (filters never apply)."""
    project_count: int
    active_projects: int
    total_sales: float
    total_target: float
    achievement_rate: float
    manufacturer_count: int


class TopProjectRow(BaseModel):
    """One bar group of the Top-N sales chart."""
    project_id: str
    label: str
    sales: float
    target: float


class ReportResponse(BaseModel):
    project_id: str
    report: str
    provider: str
