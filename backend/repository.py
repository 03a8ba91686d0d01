"""
PharmaTrack Project Repository

CRUD over the project collection. Every mutation is one full read of the
collection followed by one full write; nothing is persisted per record.

Architecture:
    - Constructed with a ProjectStorage (no module-level storage global)
    - Raises InvalidInput before persisting anything bad
    - Raises NotFound for unknown project ids
    - Mutations hold a process-wide lock, and the save is conditional on the
      revision that was read, so a writer in another process surfaces as
      ConcurrentModification instead of a silently lost update
"""

import logging
import threading
import uuid
from datetime import date
from typing import Callable, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import InvalidInput, NotFound
from .schemas import MonthlyRecord, Project, ProjectCreate, ProjectUpdate, parse_status
from .storage import ProjectStorage

logger = logging.getLogger("pharmatrack.repository")


def _validated(model_cls: type[BaseModel], data) -> BaseModel:
    """Validate data (dict or model instance) into model_cls, mapping errors to InvalidInput."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or model_cls.__name__
        raise InvalidInput(
            f"Invalid {field}: {first['msg']}",
            field=field, errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


def _new_project_id() -> str:
    return f"p{uuid.uuid4().hex[:12]}"


def _index_of(projects: list[Project], project_id: str) -> Optional[int]:
    for i, p in enumerate(projects):
        if p.id == project_id:
            return i
    return None


class ProjectRepository:
    """Owns the authoritative project collection for the running process."""

    def __init__(
        self,
        storage: ProjectStorage,
        id_factory: Callable[[], str] = _new_project_id,
        today: Callable[[], date] = date.today,
    ):
        self.storage = storage
        self._id_factory = id_factory
        self._today = today
        self._write_lock = threading.Lock()

    # ---- Reads ----

    def get_all(self) -> list[Project]:
        return self.storage.load()

    def get(self, project_id: str) -> Project:
        for project in self.storage.load():
            if project.id == project_id:
                return project
        raise NotFound(f"Project {project_id} not found", project_id=project_id)

    # ---- Mutations ----

    def create(self, name: str, manufacturer: str, products: str = "", description: str = "") -> Project:
        """
        Create an Active project starting today with no monthly data.

        Raises:
            InvalidInput: empty name or manufacturer
        """
        data = _validated(ProjectCreate, {
            "name": name,
            "manufacturer": manufacturer,
            "products": products or "",
            "description": description or "",
        })

        with self._write_lock:
            projects, revision = self.storage.load_versioned()
            existing = {p.id for p in projects}
            project_id = self._id_factory()
            while project_id in existing:
                project_id = self._id_factory()

            project = Project(
                id=project_id,
                name=data.name,
                manufacturer=data.manufacturer,
                products=data.products,
                start_date=self._today(),
                status="Active",
                description=data.description,
                monthly_data=[],
            )
            projects.append(project)
            self.storage.save(projects, expected_revision=revision)

        logger.info(f"Created project {project.id} ({project.name})")
        return project

    def update(self, project: Union[Project, dict]) -> Project:
        """
        Replace the stored project with the same id, or append it if the id
        is new (upsert-by-id).

        Raises:
            InvalidInput: blank name/manufacturer, unknown status,
                duplicate months, or invalid monthly figures
        """
        return self._upsert(_validated(Project, project))

    def _upsert(self, project: Project, check_status: bool = True) -> Project:
        project = self._check_project(project, check_status)

        with self._write_lock:
            projects, revision = self.storage.load_versioned()
            index = _index_of(projects, project.id)
            if index is None:
                projects.append(project)
            else:
                projects[index] = project
            self.storage.save(projects, expected_revision=revision)

        logger.info(f"{'Added' if index is None else 'Updated'} project {project.id}")
        return project

    def edit(self, project_id: str, changes: Union[ProjectUpdate, dict]) -> Project:
        """
        Apply a partial update to an existing project's details.

        A stored status outside ProjectStatus is kept as is unless the
        changes set a new one.
        """
        changes = _validated(ProjectUpdate, changes)
        current = self.get(project_id)
        update_data = {
            k: v for k, v in changes.model_dump(exclude_unset=True).items() if v is not None
        }
        if "status" in update_data:
            update_data["status"] = changes.status.value
        return self._upsert(
            current.model_copy(update=update_data), check_status="status" in update_data
        )

    def record_month(self, project_id: str, record: Union[MonthlyRecord, dict]) -> Project:
        """
        Insert or replace one month of data for a project.

        An existing entry for the same month is replaced in place; a new
        month is appended and the history re-sorted ascending by month.

        Raises:
            InvalidInput: malformed month or negative figures
            NotFound: no project with project_id
        """
        record = _validated(MonthlyRecord, record)

        with self._write_lock:
            projects, revision = self.storage.load_versioned()
            index = _index_of(projects, project_id)
            if index is None:
                raise NotFound(f"Project {project_id} not found", project_id=project_id)

            project = projects[index]
            history = list(project.monthly_data)
            month_index = next(
                (i for i, m in enumerate(history) if m.month == record.month), None
            )
            if month_index is not None:
                history[month_index] = record
            else:
                history.append(record)
                history.sort(key=lambda m: m.month)

            project = project.model_copy(update={"monthly_data": history})
            projects[index] = project
            self.storage.save(projects, expected_revision=revision)

        logger.info(
            f"{'Replaced' if month_index is not None else 'Recorded'} "
            f"{record.month} for project {project_id}"
        )
        return project

    # ---- Helpers ----

    @staticmethod
    def _check_project(project: Project, check_status: bool = True) -> Project:
        if not project.name.strip():
            raise InvalidInput("Project name must not be empty", field="name")
        if not project.manufacturer.strip():
            raise InvalidInput("Manufacturer must not be empty", field="manufacturer")
        if check_status and parse_status(project.status) is None:
            raise InvalidInput(
                f"Invalid status: {project.status}. Must be one of Active, Pending, Completed",
                field="status",
            )

        months = [m.month for m in project.monthly_data]
        if len(months) != len(set(months)):
            raise InvalidInput("Monthly data contains duplicate months", field="monthly_data")
        if months != sorted(months):
            project = project.model_copy(
                update={"monthly_data": sorted(project.monthly_data, key=lambda m: m.month)}
            )
        return project
