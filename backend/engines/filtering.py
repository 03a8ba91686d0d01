"""
PharmaTrack — Filter Engine

Narrows a project collection for list display:
    - search term: case-insensitive substring of name, manufacturer,
      or (when non-empty) products; an empty term matches everything
    - status: exact equality, or the "All" sentinel for no constraint

Both predicates must hold. The result keeps collection order.
"""

from typing import Optional

from ..schemas import Project, STATUS_ALL


def matches_search(project: Project, search_term: str) -> bool:
    term = (search_term or "").lower()
    if not term:
        return True
    if term in project.name.lower() or term in project.manufacturer.lower():
        return True
    return bool(project.products) and term in project.products.lower()


def matches_status(project: Project, status_filter: Optional[str]) -> bool:
    if status_filter is None or status_filter == STATUS_ALL:
        return True
    # Accept ProjectStatus members as well as raw strings
    return project.status == getattr(status_filter, "value", status_filter)


def filter_projects(
    projects: list[Project],
    search_term: str = "",
    status_filter: Optional[str] = STATUS_ALL,
) -> list[Project]:
    return [
        p for p in projects
        if matches_search(p, search_term) and matches_status(p, status_filter)
    ]
