"""
PharmaTrack — Frontend API Client

Centralized HTTP client for all backend API calls.
All frontend components use this module instead of making direct HTTP requests.

Usage:
    from frontend.api_client import api
    projects = api.get_projects(search="辉瑞")
    api.record_month("p1", {"month": "2023-11", ...})
"""

import os

import requests

# Backend URL — configurable via environment
API_BASE = os.environ.get("PHARMATRACK_API_URL", "http://127.0.0.1:8050")


class APIError(Exception):
    """Backend returned an error; message is the backend's detail text."""

    def __init__(self, status_code: int, message: str, error_code: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class PharmaTrackAPI:
    """HTTP client wrapper for the PharmaTrack backend API."""

    def __init__(self, base_url: str = API_BASE):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _check(r: requests.Response):
        if r.ok:
            return r.json()
        try:
            body = r.json().get("detail", r.text)
        except ValueError:
            body = r.text
        # Router errors nest {"detail", "error_code"} under FastAPI's "detail"
        if isinstance(body, dict):
            raise APIError(r.status_code, body.get("detail", str(body)), body.get("error_code", ""))
        if isinstance(body, list):
            body = "; ".join(e.get("msg", str(e)) for e in body if isinstance(e, dict))
        raise APIError(r.status_code, str(body))

    def _get(self, path: str, params: dict = None):
        return self._check(self.session.get(self._url(path), params=params, timeout=30))

    def _post(self, path: str, json_data: dict = None, timeout: int = 30):
        return self._check(self.session.post(self._url(path), json=json_data, timeout=timeout))

    def _put(self, path: str, json_data: dict = None):
        return self._check(self.session.put(self._url(path), json=json_data, timeout=30))

    def _patch(self, path: str, json_data: dict = None):
        return self._check(self.session.patch(self._url(path), json=json_data, timeout=30))

    # ---- Health ----
    def health(self) -> dict:
        return self._get("/health")

    # ---- Projects ----
    def get_projects(self, search: str = "", status: str = "All") -> list:
        params = {"status": status}
        if search:
            params["search"] = search
        return self._get("/api/projects", params=params)

    def get_project(self, project_id: str) -> dict:
        return self._get(f"/api/projects/{project_id}")

    def create_project(self, name: str, manufacturer: str, products: str = "", description: str = "") -> dict:
        return self._post("/api/projects", json_data={
            "name": name,
            "manufacturer": manufacturer,
            "products": products,
            "description": description,
        })

    def edit_project(self, project_id: str, data: dict) -> dict:
        return self._patch(f"/api/projects/{project_id}", json_data=data)

    def replace_project(self, project: dict) -> dict:
        return self._put(f"/api/projects/{project['id']}", json_data=project)

    def record_month(self, project_id: str, record: dict) -> dict:
        return self._post(f"/api/projects/{project_id}/monthly-data", json_data=record)

    def get_project_metrics(self, project_id: str) -> dict:
        return self._get(f"/api/projects/{project_id}/metrics")

    def get_project_history(self, project_id: str) -> list:
        return self._get(f"/api/projects/{project_id}/history")

    # ---- Dashboard ----
    def get_summary(self) -> dict:
        return self._get("/api/dashboard/summary")

    def get_top_projects(self, n: int = 5) -> list:
        return self._get("/api/dashboard/top-projects", params={"n": n})

    def get_all_project_metrics(self) -> list:
        return self._get("/api/dashboard/project-metrics")

    # ---- AI Report ----
    def generate_report(self, project_id: str) -> dict:
        # LLM calls are slow; no retry
        return self._post(f"/api/projects/{project_id}/report", timeout=120)


# Global API client instance
api = PharmaTrackAPI()
