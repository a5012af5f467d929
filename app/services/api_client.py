"""
Client HTTP de l'API tâches - même contrat que le front (api.js)
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/tasks"
REQUEST_TIMEOUT = 10


class TaskApiError(Exception):
    def __init__(self, action: str, status_code: int, message: str = ""):
        super().__init__(f"{action} ({status_code}): {message}" if message else f"{action} ({status_code})")
        self.action = action
        self.status_code = status_code
        self.message = message


class TaskApiClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _task_url(self, task_id: str) -> str:
        return f"{self.base_url}/{quote(str(task_id), safe='')}"

    def _send(self, action: str, method: str, url: str, **kwargs) -> Any:
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("error", "")
            except (ValueError, AttributeError):
                message = ""
            logger.warning(f"{action}: {method} {url} -> {response.status_code} {message}")
            raise TaskApiError(action, response.status_code, message)
        if response.status_code == 204:
            return None
        return response.json()

    def list_tasks(self, q: str = "", status: str = "all", sort: str = "created") -> list:
        params = {}
        if q:
            params["q"] = q
        if status:
            params["status"] = status
        if sort:
            params["sort"] = sort
        return self._send("Failed to load tasks", "GET", self.base_url, params=params)

    def get_task(self, task_id: str) -> dict:
        return self._send("Failed to load task", "GET", self._task_url(task_id))

    def create_task(self, data: dict) -> dict:
        return self._send("Failed to create task", "POST", self.base_url, json=data)

    def update_task(self, task_id: str, patch: dict) -> dict:
        return self._send("Failed to update task", "PUT", self._task_url(task_id), json=patch)

    def delete_task(self, task_id: str) -> dict:
        self._send("Failed to delete task", "DELETE", self._task_url(task_id))
        return {"ok": True}
