"""Item store client: the remote owner of every committed sequence."""

from __future__ import annotations

import requests

from outline.errors import ReorderError, ReorderErrorType, error_from_response
from outline.models import OrderedItem, Scope, ScopeKind
from utils.logging_utils import store_logger, log_info, log_error

# kind -> (method, reorder path, ids field)
REORDER_ENDPOINTS = {
    ScopeKind.MODULES: ("POST", "/api/courses/{parent_id}/modules/reorder", "moduleIds"),
    ScopeKind.CHAPTERS: ("POST", "/api/modules/{parent_id}/chapters/reorder", "chapterIds"),
    ScopeKind.CONTENT: ("PATCH", "/api/content/reorder", "contentItemIds"),
}

LIST_ENDPOINTS = {
    ScopeKind.MODULES: "/api/courses/{parent_id}/modules",
    ScopeKind.CHAPTERS: "/api/modules/{parent_id}/chapters",
    ScopeKind.CONTENT: "/api/chapters/{parent_id}/content",
}


class ApiItemStore:
    """Talks to the outline service over HTTP.

    ``reorder`` always sends the complete id list of the scope so the
    service can treat it as an idempotent replace-order. Every failure is
    raised as a ReorderError.
    """

    def __init__(self, base_url, session=None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def reorder(self, scope: Scope, ordered_ids) -> None:
        method, path, field = REORDER_ENDPOINTS[scope.kind]
        body = {field: [int(item_id) for item_id in ordered_ids]}
        if scope.kind is ScopeKind.CONTENT:
            body["chapterId"] = scope.parent_id
        self._request(method, path.format(parent_id=scope.parent_id), body, action=f"reorder {scope}")
        log_info(store_logger, "Order saved", scope=str(scope), ordered_ids=body[field])

    def fetch(self, scope: Scope) -> list[OrderedItem]:
        path = LIST_ENDPOINTS[scope.kind].format(parent_id=scope.parent_id)
        rows = self._request("GET", path, None, action=f"fetch {scope}")
        if not isinstance(rows, list):
            raise ReorderError("Unexpected response from the outline service", ReorderErrorType.SERVER)
        return [OrderedItem.from_row(row) for row in rows]

    def move_chapter(self, chapter_id: int, target_module_id: int, target_index: int | None = None) -> dict:
        body = {"targetModuleId": target_module_id}
        if target_index is not None:
            body["targetOrderIndex"] = target_index
        result = self._request("POST", f"/api/chapters/{chapter_id}/move", body, action=f"move chapter {chapter_id}")
        return (result or {}).get("data", {})

    def _request(self, method, path, body, action):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            log_error(store_logger, "Request failed", action=action, url=url, error=str(e))
            raise ReorderError("Connection error", ReorderErrorType.NETWORK) from e

        if not 200 <= response.status_code < 300:
            error = error_from_response(response)
            log_error(store_logger, "Request rejected", action=action, status_code=response.status_code,
                      error=error.message, details=error.details)
            raise error

        try:
            return response.json()
        except ValueError:
            return None
