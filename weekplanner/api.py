"""
HTTP client for the planning backend.

Resource groups:
- Subjects: list / get / create / update / delete
- Weeks:    get / update, plus nested resource create / update / delete
- Export:   binary spreadsheet export of one subject

Request and response bodies are JSON, except the export which returns raw
bytes. The client performs no caching, retries or conflict resolution:
callers re-fetch the parent subject after every mutation.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

import requests

from weekplanner import config
from weekplanner.model import Resource, Subject, Week

log = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(Exception):
    """
    The only failure kind the client distinguishes: the call did not succeed.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _subject_list(data: Any) -> list[Subject]:
    if not isinstance(data, list):
        raise TypeError("expected a list of subjects")
    return [Subject.from_dict(s) for s in data]


class PlannerClient:
    """
    Thin wrapper around a requests.Session bound to the backend base URL.

    The session is the lifetime of every request made through the client:
    once close() is called (or the `with` block exits), further calls raise
    ApiError instead of reaching the network.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = config.api_base_url(base_url)
        self.timeout = timeout if timeout is not None else config.request_timeout()
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        self._closed = False

    def __enter__(self) -> "PlannerClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, json_body: Any = None) -> requests.Response:
        if self._closed:
            raise ApiError(f"{method} {path}: client is closed")

        url = f"{self.base_url}{path}"
        log.debug("%s %s", method, url)
        try:
            resp = self._session.request(method, url, json=json_body, timeout=self.timeout)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise ApiError(f"{method} {path} failed with status {status}", status_code=status) from e
        except requests.RequestException as e:
            raise ApiError(f"{method} {path} failed: {e}") from e
        return resp

    def _json(self, method: str, path: str, json_body: Any = None) -> Any:
        resp = self._request(method, path, json_body)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(f"{method} {path}: invalid JSON response") from e

    def _parse(self, method: str, path: str, factory: Callable[[Any], T], json_body: Any = None) -> T:
        data = self._json(method, path, json_body)
        try:
            return factory(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ApiError(f"{method} {path}: unexpected response shape") from e

    # ------------------------------------------------------------------
    # Subjects
    # ------------------------------------------------------------------

    def list_subjects(self) -> list[Subject]:
        return self._parse("GET", "/subjects", _subject_list)

    def get_subject(self, subject_id: int) -> Subject:
        return self._parse("GET", f"/subjects/{subject_id}", Subject.from_dict)

    def create_subject(self, name: str, semester: str) -> Subject:
        body = {"name": name, "semester": semester}
        return self._parse("POST", "/subjects", Subject.from_dict, body)

    def update_subject(self, subject_id: int, name: str | None = None, semester: str | None = None) -> Subject:
        body: dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if semester is not None:
            body["semester"] = semester
        return self._parse("PUT", f"/subjects/{subject_id}", Subject.from_dict, body)

    def delete_subject(self, subject_id: int) -> None:
        self._request("DELETE", f"/subjects/{subject_id}")

    # ------------------------------------------------------------------
    # Weeks & resources
    # ------------------------------------------------------------------

    def get_week(self, week_id: int) -> Week:
        return self._parse("GET", f"/weeks/{week_id}", Week.from_dict)

    def update_week(self, week_id: int, content: str) -> Week:
        return self._parse("PUT", f"/weeks/{week_id}", Week.from_dict, {"content": content})

    def create_resource(
        self,
        week_id: int,
        url: str,
        title: str | None = None,
        description: str | None = None,
    ) -> Resource:
        body: dict[str, Any] = {"url": url}
        if title:
            body["title"] = title
        if description:
            body["description"] = description
        return self._parse("POST", f"/weeks/{week_id}/resources", Resource.from_dict, body)

    def update_resource(self, resource_id: int, **fields: Any) -> Resource:
        """
        Partial update; accepted keys: url, title, description.
        """
        unknown = set(fields) - {"url", "title", "description"}
        if unknown:
            raise ValueError(f"Unknown resource fields: {sorted(unknown)}")
        return self._parse("PUT", f"/weeks/resources/{resource_id}", Resource.from_dict, fields)

    def delete_resource(self, resource_id: int) -> None:
        self._request("DELETE", f"/weeks/resources/{resource_id}")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_subject(self, subject_id: int) -> bytes:
        return self._request("GET", f"/export/subjects/{subject_id}").content
