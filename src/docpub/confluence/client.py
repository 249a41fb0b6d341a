"""Thin Confluence REST client over a single requests.Session.

Every call is blocking with no timeout and no retry. Failures (non-2xx
status or a transport error) are logged with status and body, and the
method returns its failure value (``None`` or ``False``) so that callers
can move on to the next page or attachment.
"""

import base64
import json
import logging
from pathlib import Path
from typing import Any, Optional

import requests


log = logging.getLogger(__name__)

API_PATH = "rest/api/"
ADF_REPRESENTATION = "atlas_doc_format"
STORAGE_REPRESENTATION = "storage"


def basic_auth_header(username: str, api_token: str) -> str:
    """Return the value of a Basic Authorization header for username:api_token."""
    raw = f"{username}:{api_token}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def page_body(body: Any, representation: str) -> dict:
    """Wrap a body value for the given representation; ADF documents are sent as JSON strings."""
    value = body if isinstance(body, str) else json.dumps(body)
    return {representation: {"value": value, "representation": representation}}


class ConfluenceClient:
    """Page lookup, create, update and attachment upload against /rest/api."""

    def __init__(self, base_url: str, username: str, api_token: str, session: requests.Session = None):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": basic_auth_header(username, api_token),
            "Accept": "application/json",
        })

    def __enter__(self) -> "ConfluenceClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def url(self, path: str) -> str:
        return f"{self.base_url}{API_PATH}{path}"

    def _request(self, method: str, path: str, action: str, **kwargs) -> Optional[requests.Response]:
        """Send a request; return the response on 2xx, else log and return None."""
        try:
            response = self.session.request(method, self.url(path), **kwargs)
        except requests.RequestException as e:
            log.error("Failed to %s: %s", action, e)
            return None
        if not response.ok:
            log.error("Failed to %s: %s - %s", action, response.status_code, response.text)
            return None
        return response

    @staticmethod
    def _json(response: requests.Response, action: str) -> Optional[dict]:
        try:
            return response.json()
        except ValueError as e:
            log.error("Failed to %s: invalid JSON response (%s)", action, e)
            return None

    @staticmethod
    def _first_id(results: list, action: str) -> Optional[str]:
        """Return the id of the first result; None when there are no results or it has no id."""
        if not results:
            return None
        first = results[0]
        result_id = first.get("id") if isinstance(first, dict) else None
        if result_id is None:
            log.error("Failed to %s: result has no id", action)
            return None
        return str(result_id)

    def find_page_id(self, space: str, title: str) -> Optional[str]:
        """Return the id of the page titled title in space, or None."""
        action = f"look up page '{title}'"
        response = self._request("GET", "content", action, params={"spaceKey": space, "title": title})
        data = self._json(response, action) if response is not None else None
        results = (data or {}).get("results") or []
        return self._first_id(results, action)

    def get_page_version(self, page_id: str) -> Optional[int]:
        """Return the current version number of a page, or None when it cannot be read."""
        action = f"read version of page {page_id}"
        response = self._request("GET", f"content/{page_id}", action, params={"expand": "version"})
        data = self._json(response, action) if response is not None else None
        try:
            return int(data["version"]["number"])
        except (TypeError, KeyError, ValueError):
            if data is not None:
                log.error("Failed to %s: response has no version number", action)
            return None

    def create_page(
        self,
        space: str,
        title: str,
        body: Any,
        representation: str = ADF_REPRESENTATION,
        ) -> Optional[str]:
        """Create a page and return its id, or None on failure."""
        payload = {
            "type": "page",
            "title": title,
            "space": {"key": space},
            "body": page_body(body, representation),
        }
        action = f"create page '{title}'"
        response = self._request("POST", "content", action, json=payload)
        data = self._json(response, action) if response is not None else None
        if not data or "id" not in data:
            return None
        log.info("Created page: %s", title)
        return str(data["id"])

    def update_page(
        self,
        page_id: str,
        space: str,
        title: str,
        body: Any,
        version: int,
        representation: str = ADF_REPRESENTATION,
        ) -> bool:
        """Replace a page body, sending version as the new version number."""
        payload = {
            "id": page_id,
            "type": "page",
            "title": title,
            "version": {"number": version},
            "space": {"key": space},
            "body": page_body(body, representation),
        }
        response = self._request("PUT", f"content/{page_id}", f"update page '{title}'", json=payload)
        if response is None:
            return False
        log.info("Updated page: %s (version %d)", title, version)
        return True

    def upload_attachment(self, page_id: str, path: Path) -> Optional[str]:
        """Attach a file to a page and return the attachment id, or None on failure."""
        action = f"upload attachment {path.name}"
        try:
            with path.open("rb") as fh:
                response = self._request(
                    "POST",
                    f"content/{page_id}/child/attachment",
                    action,
                    headers={"X-Atlassian-Token": "no-check"},
                    files={"file": (path.name, fh, "application/octet-stream")},
                )
        except OSError as e:
            log.error("Failed to %s: %s", action, e)
            return None
        data = self._json(response, action) if response is not None else None
        return self._first_id((data or {}).get("results") or [], action)
