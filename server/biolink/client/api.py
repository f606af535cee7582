# server/biolink/client/api.py

import logging
from typing import List, Optional

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class BiolinkClient:
    """Thin HTTP client for the dashboard's calls against the Biolink API."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs) -> dict:
        response = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok or not body.get("success", False):
            raise ApiError(
                body.get("error") or f"Request failed with status {response.status_code}",
                status=response.status_code,
                code=body.get("code"),
            )

        return body.get("data") or {}

    def list_links(self, folder_id: Optional[str] = None, top_level: bool = False) -> List[dict]:
        params = {}
        if top_level:
            params["folder_id"] = "none"
        elif folder_id:
            params["folder_id"] = folder_id
        return self._request("GET", "/api/links", params=params).get("links", [])

    def public_links(self, owner_ref: str) -> List[dict]:
        return self._request("GET", f"/api/public/{owner_ref}").get("links", [])

    def update_link_order(self, link_ids: List[str], folder_id: Optional[str] = None) -> dict:
        payload = {"link_ids": list(link_ids)}
        if folder_id is not None:
            payload["folder_id"] = folder_id
        return self._request("POST", "/api/links/order", json=payload)

    def persist_order(self, link_ids: List[str], scope: Optional[str]) -> dict:
        """Persist collaborator for OrderCache: a None scope is the top level."""
        return self.update_link_order(link_ids, folder_id=scope if scope is not None else "none")

    def update_link_folder(self, link_id: str, folder_id: Optional[str]) -> dict:
        return self._request("PUT", f"/api/links/{link_id}/folder", json={"folder_id": folder_id}).get("link", {})

    def canonicalize(self, platform: str, link_type: str, raw_input: str) -> str:
        data = self._request("POST", "/api/music/canonicalize", json={
            "platform": platform,
            "type": link_type,
            "input": raw_input,
        })
        return data["url"]

    def resolve_metadata(self, url: str, overrides: Optional[dict] = None) -> dict:
        try:
            data = self._request("POST", "/api/music/metadata", json={"url": url, "overrides": overrides or {}})
        except (requests.exceptions.RequestException, ApiError) as e:
            logger.warning(f"Metadata lookup failed for {url}: {e}")
            return dict(overrides or {})
        return data.get("metadata") or {}
