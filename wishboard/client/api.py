"""
Thin HTTP client for the board API.

Unwraps the `{success, data?, error?}` envelope and raises `BoardAPIError`
for every failed call. Works with any `httpx.Client`, including FastAPI's
`TestClient`.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import httpx


class BoardAPIError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{status_code} {code}: {message}")


class BoardClient:

    def __init__(self, http: httpx.Client):
        self.http = http

    @classmethod
    def connect(cls, base_url: str, timeout: float = 10.0) -> "BoardClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self.http.close()

    def _call(self, method: str, url: str, **kwargs) -> Any:
        response = self.http.request(method, url, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error or not body.get("success", False):
            raise BoardAPIError(
                status_code=response.status_code,
                code=body.get("code", "HTTP_ERROR"),
                message=body.get("error", response.reason_phrase),
            )
        return body.get("data")

    # --- entries ---

    def list_entries(self, user: Optional[str] = None, entry_type: Optional[str] = None) -> list[dict]:
        params = {}
        if user:
            params["user"] = user
        if entry_type:
            params["type"] = entry_type
        return self._call("GET", "/entries", params=params)

    def get_entry(self, entry_id: str) -> dict:
        return self._call("GET", f"/entries/{entry_id}")

    def create_entry(
        self,
        user_name: str,
        entry_type: str,
        content: str,
        year: int,
        image_url: Optional[str] = None,
        locked_until: Optional[datetime] = None,
    ) -> dict:
        payload = {
            "userName": user_name,
            "type": entry_type,
            "content": content,
            "year": year,
            "imageUrl": image_url,
            "lockedUntil": locked_until.isoformat() if locked_until else None,
        }
        return self._call("POST", "/entries", json=payload)

    def update_entry(self, entry_id: str, user_name: str, **changes: Any) -> dict:
        """`changes` uses wire names: content, imageUrl, lockedUntil."""
        payload = {"userName": user_name}
        for name, value in changes.items():
            payload[name] = value.isoformat() if isinstance(value, datetime) else value
        return self._call("PUT", f"/entries/{entry_id}", json=payload)

    def delete_entry(self, entry_id: str, user_name: str) -> None:
        self._call("DELETE", f"/entries/{entry_id}", params={"userName": user_name})

    # --- reactions ---

    def react(self, entry_id: str, user_name: str, emoji: str) -> dict:
        payload = {"entryId": entry_id, "userName": user_name, "emoji": emoji}
        return self._call("POST", "/reactions", json=payload)

    def unreact(self, entry_id: str, user_name: str, emoji: str) -> None:
        params = {"entryId": entry_id, "userName": user_name, "emoji": emoji}
        self._call("DELETE", "/reactions", params=params)

    # --- comments ---

    def list_comments(self, entry_id: str) -> list[dict]:
        return self._call("GET", "/comments", params={"entryId": entry_id})

    def add_comment(self, entry_id: str, user_name: str, content: str) -> dict:
        payload = {"entryId": entry_id, "userName": user_name, "content": content}
        return self._call("POST", "/comments", json=payload)

    def delete_comment(self, comment_id: str, user_name: str) -> None:
        self._call("DELETE", "/comments", params={"id": comment_id, "userName": user_name})

    # --- uploads ---

    def upload(self, filename: str, data: bytes, content_type: str = "application/octet-stream") -> dict:
        files = {"file": (filename, data, content_type)}
        return self._call("POST", "/upload", files=files)
