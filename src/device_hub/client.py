"""
DeviceHubClient SDK: sync client for the Device Hub API.

Used by dashboards, scripts and gateways to register devices, switch them
on and off, and read their status and history.
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import httpx


@dataclass
class ClientDevice:
    """Device info returned by the SDK."""

    enroll_id: str
    name: str
    power_state: bool
    value: Optional[datetime] = None


@dataclass
class ClientLogEntry:
    action: str
    timestamp: Optional[datetime] = None
    username: Optional[str] = None


class DeviceHubError(Exception):
    """Raised when the server returns an error or cannot be reached."""

    def __init__(self, message: str, code: str = "CLIENT_ERROR", status_code: int | None = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class DeviceHubClient:
    """Synchronous HTTP client for Device Hub."""

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        token: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
    ):
        self.server_url = server_url.rstrip("/")
        self.token = token
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
        )

    def _auth_headers(self) -> dict[str, str]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Central HTTP method with retry.

        Retries on timeouts, transport errors, 5xx and 429. Other 4xx
        responses raise immediately with the server's error code.
        """
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = getattr(self._http, method)(path, headers=self._auth_headers(), **kwargs)
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
                break

            if resp.status_code >= 500 or resp.status_code == 429:
                last_error = f"HTTP {resp.status_code}"
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
                raise DeviceHubError(
                    f"Server error: {resp.status_code}", code="SERVER_ERROR",
                    status_code=resp.status_code,
                )

            try:
                data = resp.json()
            except json.JSONDecodeError:
                raise DeviceHubError("Invalid JSON response", code="JSON_ERROR", status_code=resp.status_code)

            if resp.status_code >= 400:
                raise DeviceHubError(
                    data.get("error", f"Client error: {resp.status_code}"),
                    code=data.get("code", "CLIENT_ERROR"),
                    status_code=resp.status_code,
                )
            return data

        raise DeviceHubError(
            f"All {self.max_retries} retries exhausted: {last_error}", code="CONNECTION_ERROR",
        )

    @staticmethod
    def _parse_time(raw: Any) -> Optional[datetime]:
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except (ValueError, TypeError):
            return None

    @classmethod
    def _parse_device(cls, data: dict) -> ClientDevice:
        return ClientDevice(
            enroll_id=data.get("enroll_id", ""),
            name=data.get("name", ""),
            power_state=bool(data.get("power_state", False)),
            value=cls._parse_time(data.get("value")),
        )

    # ── Accounts ──

    def signup(self, username: str, email: str, password: str) -> dict[str, Any]:
        return self._request("post", "/user/signup", json={
            "username": username, "email": email, "password": password,
        })

    def login(self, email: str, password: str) -> str:
        """Log in and keep the returned token for subsequent calls."""
        data = self._request("post", "/user/login", json={"email": email, "password": password})
        self.token = data["token"]
        return self.token

    # ── Devices ──

    def register(self, enroll_id: str, name: str, value: str) -> ClientDevice:
        data = self._request("post", "/device/register", json={
            "enrollId": enroll_id, "name": name, "value": value,
        })
        return self._parse_device(data)

    def turn_on(self, enroll_id: str) -> ClientDevice:
        return self._parse_device(
            self._request("post", "/device/turn-on", json={"enrollId": enroll_id})
        )

    def turn_off(self, enroll_id: str) -> ClientDevice:
        return self._parse_device(
            self._request("post", "/device/turn-off", json={"enrollId": enroll_id})
        )

    def status(self, enroll_id: str) -> ClientDevice:
        data = self._request("get", f"/device/status/{enroll_id}")
        return self._parse_device({**data, "enroll_id": data.get("enroll_id", enroll_id)})

    def logs(self, enroll_id: str, limit: int = 50) -> list[ClientLogEntry]:
        data = self._request("get", f"/device/logs/{enroll_id}", params={"limit": limit})
        return [
            ClientLogEntry(
                action=e.get("action", ""),
                timestamp=self._parse_time(e.get("timestamp")),
                username=e.get("username"),
            )
            for e in data.get("entries", [])
        ]

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
