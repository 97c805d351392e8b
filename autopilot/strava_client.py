from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import requests

from .config import Settings
from .storage import read_json, write_json


logger = logging.getLogger(__name__)

BASE_URL = "https://www.strava.com"
API_URL = f"{BASE_URL}/api/v3"
TOKEN_URL = f"{BASE_URL}/oauth/token"
TIMEOUT_SECONDS = 30


def _clean_token(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class StravaClient:
    """Thin Strava v3 client for the four calls the autopilot makes.

    Access and refresh tokens start from settings, are overridden by the
    token cache file when present, and are written back whenever a refresh
    hands out new ones.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.client_id = settings.strava_client_id
        self.client_secret = settings.strava_client_secret
        self.access_token = settings.strava_access_token
        self.refresh_token = settings.strava_refresh_token
        self.token_file = settings.strava_token_file
        self.session = session or requests.Session()
        self._adopt_tokens(read_json(self.token_file) or {})

    def _adopt_tokens(self, tokens: dict[str, Any]) -> bool:
        """Take over any usable tokens; True when the refresh token changed."""
        self.access_token = _clean_token(tokens.get("access_token")) or self.access_token
        refresh = _clean_token(tokens.get("refresh_token"))
        if refresh is None or refresh == self.refresh_token:
            return False
        self.refresh_token = refresh
        return True

    def refresh_access_token(self) -> str:
        grant = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "grant_type": "refresh_token",
        }
        response = self.session.post(TOKEN_URL, data=grant, timeout=TIMEOUT_SECONDS)
        response.raise_for_status()
        payload = response.json()
        if not _clean_token(payload.get("access_token")):
            raise RuntimeError("Strava token refresh succeeded without access_token.")
        if self._adopt_tokens(payload):
            logger.info("Strava refresh token rotated; updating token cache.")
        if self.refresh_token:
            write_json(self.token_file, {"access_token": self.access_token, "refresh_token": self.refresh_token})
        logger.info("Strava access token refreshed.")
        return self.access_token

    def _request(
        self, method: str, path: str, *, params: dict[str, Any] | None = None, data: dict[str, Any] | None = None
    ) -> requests.Response:
        """Authorized call with one refresh-and-retry on 401; other HTTP errors raise."""
        if not self.access_token:
            self.refresh_access_token()
        for attempt in (1, 2):
            response = self.session.request(
                method,
                f"{API_URL}{path}",
                headers={"Authorization": f"Bearer {self.access_token}"},
                params=params,
                data=data,
                timeout=TIMEOUT_SECONDS,
            )
            if response.status_code != 401 or attempt == 2:
                break
            logger.info("Strava rejected the access token for %s %s; refreshing.", method, path)
            self.refresh_access_token()
        response.raise_for_status()
        return response

    def list_activities(
        self,
        after: datetime,
        before: datetime | None = None,
        *,
        page: int = 1,
        per_page: int = 50,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "per_page": per_page,
            "page": page,
            "after": int(after.timestamp()),
        }
        if before is not None:
            params["before"] = int(before.timestamp())
        response = self._request("GET", "/athlete/activities", params=params)
        payload = response.json()
        if not isinstance(payload, list):
            return []
        return [item for item in payload if isinstance(item, dict)]

    def get_activity_details(self, activity_id: int) -> dict[str, Any]:
        response = self._request("GET", f"/activities/{activity_id}")
        return response.json()

    def get_activity_laps(self, activity_id: int) -> list[dict[str, Any]]:
        response = self._request("GET", f"/activities/{activity_id}/laps")
        payload = response.json()
        return payload if isinstance(payload, list) else []

    def update_activity(self, activity_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        data = {key: value for key, value in payload.items() if value is not None}
        response = self._request("PUT", f"/activities/{activity_id}", data=data)
        return response.json()
