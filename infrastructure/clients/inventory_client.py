import logging
from typing import Any, Dict, List

import requests

from auth import RemoteUnavailableError, SessionExpiredError
from infrastructure.clients.api_errors import AUTH_FAILURE_CODES, check_server_error, json_body

log = logging.getLogger(__name__)


class InventoryClient:
    """Reads the synced stock feed and the video catalog.

    Callers pass the bearer credential explicitly; nothing is looked up from
    ambient session state here.
    """

    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, token: str, what: str):
        headers = {"Authorization": f"Bearer {token}"}
        try:
            resp = requests.get(f"{self.base_url}{path}", headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteUnavailableError(f"{what}: {e}") from e
        if resp.status_code in AUTH_FAILURE_CODES:
            raise SessionExpiredError()
        check_server_error(resp, what)
        if resp.status_code != 200:
            raise RemoteUnavailableError(f"{what} failed: HTTP {resp.status_code}")
        return json_body(resp, what)

    def fetch_stock(self, token: str) -> Dict[str, Any]:
        data = self._get("/autotrader/stock", token, "stock fetch")
        if not isinstance(data, dict):
            raise RemoteUnavailableError("stock fetch: unexpected payload shape")
        log.info(f"✅ Stock fetched: {len(data.get('results') or [])} vehicles (sync: {data.get('syncStatus')})")
        return data

    def fetch_videos(self, token: str) -> List[Dict[str, Any]]:
        data = self._get("/videos", token, "video fetch")
        if not isinstance(data, list):
            raise RemoteUnavailableError("video fetch: unexpected payload shape")
        log.info(f"✅ Videos fetched: {len(data)} records")
        return data
