import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from auth import (
    InvalidCredentialsError,
    RemoteRequestError,
    RemoteUnavailableError,
    SessionExpiredError,
)
from infrastructure.clients.api_errors import AUTH_FAILURE_CODES, check_server_error, error_message, json_body

log = logging.getLogger(__name__)

# Status codes the auth service uses to reject a login or a one-time code.
REJECTION_CODES = (400, 401, 403, 404, 423, 429)


class AuthApiClient:
    """Stateless wrapper around the remote authentication API."""

    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _send(self, method: str, path: str, what: str, token: Optional[str] = None, **kwargs) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            resp = requests.request(method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.error(f"❌ Network error during {what}: {e}")
            raise RemoteUnavailableError() from e
        check_server_error(resp, what)
        return resp

    def login(self, username: str, password: str) -> Dict[str, Any]:
        resp = self._send("POST", "/auth/login", "login", json={"username": username, "password": password})
        if resp.status_code in REJECTION_CODES:
            raise InvalidCredentialsError(error_message(resp, InvalidCredentialsError.default_message))
        return json_body(resp, "login")

    def verify_two_factor(self, user_id: str, code: str) -> Dict[str, Any]:
        resp = self._send("POST", "/auth/verify-2fa", "2FA verification", json={"userId": user_id, "code": code})
        if resp.status_code in REJECTION_CODES:
            raise InvalidCredentialsError(error_message(resp, "Invalid or expired code"))
        return json_body(resp, "2FA verification")

    def update_profile(
        self,
        token: str,
        current_password: str,
        username: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {"currentPassword": current_password}
        if username:
            payload["username"] = username
        if new_password:
            payload["password"] = new_password
        resp = self._send("PUT", "/auth/profile", "profile update", token=token, json=payload)
        if resp.status_code in AUTH_FAILURE_CODES:
            raise SessionExpiredError()
        if resp.status_code >= 400:
            raise RemoteRequestError(error_message(resp, "Update failed"))
        return json_body(resp, "profile update")

    def forgot_password(self, email: str) -> Dict[str, Any]:
        resp = self._send("POST", "/auth/forgot-password", "password reset request", json={"email": email})
        if resp.status_code >= 400:
            raise RemoteRequestError(error_message(resp, "Failed to send email. Please try again."))
        return json_body(resp, "password reset request") if resp.content else {}

    def reset_password(self, reset_token: str, password: str) -> Dict[str, Any]:
        path = f"/auth/reset-password/{quote(reset_token, safe='')}"
        resp = self._send("PUT", path, "password reset", json={"password": password})
        if resp.status_code >= 400:
            raise RemoteRequestError(error_message(resp, "Invalid or expired token."))
        return json_body(resp, "password reset") if resp.content else {}
