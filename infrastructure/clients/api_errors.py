import requests

from auth import RemoteUnavailableError

AUTH_FAILURE_CODES = (401, 403)


def error_message(resp: requests.Response, default: str) -> str:
    """Read the human-readable ``message`` field of an error payload."""
    try:
        body = resp.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return default


def json_body(resp: requests.Response, what: str):
    try:
        return resp.json()
    except ValueError as e:
        raise RemoteUnavailableError(f"{what}: response was not JSON") from e


def check_server_error(resp: requests.Response, what: str) -> None:
    if resp.status_code >= 500:
        raise RemoteUnavailableError(f"{what} failed: HTTP {resp.status_code}")
