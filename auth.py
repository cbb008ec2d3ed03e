import os
import re
from dataclasses import dataclass
from typing import Optional

import streamlit as st

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_BASE_URL = "http://localhost:8501"
DEFAULT_SESSION_DB = "portal_session.db"
MIN_PASSWORD_LENGTH = 6
OTP_CODE_LENGTH = 6
OTP_CODE_RE = re.compile(r"^\d{%d}$" % OTP_CODE_LENGTH)


class PortalError(Exception):
    """Base class for every failure surfaced to the portal views."""

    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentialsError(PortalError):
    default_message = "Invalid credentials"


class SessionExpiredError(PortalError):
    default_message = "Your session has expired. Please sign in again."


class ValidationError(PortalError):
    default_message = "Invalid input"


class RemoteUnavailableError(PortalError):
    default_message = "The service is unavailable. Please try again later."


class RemoteRequestError(PortalError):
    default_message = "Request failed"


class InvalidStateError(PortalError):
    default_message = "Operation not allowed in the current session state"


def get_secret(key, default=None):
    try:
        value = st.secrets.get(key)
    except FileNotFoundError:
        value = None
    if value is None:
        value = os.getenv(key)
    return value if value is not None else default


@dataclass(frozen=True)
class PortalConfig:
    api_url: str
    base_url: str
    session_db: str
    http_timeout: float
    stock_page_size: int


def load_portal_config() -> PortalConfig:
    return PortalConfig(
        api_url=str(get_secret("PORTAL_API_URL", DEFAULT_API_URL)).rstrip("/"),
        base_url=str(get_secret("PORTAL_BASE_URL", DEFAULT_BASE_URL)).rstrip("/"),
        session_db=str(get_secret("SESSION_DB", DEFAULT_SESSION_DB)),
        http_timeout=float(get_secret("HTTP_TIMEOUT", 10)),
        stock_page_size=int(get_secret("STOCK_PAGE_SIZE", 10)),
    )


# --- LOCAL VALIDATION (runs before any network call) ---

def validate_login_input(username, password):
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("Username is required.")
    if not isinstance(password, str) or not password:
        raise ValidationError("Password is required.")
    return username.strip(), password


def validate_otp_code(code) -> str:
    code = (code or "").strip()
    if not OTP_CODE_RE.match(code):
        raise ValidationError(f"Enter the {OTP_CODE_LENGTH}-digit code.")
    return code


def validate_new_password(password, confirm_password):
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def validate_email(email) -> str:
    email = (email or "").strip()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Enter a valid email address.")
    return email


# --- CLIENT FACTORIES ---

_auth_client = None
_inventory_client = None


def get_auth_client():
    from infrastructure.clients.auth_api_client import AuthApiClient

    global _auth_client
    config = load_portal_config()
    if _auth_client is None or _auth_client.base_url != config.api_url:
        _auth_client = AuthApiClient(config.api_url, timeout=config.http_timeout)
    return _auth_client


def get_inventory_client():
    from infrastructure.clients.inventory_client import InventoryClient

    global _inventory_client
    config = load_portal_config()
    if _inventory_client is None or _inventory_client.base_url != config.api_url:
        _inventory_client = InventoryClient(config.api_url, timeout=config.http_timeout)
    return _inventory_client


def get_session_store(key: str):
    from infrastructure.repositories.sqlite_session_store import SQLiteSessionStore

    store = SQLiteSessionStore(load_portal_config().session_db, key=key)
    store.init_db()
    return store
