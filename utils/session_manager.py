import uuid
from urllib.parse import unquote

import sentry_sdk
import streamlit as st
import streamlit.components.v1 as components

import auth
from use_cases.auth_flow import AuthSessionManager
from use_cases.inventory_flow import LoadTracker

"""
SESSION STATE CONTRACT

Streamlit session state for the portal. Only AuthSessionManager writes the
durable identity; everything below is per-browser-tab memory.

auth_manager: AuthSessionManager | None
    login state machine for this browser
    default: None (created by get_auth_manager)
    owner: session_manager

device_key: str | None
    key of this browser's row in the durable session store (cookie-backed)
    default: None
    owner: session_manager

inventory_tracker: LoadTracker
    liveness guard for stock/video loads
    default: LoadTracker()
    owner: stock_view

stock_search: str, stock_filter: str, stock_page: int
    stock table controls
    default: "", "All", 1
    owner: stock_view

flash: tuple[str, str] | None
    one-shot (level, message) shown on the next render
    default: None
    owner: views
"""

DEVICE_COOKIE = "portal_device"
DEVICE_COOKIE_MAX_AGE = 2592000  # 30 days


def init_session_state():
    if "auth_manager" not in st.session_state:
        st.session_state.auth_manager = None
    if "device_key" not in st.session_state:
        st.session_state.device_key = None
    if "inventory_tracker" not in st.session_state:
        st.session_state.inventory_tracker = LoadTracker()
    if "stock_search" not in st.session_state:
        st.session_state.stock_search = ""
    if "stock_filter" not in st.session_state:
        st.session_state.stock_filter = "All"
    if "stock_page" not in st.session_state:
        st.session_state.stock_page = 1
    if "flash" not in st.session_state:
        st.session_state.flash = None


def _persist_device_cookie(device_key: str):
    components.html(
        f"""
        <script>
            var cookieStr = "{DEVICE_COOKIE}=" + encodeURIComponent("{device_key}") + "; path=/; max-age={DEVICE_COOKIE_MAX_AGE}; SameSite=Lax";
            document.cookie = cookieStr;
            try {{
                window.parent.document.cookie = cookieStr;
            }} catch (e) {{
                console.log("Cross-origin frame block, normal behavior if different origin");
            }}
        </script>
        """,
        height=0,
    )


def resolve_device_key() -> str:
    if st.session_state.get("device_key"):
        return st.session_state.device_key
    try:
        from_cookie = st.context.cookies.get(DEVICE_COOKIE)
    except Exception:
        # Headless runs (tests, bare imports) have no request context.
        from_cookie = None

    if from_cookie:
        device_key = unquote(from_cookie)
    else:
        device_key = uuid.uuid4().hex
        _persist_device_cookie(device_key)
    st.session_state.device_key = device_key
    return device_key


def get_auth_manager() -> AuthSessionManager:
    manager = st.session_state.get("auth_manager")
    if manager is None:
        store = auth.get_session_store(resolve_device_key())
        manager = AuthSessionManager(auth.get_auth_client(), store)
        st.session_state.auth_manager = manager
    return manager


def attach_sentry_user(identity):
    if identity is None:
        sentry_sdk.set_user(None)
        return
    sentry_sdk.set_user({"id": identity.subject_id, "role": identity.role, "username": identity.username})


def flash(level: str, message: str):
    st.session_state.flash = (level, message)


def show_flash():
    pending = st.session_state.get("flash")
    if not pending:
        return
    st.session_state.flash = None
    level, message = pending
    getattr(st, level, st.info)(message)


def logout():
    manager = get_auth_manager()
    manager.logout()
    st.session_state.inventory_tracker.invalidate()
    attach_sentry_user(None)
    st.rerun()


def expire_session():
    """Called when the API rejects the bearer credential mid-view."""
    manager = get_auth_manager()
    manager.handle_session_expired()
    st.session_state.inventory_tracker.invalidate()
    attach_sentry_user(None)
    flash("warning", auth.SessionExpiredError.default_message)
    st.rerun()
