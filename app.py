import streamlit as st
from datetime import datetime

from infrastructure.observability import setup_observability
setup_observability()

from use_cases import auth_flow, bootstrap
from use_cases.rbac_policy import home_for
from utils import session_manager
from views import login_view, password_reset_view, settings_view, stock_view

# --- PAGE SETUP ---
st.set_page_config(page_title="Dealer Portal", layout="wide", initial_sidebar_state="expanded")

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "uptime": datetime.utcnow().isoformat()})
    st.stop()

# page -> (required role, label, renderer)
ROUTES = {
    "admin": ("admin", "🏢 Admin stock", lambda m: stock_view.render_stock_page(m, admin=True)),
    "staff": ("staff", "🚗 Stock", lambda m: stock_view.render_stock_page(m, admin=False)),
    "settings": ("staff", "⚙️ Settings", settings_view.render_settings_page),
}

# --- STARTUP ORCHESTRATION ---
startup_result = bootstrap.run_startup()
if startup_result.status == "STOP":
    st.stop()

manager = session_manager.get_auth_manager()

# --- PUBLIC: PASSWORD RESET LINK ---
reset_token = st.query_params.get("reset_token")
if reset_token:
    password_reset_view.render_reset_password(manager, reset_token)
    st.stop()

# --- ACCESS GUARD (re-evaluated on every rerun) ---
page = st.query_params.get("page") or home_for(manager.identity)
if page not in ROUTES:
    page = home_for(manager.identity)
required_role, _, render_page = ROUTES[page]


def render_main_interface(manager):
    identity = manager.identity
    with st.sidebar:
        st.subheader(f"👋 {identity.display_name}")
        st.caption(identity.role.title())
        for key, (role, label, _) in ROUTES.items():
            if manager.guard(role).allowed and st.button(label, key=f"nav_{key}", use_container_width=True):
                st.query_params["page"] = key
                st.rerun()
        if st.button("Log out", key="nav_logout", use_container_width=True):
            session_manager.logout()

    render_page(manager)


auth_result = auth_flow.ensure_authenticated_session(manager, required_role)
# st.stop() may not halt headless/bare imports, so the branches stay exclusive.
if auth_result.status == "STOP":
    if auth_result.reason == "session_loading":
        st.write("Loading...")
    else:
        login_view.render_auth_screen()
    st.stop()
else:
    render_main_interface(manager)
