import streamlit as st

from use_cases.rbac_policy import home_for
from use_cases.session_models import LoginFailure, LoginSuccess, NeedsSecondFactor
from utils import session_manager
from views import password_reset_view


def _on_signed_in(identity):
    session_manager.attach_sentry_user(identity)
    st.query_params["page"] = home_for(identity)
    st.rerun()


def _render_code_step(manager):
    st.info("Enter the 6-digit verification code we sent you.")
    with st.form("otp_form", clear_on_submit=True):
        code = st.text_input("Verification code", max_chars=6)
        submitted = st.form_submit_button("Verify")
        if submitted:
            result = manager.verify_second_factor(code)
            if isinstance(result, LoginSuccess):
                _on_signed_in(result.identity)
            elif isinstance(result, LoginFailure):
                st.error(result.message)

    if st.button("← Back to sign in"):
        manager.restart_login()
        st.rerun()


def _render_credentials_step(manager):
    with st.form("login_form", clear_on_submit=False):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")
        if submitted:
            result = manager.login(username, password)
            if isinstance(result, LoginSuccess):
                _on_signed_in(result.identity)
            elif isinstance(result, NeedsSecondFactor):
                st.rerun()
            else:
                st.error(result.message)


def render_auth_screen():
    manager = session_manager.get_auth_manager()
    session_manager.show_flash()

    st.title("🔐 Sign In To Your Account")
    tab_login, tab_forgot = st.tabs(["Sign in", "Forgotten password?"])

    with tab_login:
        if manager.state == "awaiting_second_factor":
            _render_code_step(manager)
        else:
            _render_credentials_step(manager)

    with tab_forgot:
        password_reset_view.render_forgot_password(manager)
