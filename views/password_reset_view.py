import streamlit as st

import auth
from utils import session_manager


def render_forgot_password(manager):
    st.caption("Enter your email address and we'll send you a link to reset your password.")
    with st.form("forgot_password_form", clear_on_submit=True):
        email = st.text_input("Email Address", placeholder="name@example.com")
        submitted = st.form_submit_button("Send Reset Link")
        if submitted:
            try:
                st.success(manager.request_password_reset(email))
            except auth.PortalError as e:
                st.error(e.message)


def render_reset_password(manager, reset_token: str):
    st.title("Reset Password")
    st.caption("Create a new strong password for your account.")
    with st.form("reset_password_form", clear_on_submit=True):
        password = st.text_input("New Password", type="password")
        confirm = st.text_input("Confirm Password", type="password")
        submitted = st.form_submit_button("Set New Password")
        if submitted:
            try:
                message = manager.reset_password(reset_token, password, confirm)
            except auth.PortalError as e:
                st.error(e.message)
                return
            session_manager.flash("success", message)
            st.query_params.clear()
            st.rerun()
