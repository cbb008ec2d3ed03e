import streamlit as st

import auth
from utils import session_manager


def render_settings_page(manager):
    identity = manager.identity
    st.header("⚙️ Settings")
    st.write(f"**Username:** {identity.username}")
    st.write(f"**Role:** {identity.role}")
    if identity.email:
        st.write(f"**Email:** {identity.email}")

    session_manager.show_flash()
    with st.form("profile_form", clear_on_submit=True):
        username = st.text_input("New username (optional)")
        current_password = st.text_input("Current password *", type="password")
        new_password = st.text_input("New password (optional)", type="password")
        confirm_password = st.text_input("Confirm new password", type="password")
        submitted = st.form_submit_button("Save changes")
        if submitted:
            try:
                manager.update_profile(
                    current_password,
                    username=username,
                    new_password=new_password,
                    confirm_password=confirm_password,
                )
            except auth.SessionExpiredError:
                session_manager.expire_session()
                return
            except auth.PortalError as e:
                st.error(e.message)
                return
            session_manager.flash("success", "Profile updated successfully!")
            st.rerun()

    if st.button("Log out", type="secondary"):
        session_manager.logout()
