import streamlit as st

from use_cases.session_models import ScreenContext
from utils import session_manager

ADMIN_SECTIONS = ("Manage Teachers", "Manage Classes", "Manage Students", "School Settings")


def render_admin_dashboard(context: ScreenContext):
    st.title("Admin Dashboard")
    if context.school_id:
        st.caption(f"School: {context.school_id}")
    else:
        st.warning("No active school is linked to this account yet.")

    st.divider()
    tabs = st.tabs(list(ADMIN_SECTIONS))
    for tab, section in zip(tabs, ADMIN_SECTIONS):
        with tab:
            st.info(f"{section} is managed in the EZTeach mobile app.")

    st.divider()
    if st.button("Sign Out", key="admin_logout_btn", type="secondary"):
        session_manager.logout()
