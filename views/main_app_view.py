import streamlit as st

from use_cases.session_models import ScreenContext
from utils import session_manager

ROLE_TITLES = {
    "teacher": "Teacher",
    "sub": "Substitute",
    "unspecified": "Member",
}


def render_main_app(context: ScreenContext):
    title = ROLE_TITLES.get(context.role or "unspecified", "Member")
    st.title(f"EZTeach: {title}")

    with st.sidebar:
        if st.button("Sign Out", key="logout_btn", type="secondary"):
            session_manager.logout()

    if context.school_id:
        st.caption(f"Active school: {context.school_id}")
    else:
        # Teachers and subs join a school by code after signing up
        st.info("You have not joined a school yet. Ask your school office for its school code.")

    if context.role == "unspecified":
        st.warning("Your account role could not be determined. Some features may be unavailable.")
