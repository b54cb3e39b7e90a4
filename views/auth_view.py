import streamlit as st

from infrastructure.auth.firebase_auth_service import FirebaseAuthService
from use_cases import auth_flow


def render_auth_screen(service: FirebaseAuthService):
    st.title("🔐 Sign in to EZTeach")

    if st.session_state.get("auth_message"):
        st.info(st.session_state.auth_message)
        st.session_state.auth_message = None

    tab_login, tab_reset = st.tabs(["Sign In", "Forgot Password"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In")
            if submitted:
                result = auth_flow.sign_in(service, email, password)
                if result.status == "CONTINUE":
                    # The navigation machine swaps the screen once the profile resolves
                    st.rerun()
                else:
                    st.error(result.message)

    with tab_reset:
        with st.form("reset_form", clear_on_submit=True):
            reset_email = st.text_input("Email")
            submitted = st.form_submit_button("Send Reset Link")
            if submitted:
                result = auth_flow.request_password_reset(service, reset_email)
                if result.status == "CONTINUE":
                    st.success(result.message)
                else:
                    st.error(result.message)
