import streamlit as st

from infrastructure.config import load_settings
from infrastructure.observability import set_user_context, setup_observability


@st.cache_resource
def _init_observability() -> bool:
    settings = load_settings()
    return setup_observability(settings.log_level, settings.sentry_dsn, settings.sentry_env)


_init_observability()

from utils import session_manager  # noqa: E402
from views import admin_dashboard_view, auth_view, main_app_view, splash_view  # noqa: E402

# --- PAGE SETTINGS ---
st.set_page_config(page_title="EZTeach", layout="centered")

# --- STARTUP ORCHESTRATION ---
runtime = session_manager.ensure_runtime()
if runtime is None:
    st.error(f"🚨 EZTeach could not start ({st.session_state.startup_reason}). Check the Firebase settings.")
    if st.button("Retry"):
        session_manager.reset_runtime()
        st.rerun()
    st.stop()

# --- NAVIGATION ---
screen, context = session_manager.current_screen()

if screen == "SPLASH":
    splash_view.render_splash()
    # Poll until the navigation machine publishes the next screen
    session_manager.wait_for_screen_change(timeout=0.5)
    st.rerun()

if screen == "AUTH":
    auth_view.render_auth_screen(runtime.auth_service)
    st.stop()

set_user_context(context.user_id, context.role)

if screen == "ADMIN_DASHBOARD":
    admin_dashboard_view.render_admin_dashboard(context)
else:
    main_app_view.render_main_app(context)
