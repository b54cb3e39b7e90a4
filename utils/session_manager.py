import threading
from typing import Optional, Tuple

import streamlit as st

from infrastructure.observability import set_user_context
from use_cases import auth_flow, bootstrap
from use_cases.bootstrap import AppRuntime
from use_cases.session_models import Screen, ScreenContext

"""
SESSION STATE CONTRACT

Each browser session owns one navigation runtime; nothing is shared
between sessions.

Keys in st.session_state:

runtime: AppRuntime | None
    auth service, observer, resolver and navigation machine of this session
    default: None
    owner: session_manager
    closed by reset_runtime(); a session that simply ends is left to garbage
    collection (the splash timer is a daemon, idle resolver workers exit
    once the executor is collected)

screen_feed: ScreenFeed
    latest (screen, context) pushed by the navigation machine
    default: ScreenFeed()
    owner: session_manager

startup_reason: str | None
    why startup stopped, shown by app.py
    default: None
    owner: session_manager

auth_message: str | None
    one-shot message for the auth screen (sign-in / reset feedback)
    default: None
    owner: views.auth_view
"""


class ScreenFeed:
    """
    Receives screen changes from the navigation machine's threads and hands
    them to the Streamlit script thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._changed = threading.Event()
        self._screen: Screen = "SPLASH"
        self._context = ScreenContext()

    def push(self, screen: Screen, context: ScreenContext) -> None:
        with self._lock:
            self._screen = screen
            self._context = context
        self._changed.set()

    def current(self) -> Tuple[Screen, ScreenContext]:
        with self._lock:
            return self._screen, self._context

    def wait_for_change(self, timeout: float) -> bool:
        changed = self._changed.wait(timeout)
        self._changed.clear()
        return changed


def init_session_state():
    if "runtime" not in st.session_state:
        st.session_state.runtime = None
    if "screen_feed" not in st.session_state:
        st.session_state.screen_feed = ScreenFeed()
    if "startup_reason" not in st.session_state:
        st.session_state.startup_reason = None
    if "auth_message" not in st.session_state:
        st.session_state.auth_message = None


def ensure_runtime() -> Optional[AppRuntime]:
    init_session_state()
    if st.session_state.runtime is not None:
        return st.session_state.runtime

    result = bootstrap.run_startup()
    if result.status == "STOP" or result.runtime is None:
        st.session_state.startup_reason = result.reason
        return None

    st.session_state.runtime = result.runtime
    st.session_state.startup_reason = None
    result.runtime.navigation.observe(st.session_state.screen_feed.push)
    return result.runtime


def current_screen() -> Tuple[Screen, ScreenContext]:
    return st.session_state.screen_feed.current()


def wait_for_screen_change(timeout: float = 0.5) -> bool:
    return st.session_state.screen_feed.wait_for_change(timeout)


def logout():
    runtime = st.session_state.get("runtime")
    if runtime is not None:
        auth_flow.sign_out(runtime.auth_service)
    set_user_context(None, None)
    st.rerun()


def reset_runtime():
    """Shut down this session's runtime so the next run builds a fresh one."""
    init_session_state()
    runtime = st.session_state.runtime
    st.session_state.runtime = None
    st.session_state.screen_feed = ScreenFeed()
    if runtime is not None:
        runtime.close()
