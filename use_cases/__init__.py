"""Application layer contracts for orchestrating high-level flows."""

from .auth_flow import AuthFlowResult, AuthFlowStatus, request_password_reset, sign_in, sign_out
from .auth_session_observer import AuthSessionObserver, AuthSubscriptionError, SubscriptionHandle
from .bootstrap import AppRuntime, StartupResult, StartupStatus, run_startup
from .navigation import AppNavigationStateMachine
from .profile_resolver import ProfileResolver, ResolveError
from .session_models import (
    NavigationState,
    Role,
    Screen,
    ScreenContext,
    SessionStatus,
    UserProfile,
    derive_screen,
    is_school_admin,
)

__all__ = [
    "AppNavigationStateMachine",
    "AppRuntime",
    "AuthFlowResult",
    "AuthFlowStatus",
    "AuthSessionObserver",
    "AuthSubscriptionError",
    "NavigationState",
    "ProfileResolver",
    "ResolveError",
    "Role",
    "Screen",
    "ScreenContext",
    "SessionStatus",
    "StartupResult",
    "StartupStatus",
    "SubscriptionHandle",
    "UserProfile",
    "derive_screen",
    "is_school_admin",
    "request_password_reset",
    "run_startup",
    "sign_in",
    "sign_out",
]
