import pytest

from use_cases.session_models import (
    NavigationState,
    ScreenContext,
    SessionStatus,
    UserProfile,
    derive_screen,
    is_school_admin,
)


def test_is_school_admin() -> None:
    assert is_school_admin(UserProfile(role="school", active_school_id="s1")) is True
    assert is_school_admin(UserProfile(role="teacher")) is False
    assert is_school_admin(UserProfile.unspecified()) is False


def test_session_status_from_user_id() -> None:
    assert SessionStatus.from_user_id("u1") == SessionStatus.signed_in("u1")
    assert SessionStatus.from_user_id(None) == SessionStatus.signed_out()
    assert SessionStatus.from_user_id("") == SessionStatus.signed_out()
    with pytest.raises(ValueError):
        SessionStatus.signed_in("")


def test_derive_screen_splash_before_timer() -> None:
    state = NavigationState(
        session=SessionStatus.signed_in("u1"),
        profile=UserProfile(role="school"),
    )
    assert derive_screen(state) == "SPLASH"


@pytest.mark.parametrize(
    "role,expected",
    [
        ("school", "ADMIN_DASHBOARD"),
        ("teacher", "MAIN_APP"),
        ("sub", "MAIN_APP"),
        ("unspecified", "MAIN_APP"),
    ],
)
def test_derive_screen_role_mapping(role, expected) -> None:
    state = NavigationState(
        splash_elapsed=True,
        session=SessionStatus.signed_in("u1"),
        profile=UserProfile(role=role),
    )
    assert derive_screen(state) == expected


@pytest.mark.parametrize("session", [SessionStatus.unknown(), SessionStatus.signed_out()])
def test_derive_screen_auth_when_not_signed_in(session) -> None:
    assert derive_screen(NavigationState(splash_elapsed=True, session=session)) == "AUTH"


def test_derive_screen_pending_fetch_keeps_retained_screen() -> None:
    state = NavigationState(
        splash_elapsed=True,
        session=SessionStatus.signed_in("u1"),
        profile_fetch_in_flight=True,
    )
    assert derive_screen(state, retained="MAIN_APP") == "MAIN_APP"
    assert derive_screen(state) == "SPLASH"


def test_context_passes_profile_fields_through() -> None:
    state = NavigationState(
        splash_elapsed=True,
        session=SessionStatus.signed_in("u1"),
        profile=UserProfile(role="teacher", active_school_id="school-9"),
    )
    assert state.context == ScreenContext(user_id="u1", role="teacher", school_id="school-9")
    assert NavigationState().context == ScreenContext()
