"""Session and navigation DTOs shared across application layers."""

from dataclasses import dataclass
from typing import Literal, Optional

SessionKind = Literal["unknown", "signed_out", "signed_in"]
Role = Literal["school", "teacher", "sub", "unspecified"]
Screen = Literal["SPLASH", "AUTH", "ADMIN_DASHBOARD", "MAIN_APP"]

KNOWN_ROLES = ("school", "teacher", "sub")


@dataclass(frozen=True)
class SessionStatus:
    kind: SessionKind
    user_id: Optional[str] = None

    @classmethod
    def unknown(cls) -> "SessionStatus":
        return cls(kind="unknown")

    @classmethod
    def signed_out(cls) -> "SessionStatus":
        return cls(kind="signed_out")

    @classmethod
    def signed_in(cls, user_id: str) -> "SessionStatus":
        if not user_id:
            raise ValueError("signed_in status requires a user id")
        return cls(kind="signed_in", user_id=user_id)

    @classmethod
    def from_user_id(cls, user_id: Optional[str]) -> "SessionStatus":
        return cls.signed_in(user_id) if user_id else cls.signed_out()

    @property
    def is_signed_in(self) -> bool:
        return self.kind == "signed_in"


@dataclass(frozen=True)
class UserProfile:
    role: Role = "unspecified"
    active_school_id: Optional[str] = None

    @classmethod
    def unspecified(cls) -> "UserProfile":
        return cls()


@dataclass(frozen=True)
class ScreenContext:
    """Ancillary fields the presentation layer needs for the current screen."""

    user_id: Optional[str] = None
    role: Optional[Role] = None
    school_id: Optional[str] = None


@dataclass(frozen=True)
class NavigationState:
    screen: Screen = "SPLASH"
    splash_elapsed: bool = False
    session: SessionStatus = SessionStatus.unknown()
    profile: Optional[UserProfile] = None
    profile_fetch_in_flight: bool = False

    @property
    def context(self) -> ScreenContext:
        if not self.session.is_signed_in:
            return ScreenContext()
        if self.profile is None:
            return ScreenContext(user_id=self.session.user_id)
        return ScreenContext(
            user_id=self.session.user_id,
            role=self.profile.role,
            school_id=self.profile.active_school_id,
        )


def is_school_admin(profile: UserProfile) -> bool:
    return profile.role == "school"


def screen_for_profile(profile: UserProfile) -> Screen:
    return "ADMIN_DASHBOARD" if is_school_admin(profile) else "MAIN_APP"


def derive_screen(state: NavigationState, retained: Optional[Screen] = None) -> Screen:
    """
    Pure screen derivation.
    `retained` is the last screen resolved for the currently signed-in uid,
    shown while that uid's profile is being re-fetched.
    """
    if not state.splash_elapsed:
        return "SPLASH"
    if not state.session.is_signed_in:
        return "AUTH"
    if state.profile_fetch_in_flight:
        return retained or "SPLASH"
    return screen_for_profile(state.profile or UserProfile.unspecified())
