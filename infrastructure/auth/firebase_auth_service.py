"""
Firebase Authentication over the Identity Toolkit REST API.

Keeps the signed-in user for one client session in memory and notifies
registered listeners on every sign-in and sign-out.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

log = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

AuthStateListener = Callable[[Optional[str]], None]

# Identity Toolkit error codes -> user-facing messages
_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "Invalid email or password.",
    "INVALID_PASSWORD": "Invalid email or password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "INVALID_EMAIL": "Enter a valid email address.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Try again later.",
    "MISSING_EMAIL": "Enter your email address.",
}


class AuthServiceError(Exception):
    """Identity provider unreachable or misconfigured."""


class InvalidCredentialsError(Exception):
    pass


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str
    id_token: str
    refresh_token: str


def _error_code(payload: dict) -> str:
    err = payload.get("error", {}) if isinstance(payload, dict) else {}
    message = err.get("message", "") if isinstance(err, dict) else str(err)
    # Codes may carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled ..."
    return str(message).split(" ")[0].strip()


def describe_error(code: str) -> str:
    return _ERROR_MESSAGES.get(code, f"Authentication failed ({code or 'unknown error'}).")


class FirebaseAuthService:
    def __init__(self, api_key: str, timeout: float = 15.0, session: Optional[requests.Session] = None):
        if not api_key:
            raise AuthServiceError("Firebase Web API key is not configured")
        self._api_key = api_key
        self._timeout = timeout
        self._http = session or requests.Session()
        self._lock = threading.Lock()
        self._notify_lock = threading.RLock()
        self._user: Optional[AuthUser] = None
        self._listeners: Dict[int, AuthStateListener] = {}
        self._ids = itertools.count(1)

    # ---- AuthService contract -------------------------------------------

    def current_user_id(self) -> Optional[str]:
        with self._lock:
            return self._user.uid if self._user else None

    @property
    def current_user(self) -> Optional[AuthUser]:
        with self._lock:
            return self._user

    def add_state_listener(self, callback: AuthStateListener) -> int:
        with self._lock:
            handle = next(self._ids)
            self._listeners[handle] = callback
            return handle

    def remove_state_listener(self, handle: int) -> None:
        with self._lock:
            self._listeners.pop(handle, None)

    # ---- account operations ---------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        data = self._post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        user = AuthUser(
            uid=str(data.get("localId", "")).strip(),
            email=str(data.get("email", email)).strip().lower(),
            id_token=str(data.get("idToken", "")),
            refresh_token=str(data.get("refreshToken", "")),
        )
        if not user.uid:
            raise AuthServiceError("Identity Toolkit response did not include a user id")

        log.info(f"User {user.uid} signed in")
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        if self.current_user_id() is None:
            return
        log.info("User signed out")
        self._set_user(None)

    def send_password_reset(self, email: str) -> None:
        self._post("accounts:sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        log.info("Password reset email requested")

    def _set_user(self, user: Optional[AuthUser]) -> None:
        # _notify_lock keeps transitions and their delivery in the same order;
        # listeners run outside _lock so they may call back into the service.
        with self._notify_lock:
            with self._lock:
                previous = self._user.uid if self._user else None
                self._user = user
                listeners = list(self._listeners.values())
            uid = user.uid if user else None
            if uid == previous:
                return
            for listener in listeners:
                try:
                    listener(uid)
                except Exception:
                    log.exception("Auth state listener raised")

    def _post(self, method: str, payload: dict) -> dict:
        url = f"{IDENTITY_TOOLKIT_URL}/{method}"
        try:
            resp = self._http.post(url, params={"key": self._api_key}, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            log.error(f"Network error calling Identity Toolkit {method}: {e}")
            raise AuthServiceError(f"Network error: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.status_code == 200 and "error" not in data:
            return data

        code = _error_code(data)
        if resp.status_code == 400 and code in _ERROR_MESSAGES:
            raise InvalidCredentialsError(describe_error(code))
        log.error(f"Identity Toolkit {method} failed: HTTP {resp.status_code} {code}")
        raise AuthServiceError(describe_error(code))
