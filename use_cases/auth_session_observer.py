"""Multiplexed view over the external authentication service's sign-in state."""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from use_cases.session_models import SessionStatus

log = logging.getLogger(__name__)

StatusListener = Callable[[SessionStatus], None]


class AuthSubscriptionError(Exception):
    """The upstream auth listener could not be established."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Failed to subscribe to auth state changes: {cause}")
        self.cause = cause


class AuthService(Protocol):
    def current_user_id(self) -> Optional[str]: ...

    def add_state_listener(self, callback: Callable[[Optional[str]], None]) -> Any: ...

    def remove_state_listener(self, handle: Any) -> None: ...


@dataclass(frozen=True)
class SubscriptionHandle:
    id: int


class AuthSessionObserver:
    """
    Wraps one AuthService and fans its sign-in/sign-out events out to any number
    of local listeners over a single upstream subscription.
    """

    def __init__(self, auth_service: AuthService):
        self._auth = auth_service
        self._lock = threading.RLock()
        self._listeners: Dict[int, StatusListener] = {}
        self._ids = itertools.count(1)
        self._upstream_handle: Any = None
        self._upstream_open = False
        self._status = SessionStatus.unknown()

    def current_status(self) -> SessionStatus:
        with self._lock:
            if not self._upstream_open:
                return SessionStatus.from_user_id(self._auth.current_user_id())
            return self._status

    def subscribe(self, on_change: StatusListener) -> SubscriptionHandle:
        with self._lock:
            if not self._upstream_open:
                self._open_upstream()
            handle = SubscriptionHandle(next(self._ids))
            self._listeners[handle.id] = on_change
            status = self._status
            # Replay under the lock so an upstream event cannot overtake it.
            self._deliver(handle.id, on_change, status)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        with self._lock:
            if self._listeners.pop(handle.id, None) is None:
                log.warning(f"Auth subscription {handle.id} already released")
                return
            if not self._listeners:
                self._close_upstream()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _open_upstream(self) -> None:
        # Listener first, then the seed read: a sign-in landing in between is
        # seen by the read and its event is dropped as a duplicate.
        try:
            self._upstream_handle = self._auth.add_state_listener(self._on_upstream_change)
        except Exception as e:
            self._upstream_handle = None
            self._status = SessionStatus.unknown()
            raise AuthSubscriptionError(e) from e
        try:
            self._status = SessionStatus.from_user_id(self._auth.current_user_id())
        except Exception as e:
            self._close_upstream()
            raise AuthSubscriptionError(e) from e
        self._upstream_open = True
        log.debug(f"Auth upstream listener opened (initial status: {self._status.kind})")

    def _close_upstream(self) -> None:
        handle, self._upstream_handle = self._upstream_handle, None
        self._upstream_open = False
        self._status = SessionStatus.unknown()
        try:
            self._auth.remove_state_listener(handle)
        except Exception as e:
            log.error(f"Failed to release auth upstream listener: {e}", exc_info=True)

    def _on_upstream_change(self, user_id: Optional[str]) -> None:
        status = SessionStatus.from_user_id(user_id)
        with self._lock:
            # Services that fire during add_state_listener are covered by the seed read.
            if not self._upstream_open or status == self._status:
                return
            self._status = status
            for listener_id, listener in list(self._listeners.items()):
                if listener_id in self._listeners:
                    self._deliver(listener_id, listener, status)

    def _deliver(self, listener_id: int, listener: StatusListener, status: SessionStatus) -> None:
        try:
            listener(status)
        except Exception:
            log.exception(f"Auth listener {listener_id} raised while handling {status.kind}")
