"""
Navigation state machine.

Combines the splash timer, the auth session stream and profile lookups into a
single authoritative screen. Every event source enters the same lock before
touching NavigationState, so timer, auth and resolver threads are serialized.
"""

import itertools
import logging
import threading
from concurrent.futures import Future
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from infrastructure.observability import ErrorSink
from use_cases.auth_session_observer import (
    AuthSessionObserver,
    AuthSubscriptionError,
    SubscriptionHandle,
)
from use_cases.profile_resolver import ResolveError
from use_cases.session_models import (
    NavigationState,
    Screen,
    ScreenContext,
    SessionStatus,
    UserProfile,
    derive_screen,
)

log = logging.getLogger(__name__)

DEFAULT_SPLASH_DELAY_SECONDS = 1.7

ScreenListener = Callable[[Screen, ScreenContext], None]


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


class Resolver(Protocol):
    def resolve(self, user_id: str) -> "Future[UserProfile]": ...


def _daemon_timer(delay: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class AppNavigationStateMachine:
    def __init__(
        self,
        auth_observer: AuthSessionObserver,
        profile_resolver: Resolver,
        *,
        splash_delay: float = DEFAULT_SPLASH_DELAY_SECONDS,
        timer_factory: TimerFactory = _daemon_timer,
        error_sink: Optional[ErrorSink] = None,
    ):
        self._auth_observer = auth_observer
        self._resolver = profile_resolver
        self._splash_delay = splash_delay
        self._timer_factory = timer_factory
        self._error_sink = error_sink

        self._lock = threading.RLock()
        self._state = NavigationState()
        self._observers: Dict[int, ScreenListener] = {}
        self._observer_ids = itertools.count(1)
        self._last_published: Tuple[Screen, ScreenContext] = (self._state.screen, self._state.context)

        # (uid, generation) of the only fetch whose result may still be applied
        self._fetch_tag: Optional[Tuple[str, int]] = None
        self._fetch_generation = itertools.count(1)
        # Last screen and context resolved from a profile, keyed by the uid they were resolved for
        self._resolved: Optional[Tuple[str, Screen, ScreenContext]] = None

        self._auth_handle: Optional[SubscriptionHandle] = None
        self._timer: Optional[Timer] = None
        self._started = False
        self._closed = False

    # ---- public contract -------------------------------------------------

    def start(self) -> None:
        with self._lock:
            if self._started or self._closed:
                log.warning("Navigation state machine already started or shut down")
                return
            self._started = True

        # Subscribed outside our lock: the observer delivers while holding its own.
        try:
            auth_handle = self._auth_observer.subscribe(self._on_auth_change)
        except AuthSubscriptionError as e:
            log.error(f"Navigation halted on splash: {e}")
            self._report(e, stage="auth_subscribe")
            return

        with self._lock:
            if self._closed:
                release = True
            else:
                release = False
                self._auth_handle = auth_handle
                self._timer = self._timer_factory(self._splash_delay, self._on_splash_elapsed)
                self._timer.start()
        if release:
            self._auth_observer.unsubscribe(auth_handle)

    def observe(self, on_screen_change: ScreenListener) -> SubscriptionHandle:
        with self._lock:
            handle = SubscriptionHandle(next(self._observer_ids))
            if self._closed:
                return handle
            self._observers[handle.id] = on_screen_change
            self._notify(handle.id, on_screen_change, *self._last_published)
            return handle

    def unobserve(self, handle: SubscriptionHandle) -> None:
        with self._lock:
            self._observers.pop(handle.id, None)

    def snapshot(self) -> NavigationState:
        with self._lock:
            return self._state

    @property
    def screen(self) -> Screen:
        return self.snapshot().screen

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._observers.clear()
            self._fetch_tag = None
            timer, self._timer = self._timer, None
            auth_handle, self._auth_handle = self._auth_handle, None

        if timer is not None:
            timer.cancel()
        # Released outside our lock: the observer delivers while holding its own.
        if auth_handle is not None:
            self._auth_observer.unsubscribe(auth_handle)
        log.debug("Navigation state machine shut down")

    # ---- event sources ---------------------------------------------------

    def _on_splash_elapsed(self) -> None:
        with self._lock:
            if self._closed or self._state.splash_elapsed:
                return
            self._apply(splash_elapsed=True)

    def _on_auth_change(self, status: SessionStatus) -> None:
        with self._lock:
            if self._closed:
                return

            if not status.is_signed_in:
                self._fetch_tag = None
                self._apply(session=status, profile=None, profile_fetch_in_flight=False)
                return

            uid = status.user_id
            tag = (uid, next(self._fetch_generation))
            self._fetch_tag = tag
            self._apply(session=status, profile=None, profile_fetch_in_flight=True)
            log.debug(f"Resolving profile for user {uid} (fetch #{tag[1]})")

        try:
            future = self._resolver.resolve(uid)
        except Exception as e:
            self._on_profile_failed(tag, ResolveError(uid, e))
            return
        future.add_done_callback(lambda f: self._on_profile_done(tag, f))

    def _on_profile_done(self, tag: Tuple[str, int], future: "Future[UserProfile]") -> None:
        try:
            profile = future.result()
        except ResolveError as e:
            self._on_profile_failed(tag, e)
            return
        except Exception as e:
            self._on_profile_failed(tag, ResolveError(tag[0], e))
            return

        with self._lock:
            if not self._accepts(tag):
                log.debug(f"Discarding stale profile for user {tag[0]} (fetch #{tag[1]})")
                return
            self._fetch_tag = None
            self._apply(profile=profile, profile_fetch_in_flight=False)

    def _on_profile_failed(self, tag: Tuple[str, int], error: ResolveError) -> None:
        with self._lock:
            if not self._accepts(tag):
                log.debug(f"Discarding stale profile failure for user {tag[0]} (fetch #{tag[1]})")
                return
            self._fetch_tag = None
            self._apply(profile=UserProfile.unspecified(), profile_fetch_in_flight=False)
        self._report(error, stage="profile_resolve", user_id=tag[0])

    # ---- internals (caller holds self._lock) ----------------------------

    def _accepts(self, tag: Tuple[str, int]) -> bool:
        return (
            not self._closed
            and self._fetch_tag == tag
            and self._state.session.user_id == tag[0]
        )

    def _apply(self, **changes: Any) -> None:
        state = replace(self._state, **changes)
        retained: Optional[Screen] = None
        context = state.context
        if self._resolved is not None and self._resolved[0] == state.session.user_id:
            retained = self._resolved[1]
        screen = derive_screen(state, retained)
        self._state = replace(state, screen=screen)

        if state.session.is_signed_in and state.splash_elapsed and not state.profile_fetch_in_flight:
            self._resolved = (state.session.user_id, screen, context)
        elif state.profile_fetch_in_flight and retained is not None and screen == retained:
            # Profile stays None in the state; only the published context is carried over
            context = self._resolved[2]

        published = (screen, context)
        if published == self._last_published:
            return
        self._last_published = published
        log.info(f"Screen -> {screen}")
        for observer_id, listener in list(self._observers.items()):
            if observer_id in self._observers:
                self._notify(observer_id, listener, *published)

    def _notify(self, observer_id: int, listener: ScreenListener, screen: Screen, context: ScreenContext) -> None:
        try:
            listener(screen, context)
        except Exception:
            log.exception(f"Screen observer {observer_id} raised while handling {screen}")

    def _report(self, error: BaseException, **context: Any) -> None:
        if self._error_sink is None:
            return
        try:
            self._error_sink.report(error, **context)
        except Exception as e:
            log.warning(f"Error sink rejected {type(error).__name__}: {e}")
