from concurrent.futures import Executor, Future

import pytest


class FakeAuthService:
    """In-memory AuthService: tests drive sign-in/sign-out directly."""

    def __init__(self, user_id=None):
        self.user_id = user_id
        self.listeners = {}
        self.add_calls = 0
        self.remove_calls = 0
        self.fail_subscribe = False
        self._next = 0

    def current_user_id(self):
        return self.user_id

    def add_state_listener(self, callback):
        if self.fail_subscribe:
            raise ConnectionError("auth backend unreachable")
        self.add_calls += 1
        self._next += 1
        self.listeners[self._next] = callback
        return self._next

    def remove_state_listener(self, handle):
        self.remove_calls += 1
        self.listeners.pop(handle, None)

    def emit(self, user_id):
        self.user_id = user_id
        for callback in list(self.listeners.values()):
            callback(user_id)


class ManualTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # threading.Timer still runs a callback that was already in progress
        self.callback()


class TimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def only(self):
        assert len(self.timers) == 1
        return self.timers[0]


class FakeResolver:
    """Hands out futures the test completes in whatever order it needs."""

    def __init__(self):
        self.calls = []

    def resolve(self, user_id):
        future = Future()
        self.calls.append((user_id, future))
        return future

    def pending(self, user_id):
        return [f for uid, f in self.calls if uid == user_id and not f.done()]


class InlineExecutor(Executor):
    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as e:
            future.set_exception(e)
        return future


@pytest.fixture
def auth_service():
    return FakeAuthService()


@pytest.fixture
def timers():
    return TimerFactory()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def inline_executor():
    return InlineExecutor()
