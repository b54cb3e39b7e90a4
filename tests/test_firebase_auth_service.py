from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.auth.firebase_auth_service import (
    AuthServiceError,
    FirebaseAuthService,
    InvalidCredentialsError,
)


def _response(status_code, payload):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def service(http):
    return FirebaseAuthService("fake_api_key", timeout=3, session=http)


def test_missing_api_key_is_rejected():
    with pytest.raises(AuthServiceError):
        FirebaseAuthService("")


def test_sign_in_success_notifies_listeners(service, http):
    http.post.return_value = _response(
        200,
        {"localId": "uid-1", "email": "T@School.org", "idToken": "id", "refreshToken": "rt"},
    )
    seen = []
    service.add_state_listener(seen.append)

    user = service.sign_in_with_password("t@school.org", "secret123")

    assert user.uid == "uid-1"
    assert user.email == "t@school.org"
    assert service.current_user_id() == "uid-1"
    assert seen == ["uid-1"]
    args, kwargs = http.post.call_args
    assert args[0].endswith("accounts:signInWithPassword")
    assert kwargs["params"] == {"key": "fake_api_key"}
    assert kwargs["json"]["returnSecureToken"] is True
    assert kwargs["timeout"] == 3


def test_sign_in_bad_password(service, http):
    http.post.return_value = _response(400, {"error": {"message": "INVALID_LOGIN_CREDENTIALS"}})
    seen = []
    service.add_state_listener(seen.append)

    with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
        service.sign_in_with_password("t@school.org", "wrong")

    assert service.current_user_id() is None
    assert seen == []


def test_too_many_attempts_code_with_suffix(service, http):
    http.post.return_value = _response(
        400, {"error": {"message": "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled temporarily"}}
    )

    with pytest.raises(InvalidCredentialsError, match="Too many attempts"):
        service.sign_in_with_password("t@school.org", "wrong")


def test_sign_in_network_error(service, http):
    http.post.side_effect = requests.ConnectionError("Connection Refused")

    with pytest.raises(AuthServiceError, match="Network error"):
        service.sign_in_with_password("t@school.org", "secret123")


def test_sign_in_server_error(service, http):
    http.post.return_value = _response(500, {"error": {"message": "INTERNAL"}})

    with pytest.raises(AuthServiceError):
        service.sign_in_with_password("t@school.org", "secret123")


def test_sign_out_notifies_once(service, http):
    http.post.return_value = _response(200, {"localId": "uid-1", "idToken": "id", "refreshToken": "rt"})
    seen = []
    service.add_state_listener(seen.append)
    service.sign_in_with_password("t@school.org", "secret123")

    service.sign_out()
    service.sign_out()

    assert seen == ["uid-1", None]
    assert service.current_user_id() is None


def test_removed_listener_is_not_called(service, http):
    http.post.return_value = _response(200, {"localId": "uid-1", "idToken": "id", "refreshToken": "rt"})
    listener = MagicMock()
    handle = service.add_state_listener(listener)
    service.remove_state_listener(handle)

    service.sign_in_with_password("t@school.org", "secret123")

    listener.assert_not_called()


def test_listener_error_does_not_break_sign_in(service, http):
    http.post.return_value = _response(200, {"localId": "uid-1", "idToken": "id", "refreshToken": "rt"})
    service.add_state_listener(MagicMock(side_effect=RuntimeError("boom")))

    user = service.sign_in_with_password("t@school.org", "secret123")

    assert user.uid == "uid-1"


def test_send_password_reset(service, http):
    http.post.return_value = _response(200, {"email": "t@school.org"})

    service.send_password_reset("t@school.org")

    args, kwargs = http.post.call_args
    assert args[0].endswith("accounts:sendOobCode")
    assert kwargs["json"] == {"requestType": "PASSWORD_RESET", "email": "t@school.org"}
