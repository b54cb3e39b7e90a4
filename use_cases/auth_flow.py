"""Authentication flow orchestration (application layer)."""

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from infrastructure.auth.firebase_auth_service import (
    AuthServiceError,
    FirebaseAuthService,
    InvalidCredentialsError,
)

log = logging.getLogger(__name__)

AuthFlowStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    user_id: Optional[str] = None
    message: str = ""


def sign_in(service: FirebaseAuthService, email: str, password: str) -> AuthFlowResult:
    """
    Signs in with email and password.
    Navigation is not touched here: the auth service notifies its listeners and
    the navigation state machine picks the screen.
    """
    email = (email or "").strip().lower()
    if not email or not password:
        return AuthFlowResult(status="STOP", reason="missing_fields", message="Enter your email and password.")

    try:
        user = service.sign_in_with_password(email, password)
    except InvalidCredentialsError as e:
        return AuthFlowResult(status="STOP", reason="invalid_credentials", message=str(e))
    except AuthServiceError as e:
        log.error(f"Sign-in unavailable: {e}")
        return AuthFlowResult(status="STOP", reason="service_unavailable", message=str(e))

    return AuthFlowResult(status="CONTINUE", reason="authenticated", user_id=user.uid)


def sign_out(service: FirebaseAuthService) -> AuthFlowResult:
    service.sign_out()
    return AuthFlowResult(status="STOP", reason="signed_out")


def request_password_reset(service: FirebaseAuthService, email: str) -> AuthFlowResult:
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        return AuthFlowResult(status="STOP", reason="invalid_email", message="Enter a valid email address.")

    try:
        service.send_password_reset(email)
    except InvalidCredentialsError as e:
        return AuthFlowResult(status="STOP", reason="invalid_email", message=str(e))
    except AuthServiceError as e:
        log.error(f"Password reset unavailable: {e}")
        return AuthFlowResult(status="STOP", reason="service_unavailable", message=str(e))

    return AuthFlowResult(
        status="CONTINUE",
        reason="reset_sent",
        message="If an account exists for that email, a reset link is on its way.",
    )
