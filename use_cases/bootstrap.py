"""Startup orchestration: builds and starts the navigation graph for one client session."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import logging

from infrastructure.auth.firebase_auth_service import AuthServiceError, FirebaseAuthService
from infrastructure.config import AppSettings, load_settings
from infrastructure.observability import ErrorSink, SentryErrorSink
from infrastructure.repositories.document_store import DocumentStore
from infrastructure.repositories.firestore_document_store import FirestoreDocumentStore
from use_cases.auth_session_observer import AuthSessionObserver
from use_cases.navigation import AppNavigationStateMachine
from use_cases.profile_resolver import ProfileResolver

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass
class AppRuntime:
    """Everything one client session owns. Released by `close()`."""

    auth_service: FirebaseAuthService
    auth_observer: AuthSessionObserver
    profile_resolver: ProfileResolver
    navigation: AppNavigationStateMachine
    executor: ThreadPoolExecutor

    def close(self) -> None:
        self.navigation.shutdown()
        self.executor.shutdown(wait=False)


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]
    reason: str = ""
    runtime: Optional[AppRuntime] = None


def run_startup(
    settings: Optional[AppSettings] = None,
    *,
    auth_service: Optional[FirebaseAuthService] = None,
    document_store: Optional[DocumentStore] = None,
    error_sink: Optional[ErrorSink] = None,
) -> StartupResult:
    """Wire auth, profile lookup and navigation together and start the splash."""
    executed_steps = []
    settings = settings or load_settings()
    executed_steps.append("load_settings")

    if auth_service is None:
        try:
            auth_service = FirebaseAuthService(
                settings.firebase_web_api_key or "",
                timeout=settings.auth_timeout_seconds,
            )
        except AuthServiceError as e:
            log.error(f"Startup stopped: {e}")
            return StartupResult(status="STOP", planned_steps=tuple(executed_steps), reason="auth_not_configured")
    executed_steps.append("init_auth_service")

    if document_store is None:
        document_store = FirestoreDocumentStore(settings.firebase_credentials)
    executed_steps.append("init_document_store")

    executor = ThreadPoolExecutor(
        max_workers=settings.profile_resolve_workers,
        thread_name_prefix="profile-resolve",
    )
    auth_observer = AuthSessionObserver(auth_service)
    resolver = ProfileResolver(document_store, executor, collection=settings.profile_collection)
    navigation = AppNavigationStateMachine(
        auth_observer,
        resolver,
        splash_delay=settings.splash_delay_seconds,
        error_sink=error_sink or SentryErrorSink(),
    )
    executed_steps.append("build_navigation")

    navigation.start()
    executed_steps.append("start_navigation")

    runtime = AppRuntime(
        auth_service=auth_service,
        auth_observer=auth_observer,
        profile_resolver=resolver,
        navigation=navigation,
        executor=executor,
    )
    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps), reason="started", runtime=runtime)
