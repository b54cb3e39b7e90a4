"""Role and active-school lookup for a signed-in user."""

import logging
from concurrent.futures import Executor, Future
from typing import Any, Dict, Optional

from infrastructure.repositories.document_store import DocumentStore
from use_cases.session_models import KNOWN_ROLES, Role, UserProfile

log = logging.getLogger(__name__)

DEFAULT_PROFILE_COLLECTION = "users"


class ResolveError(Exception):
    """The profile could not be fetched (distinct from the profile being absent)."""

    def __init__(self, user_id: str, cause: BaseException):
        super().__init__(f"Profile lookup failed for user {user_id}: {cause}")
        self.user_id = user_id
        self.cause = cause


def parse_role(raw: Any) -> Role:
    if not isinstance(raw, str):
        return "unspecified"
    role = raw.strip().lower()
    if role in KNOWN_ROLES:
        return role  # type: ignore[return-value]
    return "unspecified"


def parse_profile(data: Optional[Dict[str, Any]]) -> UserProfile:
    """
    Maps a `users/{uid}` document onto a UserProfile.
    Missing or malformed documents yield the unspecified profile.
    """
    if not isinstance(data, dict):
        return UserProfile.unspecified()

    school_id = data.get("activeSchoolId")
    if not isinstance(school_id, str) or not school_id.strip():
        school_id = None

    return UserProfile(role=parse_role(data.get("role")), active_school_id=school_id)


class ProfileResolver:
    """Single-attempt asynchronous profile lookup. Holds no per-user state."""

    def __init__(
        self,
        store: DocumentStore,
        executor: Executor,
        collection: str = DEFAULT_PROFILE_COLLECTION,
    ):
        self._store = store
        self._executor = executor
        self._collection = collection

    def resolve(self, user_id: str) -> "Future[UserProfile]":
        return self._executor.submit(self._lookup, user_id)

    def _lookup(self, user_id: str) -> UserProfile:
        try:
            data = self._store.get_document(self._collection, user_id)
        except Exception as e:
            raise ResolveError(user_id, e) from e

        profile = parse_profile(data)
        if data is None:
            log.info(f"No profile document for user {user_id}; using unspecified role")
        elif isinstance(data, dict) and profile.role == "unspecified":
            log.warning(f"Profile for user {user_id} has unsupported role {data.get('role')!r}")
        return profile
