from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from infrastructure.repositories.document_store import DocumentStoreError
from use_cases.profile_resolver import ProfileResolver, ResolveError, parse_profile, parse_role
from use_cases.session_models import UserProfile


@pytest.fixture
def store():
    return MagicMock()


def test_resolve_school_profile(store, inline_executor):
    store.get_document.return_value = {"role": "school", "activeSchoolId": "school-1", "email": "a@b.c"}
    resolver = ProfileResolver(store, inline_executor)

    profile = resolver.resolve("u1").result()

    assert profile == UserProfile(role="school", active_school_id="school-1")
    store.get_document.assert_called_once_with("users", "u1")


def test_resolve_uses_configured_collection(store, inline_executor):
    store.get_document.return_value = {"role": "teacher"}
    resolver = ProfileResolver(store, inline_executor, collection="staff")

    resolver.resolve("u1").result()

    store.get_document.assert_called_once_with("staff", "u1")


def test_missing_document_is_unspecified_not_error(store, inline_executor):
    store.get_document.return_value = None
    resolver = ProfileResolver(store, inline_executor)

    assert resolver.resolve("ghost").result() == UserProfile.unspecified()


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"role": 42},
        {"role": "student"},
        {"role": "district", "activeSchoolId": None},
        ["not", "a", "mapping"],
    ],
)
def test_malformed_document_is_unspecified(store, inline_executor, data):
    store.get_document.return_value = data
    resolver = ProfileResolver(store, inline_executor)

    assert resolver.resolve("u1").result().role == "unspecified"


def test_backend_failure_raises_resolve_error(store, inline_executor):
    store.get_document.side_effect = DocumentStoreError("deadline exceeded")
    resolver = ProfileResolver(store, inline_executor)

    future = resolver.resolve("u1")

    with pytest.raises(ResolveError) as exc_info:
        future.result()
    assert exc_info.value.user_id == "u1"
    assert isinstance(exc_info.value.cause, DocumentStoreError)


def test_parse_role_is_case_insensitive():
    assert parse_role("School") == "school"
    assert parse_role(" SUB ") == "sub"
    assert parse_role("parent") == "unspecified"
    assert parse_role(None) == "unspecified"


def test_parse_profile_blank_school_id_is_none():
    assert parse_profile({"role": "teacher", "activeSchoolId": "  "}).active_school_id is None
    assert parse_profile({"role": "teacher", "activeSchoolId": 7}).active_school_id is None


def test_concurrent_resolves_do_not_interfere(store):
    docs = {
        "a": {"role": "school", "activeSchoolId": "sa"},
        "b": {"role": "teacher", "activeSchoolId": "sb"},
    }
    store.get_document.side_effect = lambda _collection, uid: docs[uid]

    with ThreadPoolExecutor(max_workers=4) as executor:
        resolver = ProfileResolver(store, executor)
        futures = [(uid, resolver.resolve(uid)) for uid in ["a", "b"] * 20]
        results = [(uid, f.result(timeout=5)) for uid, f in futures]

    for uid, profile in results:
        assert profile == parse_profile(docs[uid])
