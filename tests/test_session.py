# tests/test_session.py

from __future__ import annotations

import pytest

from taskboard.core.ports import Session
from taskboard.errors import ProfileNotFound
from taskboard.identity.session import LocalIdentityProvider, SessionTracker, resolve_user
from taskboard.users.user_store import UserStore

from .fakes import FakeIdentityProvider, PartiallyFailingBackend


def test_resolve_user(users) -> None:
    user = resolve_user(Session(subject_id="u1", email="alice@work.example"), users)
    assert user.id == "u1"
    assert user.name == "Alice Smith"
    # session email wins
    assert user.email == "alice@work.example"

    with pytest.raises(ProfileNotFound) as exc:
        resolve_user(Session(subject_id="ghost"), users)
    assert exc.value.subject_id == "ghost"


def test_tracker_follows_session_changes(users) -> None:
    identity = FakeIdentityProvider(session=Session(subject_id="u1", email="alice@example.com"))
    tracker = SessionTracker(identity, users)
    seen: list[str | None] = []
    tracker.add_listener(lambda u: seen.append(u.id if u else None))

    assert tracker.start().id == "u1"
    assert tracker.is_authenticated

    identity.push(Session(subject_id="u2", email="bob@example.com"))
    assert tracker.current_user.id == "u2"

    identity.push(None)
    assert tracker.current_user is None
    assert not tracker.is_authenticated

    assert seen == ["u1", "u2", None]


def test_session_without_profile_is_logged_out(users) -> None:
    identity = FakeIdentityProvider()
    tracker = SessionTracker(identity, users)
    tracker.start()

    identity.push(Session(subject_id="no-profile", email="x@example.com"))

    assert tracker.current_user is None


def test_collaborator_failure_is_logged_not_raised(clock) -> None:
    backend = PartiallyFailingBackend("profiles")
    identity = FakeIdentityProvider(session=Session(subject_id="u1"))
    tracker = SessionTracker(identity, UserStore(backend, clock=clock))

    assert tracker.start() is None


def test_refresh_picks_up_profile_changes(users) -> None:
    identity = FakeIdentityProvider(session=Session(subject_id="u2", email="bob@example.com"))
    tracker = SessionTracker(identity, users)
    tracker.start()

    users.update_profile("u2", name="Robert")
    assert tracker.current_user.name == "Bob Jones"
    assert tracker.refresh().name == "Robert"


def test_stop_unsubscribes(users) -> None:
    identity = FakeIdentityProvider()
    tracker = SessionTracker(identity, users)
    tracker.start()
    tracker.stop()

    identity.push(Session(subject_id="u1"))
    assert tracker.current_user is None
    assert identity.subscribers == []


def test_local_identity_provider(users) -> None:
    identity = LocalIdentityProvider()
    identity.register("Alice@Example.com", "u1")
    tracker = SessionTracker(identity, users)
    tracker.start()

    assert identity.sign_in("nobody@example.com") is None
    assert tracker.current_user is None

    session = identity.sign_in(" alice@example.com ")
    assert session == Session(subject_id="u1", email="alice@example.com")
    assert tracker.current_user.id == "u1"

    # unknown email keeps the current session
    assert identity.sign_in("nobody@example.com") is None
    assert tracker.current_user.id == "u1"

    identity.sign_out()
    assert identity.current_session() is None
    assert tracker.current_user is None
