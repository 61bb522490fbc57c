# tests/test_user_store.py

from __future__ import annotations

import pytest

from taskboard.errors import CollaboratorError, ValidationError
from taskboard.users.user_models import Role


def test_list_and_get(users) -> None:
    assert [u.id for u in users.list_users()] == ["u1", "u2"]
    alice = users.get_user("u1")
    assert alice is not None
    assert (alice.name, alice.email, alice.role) == ("Alice Smith", "alice@example.com", Role.ADMIN)
    assert users.get_user("nope") is None
    assert users.get_user("") is None


def test_find_by_email_is_case_insensitive(users) -> None:
    user = users.find_by_email("  BOB@Example.com ")
    assert user is not None and user.id == "u2"
    assert users.find_by_email("carol@example.com") is None


def test_create_profile_defaults(users) -> None:
    carol = users.create_profile(user_id="u3", email="carol@example.com")
    assert carol.name == "carol"
    assert carol.role == Role.MEMBER
    assert carol.avatar is None


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"user_id": "", "email": "x@example.com"}, "id"),
        ({"user_id": "u9", "email": "not-an-email"}, "email"),
        ({"user_id": "u9", "email": "x@example.com", "role": "owner"}, "role"),
    ],
)
def test_create_profile_validation(users, kwargs, field) -> None:
    with pytest.raises(ValidationError) as exc:
        users.create_profile(**kwargs)
    assert exc.value.field == field


def test_create_profile_duplicate_id_is_collaborator_error(users) -> None:
    with pytest.raises(CollaboratorError):
        users.create_profile(user_id="u1", email="again@example.com")


def test_update_profile(users) -> None:
    updated = users.update_profile("u2", name="Robert Jones", role="manager")
    assert updated is not None
    assert (updated.name, updated.role, updated.email) == ("Robert Jones", Role.MANAGER, "bob@example.com")

    cleared = users.update_profile("u2", avatar="")
    assert cleared is not None and cleared.avatar is None

    assert users.update_profile("missing", name="X") is None
    with pytest.raises(ValidationError):
        users.update_profile("u2", name="  ")


def test_display_name_falls_back_for_dangling_ids(users) -> None:
    assert users.display_name("u1") == "Alice Smith"
    assert users.display_name("deleted-user") == "Unknown user"
    assert users.display_name(None) == "Unknown user"
