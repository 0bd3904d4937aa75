"""Tests for the read-only user lookups."""

from app.infrastructure.repositories import UserRepository


def test_exists_for_known_and_unknown_users(session_factory, create_user) -> None:
    bob = create_user("bob")

    with session_factory() as session:
        repository = UserRepository(session)

        assert repository.exists(bob) is True
        assert repository.exists("missing") is False
