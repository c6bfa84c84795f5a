"""Unit tests for AuthState variants."""

import pytest
from pydantic import ValidationError

from simpleauth.domain.model import (
    AuthStateKind,
    Authenticating,
    RequiresAccountLinking,
    RequiresBiometrics,
    RequiresMergeConflictResolution,
    SignedIn,
    SignedOut,
    User,
)
from simpleauth.domain.value import APPLE_PROVIDER, GOOGLE_PROVIDER, UserId
from tests.conftest import make_user


class TestAuthStateEquality:
    """Tests for per-variant equality."""

    def test_signed_in_compares_by_user_id(self):
        """SignedIn states are equal when user ids match, whatever the profile."""
        # Arrange
        before = User(id=UserId("u1"), email="old@x.com", display_name="Old")
        after = User(id=UserId("u1"), email="new@x.com", display_name="New")

        # Act / Assert
        assert SignedIn(user=before) == SignedIn(user=after)
        assert SignedIn(user=before) != SignedIn(user=make_user(user_id="u2"))

    def test_account_linking_compares_email_and_provider(self):
        """Linking states differ when either the e-mail or the provider differs."""
        base = RequiresAccountLinking(email="a@x.com", attempted_provider_id=APPLE_PROVIDER)

        assert base == RequiresAccountLinking(
            email="a@x.com", attempted_provider_id=APPLE_PROVIDER
        )
        assert base != RequiresAccountLinking(
            email="a@x.com", attempted_provider_id=GOOGLE_PROVIDER
        )
        assert base != RequiresAccountLinking(
            email="b@x.com", attempted_provider_id=APPLE_PROVIDER
        )

    def test_authenticating_ignores_message(self):
        """Authenticating states compare by kind alone."""
        assert Authenticating(message="Signing in...") == Authenticating(
            message="Creating account..."
        )
        assert Authenticating() == Authenticating(message="x")

    def test_different_kinds_are_never_equal(self):
        """Variants of different kinds are unequal."""
        assert SignedOut() != RequiresBiometrics()
        assert SignedOut() != Authenticating()
        assert RequiresMergeConflictResolution() != SignedOut()

    def test_equal_states_hash_equally(self):
        """Equal states can be used interchangeably as dict keys."""
        seen = {SignedIn(user=make_user(user_id="u1")): "first"}

        assert seen[SignedIn(user=User(id=UserId("u1")))] == "first"
        assert hash(Authenticating(message="a")) == hash(Authenticating(message="b"))


class TestAuthStatePredicates:
    """Tests for derived predicates."""

    @pytest.mark.parametrize(
        "state,allowed",
        [
            (SignedOut(), True),
            (Authenticating(), False),
            (RequiresBiometrics(), True),
            (SignedIn(user=make_user()), False),
            (RequiresAccountLinking(email="a@x.com"), True),
            (RequiresMergeConflictResolution(), True),
        ],
    )
    def test_allows_sign_in_attempt(self, state, allowed):
        """Sign-in is allowed from every state except Authenticating and SignedIn."""
        assert state.allows_sign_in_attempt is allowed

    @pytest.mark.parametrize(
        "state,pending",
        [
            (SignedOut(), False),
            (Authenticating(), False),
            (RequiresBiometrics(), False),
            (SignedIn(user=make_user()), False),
            (RequiresAccountLinking(email="a@x.com"), True),
            (RequiresMergeConflictResolution(), True),
        ],
    )
    def test_is_pending_resolution(self, state, pending):
        """Only linking and merge states are pending resolution."""
        assert state.is_pending_resolution is pending

    def test_is_authenticating_and_idle(self):
        """Authenticating is busy; SignedOut and SignedIn are idle."""
        assert Authenticating().is_authenticating
        assert not SignedOut().is_authenticating
        assert SignedOut().is_idle
        assert SignedIn(user=make_user()).is_idle
        assert not RequiresBiometrics().is_idle

    def test_kind_discriminant(self):
        """Each variant exposes its kind."""
        assert SignedOut().kind == AuthStateKind.SIGNED_OUT
        assert RequiresMergeConflictResolution().kind == (
            AuthStateKind.REQUIRES_MERGE_CONFLICT_RESOLUTION
        )


class TestUser:
    """Tests for User identity."""

    def test_users_are_equal_by_id(self):
        """Profile changes do not change identity."""
        assert User(id=UserId("u1"), email="a@x.com") == User(
            id=UserId("u1"), email="b@x.com"
        )
        assert User(id=UserId("u1")) != User(id=UserId("u2"))

    def test_user_is_immutable(self):
        """Users cannot be mutated after creation."""
        user = make_user()

        with pytest.raises(ValidationError):
            user.email = "changed@x.com"
