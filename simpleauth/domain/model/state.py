"""Authentication state.

``AuthState`` is a closed set of variants; exactly one is active at a time.
Each variant carries a ``kind`` discriminant and defines its own notion of
equality:

- ``SignedIn`` states are equal when their users share an id.
- ``RequiresAccountLinking`` states are equal when e-mail and attempted
  provider match.
- Every other variant compares by kind alone, so two ``Authenticating``
  states with different progress messages are equal.
"""

from enum import Enum
from typing import Any, ClassVar

from simpleauth.domain.model.common import DomainModel
from simpleauth.domain.model.user import User
from simpleauth.domain.value import ProviderId


class AuthStateKind(str, Enum):
    """Discriminant of an AuthState variant."""

    SIGNED_OUT = "signed_out"
    AUTHENTICATING = "authenticating"
    REQUIRES_BIOMETRICS = "requires_biometrics"
    SIGNED_IN = "signed_in"
    REQUIRES_ACCOUNT_LINKING = "requires_account_linking"
    REQUIRES_MERGE_CONFLICT_RESOLUTION = "requires_merge_conflict_resolution"


class AuthState(DomainModel):
    """Base class for authentication states."""

    kind: ClassVar[AuthStateKind]

    def _identity(self) -> tuple[Any, ...]:
        """Payload that participates in equality (empty by default)."""
        return ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthState):
            return NotImplemented
        return self.kind == other.kind and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((self.kind, self._identity()))

    @property
    def allows_sign_in_attempt(self) -> bool:
        """Whether a new sign-in (or re-authentication) may start from here."""
        return self.kind in (
            AuthStateKind.SIGNED_OUT,
            AuthStateKind.REQUIRES_BIOMETRICS,
            AuthStateKind.REQUIRES_ACCOUNT_LINKING,
            AuthStateKind.REQUIRES_MERGE_CONFLICT_RESOLUTION,
        )

    @property
    def is_pending_resolution(self) -> bool:
        """Whether the user must resolve a linking or merge conflict."""
        return self.kind in (
            AuthStateKind.REQUIRES_ACCOUNT_LINKING,
            AuthStateKind.REQUIRES_MERGE_CONFLICT_RESOLUTION,
        )

    @property
    def is_authenticating(self) -> bool:
        """Whether an operation is in flight."""
        return self.kind == AuthStateKind.AUTHENTICATING

    @property
    def is_idle(self) -> bool:
        """Whether background session changes may be applied."""
        return self.kind in (AuthStateKind.SIGNED_OUT, AuthStateKind.SIGNED_IN)


class SignedOut(AuthState):
    """No session."""

    kind: ClassVar[AuthStateKind] = AuthStateKind.SIGNED_OUT


class Authenticating(AuthState):
    """An operation is in flight; UI should block further calls."""

    kind: ClassVar[AuthStateKind] = AuthStateKind.AUTHENTICATING

    message: str | None = None


class RequiresBiometrics(AuthState):
    """A known local identity is waiting to be unlocked by the biometric sensor."""

    kind: ClassVar[AuthStateKind] = AuthStateKind.REQUIRES_BIOMETRICS


class SignedIn(AuthState):
    """Session established for ``user``."""

    kind: ClassVar[AuthStateKind] = AuthStateKind.SIGNED_IN

    user: User

    def _identity(self) -> tuple[Any, ...]:
        return (self.user.id,)


class RequiresAccountLinking(AuthState):
    """The e-mail belongs to an account registered under another provider.

    The user must sign in with the existing provider so the attempted
    credential can be attached to that account.
    """

    kind: ClassVar[AuthStateKind] = AuthStateKind.REQUIRES_ACCOUNT_LINKING

    email: str
    attempted_provider_id: ProviderId | None = None

    def _identity(self) -> tuple[Any, ...]:
        return (self.email, self.attempted_provider_id)


class RequiresMergeConflictResolution(AuthState):
    """Two identity records must be reconciled before continuing."""

    kind: ClassVar[AuthStateKind] = AuthStateKind.REQUIRES_MERGE_CONFLICT_RESOLUTION
