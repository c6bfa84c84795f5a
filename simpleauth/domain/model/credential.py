"""Pending provider credentials.

A credential captured at a collision point (account exists with a different
provider, credential already in use) is opaque to this package: it is only
ever handed back to the identity provider. It is held in a single-occupancy
``CredentialSlot`` owned by whichever flow is resolving the collision, and
the slot is emptied on every exit from that flow.
"""

from typing import Any

import logfire

from simpleauth.domain.value import CredentialPurpose, ProviderId


class PendingCredential:
    """Opaque provider credential plus what it was captured for.

    Compared by identity only; the wrapped credential is never inspected.
    """

    __slots__ = ("credential", "purpose", "email", "provider_id")

    def __init__(
        self,
        credential: Any,
        purpose: CredentialPurpose,
        email: str | None = None,
        provider_id: ProviderId | None = None,
    ) -> None:
        self.credential = credential
        self.purpose = purpose
        self.email = email
        self.provider_id = provider_id

    def __repr__(self) -> str:
        return (
            f"PendingCredential(purpose={self.purpose.value}, "
            f"email={self.email!r}, provider_id={self.provider_id!r})"
        )


class CredentialSlot:
    """Holds at most one pending credential."""

    def __init__(self) -> None:
        self._pending: PendingCredential | None = None

    @property
    def is_empty(self) -> bool:
        return self._pending is None

    @property
    def purpose(self) -> CredentialPurpose | None:
        """Purpose of the held credential, if any."""
        return self._pending.purpose if self._pending else None

    def peek(self) -> PendingCredential | None:
        """Return the held credential without releasing it."""
        return self._pending

    def hold(self, pending: PendingCredential) -> None:
        """Take ownership of ``pending``, discarding any stale credential.

        Args:
            pending: Credential captured by the flow that now owns the slot
        """
        if self._pending is not None:
            logfire.warn(
                "Replacing stale pending credential",
                stale_purpose=self._pending.purpose.value,
                purpose=pending.purpose.value,
            )
        self._pending = pending

    def take(self) -> PendingCredential | None:
        """Release the held credential to the caller, leaving the slot empty."""
        pending, self._pending = self._pending, None
        return pending

    def discard(self) -> None:
        """Drop the held credential, if any."""
        if self._pending is not None:
            logfire.info(
                "Discarding pending credential", purpose=self._pending.purpose.value
            )
        self._pending = None
