"""Infrastructure layer errors.

These are the raw failures collaborators raise. They never reach callers of
the state machine: the error classifier maps them into the domain taxonomy.
"""

from enum import IntEnum
from typing import Any

from simpleauth.domain.value import BiometricFailureReason, ProviderId

DEFAULT_PROVIDER_DOMAIN = "identity.provider"


class ProviderErrorCode(IntEnum):
    """Numeric failure codes reported by the identity provider.

    Values follow the Firebase Auth error codes so a Firebase-backed client
    can pass them through unchanged.
    """

    INVALID_CREDENTIAL = 17004
    USER_DISABLED = 17005
    EMAIL_ALREADY_IN_USE = 17007
    INVALID_EMAIL = 17008
    WRONG_PASSWORD = 17009
    TOO_MANY_REQUESTS = 17010
    USER_NOT_FOUND = 17011
    ACCOUNT_EXISTS_WITH_DIFFERENT_CREDENTIAL = 17012
    REQUIRES_RECENT_LOGIN = 17014
    NETWORK_ERROR = 17020
    CREDENTIAL_ALREADY_IN_USE = 17025
    WEAK_PASSWORD = 17026
    WEB_CONTEXT_CANCELLED = 17058
    # Federated sign-in UIs
    USER_CANCELLED = -5
    AUTHORIZATION_CANCELLED = 1001


CANCELLATION_CODES = frozenset(
    {
        ProviderErrorCode.WEB_CONTEXT_CANCELLED,
        ProviderErrorCode.USER_CANCELLED,
        ProviderErrorCode.AUTHORIZATION_CANCELLED,
    }
)


class SecureStoreStatus(IntEnum):
    """Status codes reported by the secure store."""

    ITEM_NOT_FOUND = -25300
    DUPLICATE_ITEM = -25299
    INTERACTION_NOT_ALLOWED = -25308
    IO_ERROR = -36


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class IdentityProviderError(AdapterError):
    """Failure reported by the identity provider.

    Collision failures may carry the credential the user attempted (or the
    one already in use) so the caller can resume the flow later.
    """

    def __init__(
        self,
        code: int,
        message: str,
        domain: str = DEFAULT_PROVIDER_DOMAIN,
        *,
        email: str | None = None,
        credential: Any = None,
        provider_id: ProviderId | None = None,
    ) -> None:
        self.code = code
        self.domain = domain
        self.message = message
        self.email = email
        self.credential = credential
        self.provider_id = provider_id
        super().__init__(f"[{domain}:{code}] {message}")

    @property
    def is_cancellation(self) -> bool:
        return self.code in CANCELLATION_CODES


class SecureStoreError(AdapterError):
    """The secure store rejected a read or write."""

    def __init__(self, status: int, message: str = "Secure store operation failed"):
        self.status = status
        super().__init__(f"{message} (status {status})")


class BiometricPromptError(AdapterError):
    """The biometric prompt did not succeed."""

    def __init__(self, reason: BiometricFailureReason, message: str | None = None):
        self.reason = reason
        super().__init__(message or f"Biometric prompt failed: {reason.value}")
