"""Domain layer errors.

``AuthError`` and its subclasses form the closed taxonomy every raw failure
is classified into. The state machine records them in its last-error slot
instead of raising them to callers.
"""

from typing import Any

from simpleauth.domain.value import BiometricFailureReason, ProviderId


class DomainError(Exception):
    """Base domain error."""

    pass


class AuthError(DomainError):
    """Base classified authentication error.

    Two errors are equal when they are the same kind and carry the same
    payload, so they can be compared in tests and UI diffing.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)

    @property
    def message(self) -> str:
        """User-facing description."""
        return str(self)

    def _identity(self) -> tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthError):
            return NotImplemented
        return type(self) is type(other) and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._identity()))


class Cancelled(AuthError):
    """The user cancelled the operation."""

    def __init__(self) -> None:
        super().__init__("The operation was cancelled.")


class Unknown(AuthError):
    """Failure that fits no other kind."""

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__("An unknown error occurred. Please try again.")


class ConfigurationError(AuthError):
    """The package or a collaborator is misconfigured."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Configuration error: {detail}")

    def _identity(self) -> tuple[Any, ...]:
        return (self.detail,)


class StoreError(AuthError):
    """The secure store rejected a read or write."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Secure storage error (code {code}).")

    def _identity(self) -> tuple[Any, ...]:
        return (self.code,)


class BiometricsNotAvailable(AuthError):
    """No usable biometric sensor on this device."""

    def __init__(self) -> None:
        super().__init__("Biometric authentication is not available on this device.")


class BiometricsFailed(AuthError):
    """The biometric prompt did not succeed."""

    def __init__(self, reason: BiometricFailureReason | None = None) -> None:
        self.reason = reason
        super().__init__("Biometric authentication failed. Please try again.")

    def _identity(self) -> tuple[Any, ...]:
        return (self.reason,)


class ProviderError(AuthError):
    """The identity provider reported a failure with no more specific kind.

    Compared by ``code`` and ``domain``; the message is informational.
    """

    def __init__(self, code: int, domain: str, message: str) -> None:
        self.code = code
        self.domain = domain
        super().__init__(message)

    def _identity(self) -> tuple[Any, ...]:
        return (self.code, self.domain)


class AccountLinkingRequired(AuthError):
    """The e-mail is already registered under a different provider."""

    def __init__(
        self, email: str, attempted_provider_id: ProviderId | None = None
    ) -> None:
        self.email = email
        self.attempted_provider_id = attempted_provider_id
        super().__init__(
            f"An account already exists for {email}. "
            "Sign in with your original method to link your accounts."
        )

    def _identity(self) -> tuple[Any, ...]:
        return (self.email, self.attempted_provider_id)


class MergeConflictRequired(AuthError):
    """The credential is already attached to another account."""

    def __init__(self) -> None:
        super().__init__(
            "This sign-in method is already linked to another account. "
            "Continue to sign in to that account."
        )


class MissingLinkingInfo(AuthError):
    """A linking or merge flow lost the credential or e-mail it needed."""

    def __init__(self) -> None:
        super().__init__(
            "Required information for account linking was missing. Please try again."
        )


class ReauthenticationRequired(AuthError):
    """The provider requires a fresh sign-in before continuing."""

    def __init__(self, provider_id: ProviderId | None = None) -> None:
        self.provider_id = provider_id
        super().__init__("For your security, please sign in again to continue.")

    def _identity(self) -> tuple[Any, ...]:
        return (self.provider_id,)


class HelpfulInvalidCredential(AuthError):
    """Wrong password (or otherwise rejected credential) for a known e-mail."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            f"The password for {email} is incorrect. "
            "Try again or reset your password."
        )

    def _identity(self) -> tuple[Any, ...]:
        return (self.email,)


class HelpfulUserNotFound(AuthError):
    """No account exists for the e-mail."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            f"No account was found for {email}. "
            "Check the address or create a new account."
        )

    def _identity(self) -> tuple[Any, ...]:
        return (self.email,)


class AccountLinkingError(AuthError):
    """Attaching a pending credential to the re-authenticated account failed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Account linking failed: {detail}")

    def _identity(self) -> tuple[Any, ...]:
        return (self.detail,)


class MergeConflictError(AuthError):
    """A merge conflict could not be resolved automatically."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Account merge failed: {detail}")

    def _identity(self) -> tuple[Any, ...]:
        return (self.detail,)
