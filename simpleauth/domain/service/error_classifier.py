"""Error classification domain service."""

from typing import Any, NamedTuple

import logfire

from simpleauth.adapter.error import (
    BiometricPromptError,
    IdentityProviderError,
    ProviderErrorCode,
    SecureStoreError,
)
from simpleauth.domain.error import (
    AccountLinkingRequired,
    AuthError,
    BiometricsFailed,
    BiometricsNotAvailable,
    Cancelled,
    HelpfulInvalidCredential,
    HelpfulUserNotFound,
    MergeConflictError,
    MergeConflictRequired,
    MissingLinkingInfo,
    ProviderError,
    ReauthenticationRequired,
    StoreError,
    Unknown,
)
from simpleauth.domain.model.credential import PendingCredential
from simpleauth.domain.value import (
    AuthField,
    BiometricFailureReason,
    CredentialPurpose,
    ProviderId,
)

from .base import Service

_EMAIL_FIELD_CODES = frozenset(
    {
        ProviderErrorCode.INVALID_EMAIL,
        ProviderErrorCode.EMAIL_ALREADY_IN_USE,
        ProviderErrorCode.USER_DISABLED,
    }
)
_PASSWORD_FIELD_CODES = frozenset(
    {ProviderErrorCode.WEAK_PASSWORD, ProviderErrorCode.WRONG_PASSWORD}
)


class Classification(NamedTuple):
    """A classified failure plus any credential captured from it."""

    error: AuthError
    pending: PendingCredential | None = None


class ErrorClassifier(Service):
    """Maps raw collaborator failures into the AuthError taxonomy.

    Pure: holds no state and performs no I/O. Every failure is classified
    exactly once, at the point it leaves a collaborator.
    """

    def classify(
        self,
        error: Exception,
        *,
        email: str | None = None,
        provider_id: ProviderId | None = None,
        credential: Any = None,
    ) -> Classification:
        """Classify a raw failure.

        Args:
            error: Exception raised by a collaborator
            email: E-mail the user attempted, when the failure carries none
            provider_id: Provider the user attempted, when the failure carries none
            credential: Credential the client stashed, when the failure carries none

        Returns:
            The classified error and, for collision failures, the captured
            credential
        """
        if isinstance(error, AuthError):
            result = Classification(error)
        elif isinstance(error, IdentityProviderError):
            result = self._classify_provider_error(
                error, email, provider_id, credential
            )
        elif isinstance(error, SecureStoreError):
            result = Classification(StoreError(error.status))
        elif isinstance(error, BiometricPromptError):
            result = Classification(self._classify_biometric_error(error))
        else:
            result = Classification(Unknown(detail=str(error)))

        logfire.info(
            "Failure classified",
            raw_type=type(error).__name__,
            classified=type(result.error).__name__,
            captured_credential=result.pending is not None,
        )
        return result

    def _classify_provider_error(
        self,
        error: IdentityProviderError,
        email: str | None,
        provider_id: ProviderId | None,
        credential: Any,
    ) -> Classification:
        email = error.email or email
        provider_id = error.provider_id or provider_id
        if error.credential is not None:
            credential = error.credential

        if error.is_cancellation:
            return Classification(Cancelled())

        code = error.code
        if code == ProviderErrorCode.ACCOUNT_EXISTS_WITH_DIFFERENT_CREDENTIAL:
            if credential is None or not email:
                return Classification(MissingLinkingInfo())
            pending = PendingCredential(
                credential,
                CredentialPurpose.LINK,
                email=email,
                provider_id=provider_id,
            )
            return Classification(AccountLinkingRequired(email, provider_id), pending)

        if code == ProviderErrorCode.EMAIL_ALREADY_IN_USE and email:
            # Nothing to attach: the user just signs in to the existing account
            return Classification(AccountLinkingRequired(email, provider_id))

        if code == ProviderErrorCode.CREDENTIAL_ALREADY_IN_USE:
            if credential is None:
                return Classification(MergeConflictError(error.message))
            pending = PendingCredential(
                credential,
                CredentialPurpose.MERGE,
                email=email,
                provider_id=provider_id,
            )
            return Classification(MergeConflictRequired(), pending)

        if (
            code
            in (ProviderErrorCode.INVALID_CREDENTIAL, ProviderErrorCode.WRONG_PASSWORD)
            and email
        ):
            return Classification(HelpfulInvalidCredential(email))

        if code == ProviderErrorCode.USER_NOT_FOUND and email:
            return Classification(HelpfulUserNotFound(email))

        if code == ProviderErrorCode.REQUIRES_RECENT_LOGIN:
            return Classification(ReauthenticationRequired(provider_id))

        return Classification(ProviderError(code, error.domain, error.message))

    def _classify_biometric_error(self, error: BiometricPromptError) -> AuthError:
        if error.reason in (
            BiometricFailureReason.NOT_AVAILABLE,
            BiometricFailureReason.NOT_ENROLLED,
        ):
            return BiometricsNotAvailable()
        return BiometricsFailed(error.reason)

    @staticmethod
    def fields_to_highlight(error: AuthError | None) -> frozenset[AuthField]:
        """Input fields a form should mark as invalid for ``error``.

        Args:
            error: Classified error, or None when there is no error

        Returns:
            Fields to highlight (empty when the error is not about user input)
        """
        if isinstance(error, HelpfulInvalidCredential):
            return frozenset({AuthField.EMAIL, AuthField.PASSWORD})
        if isinstance(error, (HelpfulUserNotFound, AccountLinkingRequired)):
            return frozenset({AuthField.EMAIL})
        if isinstance(error, ProviderError):
            if error.code in _EMAIL_FIELD_CODES:
                return frozenset({AuthField.EMAIL})
            if error.code in _PASSWORD_FIELD_CODES:
                return frozenset({AuthField.PASSWORD})
        return frozenset()
