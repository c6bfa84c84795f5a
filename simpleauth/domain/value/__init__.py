"""Domain value objects for simpleauth."""

from simpleauth.domain.value.identifiers import (
    APPLE_PROVIDER,
    GOOGLE_PROVIDER,
    PASSWORD_PROVIDER,
    ProviderId,
    UserId,
)
from simpleauth.domain.value.types import (
    AuthField,
    BiometricFailureReason,
    BiometryKind,
    CredentialPurpose,
    Email,
    SignInFactors,
    StoreNamespace,
)

__all__ = [
    # Identifiers
    "UserId",
    "ProviderId",
    "PASSWORD_PROVIDER",
    "GOOGLE_PROVIDER",
    "APPLE_PROVIDER",
    # Types
    "AuthField",
    "BiometricFailureReason",
    "BiometryKind",
    "CredentialPurpose",
    "Email",
    "SignInFactors",
    "StoreNamespace",
]
