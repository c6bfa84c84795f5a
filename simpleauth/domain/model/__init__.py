"""Domain model entities for simpleauth."""

from simpleauth.domain.model.biometric import BiometricPreference
from simpleauth.domain.model.credential import CredentialSlot, PendingCredential
from simpleauth.domain.model.state import (
    AuthState,
    AuthStateKind,
    Authenticating,
    RequiresAccountLinking,
    RequiresBiometrics,
    RequiresMergeConflictResolution,
    SignedIn,
    SignedOut,
)
from simpleauth.domain.model.user import User

__all__ = [
    "User",
    "AuthState",
    "AuthStateKind",
    "SignedOut",
    "Authenticating",
    "RequiresBiometrics",
    "SignedIn",
    "RequiresAccountLinking",
    "RequiresMergeConflictResolution",
    "BiometricPreference",
    "CredentialSlot",
    "PendingCredential",
]
