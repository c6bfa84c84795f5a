"""Store implementations."""

from simpleauth.persistence.repository.biometric_preference import (
    SqliteBiometricPreferenceStore,
)
from simpleauth.persistence.repository.secure_identity import SqliteSecureIdentityStore

__all__ = [
    "SqliteBiometricPreferenceStore",
    "SqliteSecureIdentityStore",
]
