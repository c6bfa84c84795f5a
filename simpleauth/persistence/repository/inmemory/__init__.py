"""In-memory store implementations for testing."""

from simpleauth.persistence.repository.inmemory.biometric_preference import (
    InMemoryBiometricPreferenceStore,
)
from simpleauth.persistence.repository.inmemory.secure_identity import (
    InMemorySecureIdentityStore,
)

__all__ = [
    "InMemoryBiometricPreferenceStore",
    "InMemorySecureIdentityStore",
]
