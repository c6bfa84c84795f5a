"""Repository interfaces for simpleauth.

Store interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from simpleauth.domain.repository.biometric_preference import BiometricPreferenceStore
from simpleauth.domain.repository.secure_identity import SecureIdentityStore

__all__ = [
    "BiometricPreferenceStore",
    "SecureIdentityStore",
]
