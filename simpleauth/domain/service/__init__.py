"""Domain services."""

from .base import Service
from .biometric_gate import BiometricGate
from .biometric_gateway import BiometricGateway
from .credential_link import CredentialLinkOrchestrator
from .error_classifier import Classification, ErrorClassifier
from .identity_provider import IdentityProviderClient, SessionListener
from .merge_conflict import MergeConflictResolver

__all__ = [
    "BiometricGate",
    "BiometricGateway",
    "Classification",
    "CredentialLinkOrchestrator",
    "ErrorClassifier",
    "IdentityProviderClient",
    "MergeConflictResolver",
    "Service",
    "SessionListener",
]
