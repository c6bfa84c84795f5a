"""Domain layer DI providers."""

from dishka import Scope, provide

from simpleauth.domain.model import CredentialSlot
from simpleauth.domain.repository import BiometricPreferenceStore, SecureIdentityStore
from simpleauth.domain.service import (
    BiometricGate,
    BiometricGateway,
    CredentialLinkOrchestrator,
    ErrorClassifier,
    IdentityProviderClient,
    MergeConflictResolver,
)
from simpleauth.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Everything is APP-scoped: one state machine per process owns one
    credential slot, and the flows that share it must see the same instance.
    """

    scope = Scope.APP

    @provide
    def get_error_classifier(self) -> ErrorClassifier:
        """Provide error classifier."""
        return ErrorClassifier()

    @provide
    def get_credential_slot(self) -> CredentialSlot:
        """Provide the pending credential slot shared by linking and merge."""
        return CredentialSlot()

    @provide
    def get_biometric_gate(
        self,
        gateway: BiometricGateway,
        identity_store: SecureIdentityStore,
        preference_store: BiometricPreferenceStore,
        classifier: ErrorClassifier,
    ) -> BiometricGate:
        """Provide biometric gate domain service."""
        return BiometricGate(
            gateway=gateway,
            identity_store=identity_store,
            preference_store=preference_store,
            classifier=classifier,
        )

    @provide
    def get_credential_link_orchestrator(
        self,
        client: IdentityProviderClient,
        slot: CredentialSlot,
        classifier: ErrorClassifier,
    ) -> CredentialLinkOrchestrator:
        """Provide account linking domain service."""
        return CredentialLinkOrchestrator(
            client=client, slot=slot, classifier=classifier
        )

    @provide
    def get_merge_conflict_resolver(
        self,
        client: IdentityProviderClient,
        slot: CredentialSlot,
        classifier: ErrorClassifier,
    ) -> MergeConflictResolver:
        """Provide merge conflict domain service."""
        return MergeConflictResolver(client=client, slot=slot, classifier=classifier)
