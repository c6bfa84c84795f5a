"""Application layer DI providers."""

from dishka import Scope, provide

from simpleauth.application import AuthStateMachine, BiometricController
from simpleauth.config import BiometricSettings
from simpleauth.domain.model import CredentialSlot
from simpleauth.domain.repository import BiometricPreferenceStore
from simpleauth.domain.service import (
    BiometricGate,
    CredentialLinkOrchestrator,
    ErrorClassifier,
    IdentityProviderClient,
    MergeConflictResolver,
)
from simpleauth.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application provider - concrete, no mocks needed."""

    @provide(scope=Scope.APP)
    def get_auth_state_machine(
        self,
        client: IdentityProviderClient,
        biometric_gate: BiometricGate,
        credential_link: CredentialLinkOrchestrator,
        merge_conflict: MergeConflictResolver,
        classifier: ErrorClassifier,
        slot: CredentialSlot,
        biometric_settings: BiometricSettings,
    ) -> AuthStateMachine:
        """Provide the authentication state machine."""
        return AuthStateMachine(
            client=client,
            biometric_gate=biometric_gate,
            credential_link=credential_link,
            merge_conflict=merge_conflict,
            classifier=classifier,
            slot=slot,
            biometric_settings=biometric_settings,
        )

    @provide(scope=Scope.APP)
    def get_biometric_controller(
        self,
        state_machine: AuthStateMachine,
        biometric_gate: BiometricGate,
        preference_store: BiometricPreferenceStore,
        classifier: ErrorClassifier,
        biometric_settings: BiometricSettings,
    ) -> BiometricController:
        """Provide biometric preference controller."""
        return BiometricController(
            state_machine=state_machine,
            biometric_gate=biometric_gate,
            preference_store=preference_store,
            classifier=classifier,
            settings=biometric_settings,
        )
