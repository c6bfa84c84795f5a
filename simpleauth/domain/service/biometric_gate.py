"""Biometric gating domain service."""

import logfire

from simpleauth.adapter.error import BiometricPromptError, SecureStoreError
from simpleauth.domain.error import BiometricsNotAvailable
from simpleauth.domain.model.state import AuthState, RequiresBiometrics, SignedIn
from simpleauth.domain.model.user import User
from simpleauth.domain.repository.biometric_preference import BiometricPreferenceStore
from simpleauth.domain.repository.secure_identity import SecureIdentityStore
from simpleauth.domain.service.biometric_gateway import BiometricGateway
from simpleauth.domain.service.error_classifier import ErrorClassifier
from simpleauth.domain.value import UserId

from .base import Service


class BiometricGate(Service):
    """Decides whether an established session must be unlocked biometrically."""

    def __init__(
        self,
        gateway: BiometricGateway,
        identity_store: SecureIdentityStore,
        preference_store: BiometricPreferenceStore,
        classifier: ErrorClassifier,
    ) -> None:
        """Initialize biometric gate.

        Args:
            gateway: Platform biometric sensor
            identity_store: Secure store holding the last signed-in user id
            preference_store: Per-device biometric opt-in
            classifier: Maps prompt failures into the error taxonomy
        """
        self.gateway = gateway
        self.identity_store = identity_store
        self.preference_store = preference_store
        self.classifier = classifier

    def is_available(self) -> bool:
        return self.gateway.is_available()

    @property
    def kind_label(self) -> str:
        """Label of the sensor kind, e.g. "Face ID"."""
        return self.gateway.kind().value

    async def determine_state(self, user: User) -> AuthState:
        """Choose the state a freshly authenticated user lands in.

        A returning user (stored id matches) on a device with a usable sensor
        must pass the biometric prompt. Anyone else is signed in and becomes
        the remembered user. Remembering is best effort: a store failure is
        logged and does not block sign-in.

        Args:
            user: User the provider just authenticated

        Returns:
            RequiresBiometrics or SignedIn
        """
        with logfire.span("biometric_gate.determine_state", user_id=user.id):
            try:
                stored_id = await self.identity_store.get_last_user_id()
            except SecureStoreError as e:
                logfire.warn("Failed to read last user id", error=str(e))
                stored_id = None

            available = self.gateway.is_available()
            if available and stored_id == user.id:
                logfire.info("Biometric unlock required", user_id=user.id)
                return RequiresBiometrics()

            try:
                await self.identity_store.set_last_user_id(user.id)
            except SecureStoreError as e:
                logfire.warn(
                    "Failed to remember last user id", user_id=user.id, error=str(e)
                )

            logfire.info(
                "Signed in without biometric gate",
                user_id=user.id,
                biometrics_available=available,
            )
            return SignedIn(user=user)

    async def verify(self, reason: str) -> None:
        """Run the biometric prompt.

        Args:
            reason: Text shown in the prompt

        Raises:
            BiometricsNotAvailable: If no usable sensor is present
            BiometricsFailed: If the user was not verified
        """
        if not self.gateway.is_available():
            raise BiometricsNotAvailable()

        with logfire.span("biometric_gate.verify", kind=self.kind_label):
            try:
                await self.gateway.prompt(reason)
            except BiometricPromptError as e:
                raise self.classifier.classify(e).error from e

    async def record_unlock(self, user_id: UserId) -> None:
        """Remember ``user_id`` as the biometric user if biometrics are enabled.

        Args:
            user_id: User who just unlocked the session
        """
        try:
            if await self.preference_store.is_enabled():
                await self.preference_store.set_last_user_id(user_id)
        except SecureStoreError as e:
            logfire.warn(
                "Failed to record biometric unlock", user_id=user_id, error=str(e)
            )

    async def forget_identity(self) -> None:
        """Remove the remembered user id.

        Raises:
            SecureStoreError: If the store rejects the delete
        """
        await self.identity_store.clear_last_user_id()
