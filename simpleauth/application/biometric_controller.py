"""Biometric preference controller."""

from collections.abc import Iterator
from contextlib import contextmanager

import logfire

from simpleauth.adapter.error import SecureStoreError
from simpleauth.application.state_machine import AuthStateMachine
from simpleauth.config import BiometricSettings
from simpleauth.domain.error import BiometricsNotAvailable, ConfigurationError
from simpleauth.domain.model import BiometricPreference, SignedIn
from simpleauth.domain.repository import BiometricPreferenceStore
from simpleauth.domain.service import BiometricGate, ErrorClassifier
from simpleauth.domain.value import UserId


class BiometricController:
    """Manages the user's biometric opt-in for this device.

    Unlike the state machine, this controller raises ``AuthError`` subclasses
    so settings screens can react to each step of enabling biometrics.
    """

    def __init__(
        self,
        state_machine: AuthStateMachine,
        biometric_gate: BiometricGate,
        preference_store: BiometricPreferenceStore,
        classifier: ErrorClassifier,
        settings: BiometricSettings,
    ) -> None:
        self.state_machine = state_machine
        self.biometric_gate = biometric_gate
        self.preference_store = preference_store
        self.classifier = classifier
        self.settings = settings
        self._enabled = False

    @property
    def is_biometric_enabled(self) -> bool:
        """Opt-in flag as of the last load or change."""
        return self._enabled

    @property
    def is_biometrics_available(self) -> bool:
        return self.biometric_gate.is_available()

    @property
    def biometry_kind_label(self) -> str:
        return self.biometric_gate.kind_label

    @contextmanager
    def _store_errors(self) -> Iterator[None]:
        try:
            yield
        except SecureStoreError as e:
            raise self.classifier.classify(e).error from e

    async def load_preferences(self) -> BiometricPreference:
        """Read the stored preference and cache the opt-in flag.

        Returns:
            The stored preference

        Raises:
            StoreError: If the preference cannot be read
        """
        with self._store_errors():
            preference = await self.preference_store.load()
        self._enabled = preference.enabled
        logfire.info(
            "Biometric preferences loaded",
            enabled=preference.enabled,
            has_last_user=preference.last_user_id is not None,
        )
        return preference

    async def test_biometric_authentication(self) -> None:
        """Run a prompt without touching the session.

        Raises:
            BiometricsNotAvailable: If no usable sensor is present
            BiometricsFailed: If the user was not verified
        """
        await self.biometric_gate.verify(self.settings.setup_reason)

    async def enable_biometrics(self) -> None:
        """Opt in after the user passes a verification prompt.

        Raises:
            BiometricsNotAvailable: If no usable sensor is present
            BiometricsFailed: If the user was not verified
            StoreError: If the preference cannot be saved
        """
        if not self.biometric_gate.is_available():
            raise BiometricsNotAvailable()

        await self.test_biometric_authentication()

        with self._store_errors():
            await self.preference_store.set_enabled(True)
        self._enabled = True
        logfire.info("Biometrics enabled")

    async def disable_biometrics(self) -> None:
        """Opt out and forget the biometric user.

        Raises:
            StoreError: If the preference cannot be saved
        """
        with self._store_errors():
            await self.preference_store.set_enabled(False)
            await self.preference_store.set_last_user_id(None)
        self._enabled = False
        logfire.info("Biometrics disabled")

    async def should_require_biometrics_for_current_session(self) -> bool:
        """Whether the signed-in session should be locked behind biometrics."""
        state = self.state_machine.state
        if not isinstance(state, SignedIn) or not self.biometric_gate.is_available():
            return False
        with self._store_errors():
            return await self.preference_store.should_require_biometrics(state.user.id)

    def require_biometric_authentication(self) -> None:
        """Gate the next sign-in behind biometrics."""
        self.state_machine.require_biometric_authentication()

    async def handle_successful_biometric_auth(self, user_id: UserId) -> None:
        """Remember ``user_id`` as the biometric user and opt in.

        Args:
            user_id: User who passed the prompt

        Raises:
            StoreError: If the preference cannot be saved
        """
        with self._store_errors():
            await self.preference_store.record_successful_auth(user_id)
        self._enabled = True
        logfire.info("Biometric authentication recorded", user_id=user_id)

    async def clear_all_preferences(self) -> None:
        """Forget every biometric preference on this device.

        Raises:
            StoreError: If the preferences cannot be cleared
        """
        with self._store_errors():
            await self.preference_store.clear()
        self._enabled = False
        logfire.info("Biometric preferences cleared")

    async def complete_biometric_setup(self) -> None:
        """Enable biometrics for the signed-in user.

        Raises:
            ConfigurationError: If nobody is signed in
            BiometricsNotAvailable: If no usable sensor is present
            BiometricsFailed: If the user was not verified
            StoreError: If the preference cannot be saved
        """
        state = self.state_machine.state
        if not isinstance(state, SignedIn):
            raise ConfigurationError("No signed-in user to enable biometrics for.")

        await self.enable_biometrics()
        await self.handle_successful_biometric_auth(state.user.id)

    async def is_current_user_biometric_enabled(self) -> bool:
        """Whether biometrics are enabled for the signed-in user."""
        state = self.state_machine.state
        if not isinstance(state, SignedIn):
            return False
        with self._store_errors():
            return await self.preference_store.should_require_biometrics(state.user.id)
