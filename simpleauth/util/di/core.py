"""Configuration providers."""

from dishka import Scope, provide

from simpleauth.config import BiometricSettings, SecureStoreSettings, Settings
from simpleauth.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings and the sections components depend on.

    ``Settings`` reads SIMPLEAUTH_* variables and ``.env`` once per container.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        return Settings()

    @provide
    def provide_secure_store_settings(self, settings: Settings) -> SecureStoreSettings:
        """Namespace and account of the remembered identity."""
        return settings.secure_store

    @provide
    def provide_biometric_settings(self, settings: Settings) -> BiometricSettings:
        """Prompt texts and the preference service name."""
        return settings.biometrics
