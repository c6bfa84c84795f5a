"""Application configuration."""

from typing import Literal

from pydantic import BaseModel, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from simpleauth.domain.value.types import StoreNamespace

# Keychain-style service shared by every app that opts into cross-app sign-in
DEFAULT_SHARED_SERVICE = "io.appsimple.ASimpleAuthKit.SharedAuth"


class SecureStoreSettings(BaseModel):
    """Secure identity store configuration."""

    # Service name used when identity is isolated to this app
    bundle_id: str = "io.appsimple.simpleauth"

    # Account key under which the last signed-in user id is stored
    account: str = "lastUserID"

    # When True, the identity is stored under the shared service so sibling
    # apps in the same access group can see it
    share_across_apps: bool = False
    shared_service: str = DEFAULT_SHARED_SERVICE
    access_group: str | None = None

    @computed_field
    @property
    def namespace(self) -> StoreNamespace:
        """Namespace the secure identity store writes into.

        Isolated: service=<bundle_id>, no access group
        Shared:   service=<shared_service>, access_group=<access_group>
        """
        if self.share_across_apps:
            return StoreNamespace(
                service=self.shared_service, access_group=self.access_group
            )
        return StoreNamespace(service=self.bundle_id, access_group=None)


class BiometricSettings(BaseModel):
    """Biometric gate configuration."""

    # Prompt text shown when the caller does not supply one
    default_reason: str = "Sign in to your account"

    # Reason used for the verification prompt when enabling biometrics
    setup_reason: str = "Enable biometric sign in"

    # Service name of the preference record (set by Settings validator)
    preference_service: str = ""


class StorageSettings(BaseModel):
    """Device-local storage configuration."""

    url: str = "sqlite+aiosqlite:///simpleauth.db"
    echo: bool = False


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via SIMPLEAUTH_OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # Whether to send telemetry to Logfire cloud
    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, e.g.:

        SIMPLEAUTH_ENVIRONMENT=production
        SIMPLEAUTH_SECURE_STORE__SHARE_ACROSS_APPS=true
        SIMPLEAUTH_SECURE_STORE__ACCESS_GROUP=TEAMID.io.appsimple.shared
        SIMPLEAUTH_STORAGE__URL=sqlite+aiosqlite:////var/lib/app/auth.db
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMPLEAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows STORAGE__URL syntax
        extra="ignore",
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Nested settings
    secure_store: SecureStoreSettings = SecureStoreSettings()
    biometrics: BiometricSettings = BiometricSettings()
    storage: StorageSettings = StorageSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    @model_validator(mode="after")
    def initialize_derived_settings(self) -> "Settings":
        """Validate store sharing and derive the preference service name."""
        if self.secure_store.share_across_apps and not self.secure_store.access_group:
            raise ValueError(
                "secure_store.access_group is required when share_across_apps is set"
            )

        if not self.biometrics.preference_service:
            self.biometrics.preference_service = (
                f"{self.secure_store.bundle_id}.BiometricPreferences"
            )

        return self
