"""Biometric preference domain model."""

from simpleauth.domain.model.common import DomainModel
from simpleauth.domain.value import UserId


class BiometricPreference(DomainModel):
    """Per-device biometric opt-in.

    Survives sign-out. Only an explicit user action (disable or clear)
    resets it.
    """

    enabled: bool = False
    last_user_id: UserId | None = None

    def requires_biometrics_for(self, user_id: UserId) -> bool:
        """Whether a session for ``user_id`` should be gated behind biometrics.

        Args:
            user_id: User whose session is being resumed

        Returns:
            True if biometrics are enabled and were last used by this user
        """
        return self.enabled and self.last_user_id == user_id
