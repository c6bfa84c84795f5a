"""Biometric preference store interface."""

from abc import ABC, abstractmethod
from typing import Optional

from simpleauth.domain.model.biometric import BiometricPreference
from simpleauth.domain.value import UserId


class BiometricPreferenceStore(ABC):
    """Persists the per-device biometric opt-in.

    Independent of the authentication state: values survive sign-out and
    are only reset by an explicit disable or clear.
    """

    @abstractmethod
    async def is_enabled(self) -> bool:
        """Whether the user opted into biometric sign-in."""
        pass

    @abstractmethod
    async def set_enabled(self, enabled: bool) -> None:
        """Record the opt-in flag."""
        pass

    @abstractmethod
    async def last_user_id(self) -> Optional[UserId]:
        """User who last unlocked with biometrics on this device."""
        pass

    @abstractmethod
    async def set_last_user_id(self, user_id: Optional[UserId]) -> None:
        """Record (or forget, with None) the last biometric user."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Forget every stored preference."""
        pass

    async def load(self) -> BiometricPreference:
        """Read the full preference record."""
        return BiometricPreference(
            enabled=await self.is_enabled(), last_user_id=await self.last_user_id()
        )

    async def should_require_biometrics(self, user_id: UserId) -> bool:
        """Whether a session for ``user_id`` should be gated behind biometrics.

        Args:
            user_id: User whose session is being resumed

        Returns:
            True if biometrics are enabled and were last used by this user
        """
        preference = await self.load()
        return preference.requires_biometrics_for(user_id)

    async def record_successful_auth(self, user_id: UserId) -> None:
        """Enable biometrics for ``user_id`` after a successful prompt.

        Args:
            user_id: User who just passed the biometric prompt
        """
        await self.set_enabled(True)
        await self.set_last_user_id(user_id)
