"""In-memory biometric preference store for testing."""

from typing import Optional

from simpleauth.domain.repository.biometric_preference import BiometricPreferenceStore
from simpleauth.domain.value import UserId


class InMemoryBiometricPreferenceStore(BiometricPreferenceStore):
    """In-memory implementation of BiometricPreferenceStore for testing."""

    def __init__(self) -> None:
        self._enabled = False
        self._last_user_id: Optional[UserId] = None

    async def is_enabled(self) -> bool:
        return self._enabled

    async def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    async def last_user_id(self) -> Optional[UserId]:
        return self._last_user_id

    async def set_last_user_id(self, user_id: Optional[UserId]) -> None:
        self._last_user_id = user_id

    async def clear(self) -> None:
        self._enabled = False
        self._last_user_id = None
