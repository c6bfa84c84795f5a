"""BiometricPreferenceStore implementation using SQLite."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from simpleauth.domain.repository.biometric_preference import BiometricPreferenceStore
from simpleauth.domain.value import StoreNamespace, UserId
from simpleauth.persistence.repository.secure_item import SqliteSecureItems

ENABLED_ACCOUNT = "biometric_enabled"
LAST_USER_ACCOUNT = "biometric_last_user_id"


class SqliteBiometricPreferenceStore(BiometricPreferenceStore):
    """SQLite implementation of BiometricPreferenceStore."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        namespace: StoreNamespace,
    ) -> None:
        """Initialize store.

        Args:
            session_factory: Factory for database sessions
            namespace: Namespace the preference items live in
        """
        self.items = SqliteSecureItems(session_factory, namespace)

    async def is_enabled(self) -> bool:
        return await self.items.read(ENABLED_ACCOUNT) == "1"

    async def set_enabled(self, enabled: bool) -> None:
        await self.items.write(ENABLED_ACCOUNT, "1" if enabled else "0")

    async def last_user_id(self) -> Optional[UserId]:
        value = await self.items.read(LAST_USER_ACCOUNT)
        return UserId(value) if value is not None else None

    async def set_last_user_id(self, user_id: Optional[UserId]) -> None:
        if user_id is None:
            await self.items.delete(LAST_USER_ACCOUNT)
        else:
            await self.items.write(LAST_USER_ACCOUNT, user_id)

    async def clear(self) -> None:
        await self.items.delete(ENABLED_ACCOUNT, LAST_USER_ACCOUNT)
