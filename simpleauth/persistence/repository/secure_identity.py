"""SecureIdentityStore implementation using SQLite."""

from typing import Optional

import logfire
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from simpleauth.domain.repository.secure_identity import SecureIdentityStore
from simpleauth.domain.value import StoreNamespace, UserId
from simpleauth.persistence.repository.secure_item import SqliteSecureItems


class SqliteSecureIdentityStore(SecureIdentityStore):
    """SQLite implementation of SecureIdentityStore."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        namespace: StoreNamespace,
        account: str = "lastUserID",
    ) -> None:
        """Initialize store.

        Args:
            session_factory: Factory for database sessions
            namespace: Isolated or shared namespace to write into
            account: Item key the user id is stored under
        """
        self.items = SqliteSecureItems(session_factory, namespace)
        self.account = account

    @property
    def namespace(self) -> StoreNamespace:
        return self.items.namespace

    async def get_last_user_id(self) -> Optional[UserId]:
        value = await self.items.read(self.account)
        return UserId(value) if value is not None else None

    async def set_last_user_id(self, user_id: UserId) -> None:
        await self.items.write(self.account, user_id)
        logfire.info(
            "Last user id stored",
            service=self.namespace.service,
            shared=self.namespace.is_shared,
        )

    async def clear_last_user_id(self) -> None:
        await self.items.delete(self.account)
        logfire.info("Last user id cleared", service=self.namespace.service)
