"""Keychain-style item access shared by the SQLite-backed stores."""

from typing import Optional

import logfire
from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from simpleauth.adapter.error import SecureStoreError, SecureStoreStatus
from simpleauth.domain.value import StoreNamespace
from simpleauth.persistence.tables import secure_items_table


class SqliteSecureItems:
    """Reads and writes string items under one namespace.

    Each call runs in its own session and commits before returning, so a
    write is durable once the awaiting caller resumes.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        namespace: StoreNamespace,
    ) -> None:
        """Initialize item access.

        Args:
            session_factory: Factory for database sessions
            namespace: Service and access group every item is keyed under
        """
        self.session_factory = session_factory
        self.namespace = namespace

    def _key(self, account: str):
        table = secure_items_table
        group = self.namespace.access_group
        return and_(
            table.c.service == self.namespace.service,
            table.c.account == account,
            table.c.access_group.is_(None)
            if group is None
            else table.c.access_group == group,
        )

    async def read(self, account: str) -> Optional[str]:
        """Read the item stored under ``account``.

        Args:
            account: Item key within the namespace

        Returns:
            The stored value, None if absent

        Raises:
            SecureStoreError: If the database cannot be read
        """
        stmt = select(secure_items_table.c.value).where(self._key(account))
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logfire.error(
                "Secure item read failed",
                service=self.namespace.service,
                account=account,
                error=str(e),
            )
            raise SecureStoreError(SecureStoreStatus.IO_ERROR, "Read failed") from e

    async def write(self, account: str, value: str) -> None:
        """Insert or replace the item stored under ``account``.

        Args:
            account: Item key within the namespace
            value: Value to store

        Raises:
            SecureStoreError: If the database rejects the write
        """
        table = secure_items_table
        try:
            async with self.session_factory() as session:
                existing = await session.execute(
                    select(table.c.id).where(self._key(account))
                )
                item_id = existing.scalar_one_or_none()

                if item_id is not None:
                    stmt = (
                        table.update()
                        .where(table.c.id == item_id)
                        .values(value=value, updated_at=func.now())
                    )
                else:
                    stmt = table.insert().values(
                        service=self.namespace.service,
                        account=account,
                        access_group=self.namespace.access_group,
                        value=value,
                    )
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            logfire.error(
                "Secure item write failed",
                service=self.namespace.service,
                account=account,
                error=str(e),
            )
            raise SecureStoreError(SecureStoreStatus.IO_ERROR, "Write failed") from e

    async def delete(self, *accounts: str) -> None:
        """Delete items; deleting a missing item is not an error.

        Args:
            accounts: Item keys to delete (all items in the namespace if none)

        Raises:
            SecureStoreError: If the database rejects the delete
        """
        table = secure_items_table
        if accounts:
            conditions = [self._key(account) for account in accounts]
        else:
            group = self.namespace.access_group
            conditions = [
                and_(
                    table.c.service == self.namespace.service,
                    table.c.access_group.is_(None)
                    if group is None
                    else table.c.access_group == group,
                )
            ]
        try:
            async with self.session_factory() as session:
                for condition in conditions:
                    await session.execute(delete(table).where(condition))
                await session.commit()
        except SQLAlchemyError as e:
            logfire.error(
                "Secure item delete failed",
                service=self.namespace.service,
                error=str(e),
            )
            raise SecureStoreError(SecureStoreStatus.IO_ERROR, "Delete failed") from e
