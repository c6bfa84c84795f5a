"""Secure identity store interface."""

from abc import ABC, abstractmethod
from typing import Optional

from simpleauth.domain.value import StoreNamespace, UserId


class SecureIdentityStore(ABC):
    """Remembers which user last signed in on this device.

    Backed by platform secure storage. The value is namespaced so it is
    either private to this app or shared with sibling apps in an access
    group.
    """

    @property
    @abstractmethod
    def namespace(self) -> StoreNamespace:
        """Namespace the store reads and writes."""
        pass

    @abstractmethod
    async def get_last_user_id(self) -> Optional[UserId]:
        """Read the last signed-in user id.

        Returns:
            The stored id, None if nothing is stored

        Raises:
            SecureStoreError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def set_last_user_id(self, user_id: UserId) -> None:
        """Store the last signed-in user id, replacing any previous value.

        Args:
            user_id: Id to store

        Raises:
            SecureStoreError: If the store rejects the write
        """
        pass

    @abstractmethod
    async def clear_last_user_id(self) -> None:
        """Remove the stored id. Clearing an empty store is not an error.

        Raises:
            SecureStoreError: If the store rejects the delete
        """
        pass
