"""In-memory secure identity store for testing."""

from typing import Optional

from simpleauth.domain.repository.secure_identity import SecureIdentityStore
from simpleauth.domain.value import StoreNamespace, UserId


class InMemorySecureIdentityStore(SecureIdentityStore):
    """In-memory implementation of SecureIdentityStore for testing."""

    def __init__(self, namespace: StoreNamespace | None = None) -> None:
        self._namespace = namespace or StoreNamespace(service="simpleauth.test")
        self._user_id: Optional[UserId] = None

    @property
    def namespace(self) -> StoreNamespace:
        return self._namespace

    async def get_last_user_id(self) -> Optional[UserId]:
        """Get stored user id."""
        return self._user_id

    async def set_last_user_id(self, user_id: UserId) -> None:
        """Store user id."""
        self._user_id = user_id

    async def clear_last_user_id(self) -> None:
        """Clear stored user id."""
        self._user_id = None
