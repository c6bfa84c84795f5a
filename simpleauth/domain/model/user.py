"""User domain model."""

from simpleauth.domain.model.common import DomainModel
from simpleauth.domain.value import ProviderId, UserId


class User(DomainModel):
    """Identity returned by the provider for an established session.

    Two users are the same user when their provider-assigned ids match;
    profile fields may change between sessions without changing identity.
    """

    id: UserId
    email: str | None = None
    display_name: str | None = None
    is_anonymous: bool = False
    provider_id: ProviderId | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
