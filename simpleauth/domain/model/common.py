"""Base for domain entities and states."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Immutable domain record.

    Entities and states are replaced, never mutated: a profile refresh yields
    a new ``User`` and every transition publishes a new ``AuthState``.
    """

    model_config = ConfigDict(frozen=True)
