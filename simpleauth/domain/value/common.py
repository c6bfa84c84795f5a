"""Immutable value object bases."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel

RootT = TypeVar("RootT")


class ValueObject(BaseModel):
    """Immutable record compared field by field.

    Inputs such as sign-in factors and store namespaces are passed between
    layers but never changed once built.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")


class RootValueObject(RootModel[RootT], Generic[RootT]):
    """Immutable wrapper around one primitive, e.g. an e-mail address.

    ``.root`` holds the primitive. ``str()`` renders it, so wrapped values
    can go straight into log attributes and messages.
    """

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.root)
