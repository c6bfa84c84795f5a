"""Provider base class and component names."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with a mock and a production implementation
Component = Literal["persistence", "platform"]


class ProviderBase(Provider):
    """Base for every simpleauth provider.

    A base class that declares ``__mock_component__`` is a swappable
    component; its subclasses set ``__is_mock__`` to say which side they
    implement. A provider with no subclasses is always used as-is.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
