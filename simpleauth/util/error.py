"""Errors raised while wiring the package together.

These never describe an authentication failure; those are classified into
``simpleauth.domain.error``.
"""


class UtilError(Exception):
    """Base error for wiring and tooling problems."""


class DependencyInjectionError(UtilError):
    """No provider implementation matches the requested component.

    Attributes:
        component: Component (or provider base name) that could not be resolved
        use_mock: Whether a mock implementation was requested
    """

    def __init__(self, component: str, use_mock: bool) -> None:
        self.component = component
        self.use_mock = use_mock
        kind = "mock" if use_mock else "production"
        super().__init__(f"No {kind} implementation for {component}")
