"""Dependency injection wiring for simpleauth."""

from typing import Type

from simpleauth.util.di.application import ProdApplicationProvider
from simpleauth.util.di.base import Component, ProviderBase
from simpleauth.util.di.core import ProdConfigProvider
from simpleauth.util.di.domain import ProdDomainProvider
from simpleauth.util.di.infrastructure import (
    PersistenceProvider,
    PlatformProvider,
    ProdPersistenceProvider,
    ProdPlatformProvider,
)
from simpleauth.util.error import DependencyInjectionError

# Fixed providers first, then the swappable components
PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    PersistenceProvider,
    PlatformProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve the provider class to instantiate for ``base``.

    Args:
        base: Entry of PROVIDERS
        use_mock: Pick the mock side of a swappable component

    Returns:
        ``base`` itself for fixed providers, otherwise the subclass whose
        ``__is_mock__`` equals ``use_mock``

    Raises:
        DependencyInjectionError: If the component has no such implementation
    """
    implementations = base.__subclasses__()
    if not implementations:
        return base

    for impl in implementations:
        if getattr(impl, "__is_mock__", False) == use_mock:
            return impl

    component = base.__mock_component__ or base.__name__
    raise DependencyInjectionError(component, use_mock)


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "PersistenceProvider",
    "PlatformProvider",
    "ProdPersistenceProvider",
    "ProdPlatformProvider",
]
