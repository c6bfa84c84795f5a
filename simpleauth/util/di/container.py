"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from simpleauth.domain.service import BiometricGateway, IdentityProviderClient
from simpleauth.util.di import PROVIDERS, get_provider


def create_container(
    identity_provider: IdentityProviderClient,
    biometric_gateway: BiometricGateway,
) -> AsyncContainer:
    """Build production container (all prod implementations).

    Settings are loaded from environment variables automatically. The host
    application supplies its platform adapters.

    Args:
        identity_provider: Wrapper around the identity provider SDK
        biometric_gateway: Wrapper around the platform biometric sensor

    Returns:
        Configured DI container with production providers
    """
    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(
        *provider_instances,
        context={
            IdentityProviderClient: identity_provider,
            BiometricGateway: biometric_gateway,
        },
    )
