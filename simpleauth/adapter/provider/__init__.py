"""Identity provider adapters."""

from simpleauth.adapter.provider.client import MockIdentityProviderClient

__all__ = ["MockIdentityProviderClient"]
