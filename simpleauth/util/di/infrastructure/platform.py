"""Platform infrastructure providers.

The identity provider SDK wrapper and the biometric sensor belong to the
host application; production containers receive them as context.
"""

from dishka import Scope, from_context

from simpleauth.domain.service import BiometricGateway, IdentityProviderClient
from simpleauth.util.di.base import ProviderBase


class PlatformProvider(ProviderBase):
    """Platform component base."""

    __mock_component__ = "platform"


class ProdPlatformProvider(PlatformProvider):
    """Production platform provider reading adapters from container context."""

    __is_mock__ = False

    identity_provider = from_context(provides=IdentityProviderClient, scope=Scope.APP)
    biometric_gateway = from_context(provides=BiometricGateway, scope=Scope.APP)
