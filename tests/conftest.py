"""Test configuration and fixtures."""

from pydantic import SecretStr

from simpleauth.domain.model import User
from simpleauth.domain.value import (
    PASSWORD_PROVIDER,
    Email,
    ProviderId,
    SignInFactors,
    UserId,
)


def make_factors(
    email: str = "a@x.com",
    password: str = "correct-horse",
    display_name: str | None = None,
) -> SignInFactors:
    """Build sign-in factors for tests."""
    return SignInFactors(
        email=Email(email), password=SecretStr(password), display_name=display_name
    )


def make_user(
    email: str = "a@x.com",
    user_id: str | None = None,
    provider_id: ProviderId = PASSWORD_PROVIDER,
    is_anonymous: bool = False,
) -> User:
    """Build a user the way MockIdentityProviderClient would for ``email``."""
    return User(
        id=UserId(user_id or f"user:{email}"),
        email=email,
        provider_id=provider_id,
        is_anonymous=is_anonymous,
    )
