"""Strongly typed identifiers for authentication entities.

User ids are opaque strings assigned by the identity provider; provider ids
name the sign-in method that produced a credential (e.g. "password",
"google.com", "apple.com").
"""

from typing import NewType

UserId = NewType("UserId", str)
ProviderId = NewType("ProviderId", str)

# Well-known provider ids
PASSWORD_PROVIDER = ProviderId("password")
GOOGLE_PROVIDER = ProviderId("google.com")
APPLE_PROVIDER = ProviderId("apple.com")
