"""Domain value objects for authentication flows.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum

from pydantic import SecretStr, field_validator

from simpleauth.domain.value.common import RootValueObject, ValueObject


class AuthField(str, Enum):
    """Input fields a sign-in form can highlight after a failure."""

    EMAIL = "email"
    PASSWORD = "password"
    DISPLAY_NAME = "display_name"


class CredentialPurpose(str, Enum):
    """Why a provider credential was captured for later use.

    LINK credentials are attached to the account the user re-authenticates
    into. MERGE credentials are replayed to sign into the existing account.
    """

    LINK = "link"
    MERGE = "merge"


class BiometryKind(str, Enum):
    """Kind of biometric sensor, valued by its display label."""

    FACE_ID = "Face ID"
    TOUCH_ID = "Touch ID"
    GENERIC = "Biometrics"


class BiometricFailureReason(str, Enum):
    """Reason the biometric prompt did not succeed."""

    AUTHENTICATION_FAILED = "authentication_failed"
    USER_CANCEL = "user_cancel"
    USER_FALLBACK = "user_fallback"
    SYSTEM_CANCEL = "system_cancel"
    LOCKOUT = "lockout"
    NOT_ENROLLED = "not_enrolled"
    NOT_AVAILABLE = "not_available"


class Email(RootValueObject[str]):
    """E-mail address used as the primary sign-in factor."""

    @field_validator("root")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate the address is plausibly an e-mail and normalize whitespace."""
        v = v.strip()
        if len(v) < 3 or len(v) > 320:
            raise ValueError("Email must be 3-320 characters")
        local, sep, domain = v.partition("@")
        if not sep or not local or not domain:
            raise ValueError("Email must contain a local part and a domain")
        return v


class SignInFactors(ValueObject):
    """Credentials typed by the user for e-mail/password flows.

    ``display_name`` is only used when creating an account.
    """

    email: Email
    password: SecretStr
    display_name: str | None = None


class StoreNamespace(ValueObject):
    """Keychain-style namespace the secure identity store writes into.

    An isolated namespace uses the app's own service name and no access
    group. A shared namespace uses a common service name plus an access
    group so sibling apps see the same identity.
    """

    service: str
    access_group: str | None = None

    @property
    def is_shared(self) -> bool:
        """Whether the namespace is visible to other apps in the access group."""
        return self.access_group is not None
