"""Identity provider client interface."""

from collections.abc import Awaitable, Callable
from typing import Any

from simpleauth.domain.model.user import User
from simpleauth.domain.value import ProviderId, SignInFactors, UserId

# Awaited by the client whenever its session user changes (None on sign-out)
SessionListener = Callable[[User | None], Awaitable[None]]


class IdentityProviderClient:
    """Generic identity provider client interface.

    Implementations wrap a remote identity provider SDK. Every failure is
    raised as ``IdentityProviderError``; collision failures attach the
    credential involved so the flow can be resumed.
    """

    @property
    def current_user(self) -> User | None:
        """User of the locally established session, if any."""
        raise NotImplementedError

    async def sign_in(self, factors: SignInFactors) -> User:
        """Sign in with e-mail and password.

        Args:
            factors: E-mail and password typed by the user

        Returns:
            The signed-in user
        """
        raise NotImplementedError

    async def create_account(self, factors: SignInFactors) -> User:
        """Register a new e-mail/password account and sign into it.

        Args:
            factors: E-mail, password and optional display name

        Returns:
            The newly created user
        """
        raise NotImplementedError

    async def sign_in_with_federated_provider(
        self, provider_id: ProviderId, presentation_context: Any = None
    ) -> User:
        """Run a federated sign-in (Google, Apple, ...).

        Args:
            provider_id: Federated provider to use
            presentation_context: Platform object the provider UI is shown from

        Returns:
            The signed-in user
        """
        raise NotImplementedError

    async def sign_in_with_credential(self, credential: Any) -> User:
        """Sign in with a previously captured provider credential.

        Args:
            credential: Opaque credential captured from an earlier failure

        Returns:
            The signed-in user
        """
        raise NotImplementedError

    async def attach_credential(self, credential: Any, user_id: UserId) -> User:
        """Link a captured credential to the current session's account.

        Args:
            credential: Opaque credential captured from an earlier failure
            user_id: Id of the session user the credential is attached to

        Returns:
            The user after linking
        """
        raise NotImplementedError

    async def send_password_reset(self, email: str) -> None:
        """Ask the provider to e-mail a password reset link."""
        raise NotImplementedError

    async def sign_out(self) -> None:
        """End the remote session."""
        raise NotImplementedError

    def pending_credential(self) -> Any:
        """Credential the SDK stashed at the last collision, if any."""
        raise NotImplementedError

    def clear_pending_credential(self) -> None:
        """Forget any credential the SDK stashed at a collision."""
        raise NotImplementedError

    def add_session_listener(self, listener: SessionListener) -> Any:
        """Register ``listener`` for session changes.

        Returns:
            Handle to pass to ``remove_session_listener``
        """
        raise NotImplementedError

    def remove_session_listener(self, handle: Any) -> None:
        """Unregister a listener added with ``add_session_listener``."""
        raise NotImplementedError
