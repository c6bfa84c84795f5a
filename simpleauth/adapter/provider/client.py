"""Scripted identity provider client.

Stands in for a real provider SDK in tests and local development. Results
are deterministic unless a test scripts them, and every call is recorded.
"""

import asyncio
import itertools
from collections import defaultdict, deque
from typing import Any

import logfire

from simpleauth.adapter.error import IdentityProviderError, ProviderErrorCode
from simpleauth.domain.model.user import User
from simpleauth.domain.service.identity_provider import (
    IdentityProviderClient,
    SessionListener,
)
from simpleauth.domain.value import (
    PASSWORD_PROVIDER,
    ProviderId,
    SignInFactors,
    UserId,
)


class MockIdentityProviderClient(IdentityProviderClient):
    """Mock identity provider client for testing.

    By default every sign-in succeeds with a user derived from its input
    (``user:<email>`` or ``<provider>:mock-user``). Use ``script`` to queue
    results for an operation: a ``User`` is returned, an exception is raised.
    ``pause``/``resume`` hold every provider call until released so tests can
    observe the in-flight state.
    """

    def __init__(self) -> None:
        """Initialize mock client without a session."""
        self._current_user: User | None = None
        self._stashed_credential: Any = None
        self._listeners: dict[int, SessionListener] = {}
        self._handles = itertools.count(1)
        self._scripts: dict[str, deque[User | Exception]] = defaultdict(deque)
        self._gate: asyncio.Event | None = None
        self.calls: list[tuple[str, Any]] = []

    # Test controls

    def script(self, operation: str, *outcomes: User | Exception) -> None:
        """Queue outcomes for the next calls of ``operation``.

        Args:
            operation: Method name, e.g. "sign_in" or "attach_credential"
            outcomes: Users to return or exceptions to raise, in order
        """
        self._scripts[operation].extend(outcomes)

    def stash_credential(self, credential: Any) -> None:
        """Simulate an SDK that keeps the collision credential itself."""
        self._stashed_credential = credential

    def pause(self) -> None:
        """Hold every provider call until ``resume`` is called."""
        self._gate = asyncio.Event()

    def resume(self) -> None:
        """Release held provider calls."""
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    def call_count(self, operation: str) -> int:
        """Number of recorded calls of ``operation``."""
        return sum(1 for name, _ in self.calls if name == operation)

    def set_current_user(self, user: User | None) -> None:
        """Set the local session without notifying listeners."""
        self._current_user = user

    async def simulate_session_change(self, user: User | None) -> None:
        """Change the session as a background token refresh or revocation would."""
        self._current_user = user
        await self._notify()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # IdentityProviderClient

    @property
    def current_user(self) -> User | None:
        return self._current_user

    async def sign_in(self, factors: SignInFactors) -> User:
        email = factors.email.root
        default = User(
            id=UserId(f"user:{email}"),
            email=email,
            provider_id=PASSWORD_PROVIDER,
        )
        return await self._establish("sign_in", email, default)

    async def create_account(self, factors: SignInFactors) -> User:
        email = factors.email.root
        default = User(
            id=UserId(f"user:{email}"),
            email=email,
            display_name=factors.display_name,
            provider_id=PASSWORD_PROVIDER,
        )
        return await self._establish("create_account", email, default)

    async def sign_in_with_federated_provider(
        self, provider_id: ProviderId, presentation_context: Any = None
    ) -> User:
        default = User(
            id=UserId(f"{provider_id}:mock-user"),
            email=f"mock@{provider_id}",
            provider_id=provider_id,
        )
        return await self._establish(
            "sign_in_with_federated_provider", provider_id, default
        )

    async def sign_in_with_credential(self, credential: Any) -> User:
        default = User(id=UserId(f"credential:{credential}"))
        return await self._establish("sign_in_with_credential", credential, default)

    async def attach_credential(self, credential: Any, user_id: UserId) -> User:
        if self._current_user is None or self._current_user.id != user_id:
            await self._record("attach_credential", credential)
            raise IdentityProviderError(
                ProviderErrorCode.USER_NOT_FOUND, "No session for the user"
            )
        default = self._current_user
        user = await self._run("attach_credential", credential, default)
        self._current_user = user
        return user

    async def send_password_reset(self, email: str) -> None:
        await self._run("send_password_reset", email, None)

    async def sign_out(self) -> None:
        await self._run("sign_out", None, None)
        self._current_user = None
        await self._notify()

    def pending_credential(self) -> Any:
        return self._stashed_credential

    def clear_pending_credential(self) -> None:
        self._stashed_credential = None

    def add_session_listener(self, listener: SessionListener) -> int:
        handle = next(self._handles)
        self._listeners[handle] = listener
        return handle

    def remove_session_listener(self, handle: int) -> None:
        self._listeners.pop(handle, None)

    # Internals

    async def _record(self, operation: str, argument: Any) -> None:
        self.calls.append((operation, argument))
        if self._gate is not None:
            await self._gate.wait()

    async def _run(self, operation: str, argument: Any, default: Any) -> Any:
        await self._record(operation, argument)
        queue = self._scripts.get(operation)
        outcome = queue.popleft() if queue else default
        if isinstance(outcome, Exception):
            logfire.info("Mock provider failing", operation=operation)
            raise outcome
        return outcome

    async def _establish(self, operation: str, argument: Any, default: User) -> User:
        user = await self._run(operation, argument, default)
        self._current_user = user
        await self._notify()
        return user

    async def _notify(self) -> None:
        for listener in list(self._listeners.values()):
            await listener(self._current_user)
