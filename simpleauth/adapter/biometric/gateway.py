"""Scripted biometric gateway."""

import asyncio
from collections import deque

from simpleauth.adapter.error import BiometricPromptError
from simpleauth.domain.service.biometric_gateway import BiometricGateway
from simpleauth.domain.value import BiometricFailureReason, BiometryKind


class MockBiometricGateway(BiometricGateway):
    """Mock biometric sensor for testing.

    Prompts succeed unless failures are queued with ``fail_next``.
    """

    def __init__(
        self, available: bool = True, kind: BiometryKind = BiometryKind.FACE_ID
    ) -> None:
        self.available = available
        self._kind = kind
        self._failures: deque[BiometricFailureReason] = deque()
        self._gate: asyncio.Event | None = None
        self.prompts: list[str] = []

    def fail_next(self, *reasons: BiometricFailureReason) -> None:
        """Queue failures for the next prompts."""
        self._failures.extend(reasons)

    def pause(self) -> None:
        """Hold prompts until ``resume`` is called."""
        self._gate = asyncio.Event()

    def resume(self) -> None:
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    def is_available(self) -> bool:
        return self.available

    def kind(self) -> BiometryKind:
        return self._kind

    async def prompt(self, reason: str) -> None:
        self.prompts.append(reason)
        if self._gate is not None:
            await self._gate.wait()
        if not self.available:
            raise BiometricPromptError(BiometricFailureReason.NOT_AVAILABLE)
        if self._failures:
            raise BiometricPromptError(self._failures.popleft())
