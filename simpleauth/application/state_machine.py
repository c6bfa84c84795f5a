"""Authentication state machine."""

from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

import logfire

from simpleauth.adapter.error import SecureStoreError
from simpleauth.config import BiometricSettings
from simpleauth.domain.error import (
    AccountLinkingRequired,
    AuthError,
    Cancelled,
    MergeConflictRequired,
)
from simpleauth.domain.model import (
    AuthState,
    AuthStateKind,
    Authenticating,
    CredentialSlot,
    RequiresBiometrics,
    SignedIn,
    SignedOut,
    User,
)
from simpleauth.domain.service import (
    BiometricGate,
    CredentialLinkOrchestrator,
    ErrorClassifier,
    IdentityProviderClient,
    MergeConflictResolver,
)
from simpleauth.domain.value import (
    PASSWORD_PROVIDER,
    AuthField,
    ProviderId,
    SignInFactors,
)

StateListener = Callable[[AuthState], None]


class AuthStateMachine:
    """Owns the single authoritative AuthState.

    Every public operation checks its guard against the current state and,
    when it proceeds, publishes ``Authenticating`` before its first await.
    Because all mutation happens on one event loop, a second call made while
    an operation is in flight sees ``Authenticating`` and is rejected as a
    logged no-op rather than queued.

    Operations that supersede whatever is in flight (sign-out, cancelling a
    pending action, an honoured session change) bump an epoch counter. An
    operation re-checks the epoch after each await and drops its result if
    it was superseded.

    Failures never propagate to callers: they are classified once and
    recorded in ``last_error``, which every operation clears when it starts.
    """

    def __init__(
        self,
        client: IdentityProviderClient,
        biometric_gate: BiometricGate,
        credential_link: CredentialLinkOrchestrator,
        merge_conflict: MergeConflictResolver,
        classifier: ErrorClassifier,
        slot: CredentialSlot,
        biometric_settings: BiometricSettings,
    ) -> None:
        """Initialize state machine in SignedOut.

        Args:
            client: Identity provider client
            biometric_gate: Decides and runs the biometric unlock
            credential_link: Account linking flow
            merge_conflict: Merge conflict flow
            classifier: Maps raw failures into the error taxonomy
            slot: Slot shared by the linking and merge flows
            biometric_settings: Biometric prompt defaults
        """
        self.client = client
        self.biometric_gate = biometric_gate
        self.credential_link = credential_link
        self.merge_conflict = merge_conflict
        self.classifier = classifier
        self.slot = slot
        self.biometric_settings = biometric_settings

        self._state: AuthState = SignedOut()
        self._last_error: AuthError | None = None
        # Pending state to return to if a re-authentication is cancelled
        self._resume_state: AuthState | None = None
        self._epoch = 0
        self._listeners: list[StateListener] = []
        self._session_handle: Any = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def last_error(self) -> AuthError | None:
        """Most recent classified failure, None after a clean operation."""
        return self._last_error

    @property
    def has_pending_credential(self) -> bool:
        return not self.slot.is_empty

    @property
    def fields_to_highlight(self) -> frozenset[AuthField]:
        """Form fields the last error relates to."""
        return self.classifier.fields_to_highlight(self._last_error)

    @property
    def is_biometrics_available(self) -> bool:
        return self.biometric_gate.is_available()

    @property
    def biometry_kind_label(self) -> str:
        return self.biometric_gate.kind_label

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state.

        Args:
            listener: Synchronous callback receiving the new state

        Returns:
            Callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Listen for session changes and adopt any existing session."""
        if self._session_handle is None:
            self._session_handle = self.client.add_session_listener(
                self._on_session_changed
            )
        user = self.client.current_user
        logfire.info("Auth state machine started", has_session=user is not None)
        if user is not None:
            await self._on_session_changed(user)

    def close(self) -> None:
        """Stop listening for session changes."""
        if self._session_handle is not None:
            self.client.remove_session_listener(self._session_handle)
            self._session_handle = None

    # ------------------------------------------------------------------
    # Sign-in
    # ------------------------------------------------------------------

    async def sign_in_with_credentials(self, factors: SignInFactors) -> None:
        """Sign in with e-mail and password.

        Args:
            factors: E-mail and password typed by the user
        """
        await self._sign_in(
            "sign_in_with_credentials",
            partial(self.client.sign_in, factors),
            email=factors.email.root,
            provider_id=PASSWORD_PROVIDER,
            message="Signing in...",
        )

    async def create_account(self, factors: SignInFactors) -> None:
        """Create an e-mail/password account and sign into it.

        Args:
            factors: E-mail, password and optional display name
        """
        await self._sign_in(
            "create_account",
            partial(self.client.create_account, factors),
            email=factors.email.root,
            provider_id=PASSWORD_PROVIDER,
            message="Creating account...",
        )

    async def sign_in_with_federated_provider(
        self, provider_id: ProviderId, presentation_context: Any = None
    ) -> None:
        """Sign in with a federated provider such as Google or Apple.

        Args:
            provider_id: Federated provider to use
            presentation_context: Platform object the provider UI is shown from
        """
        await self._sign_in(
            "sign_in_with_federated_provider",
            partial(
                self.client.sign_in_with_federated_provider,
                provider_id,
                presentation_context,
            ),
            email=None,
            provider_id=provider_id,
            message="Signing in...",
        )

    async def _sign_in(
        self,
        operation: str,
        call: Callable[[], Awaitable[User]],
        *,
        email: str | None,
        provider_id: ProviderId,
        message: str,
    ) -> None:
        if not self._state.allows_sign_in_attempt:
            logfire.warn(
                "Sign-in rejected", operation=operation, state=self._state.kind.value
            )
            return

        prior = self._state
        if prior.is_pending_resolution:
            # Re-authentication: keep the captured credential
            self._resume_state = prior
        else:
            self._resume_state = None
            self._discard_pending()

        epoch = self._begin(Authenticating(message=message))

        with logfire.span(
            "auth_state_machine.{operation}",
            operation=operation,
            provider_id=provider_id,
            reauthentication=prior.is_pending_resolution,
        ):
            try:
                user = await call()
            except Exception as e:
                if self._is_current(epoch):
                    self._handle_sign_in_failure(e, email, provider_id)
                return

            if not self._is_current(epoch):
                return

            if self.credential_link.has_pending_link:
                try:
                    user = await self.credential_link.complete(user)
                except AuthError as e:
                    if self._is_current(epoch):
                        self._fail(e)
                    return
                if not self._is_current(epoch):
                    return
            else:
                # The user signed into the existing account directly, which
                # settles any merge conflict left in the slot
                self._discard_pending()

            await self._settle(user, epoch)

    def _handle_sign_in_failure(
        self, error: Exception, email: str | None, provider_id: ProviderId
    ) -> None:
        classification = self.classifier.classify(
            error,
            email=email,
            provider_id=provider_id,
            credential=self.client.pending_credential(),
        )
        classified = classification.error

        if isinstance(classified, Cancelled):
            resume = self._resume_state
            self._resume_state = None
            self._last_error = classified
            if resume is not None:
                logfire.info("Re-authentication cancelled", state=resume.kind.value)
                self._set_state(resume)
            else:
                logfire.info("Sign-in cancelled")
                self._discard_pending()
                self._set_state(SignedOut())
            return

        if isinstance(classified, AccountLinkingRequired):
            self._resume_state = None
            state = self.credential_link.begin(classification)
            self._last_error = classified
            self._set_state(state)
            return

        if isinstance(classified, MergeConflictRequired):
            self._resume_state = None
            try:
                state = self.merge_conflict.begin(classification)
            except AuthError as e:
                self._fail(e)
                return
            self._last_error = classified
            self._set_state(state)
            return

        self._fail(classified)

    async def _settle(self, user: User, epoch: int) -> None:
        """Publish the post-authentication state for ``user``."""
        self._resume_state = None
        if user.is_anonymous:
            self._set_state(SignedIn(user=user))
            return

        state = await self.biometric_gate.determine_state(user)
        if self._is_current(epoch):
            self._set_state(state)

    async def determine_biometric_state(self, user: User) -> None:
        """Publish SignedIn or RequiresBiometrics for an authenticated user.

        Args:
            user: User the provider authenticated
        """
        self._epoch += 1
        await self._settle(user, self._epoch)

    # ------------------------------------------------------------------
    # Sign-out and cancellation
    # ------------------------------------------------------------------

    async def sign_out(self) -> None:
        """Sign out from any state.

        The machine stays in ``Authenticating`` while the remembered user is
        forgotten and the remote session is ended, so no sign-in can start
        until both are done. Their failures are recorded in ``last_error``
        but the call always ends in SignedOut.
        """
        with logfire.span("auth_state_machine.sign_out", state=self._state.kind.value):
            self._discard_pending()
            self._resume_state = None
            epoch = self._begin(Authenticating(message="Signing out..."))

            try:
                await self.biometric_gate.forget_identity()
            except SecureStoreError as e:
                self._last_error = self.classifier.classify(e).error
                logfire.error("Failed to clear remembered user", error=str(e))

            try:
                await self.client.sign_out()
            except Exception as e:
                self._last_error = self.classifier.classify(e).error
                logfire.error("Remote sign-out failed", error=str(e))

            if self._is_current(epoch):
                self._set_state(SignedOut())

    def cancel_pending_action(self) -> None:
        """Abandon a pending linking or merge flow."""
        if not self._state.is_pending_resolution:
            logfire.info(
                "Nothing pending to cancel", state=self._state.kind.value
            )
            return

        logfire.info("Pending action cancelled", state=self._state.kind.value)
        self._epoch += 1
        self._discard_pending()
        self._resume_state = None
        self._last_error = None
        self._set_state(SignedOut())

    # ------------------------------------------------------------------
    # Biometrics
    # ------------------------------------------------------------------

    def require_biometric_authentication(self) -> None:
        """Gate the next sign-in behind biometrics (from SignedOut only)."""
        if self._state.kind != AuthStateKind.SIGNED_OUT:
            logfire.warn(
                "Biometric gate rejected", state=self._state.kind.value
            )
            return
        if not self.biometric_gate.is_available():
            logfire.warn("Biometric gate rejected: sensor unavailable")
            return
        self._set_state(RequiresBiometrics())

    async def authenticate_with_biometrics(self, reason: str | None = None) -> None:
        """Unlock the existing session with the biometric prompt.

        Args:
            reason: Prompt text (defaults to the configured reason)
        """
        if self._state.kind != AuthStateKind.REQUIRES_BIOMETRICS:
            logfire.warn(
                "Biometric authentication rejected", state=self._state.kind.value
            )
            return

        user = self.client.current_user
        if user is None:
            logfire.warn("No session to unlock with biometrics")
            self._epoch += 1
            self._last_error = None
            self._set_state(SignedOut())
            return

        label = self.biometric_gate.kind_label
        epoch = self._begin(Authenticating(message=f"Authenticating with {label}..."))

        with logfire.span(
            "auth_state_machine.authenticate_with_biometrics", user_id=user.id
        ):
            try:
                await self.biometric_gate.verify(
                    reason or self.biometric_settings.default_reason
                )
            except Exception as e:
                if self._is_current(epoch):
                    error = self.classifier.classify(e).error
                    logfire.warn("Biometric authentication failed", error=error.message)
                    self._last_error = error
                    self._set_state(RequiresBiometrics())
                return

            if not self._is_current(epoch):
                return

            current = self.client.current_user
            if current is None or current.id != user.id:
                logfire.error(
                    "Session changed during biometric prompt",
                    expected_user_id=user.id,
                    current_user_id=current.id if current else None,
                )
                self._set_state(SignedOut())
                return

            await self.biometric_gate.record_unlock(current.id)
            if self._is_current(epoch):
                self._set_state(SignedIn(user=current))

    # ------------------------------------------------------------------
    # Merge conflict
    # ------------------------------------------------------------------

    async def proceed_with_merge_conflict_resolution(self) -> None:
        """Sign into the account that owns the conflicting credential."""
        if self._state.kind != AuthStateKind.REQUIRES_MERGE_CONFLICT_RESOLUTION:
            logfire.warn(
                "Merge resolution rejected", state=self._state.kind.value
            )
            return

        self._resume_state = None
        epoch = self._begin(Authenticating(message="Signing in to existing account..."))

        try:
            user = await self.merge_conflict.resolve()
        except AuthError as e:
            if self._is_current(epoch):
                self._fail(e)
            return

        if self._is_current(epoch):
            await self._settle(user, epoch)

    # ------------------------------------------------------------------
    # Side channels
    # ------------------------------------------------------------------

    async def send_password_reset(self, email: str) -> None:
        """Request a password reset e-mail. Never changes the state.

        Args:
            email: Address to send the reset link to
        """
        self._last_error = None
        with logfire.span("auth_state_machine.send_password_reset"):
            try:
                await self.client.send_password_reset(email)
            except Exception as e:
                self._last_error = self.classifier.classify(e, email=email).error
                logfire.warn("Password reset failed", error=self._last_error.message)
                return
            logfire.info("Password reset requested")

    # ------------------------------------------------------------------
    # Session notifications
    # ------------------------------------------------------------------

    async def _on_session_changed(self, user: User | None) -> None:
        if not self._state.is_idle:
            logfire.info(
                "Session change ignored",
                state=self._state.kind.value,
                has_user=user is not None,
            )
            return

        if user is None:
            if self._state.kind == AuthStateKind.SIGNED_OUT:
                return
            logfire.info("Session ended remotely")
            self._discard_pending()
            epoch = self._begin(Authenticating(message="Signing out..."))
            try:
                await self.biometric_gate.forget_identity()
            except SecureStoreError as e:
                logfire.warn("Failed to clear remembered user", error=str(e))
            if self._is_current(epoch):
                self._set_state(SignedOut())
            return

        if isinstance(self._state, SignedIn) and self._state.user.id == user.id:
            if self._state.user.model_dump() != user.model_dump():
                self._set_state(SignedIn(user=user))
            return

        logfire.info("Session established remotely", user_id=user.id)
        await self.determine_biometric_state(user)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin(self, state: Authenticating) -> int:
        """Start an operation: clear the error and publish ``state``."""
        self._epoch += 1
        self._last_error = None
        self._set_state(state)
        return self._epoch

    def _is_current(self, epoch: int) -> bool:
        if epoch != self._epoch:
            logfire.info("Discarding result of superseded operation")
            return False
        return True

    def _fail(self, error: AuthError) -> None:
        logfire.warn(
            "Authentication failed",
            error_kind=type(error).__name__,
            error=error.message,
        )
        self._discard_pending()
        self._resume_state = None
        self._last_error = error
        self._set_state(SignedOut())

    def _discard_pending(self) -> None:
        self.slot.discard()
        self.client.clear_pending_credential()

    def _set_state(self, state: AuthState) -> None:
        previous, self._state = self._state, state
        logfire.info(
            "Auth state changed",
            from_state=previous.kind.value,
            to_state=state.kind.value,
        )
        for listener in list(self._listeners):
            listener(state)
