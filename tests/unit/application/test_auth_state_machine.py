"""Unit tests for AuthStateMachine."""

import asyncio

import pytest
import pytest_asyncio

from simpleauth.adapter.biometric import MockBiometricGateway
from simpleauth.adapter.error import (
    DEFAULT_PROVIDER_DOMAIN,
    IdentityProviderError,
    ProviderErrorCode,
)
from simpleauth.adapter.provider import MockIdentityProviderClient
from simpleauth.application import AuthStateMachine
from simpleauth.domain.error import (
    AccountLinkingError,
    AccountLinkingRequired,
    BiometricsFailed,
    Cancelled,
    HelpfulInvalidCredential,
    HelpfulUserNotFound,
    MergeConflictRequired,
    MissingLinkingInfo,
    ProviderError,
    Unknown,
)
from simpleauth.domain.model import (
    Authenticating,
    CredentialSlot,
    RequiresAccountLinking,
    RequiresBiometrics,
    RequiresMergeConflictResolution,
    SignedIn,
    SignedOut,
    User,
)
from simpleauth.domain.value import (
    APPLE_PROVIDER,
    GOOGLE_PROVIDER,
    PASSWORD_PROVIDER,
    AuthField,
    BiometricFailureReason,
    UserId,
)
from tests.conftest import make_factors, make_user
from tests.fakes import RecordingSecureIdentityStore
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


@pytest_asyncio.fixture
async def machine(unit_env) -> AuthStateMachine:
    return await unit_env.get(AuthStateMachine)


@pytest_asyncio.fixture
async def client(unit_env) -> MockIdentityProviderClient:
    return await unit_env.get(MockIdentityProviderClient)


@pytest_asyncio.fixture
async def gateway(unit_env) -> MockBiometricGateway:
    return await unit_env.get(MockBiometricGateway)


@pytest_asyncio.fixture
async def store(unit_env) -> RecordingSecureIdentityStore:
    return await unit_env.get(RecordingSecureIdentityStore)


@pytest_asyncio.fixture
async def slot(unit_env) -> CredentialSlot:
    return await unit_env.get(CredentialSlot)


async def _reach_linking(machine, client) -> None:
    """Drive the machine into RequiresAccountLinking for a@x.com via Apple."""
    client.script(
        "sign_in_with_federated_provider",
        IdentityProviderError(
            ProviderErrorCode.ACCOUNT_EXISTS_WITH_DIFFERENT_CREDENTIAL,
            "Account exists",
            email="a@x.com",
            credential="apple-token",
        ),
    )
    await machine.sign_in_with_federated_provider(APPLE_PROVIDER)


async def _reach_merge(machine, client) -> None:
    """Drive the machine into RequiresMergeConflictResolution via Google."""
    client.script(
        "sign_in_with_federated_provider",
        IdentityProviderError(
            ProviderErrorCode.CREDENTIAL_ALREADY_IN_USE,
            "Credential in use",
            credential="google-token",
        ),
    )
    await machine.sign_in_with_federated_provider(GOOGLE_PROVIDER)


async def _reach_biometrics(machine, store) -> User:
    """Sign in a returning user so the session is locked behind biometrics."""
    user = make_user()
    await store.set_last_user_id(user.id)
    store.writes.clear()
    await machine.sign_in_with_credentials(make_factors())
    return user


class TestSignIn:
    """Tests for e-mail/password and federated sign-in."""

    @pytest.mark.asyncio
    async def test_first_sign_in(self, machine, store):
        """A first sign-in lands in SignedIn and remembers the user once."""
        # Act
        await machine.sign_in_with_credentials(make_factors())

        # Assert
        assert machine.state == SignedIn(user=make_user())
        assert machine.last_error is None
        assert store.writes == [UserId("user:a@x.com")]

    @pytest.mark.asyncio
    async def test_returning_user_requires_biometrics(self, machine, store):
        """A remembered user on a device with a sensor must unlock."""
        # Arrange / Act
        await _reach_biometrics(machine, store)

        # Assert
        assert machine.state == RequiresBiometrics()
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_create_account(self, machine, client):
        await machine.create_account(make_factors(display_name="Ada"))

        assert machine.state == SignedIn(user=make_user())
        assert machine.state.user.display_name == "Ada"
        assert client.call_count("create_account") == 1

    @pytest.mark.asyncio
    async def test_federated_sign_in(self, machine):
        await machine.sign_in_with_federated_provider(GOOGLE_PROVIDER)

        assert isinstance(machine.state, SignedIn)
        assert machine.state.user.provider_id == GOOGLE_PROVIDER

    @pytest.mark.asyncio
    async def test_anonymous_user_skips_biometric_gate(self, machine, client, store):
        client.script(
            "sign_in_with_federated_provider", User(id="anon", is_anonymous=True)
        )

        await machine.sign_in_with_federated_provider(GOOGLE_PROVIDER)

        assert machine.state == SignedIn(user=User(id="anon"))
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_duplicate_call_while_in_flight_is_ignored(self, machine, client):
        """A second call during Authenticating never reaches the provider."""
        # Arrange
        client.pause()
        first = asyncio.create_task(machine.sign_in_with_credentials(make_factors()))
        await asyncio.sleep(0)
        assert machine.state == Authenticating()

        # Act
        await machine.sign_in_with_credentials(make_factors())
        client.resume()
        await first

        # Assert
        assert client.call_count("sign_in") == 1
        assert machine.state == SignedIn(user=make_user())

    @pytest.mark.asyncio
    async def test_wrong_password_is_helpful(self, machine, client):
        client.script(
            "sign_in",
            IdentityProviderError(ProviderErrorCode.WRONG_PASSWORD, "Wrong password"),
        )

        await machine.sign_in_with_credentials(make_factors())

        assert machine.state == SignedOut()
        assert machine.last_error == HelpfulInvalidCredential("a@x.com")
        assert machine.fields_to_highlight == {AuthField.EMAIL, AuthField.PASSWORD}

    @pytest.mark.asyncio
    async def test_error_cleared_by_next_attempt(self, machine, client):
        client.script(
            "sign_in", IdentityProviderError(ProviderErrorCode.USER_NOT_FOUND, "None")
        )
        await machine.sign_in_with_credentials(make_factors())
        assert machine.last_error == HelpfulUserNotFound("a@x.com")

        await machine.sign_in_with_credentials(make_factors())

        assert machine.last_error is None
        assert machine.fields_to_highlight == frozenset()

    @pytest.mark.asyncio
    async def test_cancelled_fresh_attempt_signs_out(self, machine, client):
        """Closing a provider sheet signs out and records the cancellation."""
        client.script(
            "sign_in_with_federated_provider",
            IdentityProviderError(ProviderErrorCode.WEB_CONTEXT_CANCELLED, "Closed"),
        )

        await machine.sign_in_with_federated_provider(GOOGLE_PROVIDER)

        assert machine.state == SignedOut()
        assert machine.last_error == Cancelled()
        assert machine.fields_to_highlight == frozenset()

    @pytest.mark.asyncio
    async def test_fresh_attempt_drops_stale_sdk_credential(self, machine, client):
        client.stash_credential("stale")

        await machine.sign_in_with_credentials(make_factors())

        assert client.pending_credential() is None


SIGN_IN_ENTRY_POINTS = [
    pytest.param(
        "sign_in",
        lambda m: m.sign_in_with_credentials(make_factors("b@x.com")),
        id="credentials",
    ),
    pytest.param(
        "create_account",
        lambda m: m.create_account(make_factors("b@x.com")),
        id="create_account",
    ),
    pytest.param(
        "sign_in_with_federated_provider",
        lambda m: m.sign_in_with_federated_provider(APPLE_PROVIDER),
        id="federated",
    ),
]


class TestSignInRejection:
    """Sign-in entry points are no-ops while signed in or in flight."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, attempt", SIGN_IN_ENTRY_POINTS)
    async def test_rejected_while_signed_in(
        self, machine, client, operation, attempt
    ):
        """State and last error are both left untouched."""
        # Arrange
        await machine.sign_in_with_credentials(make_factors())
        client.script(
            "send_password_reset",
            IdentityProviderError(ProviderErrorCode.USER_NOT_FOUND, "None"),
        )
        await machine.send_password_reset("a@x.com")
        calls_before = client.call_count(operation)

        # Act
        await attempt(machine)

        # Assert
        assert machine.state == SignedIn(user=make_user())
        assert machine.last_error == HelpfulUserNotFound("a@x.com")
        assert client.call_count(operation) == calls_before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, attempt", SIGN_IN_ENTRY_POINTS)
    async def test_rejected_while_authenticating(
        self, machine, client, operation, attempt
    ):
        # Arrange
        client.pause()
        first = asyncio.create_task(machine.sign_in_with_credentials(make_factors()))
        await asyncio.sleep(0)
        calls_before = client.call_count(operation)

        # Act
        await attempt(machine)

        # Assert
        assert machine.state == Authenticating(message="Signing in...")
        assert machine.last_error is None
        assert client.call_count(operation) == calls_before

        client.resume()
        await first
        assert machine.state == SignedIn(user=make_user())


class TestAccountLinking:
    """Tests for the account linking flow."""

    @pytest.mark.asyncio
    async def test_collision_requires_linking(self, machine, client):
        # Act
        await _reach_linking(machine, client)

        # Assert
        assert machine.state == RequiresAccountLinking(
            email="a@x.com", attempted_provider_id=APPLE_PROVIDER
        )
        assert machine.last_error == AccountLinkingRequired("a@x.com", APPLE_PROVIDER)
        assert machine.has_pending_credential

    @pytest.mark.asyncio
    async def test_reauthentication_links_credential(self, machine, client, slot):
        """Signing in with the original method attaches the Apple credential."""
        # Arrange
        await _reach_linking(machine, client)

        # Act
        await machine.sign_in_with_credentials(make_factors())

        # Assert
        assert machine.state == SignedIn(user=make_user())
        assert ("attach_credential", "apple-token") in client.calls
        assert slot.is_empty
        assert not machine.has_pending_credential

    @pytest.mark.asyncio
    async def test_cancelled_reauthentication_keeps_linking(
        self, machine, client, slot
    ):
        """Backing out of the re-auth sheet returns to the linking prompt."""
        # Arrange
        await _reach_linking(machine, client)
        client.script(
            "sign_in_with_federated_provider",
            IdentityProviderError(ProviderErrorCode.WEB_CONTEXT_CANCELLED, "Closed"),
        )

        # Act
        await machine.sign_in_with_federated_provider(GOOGLE_PROVIDER)

        # Assert
        assert machine.state == RequiresAccountLinking(
            email="a@x.com", attempted_provider_id=APPLE_PROVIDER
        )
        assert machine.last_error == Cancelled()
        assert slot.peek().credential == "apple-token"

    @pytest.mark.asyncio
    async def test_attach_failure_signs_out(self, machine, client, slot):
        await _reach_linking(machine, client)
        client.script(
            "attach_credential",
            IdentityProviderError(ProviderErrorCode.NETWORK_ERROR, "Offline"),
        )

        await machine.sign_in_with_credentials(make_factors())

        assert machine.state == SignedOut()
        assert machine.last_error == AccountLinkingError("Offline")
        assert slot.is_empty

    @pytest.mark.asyncio
    async def test_email_in_use_asks_for_original_sign_in(self, machine, client):
        """Creating an account for a taken e-mail links nothing on re-auth."""
        client.script(
            "create_account",
            IdentityProviderError(ProviderErrorCode.EMAIL_ALREADY_IN_USE, "Taken"),
        )

        await machine.create_account(make_factors())
        assert machine.state == RequiresAccountLinking(
            email="a@x.com", attempted_provider_id=PASSWORD_PROVIDER
        )
        assert not machine.has_pending_credential

        await machine.sign_in_with_credentials(make_factors())
        assert machine.state == SignedIn(user=make_user())
        assert client.call_count("attach_credential") == 0

    @pytest.mark.asyncio
    async def test_collision_without_credential(self, machine, client):
        client.script(
            "sign_in_with_federated_provider",
            IdentityProviderError(
                ProviderErrorCode.ACCOUNT_EXISTS_WITH_DIFFERENT_CREDENTIAL,
                "Account exists",
                email="a@x.com",
            ),
        )

        await machine.sign_in_with_federated_provider(APPLE_PROVIDER)

        assert machine.state == SignedOut()
        assert machine.last_error == MissingLinkingInfo()


class TestMergeConflict:
    """Tests for the merge conflict flow."""

    @pytest.mark.asyncio
    async def test_credential_in_use_requires_merge(self, machine, client):
        await _reach_merge(machine, client)

        assert machine.state == RequiresMergeConflictResolution()
        assert machine.last_error == MergeConflictRequired()
        assert machine.has_pending_credential

    @pytest.mark.asyncio
    async def test_proceed_signs_into_existing_account(self, machine, client, slot):
        await _reach_merge(machine, client)

        await machine.proceed_with_merge_conflict_resolution()

        assert machine.state == SignedIn(user=User(id="credential:google-token"))
        assert slot.is_empty

    @pytest.mark.asyncio
    async def test_failed_merge_signs_out(self, machine, client, slot):
        """A failing replay reverts to SignedOut with the provider error."""
        # Arrange
        await _reach_merge(machine, client)
        client.script(
            "sign_in_with_credential",
            IdentityProviderError(ProviderErrorCode.NETWORK_ERROR, "Offline"),
        )

        # Act
        await machine.proceed_with_merge_conflict_resolution()

        # Assert
        assert machine.state == SignedOut()
        assert machine.last_error == ProviderError(
            ProviderErrorCode.NETWORK_ERROR, DEFAULT_PROVIDER_DOMAIN, "Offline"
        )
        assert slot.is_empty

    @pytest.mark.asyncio
    async def test_missing_credential_at_confirmation(self, machine, client, slot):
        await _reach_merge(machine, client)
        slot.discard()

        await machine.proceed_with_merge_conflict_resolution()

        assert machine.state == SignedOut()
        assert machine.last_error == MissingLinkingInfo()
        assert client.call_count("sign_in_with_credential") == 0

    @pytest.mark.asyncio
    async def test_proceed_rejected_outside_merge(self, machine, client):
        await machine.proceed_with_merge_conflict_resolution()

        assert machine.state == SignedOut()
        assert client.call_count("sign_in_with_credential") == 0

    @pytest.mark.asyncio
    async def test_direct_sign_in_settles_conflict(self, machine, client, slot):
        await _reach_merge(machine, client)

        await machine.sign_in_with_credentials(make_factors())

        assert machine.state == SignedIn(user=make_user())
        assert slot.is_empty


class TestBiometrics:
    """Tests for unlocking a session with biometrics."""

    @pytest.mark.asyncio
    async def test_unlock_signs_in(self, machine, store, gateway):
        user = await _reach_biometrics(machine, store)

        await machine.authenticate_with_biometrics()

        assert machine.state == SignedIn(user=user)
        assert gateway.prompts == ["Sign in to your account"]

    @pytest.mark.asyncio
    async def test_failure_stays_locked(self, machine, store, gateway):
        """A failed prompt keeps the lock and records why."""
        # Arrange
        await _reach_biometrics(machine, store)
        gateway.fail_next(BiometricFailureReason.AUTHENTICATION_FAILED)

        # Act
        await machine.authenticate_with_biometrics("Unlock")

        # Assert
        assert machine.state == RequiresBiometrics()
        assert machine.last_error == BiometricsFailed(
            BiometricFailureReason.AUTHENTICATION_FAILED
        )

    @pytest.mark.asyncio
    async def test_unexpected_sensor_error_stays_locked(
        self, machine, store, gateway, monkeypatch
    ):
        """A crash in the sensor is recorded as Unknown and can be retried."""
        # Arrange
        user = await _reach_biometrics(machine, store)

        async def crash(reason: str) -> None:
            raise RuntimeError("sensor crashed")

        monkeypatch.setattr(gateway, "prompt", crash)

        # Act
        await machine.authenticate_with_biometrics()

        # Assert
        assert machine.state == RequiresBiometrics()
        assert isinstance(machine.last_error, Unknown)

        monkeypatch.undo()
        await machine.authenticate_with_biometrics()
        assert machine.state == SignedIn(user=user)

    @pytest.mark.asyncio
    async def test_session_change_during_prompt_signs_out(
        self, machine, client, store, gateway
    ):
        await _reach_biometrics(machine, store)
        gateway.pause()
        task = asyncio.create_task(machine.authenticate_with_biometrics())
        await asyncio.sleep(0)

        client.set_current_user(make_user("b@x.com"))
        gateway.resume()
        await task

        assert machine.state == SignedOut()
        assert machine.last_error is None

    @pytest.mark.asyncio
    async def test_no_session_to_unlock(self, machine):
        machine.require_biometric_authentication()
        assert machine.state == RequiresBiometrics()

        await machine.authenticate_with_biometrics()

        assert machine.state == SignedOut()

    @pytest.mark.asyncio
    async def test_require_rejected_without_sensor(self, machine, gateway):
        gateway.available = False

        machine.require_biometric_authentication()

        assert machine.state == SignedOut()

    @pytest.mark.asyncio
    async def test_password_sign_in_from_biometric_lock(self, machine, store):
        """The user may fall back to a full sign-in from the lock screen."""
        await _reach_biometrics(machine, store)

        await machine.sign_in_with_credentials(make_factors("b@x.com"))

        assert machine.state == SignedIn(user=make_user("b@x.com"))


class TestSignOut:
    """Tests for sign-out and cancellation."""

    @pytest.mark.asyncio
    async def test_sign_out_from_signed_in(self, machine, client, store):
        await machine.sign_in_with_credentials(make_factors())

        await machine.sign_out()

        assert machine.state == SignedOut()
        assert await store.get_last_user_id() is None
        assert client.current_user is None

    @pytest.mark.asyncio
    async def test_sign_out_from_linking(self, machine, client, store, slot):
        await _reach_linking(machine, client)

        await machine.sign_out()

        assert machine.state == SignedOut()
        assert machine.last_error is None
        assert slot.is_empty
        assert await store.get_last_user_id() is None

    @pytest.mark.asyncio
    async def test_sign_out_from_biometric_lock(self, machine, store):
        await _reach_biometrics(machine, store)

        await machine.sign_out()

        assert machine.state == SignedOut()
        assert await store.get_last_user_id() is None

    @pytest.mark.asyncio
    async def test_sign_out_supersedes_in_flight_sign_in(
        self, machine, client, store
    ):
        """A sign-in that completes after sign-out is discarded."""
        # Arrange
        client.pause()
        sign_in = asyncio.create_task(
            machine.sign_in_with_credentials(make_factors())
        )
        await asyncio.sleep(0)

        # Act
        sign_out = asyncio.create_task(machine.sign_out())
        await asyncio.sleep(0)
        assert machine.state == Authenticating(message="Signing out...")
        client.resume()
        await asyncio.gather(sign_in, sign_out)

        # Assert
        assert machine.state == SignedOut()
        assert store.writes == []
        assert await store.get_last_user_id() is None

    @pytest.mark.asyncio
    async def test_sign_in_waits_for_sign_out_to_finish(
        self, machine, client, store, gateway
    ):
        """Sign-in is rejected until sign-out has cleared the store and session."""
        # Arrange
        await machine.sign_in_with_credentials(make_factors())
        gateway.available = False
        store.clear_gate = asyncio.Event()
        sign_out = asyncio.create_task(machine.sign_out())
        await asyncio.sleep(0)

        # Act
        await machine.sign_in_with_credentials(make_factors())

        # Assert
        assert machine.state == Authenticating(message="Signing out...")
        assert client.call_count("sign_in") == 1

        store.clear_gate.set()
        await sign_out
        assert machine.state == SignedOut()
        assert client.current_user is None

        await machine.sign_in_with_credentials(make_factors())
        assert machine.state == SignedIn(user=make_user())
        assert await store.get_last_user_id() == UserId("user:a@x.com")
        assert client.current_user.id == UserId("user:a@x.com")

    @pytest.mark.asyncio
    async def test_store_failure_is_reported(self, machine, store):
        await machine.sign_in_with_credentials(make_factors())
        store.fail_clears = True

        await machine.sign_out()

        assert machine.state == SignedOut()
        assert machine.last_error is not None

    @pytest.mark.asyncio
    async def test_cancel_pending_action(self, machine, client, slot):
        await _reach_linking(machine, client)

        machine.cancel_pending_action()
        machine.cancel_pending_action()

        assert machine.state == SignedOut()
        assert machine.last_error is None
        assert slot.is_empty

    @pytest.mark.asyncio
    async def test_cancel_pending_action_ignored_when_signed_in(self, machine):
        await machine.sign_in_with_credentials(make_factors())

        machine.cancel_pending_action()

        assert machine.state == SignedIn(user=make_user())


class TestPasswordReset:
    """Tests for the password reset side channel."""

    @pytest.mark.asyncio
    async def test_reset_leaves_state(self, machine, client):
        await machine.send_password_reset("a@x.com")

        assert machine.state == SignedOut()
        assert machine.last_error is None
        assert client.calls == [("send_password_reset", "a@x.com")]

    @pytest.mark.asyncio
    async def test_reset_failure_is_recorded(self, machine, client):
        client.script(
            "send_password_reset",
            IdentityProviderError(ProviderErrorCode.USER_NOT_FOUND, "None"),
        )

        await machine.send_password_reset("a@x.com")

        assert machine.state == SignedOut()
        assert machine.last_error == HelpfulUserNotFound("a@x.com")


class TestSessionChanges:
    """Tests for out-of-band session notifications."""

    @pytest.mark.asyncio
    async def test_start_adopts_existing_session(self, machine, client):
        client.set_current_user(make_user())

        await machine.start()

        assert machine.state == SignedIn(user=make_user())
        assert client.listener_count == 1

    @pytest.mark.asyncio
    async def test_close_stops_listening(self, machine, client):
        await machine.start()

        machine.close()

        assert client.listener_count == 0

    @pytest.mark.asyncio
    async def test_remote_sign_in_and_sign_out(self, machine, client, store):
        await machine.start()

        await client.simulate_session_change(make_user())
        assert machine.state == SignedIn(user=make_user())

        await client.simulate_session_change(None)
        assert machine.state == SignedOut()
        assert await store.get_last_user_id() is None

    @pytest.mark.asyncio
    async def test_remote_end_blocks_sign_in_until_forgotten(
        self, machine, client, store
    ):
        # Arrange
        await machine.start()
        await machine.sign_in_with_credentials(make_factors())
        store.clear_gate = asyncio.Event()
        ended = asyncio.create_task(client.simulate_session_change(None))
        await asyncio.sleep(0)

        # Act
        await machine.sign_in_with_credentials(make_factors())

        # Assert
        assert machine.state == Authenticating(message="Signing out...")
        assert client.call_count("sign_in") == 1

        store.clear_gate.set()
        await ended
        assert machine.state == SignedOut()
        assert await store.get_last_user_id() is None

    @pytest.mark.asyncio
    async def test_profile_refresh_updates_user(self, machine, client):
        await machine.start()
        await machine.sign_in_with_credentials(make_factors())

        await client.simulate_session_change(
            User(id="user:a@x.com", email="a@x.com", display_name="Ada")
        )

        assert machine.state.user.display_name == "Ada"

    @pytest.mark.asyncio
    async def test_ignored_while_pending(self, machine, client):
        await machine.start()
        await _reach_linking(machine, client)

        await client.simulate_session_change(make_user())

        assert isinstance(machine.state, RequiresAccountLinking)

    @pytest.mark.asyncio
    async def test_sign_in_notification_does_not_double_write(
        self, machine, client, store
    ):
        """The provider's own notification during sign-in is ignored."""
        await machine.start()

        await machine.sign_in_with_credentials(make_factors())

        assert machine.state == SignedIn(user=make_user())
        assert store.writes == [UserId("user:a@x.com")]


class TestObservation:
    """Tests for state subscriptions."""

    @pytest.mark.asyncio
    async def test_subscribe_and_unsubscribe(self, machine):
        # Arrange
        seen = []
        unsubscribe = machine.subscribe(seen.append)

        # Act
        await machine.sign_in_with_credentials(make_factors())
        unsubscribe()
        await machine.sign_out()

        # Assert
        assert seen == [Authenticating(), SignedIn(user=make_user())]

    @pytest.mark.asyncio
    async def test_biometric_labels(self, machine):
        assert machine.is_biometrics_available
        assert machine.biometry_kind_label == "Face ID"
