"""Account linking domain service."""

import logfire

from simpleauth.domain.error import (
    AccountLinkingError,
    AccountLinkingRequired,
    MissingLinkingInfo,
)
from simpleauth.domain.model.credential import CredentialSlot
from simpleauth.domain.model.state import RequiresAccountLinking
from simpleauth.domain.model.user import User
from simpleauth.domain.service.error_classifier import Classification, ErrorClassifier
from simpleauth.domain.service.identity_provider import IdentityProviderClient
from simpleauth.domain.value import CredentialPurpose

from .base import Service


class CredentialLinkOrchestrator(Service):
    """Links a credential the user tried to an account they already own.

    When a provider reports that the e-mail already belongs to an account
    under a different provider, the attempted credential is captured and
    the user is asked to sign in with the original provider. After that
    re-authentication the captured credential is attached to the session.
    """

    def __init__(
        self,
        client: IdentityProviderClient,
        slot: CredentialSlot,
        classifier: ErrorClassifier,
    ) -> None:
        """Initialize linking orchestrator.

        Args:
            client: Identity provider client
            slot: Slot owning the pending credential
            classifier: Maps attach failures into the error taxonomy
        """
        self.client = client
        self.slot = slot
        self.classifier = classifier

    @property
    def has_pending_link(self) -> bool:
        """Whether a captured credential is waiting to be attached."""
        return self.slot.purpose == CredentialPurpose.LINK

    def begin(self, classification: Classification) -> RequiresAccountLinking:
        """Capture the collision and move to the linking state.

        Args:
            classification: An AccountLinkingRequired failure, with the
                attempted credential when the provider supplied one

        Returns:
            The RequiresAccountLinking state to publish
        """
        error = classification.error
        assert isinstance(error, AccountLinkingRequired)

        if classification.pending is not None:
            self.slot.hold(classification.pending)
        else:
            # Re-authenticating is enough; there is nothing to attach
            self.slot.discard()

        logfire.info(
            "Account linking required",
            email=error.email,
            attempted_provider_id=error.attempted_provider_id,
            has_credential=classification.pending is not None,
        )
        return RequiresAccountLinking(
            email=error.email, attempted_provider_id=error.attempted_provider_id
        )

    async def complete(self, session_user: User) -> User:
        """Attach the captured credential to the re-authenticated session.

        The slot is empty when this returns or raises.

        Args:
            session_user: User returned by the re-authentication

        Returns:
            The user after linking

        Raises:
            MissingLinkingInfo: If no link credential is held
            AccountLinkingError: If the session changed or attaching failed
        """
        pending = self.slot.take()
        if pending is None or pending.purpose != CredentialPurpose.LINK:
            raise MissingLinkingInfo()

        with logfire.span(
            "credential_link.complete",
            user_id=session_user.id,
            provider_id=pending.provider_id,
        ):
            try:
                current = self.client.current_user
                if current is None or current.id != session_user.id:
                    logfire.error(
                        "Session user changed during linking",
                        expected_user_id=session_user.id,
                        current_user_id=current.id if current else None,
                    )
                    raise AccountLinkingError("User mismatch during linking.")

                try:
                    linked = await self.client.attach_credential(
                        pending.credential, session_user.id
                    )
                except Exception as e:
                    classified = self.classifier.classify(e, email=pending.email).error
                    logfire.error(
                        "Failed to attach credential",
                        user_id=session_user.id,
                        error=classified.message,
                    )
                    raise AccountLinkingError(classified.message) from e
            finally:
                self.client.clear_pending_credential()

            logfire.info(
                "Credential linked",
                user_id=linked.id,
                provider_id=pending.provider_id,
            )
            return linked
