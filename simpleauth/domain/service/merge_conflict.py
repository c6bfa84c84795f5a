"""Merge conflict domain service."""

import logfire

from simpleauth.domain.error import MissingLinkingInfo
from simpleauth.domain.model.credential import CredentialSlot
from simpleauth.domain.model.state import RequiresMergeConflictResolution
from simpleauth.domain.model.user import User
from simpleauth.domain.service.error_classifier import Classification, ErrorClassifier
from simpleauth.domain.service.identity_provider import IdentityProviderClient
from simpleauth.domain.value import CredentialPurpose

from .base import Service


class MergeConflictResolver(Service):
    """Resolves a credential that is already attached to another account.

    The existing credential is held until the user confirms, then replayed to
    sign into the account that owns it.
    """

    def __init__(
        self,
        client: IdentityProviderClient,
        slot: CredentialSlot,
        classifier: ErrorClassifier,
    ) -> None:
        self.client = client
        self.slot = slot
        self.classifier = classifier

    def begin(self, classification: Classification) -> RequiresMergeConflictResolution:
        """Capture the existing credential and move to the merge state.

        Args:
            classification: A MergeConflictRequired failure

        Returns:
            The RequiresMergeConflictResolution state to publish

        Raises:
            MissingLinkingInfo: If the failure carried no credential
        """
        if classification.pending is None:
            logfire.error("Merge conflict reported without a credential")
            raise MissingLinkingInfo()

        self.slot.hold(classification.pending)
        logfire.info(
            "Merge conflict resolution required",
            provider_id=classification.pending.provider_id,
        )
        return RequiresMergeConflictResolution()

    async def resolve(self) -> User:
        """Sign in with the held credential.

        The slot is empty when this returns or raises.

        Returns:
            The user owning the credential

        Raises:
            MissingLinkingInfo: If no merge credential is held
            AuthError: Classified failure of the replayed sign-in
        """
        pending = self.slot.take()
        if pending is None or pending.purpose != CredentialPurpose.MERGE:
            raise MissingLinkingInfo()

        with logfire.span("merge_conflict.resolve", provider_id=pending.provider_id):
            try:
                user = await self.client.sign_in_with_credential(pending.credential)
            except Exception as e:
                classified = self.classifier.classify(
                    e, email=pending.email, provider_id=pending.provider_id
                ).error
                logfire.error("Merge conflict sign-in failed", error=classified.message)
                raise classified from e
            finally:
                self.client.clear_pending_credential()

            logfire.info("Merge conflict resolved", user_id=user.id)
            return user
