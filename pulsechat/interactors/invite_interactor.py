# pulsechat/interactors/invite_interactor.py
from typing import List, Optional, Tuple

from pulsechat.domain.clock import utcnow
from pulsechat.domain.entities import InviteStatus
from pulsechat.domain.errors import (
    AlreadyExists,
    AlreadyPending,
    AlreadyResponded,
    InvalidInput,
    NotAuthorized,
    NotFound,
)
from pulsechat.gateways.interfaces import (
    IConversationGateway,
    IInviteGateway,
    IUserGateway,
)
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.uow import UoWModel


def _respond(invite: UoWModel, status: InviteStatus) -> None:
    if invite.status != InviteStatus.PENDING:
        raise AlreadyResponded()
    invite.status = status
    invite.responded_at = utcnow()


def _clean_message(message: Optional[str]) -> Optional[str]:
    if message is None:
        return None
    return message.strip() or None


class InviteInteractor:
    """Chat invites (a DM request to a stranger) and group invites.

    Both move pending -> accepted | rejected exactly once; only the
    recipient may respond.
    """

    def __init__(
        self,
        invite_gateway: IInviteGateway,
        conversation_gateway: IConversationGateway,
        user_gateway: IUserGateway,
    ):
        self.invite_gateway = invite_gateway
        self.conversation_gateway = conversation_gateway
        self.user_gateway = user_gateway

    async def send_chat_invite(
        self, invite: schemas.ChatInviteCreate, user: schemas.User
    ) -> int:
        if invite.to_user_id == user.id:
            raise InvalidInput("Cannot invite yourself")
        if await self.user_gateway.get_user(invite.to_user_id) is None:
            raise NotFound(f"User {invite.to_user_id} not found")
        if await self.conversation_gateway.get_direct(user.id, invite.to_user_id):
            raise AlreadyExists("A conversation with this user already exists")
        if await self.invite_gateway.get_pending_chat_invite_between(
            user.id, invite.to_user_id
        ):
            raise AlreadyPending("A chat invite between you is already pending")

        created = await self.invite_gateway.create_chat_invite(
            user.id, invite.to_user_id, _clean_message(invite.message)
        )
        return created.id

    async def _get_chat_invite_for_recipient(
        self, invite_id: int, user: schemas.User
    ) -> UoWModel:
        invite = await self.invite_gateway.get_chat_invite(invite_id)
        if invite is None:
            raise NotFound(f"Chat invite {invite_id} not found")
        if invite.to_user_id != user.id:
            raise NotAuthorized("Only the invited user can respond to this invite")
        return invite

    async def accept_chat_invite(
        self, invite_id: int, user: schemas.User
    ) -> Tuple[int, schemas.ChatInvite]:
        invite = await self._get_chat_invite_for_recipient(invite_id, user)
        _respond(invite, InviteStatus.ACCEPTED)

        # another path may have created the conversation in the meantime
        conversation = await self.conversation_gateway.get_direct(
            invite.from_user_id, invite.to_user_id
        )
        if conversation is None:
            try:
                conversation = await self.conversation_gateway.create_direct(
                    invite.from_user_id, invite.to_user_id
                )
            except AlreadyExists:
                conversation = await self.conversation_gateway.get_direct(
                    invite.from_user_id, invite.to_user_id
                )
                if conversation is None:
                    raise
        await self.invite_gateway.save()
        return conversation.id, schemas.ChatInvite.model_validate(invite._model)

    async def reject_chat_invite(
        self, invite_id: int, user: schemas.User
    ) -> schemas.ChatInvite:
        invite = await self._get_chat_invite_for_recipient(invite_id, user)
        _respond(invite, InviteStatus.REJECTED)
        await self.invite_gateway.save()
        return schemas.ChatInvite.model_validate(invite._model)

    async def get_incoming_chat_invites(
        self, viewer: Optional[schemas.User]
    ) -> List[schemas.ChatInvite]:
        if viewer is None:
            return []
        invites = await self.invite_gateway.get_incoming_chat_invites(viewer.id)
        return [schemas.ChatInvite.model_validate(i._model) for i in invites]

    async def get_outgoing_chat_invites(
        self, viewer: Optional[schemas.User]
    ) -> List[schemas.ChatInvite]:
        if viewer is None:
            return []
        invites = await self.invite_gateway.get_outgoing_chat_invites(viewer.id)
        return [schemas.ChatInvite.model_validate(i._model) for i in invites]

    async def send_group_invites(
        self, invite: schemas.GroupInviteCreate, user: schemas.User
    ) -> List[Tuple[int, int]]:
        """Invite users to a group; returns (invite_id, user_id) pairs created.

        Existing participants, users with a pending invite to the same group
        and unknown users are skipped without error.
        """
        conversation = await self.conversation_gateway.get_conversation(
            invite.conversation_id
        )
        if conversation is None:
            raise NotFound(f"Conversation {invite.conversation_id} not found")
        member_ids = {m.user_id for m in conversation.members}
        if user.id not in member_ids:
            raise NotAuthorized("Only participants can invite to this conversation")
        if not conversation.is_group:
            raise InvalidInput("Invites can only be sent to group conversations")

        known = await self.user_gateway.get_many(invite.user_ids)
        targets = []
        for user_id in dict.fromkeys(invite.user_ids):
            if user_id in member_ids or user_id not in known:
                continue
            if await self.invite_gateway.has_pending_group_invite(
                conversation.id, user_id
            ):
                continue
            targets.append(user_id)

        created = await self.invite_gateway.create_group_invites(
            conversation.id, user.id, targets, _clean_message(invite.message)
        )
        return [(i.id, i.invited_user_id) for i in created]

    async def _get_group_invite_for_recipient(
        self, invite_id: int, user: schemas.User
    ) -> UoWModel:
        invite = await self.invite_gateway.get_group_invite(invite_id)
        if invite is None:
            raise NotFound(f"Group invite {invite_id} not found")
        if invite.invited_user_id != user.id:
            raise NotAuthorized("Only the invited user can respond to this invite")
        return invite

    async def accept_group_invite(
        self, invite_id: int, user: schemas.User
    ) -> schemas.GroupChatInvite:
        invite = await self._get_group_invite_for_recipient(invite_id, user)
        _respond(invite, InviteStatus.ACCEPTED)

        conversation = await self.conversation_gateway.get_conversation(
            invite.conversation_id
        )
        if conversation is None:
            raise NotFound(f"Conversation {invite.conversation_id} not found")
        await self.conversation_gateway.add_member(conversation, user.id)
        await self.invite_gateway.save()
        return self.to_group_view(invite)

    async def reject_group_invite(
        self, invite_id: int, user: schemas.User
    ) -> schemas.GroupChatInvite:
        invite = await self._get_group_invite_for_recipient(invite_id, user)
        _respond(invite, InviteStatus.REJECTED)
        await self.invite_gateway.save()
        return self.to_group_view(invite)

    async def get_incoming_group_invites(
        self, viewer: Optional[schemas.User]
    ) -> List[schemas.GroupChatInvite]:
        if viewer is None:
            return []
        invites = await self.invite_gateway.get_incoming_group_invites(viewer.id)
        return [self.to_group_view(i) for i in invites]

    @staticmethod
    def to_group_view(invite: UoWModel) -> schemas.GroupChatInvite:
        return schemas.GroupChatInvite(
            id=invite.id,
            conversation_id=invite.conversation_id,
            conversation_name=invite.conversation.name,
            invited_user_id=invite.invited_user_id,
            invited_by_user_id=invite.invited_by_user_id,
            invited_by=schemas.UserBasic.model_validate(invite.invited_by),
            status=invite.status,
            message=invite.message,
            created_at=invite.created_at,
            responded_at=invite.responded_at,
        )
