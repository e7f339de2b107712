# pulsechat/interactors/conversation_interactor.py
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from pulsechat.config import AppConfig
from pulsechat.domain.clock import is_within, utcnow
from pulsechat.domain.errors import InvalidInput, NotAuthorized, NotFound
from pulsechat.gateways.interfaces import (
    IConversationGateway,
    IInviteGateway,
    IUserGateway,
)
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.uow import UoWModel


class ConversationInteractor:
    def __init__(
        self,
        config: AppConfig,
        conversation_gateway: IConversationGateway,
        user_gateway: IUserGateway,
        invite_gateway: IInviteGateway,
    ):
        self.config = config
        self.conversation_gateway = conversation_gateway
        self.user_gateway = user_gateway
        self.invite_gateway = invite_gateway

    async def require_membership(
        self, conversation_id: int, user_id: int
    ) -> Tuple[UoWModel, UoWModel]:
        conversation = await self.conversation_gateway.get_conversation(conversation_id)
        if conversation is None:
            raise NotFound(f"Conversation {conversation_id} not found")
        member = await self.conversation_gateway.get_member(conversation_id, user_id)
        if member is None:
            raise NotAuthorized("You are not a participant of this conversation")
        return conversation, member

    async def get_conversations(
        self, viewer: Optional[schemas.User]
    ) -> List[schemas.Conversation]:
        if viewer is None:
            return []
        conversations = await self.conversation_gateway.get_visible_for_user(viewer.id)
        return await self._build_views(conversations, viewer.id, schemas.Conversation)

    async def get_conversation(
        self, conversation_id: int, viewer: Optional[schemas.User]
    ) -> Optional[schemas.ConversationDetail]:
        if viewer is None:
            return None
        conversation = await self.conversation_gateway.get_conversation(conversation_id)
        if conversation is None or not any(
            m.user_id == viewer.id for m in conversation.members
        ):
            return None
        views = await self._build_views(
            [conversation], viewer.id, schemas.ConversationDetail
        )
        return views[0]

    async def get_or_create_direct(
        self, other_user_id: int, user: schemas.User
    ) -> Tuple[int, bool]:
        """Return the id of the direct conversation with ``other_user_id``
        and whether it was created by this call."""
        if other_user_id == user.id:
            raise InvalidInput("Cannot start a direct conversation with yourself")
        if await self.user_gateway.get_user(other_user_id) is None:
            raise NotFound(f"User {other_user_id} not found")

        existing = await self.conversation_gateway.get_direct(user.id, other_user_id)
        if existing:
            return existing.id, False
        conversation = await self.conversation_gateway.create_direct(
            user.id, other_user_id
        )
        return conversation.id, True

    async def create_group(
        self, group: schemas.GroupCreate, user: schemas.User
    ) -> schemas.GroupCreated:
        name = group.name.strip()
        if not name:
            raise InvalidInput("Group name must not be empty")

        conversation = await self.conversation_gateway.create_group(name, user.id)

        # only the creator joins now; everyone else gets an invite
        candidate_ids = list(dict.fromkeys(i for i in group.participant_ids if i != user.id))
        known = await self.user_gateway.get_many(candidate_ids)
        invited_user_ids = [i for i in candidate_ids if i in known]
        invites = await self.invite_gateway.create_group_invites(
            conversation.id, user.id, invited_user_ids, None
        )
        return schemas.GroupCreated(
            conversation_id=conversation.id,
            invite_ids=[invite.id for invite in invites],
            invited_user_ids=invited_user_ids,
        )

    async def mark_read(self, conversation_id: int, user: schemas.User) -> datetime:
        _, member = await self.require_membership(conversation_id, user.id)
        now = utcnow()
        member.last_read_at = now
        await self.conversation_gateway.save()
        return now

    async def set_typing(self, conversation_id: int, user: schemas.User) -> None:
        _, member = await self.require_membership(conversation_id, user.id)
        member.typing_at = utcnow()
        await self.conversation_gateway.save()

    async def clear_typing(self, conversation_id: int, user: schemas.User) -> None:
        _, member = await self.require_membership(conversation_id, user.id)
        if member.typing_at is not None:
            member.typing_at = None
            await self.conversation_gateway.save()

    async def hide(self, conversation_id: int, user: schemas.User) -> None:
        _, member = await self.require_membership(conversation_id, user.id)
        if not member.is_hidden:
            member.is_hidden = True
            await self.conversation_gateway.save()

    async def _build_views(self, conversations: List[UoWModel], viewer_id: int, view_type):
        unread_counts = await self.conversation_gateway.get_unread_counts(
            viewer_id, [c.id for c in conversations]
        )
        users = await self.user_gateway.get_many(
            [m.user_id for c in conversations for m in c.members]
        )
        now = utcnow()
        return [
            self._to_view(c, viewer_id, users, unread_counts.get(c.id, 0), now, view_type)
            for c in conversations
        ]

    def _to_view(self, conversation, viewer_id, users, unread_count, now, view_type):
        typing_ttl = timedelta(seconds=self.config.TYPING_TTL_SECONDS)
        online_window = timedelta(seconds=self.config.ONLINE_WINDOW_SECONDS)
        members = conversation.members
        others = [m for m in members if m.user_id != viewer_id]

        data = {
            "id": conversation.id,
            "is_group": conversation.is_group,
            "name": conversation.name or "Group",
            "last_message": conversation.last_message,
            "last_message_at": conversation.last_message_at,
            "last_message_sender_id": conversation.last_message_sender_id,
            "is_typing": any(is_within(m.typing_at, typing_ttl, now) for m in others),
            "unread_count": unread_count,
            "member_count": len(members),
        }
        if not conversation.is_group:
            other = users.get(others[0].user_id) if others else None
            data.update(
                name=(other.name if other else None) or "User",
                image_url=other.image_url if other else None,
                other_user_id=other.id if other else None,
                is_online=is_within(
                    other.last_seen_at if other else None, online_window, now
                ),
            )
        if view_type is schemas.ConversationDetail:
            data["members"] = [
                schemas.ConversationMember(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    image_url=user.image_url,
                    last_seen_at=user.last_seen_at,
                    is_online=is_within(user.last_seen_at, online_window, now),
                )
                for user in (users[m.user_id] for m in members if m.user_id in users)
            ]
        return view_type(**data)
