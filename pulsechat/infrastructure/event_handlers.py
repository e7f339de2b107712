# pulsechat/infrastructure/event_handlers.py
from pulsechat.domain.events import (
    ChatInviteCreated,
    ConversationChanged,
    ConversationRead,
    GroupInviteCreated,
    InviteResponded,
    MessageCreated,
    MessageDeleted,
    PresenceUpdated,
    ReactionToggled,
    TypingChanged,
)


def conversation_channel(conversation_id: int) -> str:
    return f"conversation:{conversation_id}"


def typing_channel(conversation_id: int) -> str:
    return f"conversation:{conversation_id}:typing"


def user_conversations_channel(user_id: int) -> str:
    return f"user:{user_id}:conversations"


def user_invites_channel(user_id: int) -> str:
    return f"user:{user_id}:invites"


PRESENCE_CHANNEL = "presence"


class EventHandlers:
    def __init__(self, redis_client):
        self.redis_client = redis_client

    def register_all(self, dispatcher) -> None:
        dispatcher.register(MessageCreated, self.publish_message_created)
        dispatcher.register(MessageDeleted, self.publish_message_deleted)
        dispatcher.register(ReactionToggled, self.publish_reaction_toggled)
        dispatcher.register(TypingChanged, self.publish_typing_changed)
        dispatcher.register(ConversationRead, self.publish_conversation_read)
        dispatcher.register(ConversationChanged, self.publish_conversation_changed)
        dispatcher.register(ChatInviteCreated, self.publish_chat_invite_created)
        dispatcher.register(GroupInviteCreated, self.publish_group_invite_created)
        dispatcher.register(InviteResponded, self.publish_invite_responded)
        dispatcher.register(PresenceUpdated, self.publish_presence_updated)

    async def _publish(self, channel: str, event_type: str, data: dict) -> None:
        await self.redis_client.publish_json(channel, {"type": event_type, **data})

    async def publish_message_created(self, event: MessageCreated):
        data = event.model_dump()
        data["id"] = data.pop("message_id")
        await self._publish(
            conversation_channel(event.conversation_id), "message_created", data
        )

    async def publish_message_deleted(self, event: MessageDeleted):
        await self._publish(
            conversation_channel(event.conversation_id),
            "message_deleted",
            {"id": event.message_id, "conversation_id": event.conversation_id},
        )

    async def publish_reaction_toggled(self, event: ReactionToggled):
        await self._publish(
            conversation_channel(event.conversation_id),
            "reaction_toggled",
            event.model_dump(),
        )

    async def publish_typing_changed(self, event: TypingChanged):
        await self._publish(
            typing_channel(event.conversation_id), "typing", event.model_dump()
        )

    async def publish_conversation_read(self, event: ConversationRead):
        await self._publish(
            conversation_channel(event.conversation_id),
            "conversation_read",
            event.model_dump(),
        )

    async def publish_conversation_changed(self, event: ConversationChanged):
        for user_id in event.user_ids:
            await self._publish(
                user_conversations_channel(user_id),
                "conversation_changed",
                {"conversation_id": event.conversation_id, "reason": event.reason},
            )

    async def publish_chat_invite_created(self, event: ChatInviteCreated):
        await self._publish(
            user_invites_channel(event.to_user_id),
            "chat_invite_created",
            event.model_dump(),
        )

    async def publish_group_invite_created(self, event: GroupInviteCreated):
        for invite_id, user_id in zip(event.invite_ids, event.invited_user_ids):
            await self._publish(
                user_invites_channel(user_id),
                "group_invite_created",
                {
                    "invite_id": invite_id,
                    "conversation_id": event.conversation_id,
                    "invited_by_user_id": event.invited_by_user_id,
                },
            )

    async def publish_invite_responded(self, event: InviteResponded):
        await self._publish(
            user_invites_channel(event.notify_user_id),
            "invite_responded",
            event.model_dump(),
        )

    async def publish_presence_updated(self, event: PresenceUpdated):
        await self._publish(PRESENCE_CHANNEL, "presence", event.model_dump())
