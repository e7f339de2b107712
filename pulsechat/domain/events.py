# pulsechat/domain/events.py
from datetime import datetime

from pydantic import BaseModel


class Event(BaseModel):
    pass


class UserInfo(BaseModel):
    id: int
    name: str | None = None


class MessageEvent(Event):
    message_id: int
    conversation_id: int
    sender: UserInfo
    created_at: datetime


class MessageCreated(MessageEvent):
    body: str
    reply_to: str | None = None
    reply_to_user: str | None = None


class MessageDeleted(MessageEvent):
    pass


class ReactionToggled(Event):
    message_id: int
    conversation_id: int
    user_id: int
    emoji: str | None


class TypingChanged(Event):
    conversation_id: int
    user_id: int
    is_typing: bool


class ConversationRead(Event):
    conversation_id: int
    user_id: int
    read_at: datetime


class ConversationChanged(Event):
    conversation_id: int
    user_ids: list[int]
    reason: str


class ChatInviteCreated(Event):
    invite_id: int
    from_user_id: int
    to_user_id: int


class GroupInviteCreated(Event):
    invite_ids: list[int]
    conversation_id: int
    invited_by_user_id: int
    invited_user_ids: list[int]


class InviteResponded(Event):
    invite_id: int
    kind: str
    status: str
    notify_user_id: int
    conversation_id: int | None = None


class PresenceUpdated(Event):
    user_id: int
    last_seen_at: datetime
