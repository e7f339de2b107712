# pulsechat/infrastructure/schemas.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pulsechat.domain.entities import InviteStatus


class UserBasic(BaseModel):
    id: int
    name: str | None = None
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class User(UserBasic):
    email: str | None = None
    last_seen_at: datetime
    created_at: datetime


class UserPresence(User):
    is_online: bool = False


class SearchHistoryEntry(BaseModel):
    id: int
    query: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SearchHistoryCreate(BaseModel):
    query: str


class ConversationMember(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None
    image_url: str | None = None
    last_seen_at: datetime | None = None
    is_online: bool = False


class Conversation(BaseModel):
    """A conversation as seen by one viewer."""

    id: int
    is_group: bool
    name: str
    image_url: str | None = None
    last_message: str | None = None
    last_message_at: datetime
    last_message_sender_id: int | None = None
    other_user_id: int | None = None
    is_online: bool = False
    is_typing: bool = False
    unread_count: int = 0
    member_count: int


class ConversationDetail(Conversation):
    members: list[ConversationMember] = Field(default_factory=list)


class DirectConversationCreate(BaseModel):
    other_user_id: int


class GroupCreate(BaseModel):
    name: str
    participant_ids: list[int] = Field(default_factory=list)


class ConversationRef(BaseModel):
    conversation_id: int


class GroupCreated(ConversationRef):
    invite_ids: list[int] = Field(default_factory=list)
    invited_user_ids: list[int] = Field(default_factory=list)


class MessageCreate(BaseModel):
    conversation_id: int
    body: str
    reply_to: str | None = None
    reply_to_user: str | None = None


class MessageRef(BaseModel):
    message_id: int | None = None


class ReactionToggle(BaseModel):
    emoji: str

    @field_validator("emoji")
    @classmethod
    def strip_emoji(cls, value: str) -> str:
        return value.strip()


class ReactionCount(BaseModel):
    emoji: str
    count: int


class ReactionState(BaseModel):
    message_id: int
    conversation_id: int
    emoji: str | None = None


class Message(BaseModel):
    id: int
    conversation_id: int
    body: str
    created_at: datetime
    is_deleted: bool = False
    reply_to: str | None = None
    reply_to_user: str | None = None
    sender: UserBasic
    reactions: list[ReactionCount] = Field(default_factory=list)
    my_reaction: str | None = None


class SuggestionRequest(BaseModel):
    context: str
    user_name: str | None = None


class SuggestionResponse(BaseModel):
    suggestions: list[str] = Field(default_factory=list)


class ChatInviteCreate(BaseModel):
    to_user_id: int
    message: str | None = None


class ChatInvite(BaseModel):
    id: int
    from_user_id: int
    to_user_id: int
    status: InviteStatus
    message: str | None = None
    created_at: datetime
    responded_at: datetime | None = None
    from_user: UserBasic
    to_user: UserBasic

    model_config = ConfigDict(from_attributes=True)


class GroupInviteCreate(BaseModel):
    conversation_id: int
    user_ids: list[int]
    message: str | None = None


class GroupChatInvite(BaseModel):
    id: int
    conversation_id: int
    conversation_name: str | None = None
    invited_user_id: int
    invited_by_user_id: int
    invited_by: UserBasic
    status: InviteStatus
    message: str | None = None
    created_at: datetime
    responded_at: datetime | None = None


class InviteRef(BaseModel):
    invite_id: int


class InviteRefs(BaseModel):
    invite_ids: list[int] = Field(default_factory=list)
