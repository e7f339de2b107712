# pulsechat/infrastructure/models.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pulsechat.domain.clock import utcnow
from pulsechat.domain.entities import InviteStatus
from pulsechat.infrastructure.database import Base

invite_status = SAEnum(
    InviteStatus,
    name="invite_status",
    native_enum=False,
    values_callable=lambda statuses: [status.value for status in statuses],
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    token_identifier: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String, index=True)
    email: Mapped[Optional[str]] = mapped_column(String)
    image_url: Mapped[Optional[str]] = mapped_column(String)
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class SearchHistory(Base):
    __tablename__ = "search_history"

    __table_args__ = (
        UniqueConstraint("user_id", "query", name="uq_search_history_user_query"),
        Index("ix_search_history_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE")
    )
    query: Mapped[str] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    is_group: Mapped[bool] = mapped_column(Boolean, default=False)
    name: Mapped[Optional[str]] = mapped_column(String)
    # sorted "low:high" user id pair, only set for direct conversations
    direct_key: Mapped[Optional[str]] = mapped_column(String, unique=True)
    last_message: Mapped[Optional[str]] = mapped_column(Text)
    last_message_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    last_message_sender_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id")
    )
    created_by_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    members: Mapped[List["ConversationMember"]] = relationship(
        "ConversationMember",
        back_populates="conversation",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class ConversationMember(Base):
    """Participant row; carries the per-user read cursor, typing and hidden state."""

    __tablename__ = "conversation_members"

    __table_args__ = (Index("ix_conversation_members_user", "user_id"),)

    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    last_read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    typing_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)

    conversation: Mapped[Conversation] = relationship(
        "Conversation", back_populates="members", lazy="raise_on_sql"
    )
    user: Mapped[User] = relationship("User", lazy="joined")


class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE")
    )
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    body: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    reply_to: Mapped[Optional[str]] = mapped_column(Text)
    reply_to_user: Mapped[Optional[str]] = mapped_column(String)

    sender: Mapped[User] = relationship("User", lazy="joined")
    reactions: Mapped[List["MessageReaction"]] = relationship(
        "MessageReaction",
        back_populates="message",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class MessageReaction(Base):
    """One active emoji per (message, user)."""

    __tablename__ = "message_reactions"

    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    emoji: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    message: Mapped[Message] = relationship(
        "Message", back_populates="reactions", lazy="raise_on_sql"
    )


class ChatInvite(Base):
    __tablename__ = "chat_invites"

    __table_args__ = (
        Index("ix_chat_invites_to_status", "to_user_id", "status"),
        Index("ix_chat_invites_from_status", "from_user_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    from_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    to_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    status: Mapped[InviteStatus] = mapped_column(
        invite_status, default=InviteStatus.PENDING
    )
    message: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    from_user: Mapped[User] = relationship(
        "User", foreign_keys=[from_user_id], lazy="joined"
    )
    to_user: Mapped[User] = relationship(
        "User", foreign_keys=[to_user_id], lazy="joined"
    )


class GroupChatInvite(Base):
    __tablename__ = "group_chat_invites"

    __table_args__ = (
        Index("ix_group_invites_invited_status", "invited_user_id", "status"),
        Index("ix_group_invites_conversation_status", "conversation_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE")
    )
    invited_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    invited_by_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    status: Mapped[InviteStatus] = mapped_column(
        invite_status, default=InviteStatus.PENDING
    )
    message: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    conversation: Mapped[Conversation] = relationship("Conversation", lazy="joined")
    invited_by: Mapped[User] = relationship(
        "User", foreign_keys=[invited_by_user_id], lazy="joined"
    )
