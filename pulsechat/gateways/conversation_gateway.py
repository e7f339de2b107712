# pulsechat/gateways/conversation_gateway.py
from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pulsechat.domain.clock import utcnow
from pulsechat.domain.entities import direct_key
from pulsechat.domain.errors import AlreadyExists
from pulsechat.gateways.interfaces import IConversationGateway
from pulsechat.infrastructure import models
from pulsechat.infrastructure.data_mappers import register_mappers
from pulsechat.infrastructure.uow import UnitOfWork, UoWModel


class ConversationGateway(IConversationGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        register_mappers(
            uow, session, models.Conversation, models.ConversationMember
        )

    async def get_conversation(self, conversation_id: int) -> UoWModel | None:
        stmt = select(models.Conversation).filter(
            models.Conversation.id == conversation_id
        )
        result = await self.session.execute(stmt)
        conversation = result.scalar_one_or_none()
        return UoWModel(conversation, self.uow) if conversation else None

    async def get_visible_for_user(self, user_id: int) -> list[UoWModel]:
        stmt = (
            select(models.Conversation)
            .join(
                models.ConversationMember,
                models.ConversationMember.conversation_id == models.Conversation.id,
            )
            .filter(
                models.ConversationMember.user_id == user_id,
                models.ConversationMember.is_hidden.is_(False),
            )
            .order_by(
                models.Conversation.last_message_at.desc(),
                models.Conversation.id.desc(),
            )
        )
        result = await self.session.execute(stmt)
        conversations = result.scalars().unique().all()
        return [UoWModel(conversation, self.uow) for conversation in conversations]

    async def get_direct(self, user_id: int, other_user_id: int) -> UoWModel | None:
        stmt = select(models.Conversation).filter(
            models.Conversation.is_group.is_(False),
            models.Conversation.direct_key == direct_key(user_id, other_user_id),
        )
        result = await self.session.execute(stmt)
        conversation = result.scalar_one_or_none()
        return UoWModel(conversation, self.uow) if conversation else None

    async def create_direct(self, user_id: int, other_user_id: int) -> UoWModel:
        now = utcnow()
        db_conversation = models.Conversation(
            is_group=False,
            direct_key=direct_key(user_id, other_user_id),
            last_message_at=now,
            created_by_id=user_id,
            created_at=now,
        )
        db_conversation.members = [
            models.ConversationMember(user_id=member_id, joined_at=now, is_hidden=False)
            for member_id in sorted((user_id, other_user_id))
        ]
        # flush pending work first; only the insert below is rolled back on conflict
        await self.uow.commit()
        try:
            async with self.session.begin_nested():
                uow_conversation = self.uow.register_new(db_conversation)
                await self.uow.commit()
        except IntegrityError:
            # lost the race against a concurrent insert of the same pair
            self.uow.clear()
            raise AlreadyExists(
                "A direct conversation between these users already exists"
            ) from None
        return uow_conversation

    async def create_group(self, name: str, creator_id: int) -> UoWModel:
        now = utcnow()
        db_conversation = models.Conversation(
            is_group=True,
            name=name,
            last_message_at=now,
            created_by_id=creator_id,
            created_at=now,
        )
        db_conversation.members = [
            models.ConversationMember(user_id=creator_id, joined_at=now, is_hidden=False)
        ]
        uow_conversation = self.uow.register_new(db_conversation)
        await self.uow.commit()
        return uow_conversation

    async def get_member(self, conversation_id: int, user_id: int) -> UoWModel | None:
        stmt = select(models.ConversationMember).filter(
            models.ConversationMember.conversation_id == conversation_id,
            models.ConversationMember.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        member = result.scalar_one_or_none()
        return UoWModel(member, self.uow) if member else None

    async def add_member(self, conversation: UoWModel, user_id: int) -> UoWModel:
        existing = next(
            (m for m in conversation._model.members if m.user_id == user_id), None
        )
        if existing:
            return UoWModel(existing, self.uow)
        member = models.ConversationMember(
            user_id=user_id, joined_at=utcnow(), is_hidden=False
        )
        conversation._model.members.append(member)
        self.uow.register_dirty(conversation._model)
        await self.uow.commit()
        return UoWModel(member, self.uow)

    async def save(self) -> None:
        await self.uow.commit()

    async def get_unread_counts(
        self, user_id: int, conversation_ids: list[int]
    ) -> dict[int, int]:
        if not conversation_ids:
            return {}
        member = models.ConversationMember
        stmt = (
            select(
                models.Message.conversation_id,
                func.count(models.Message.id).label("unread_count"),
            )
            .join(
                member,
                and_(
                    member.conversation_id == models.Message.conversation_id,
                    member.user_id == user_id,
                ),
            )
            .filter(
                models.Message.conversation_id.in_(conversation_ids),
                models.Message.sender_id != user_id,
                or_(
                    member.last_read_at.is_(None),
                    models.Message.created_at > member.last_read_at,
                ),
            )
            .group_by(models.Message.conversation_id)
        )
        result = await self.session.execute(stmt)
        return {row.conversation_id: row.unread_count for row in result}
