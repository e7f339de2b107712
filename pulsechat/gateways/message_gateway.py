# pulsechat/gateways/message_gateway.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pulsechat.domain.clock import utcnow
from pulsechat.gateways.interfaces import IMessageGateway
from pulsechat.infrastructure import models
from pulsechat.infrastructure.data_mappers import register_mappers
from pulsechat.infrastructure.uow import UnitOfWork, UoWModel


class MessageGateway(IMessageGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        register_mappers(
            uow,
            session,
            models.Message,
            models.MessageReaction,
            models.Conversation,
            models.ConversationMember,
        )

    async def get_message(self, message_id: int) -> UoWModel | None:
        stmt = select(models.Message).filter(models.Message.id == message_id)
        result = await self.session.execute(stmt)
        message = result.unique().scalar_one_or_none()
        return UoWModel(message, self.uow) if message else None

    async def get_all(self, conversation_id: int) -> list[UoWModel]:
        stmt = (
            select(models.Message)
            .filter(models.Message.conversation_id == conversation_id)
            .order_by(models.Message.created_at.asc(), models.Message.id.asc())
        )
        result = await self.session.execute(stmt)
        messages = result.unique().scalars().all()
        return [UoWModel(message, self.uow) for message in messages]

    async def create_message(
        self,
        conversation: UoWModel,
        sender_id: int,
        body: str,
        reply_to: str | None = None,
        reply_to_user: str | None = None,
    ) -> UoWModel:
        now = utcnow()
        db_message = models.Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            body=body,
            created_at=now,
            is_deleted=False,
            reply_to=reply_to,
            reply_to_user=reply_to_user,
        )
        uow_message = self.uow.register_new(db_message)

        conversation.last_message = body
        conversation.last_message_at = now
        conversation.last_message_sender_id = sender_id
        # a new message brings the thread back for everyone who hid it
        for member in conversation._model.members:
            member.is_hidden = False
            if member.user_id == sender_id:
                member.typing_at = None
                member.last_read_at = now

        await self.uow.commit()
        return uow_message

    async def soft_delete(self, message: UoWModel) -> UoWModel:
        message.is_deleted = True
        await self.uow.commit()
        return message

    async def set_reaction(
        self, message: UoWModel, user_id: int, emoji: str | None
    ) -> None:
        reactions = message._model.reactions
        existing = next((r for r in reactions if r.user_id == user_id), None)
        if emoji is None:
            if existing is not None:
                reactions.remove(existing)
        elif existing is not None:
            existing.emoji = emoji
            existing.created_at = utcnow()
        else:
            reactions.append(
                models.MessageReaction(
                    user_id=user_id, emoji=emoji, created_at=utcnow()
                )
            )
        self.uow.register_dirty(message)
        await self.uow.commit()
