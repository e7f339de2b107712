# pulsechat/interactors/message_interactor.py
from collections import Counter
from typing import List, Optional

from pulsechat.domain.clock import as_utc
from pulsechat.domain.entities import DELETED_MESSAGE_PLACEHOLDER
from pulsechat.domain.errors import InvalidInput, NotAuthorized, NotFound
from pulsechat.gateways.interfaces import IConversationGateway, IMessageGateway
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.uow import UoWModel


class MessageInteractor:
    def __init__(
        self,
        conversation_gateway: IConversationGateway,
        message_gateway: IMessageGateway,
    ):
        self.conversation_gateway = conversation_gateway
        self.message_gateway = message_gateway

    async def _require_member(self, conversation_id: int, user_id: int) -> UoWModel:
        conversation = await self.conversation_gateway.get_conversation(conversation_id)
        if conversation is None:
            raise NotFound(f"Conversation {conversation_id} not found")
        if not any(m.user_id == user_id for m in conversation.members):
            raise NotAuthorized("You are not a participant of this conversation")
        return conversation

    async def get_messages(
        self, conversation_id: int, viewer: Optional[schemas.User]
    ) -> List[schemas.Message]:
        conversation = await self.conversation_gateway.get_conversation(conversation_id)
        if conversation is None:
            return []
        viewer_id = viewer.id if viewer else None
        if viewer_id is not None and not any(
            m.user_id == viewer_id for m in conversation.members
        ):
            raise NotAuthorized("You are not a participant of this conversation")
        messages = await self.message_gateway.get_all(conversation_id)
        return [self.to_view(message, viewer_id) for message in messages]

    async def send_message(
        self, message: schemas.MessageCreate, user: schemas.User
    ) -> Optional[schemas.Message]:
        conversation = await self._require_member(message.conversation_id, user.id)
        body = message.body.strip()
        if not body:
            return None

        db_message = await self.message_gateway.create_message(
            conversation,
            user.id,
            body,
            reply_to=message.reply_to,
            reply_to_user=message.reply_to_user,
        )
        return schemas.Message(
            id=db_message.id,
            conversation_id=db_message.conversation_id,
            body=db_message.body,
            created_at=db_message.created_at,
            reply_to=db_message.reply_to,
            reply_to_user=db_message.reply_to_user,
            sender=schemas.UserBasic(id=user.id, name=user.name, image_url=user.image_url),
        )

    async def delete_message(self, message_id: int, user: schemas.User) -> schemas.Message:
        message = await self.message_gateway.get_message(message_id)
        if message is None:
            raise NotFound(f"Message {message_id} not found")
        if message.sender_id != user.id:
            raise NotAuthorized("Only the sender can delete this message")

        await self.message_gateway.soft_delete(message)

        conversation = await self.conversation_gateway.get_conversation(
            message.conversation_id
        )
        if (
            conversation is not None
            and conversation.last_message_sender_id == message.sender_id
            and as_utc(conversation.last_message_at) == as_utc(message.created_at)
        ):
            conversation.last_message = DELETED_MESSAGE_PLACEHOLDER
            await self.conversation_gateway.save()
        return self.to_view(message, user.id)

    async def toggle_reaction(
        self, message_id: int, emoji: str, user: schemas.User
    ) -> schemas.ReactionState:
        emoji = emoji.strip()
        if not emoji:
            raise InvalidInput("Emoji must not be empty")
        message = await self.message_gateway.get_message(message_id)
        if message is None:
            raise NotFound(f"Message {message_id} not found")
        conversation = await self._require_member(message.conversation_id, user.id)

        current = next((r.emoji for r in message.reactions if r.user_id == user.id), None)
        new_emoji = None if current == emoji else emoji
        await self.message_gateway.set_reaction(message, user.id, new_emoji)
        return schemas.ReactionState(
            message_id=message.id,
            conversation_id=conversation.id,
            emoji=new_emoji,
        )

    @staticmethod
    def to_view(message: UoWModel, viewer_id: Optional[int]) -> schemas.Message:
        counts = Counter(r.emoji for r in message.reactions)
        my_reaction = None
        if viewer_id is not None:
            my_reaction = next(
                (r.emoji for r in message.reactions if r.user_id == viewer_id), None
            )
        return schemas.Message(
            id=message.id,
            conversation_id=message.conversation_id,
            body=DELETED_MESSAGE_PLACEHOLDER if message.is_deleted else message.body,
            created_at=message.created_at,
            is_deleted=message.is_deleted,
            reply_to=message.reply_to,
            reply_to_user=message.reply_to_user,
            sender=schemas.UserBasic.model_validate(message.sender),
            reactions=[
                schemas.ReactionCount(emoji=emoji, count=count)
                for emoji, count in counts.most_common()
            ],
            my_reaction=my_reaction,
        )
