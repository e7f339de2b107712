# pulsechat/api/messages.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from pulsechat.api.dependencies import (
    get_conversation_gateway,
    get_current_user,
    get_event_dispatcher,
    get_message_interactor,
    get_suggestion_client,
    get_viewer,
)
from pulsechat.domain.events import (
    ConversationChanged,
    MessageCreated,
    MessageDeleted,
    ReactionToggled,
    UserInfo,
)
from pulsechat.gateways.conversation_gateway import ConversationGateway
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.event_dispatcher import PendingEvents
from pulsechat.infrastructure.suggestion_client import SuggestionClient
from pulsechat.interactors.message_interactor import MessageInteractor

router = APIRouter()


async def _member_ids(
    conversation_gateway: ConversationGateway, conversation_id: int
) -> List[int]:
    conversation = await conversation_gateway.get_conversation(conversation_id)
    if conversation is None:
        return []
    return [m.user_id for m in conversation.members]


@router.post("/", response_model=schemas.MessageRef)
async def create_message(
    message: schemas.MessageCreate,
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    conversation_gateway: ConversationGateway = Depends(get_conversation_gateway),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    db_message = await message_interactor.send_message(message, current_user)
    if db_message is None:
        return schemas.MessageRef(message_id=None)

    await event_dispatcher.dispatch(
        MessageCreated(
            message_id=db_message.id,
            conversation_id=db_message.conversation_id,
            sender=UserInfo(id=current_user.id, name=current_user.name),
            created_at=db_message.created_at,
            body=db_message.body,
            reply_to=db_message.reply_to,
            reply_to_user=db_message.reply_to_user,
        )
    )
    await event_dispatcher.dispatch(
        ConversationChanged(
            conversation_id=db_message.conversation_id,
            user_ids=await _member_ids(conversation_gateway, db_message.conversation_id),
            reason="message",
        )
    )
    return schemas.MessageRef(message_id=db_message.id)


@router.post("/suggestions", response_model=schemas.SuggestionResponse)
async def suggest_replies(
    request: schemas.SuggestionRequest,
    suggestion_client: SuggestionClient = Depends(get_suggestion_client),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    if viewer is None:
        return schemas.SuggestionResponse(suggestions=[])
    suggestions = await suggestion_client.suggest(
        request.context, request.user_name or viewer.name
    )
    return schemas.SuggestionResponse(suggestions=suggestions)


@router.get("/{conversation_id}", response_model=List[schemas.Message])
async def read_messages(
    conversation_id: int,
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await message_interactor.get_messages(conversation_id, viewer)


@router.delete("/{message_id}", response_model=schemas.Message)
async def delete_message(
    message_id: int,
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    conversation_gateway: ConversationGateway = Depends(get_conversation_gateway),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    deleted_message = await message_interactor.delete_message(message_id, current_user)

    await event_dispatcher.dispatch(
        MessageDeleted(
            message_id=deleted_message.id,
            conversation_id=deleted_message.conversation_id,
            sender=UserInfo(id=current_user.id, name=current_user.name),
            created_at=deleted_message.created_at,
        )
    )
    await event_dispatcher.dispatch(
        ConversationChanged(
            conversation_id=deleted_message.conversation_id,
            user_ids=await _member_ids(
                conversation_gateway, deleted_message.conversation_id
            ),
            reason="message_deleted",
        )
    )
    return deleted_message


@router.post("/{message_id}/reactions", response_model=schemas.ReactionState)
async def toggle_reaction(
    message_id: int,
    reaction: schemas.ReactionToggle,
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    state = await message_interactor.toggle_reaction(
        message_id, reaction.emoji, current_user
    )
    await event_dispatcher.dispatch(
        ReactionToggled(
            message_id=state.message_id,
            conversation_id=state.conversation_id,
            user_id=current_user.id,
            emoji=state.emoji,
        )
    )
    return state
