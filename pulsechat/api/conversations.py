# pulsechat/api/conversations.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from pulsechat.api.dependencies import (
    get_conversation_interactor,
    get_current_user,
    get_event_dispatcher,
    get_viewer,
)
from pulsechat.domain.events import (
    ConversationChanged,
    ConversationRead,
    GroupInviteCreated,
    TypingChanged,
)
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.event_dispatcher import PendingEvents
from pulsechat.interactors.conversation_interactor import ConversationInteractor

router = APIRouter()


@router.get("/", response_model=List[schemas.Conversation])
async def read_conversations(
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await conversation_interactor.get_conversations(viewer)


@router.post("/direct", response_model=schemas.ConversationRef)
async def get_or_create_direct_conversation(
    payload: schemas.DirectConversationCreate,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    conversation_id, created = await conversation_interactor.get_or_create_direct(
        payload.other_user_id, current_user
    )
    if created:
        await event_dispatcher.dispatch(
            ConversationChanged(
                conversation_id=conversation_id,
                user_ids=[current_user.id, payload.other_user_id],
                reason="created",
            )
        )
    return schemas.ConversationRef(conversation_id=conversation_id)


@router.post("/groups", response_model=schemas.GroupCreated)
async def create_group(
    group: schemas.GroupCreate,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    created = await conversation_interactor.create_group(group, current_user)
    await event_dispatcher.dispatch(
        ConversationChanged(
            conversation_id=created.conversation_id,
            user_ids=[current_user.id],
            reason="created",
        )
    )
    if created.invite_ids:
        await event_dispatcher.dispatch(
            GroupInviteCreated(
                invite_ids=created.invite_ids,
                conversation_id=created.conversation_id,
                invited_by_user_id=current_user.id,
                invited_user_ids=created.invited_user_ids,
            )
        )
    return created


@router.get("/{conversation_id}", response_model=Optional[schemas.ConversationDetail])
async def read_conversation(
    conversation_id: int,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await conversation_interactor.get_conversation(conversation_id, viewer)


@router.post("/{conversation_id}/read", status_code=204)
async def mark_read(
    conversation_id: int,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    read_at = await conversation_interactor.mark_read(conversation_id, current_user)
    await event_dispatcher.dispatch(
        ConversationRead(
            conversation_id=conversation_id, user_id=current_user.id, read_at=read_at
        )
    )


@router.post("/{conversation_id}/typing", status_code=204)
async def set_typing(
    conversation_id: int,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    await conversation_interactor.set_typing(conversation_id, current_user)
    await event_dispatcher.dispatch(
        TypingChanged(
            conversation_id=conversation_id, user_id=current_user.id, is_typing=True
        )
    )


@router.delete("/{conversation_id}/typing", status_code=204)
async def clear_typing(
    conversation_id: int,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    await conversation_interactor.clear_typing(conversation_id, current_user)
    await event_dispatcher.dispatch(
        TypingChanged(
            conversation_id=conversation_id, user_id=current_user.id, is_typing=False
        )
    )


@router.post("/{conversation_id}/hide", status_code=204)
async def hide_conversation(
    conversation_id: int,
    conversation_interactor: ConversationInteractor = Depends(get_conversation_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    await conversation_interactor.hide(conversation_id, current_user)
    await event_dispatcher.dispatch(
        ConversationChanged(
            conversation_id=conversation_id,
            user_ids=[current_user.id],
            reason="hidden",
        )
    )
