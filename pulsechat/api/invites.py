# pulsechat/api/invites.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from pulsechat.api.dependencies import (
    get_current_user,
    get_event_dispatcher,
    get_invite_interactor,
    get_viewer,
)
from pulsechat.domain.entities import InviteStatus
from pulsechat.domain.events import (
    ChatInviteCreated,
    ConversationChanged,
    GroupInviteCreated,
    InviteResponded,
)
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.event_dispatcher import PendingEvents
from pulsechat.interactors.invite_interactor import InviteInteractor

router = APIRouter()


@router.post("/chat", response_model=schemas.InviteRef)
async def send_chat_invite(
    invite: schemas.ChatInviteCreate,
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    invite_id = await invite_interactor.send_chat_invite(invite, current_user)
    await event_dispatcher.dispatch(
        ChatInviteCreated(
            invite_id=invite_id,
            from_user_id=current_user.id,
            to_user_id=invite.to_user_id,
        )
    )
    return schemas.InviteRef(invite_id=invite_id)


@router.get("/chat/incoming", response_model=List[schemas.ChatInvite])
async def read_incoming_chat_invites(
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await invite_interactor.get_incoming_chat_invites(viewer)


@router.get("/chat/outgoing", response_model=List[schemas.ChatInvite])
async def read_outgoing_chat_invites(
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await invite_interactor.get_outgoing_chat_invites(viewer)


@router.post("/chat/{invite_id}/accept", response_model=schemas.ConversationRef)
async def accept_chat_invite(
    invite_id: int,
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    conversation_id, invite = await invite_interactor.accept_chat_invite(
        invite_id, current_user
    )
    await event_dispatcher.dispatch(
        InviteResponded(
            invite_id=invite.id,
            kind="chat",
            status=InviteStatus.ACCEPTED.value,
            notify_user_id=invite.from_user_id,
            conversation_id=conversation_id,
        )
    )
    await event_dispatcher.dispatch(
        ConversationChanged(
            conversation_id=conversation_id,
            user_ids=[invite.from_user_id, invite.to_user_id],
            reason="created",
        )
    )
    return schemas.ConversationRef(conversation_id=conversation_id)


@router.post("/chat/{invite_id}/reject", response_model=schemas.ChatInvite)
async def reject_chat_invite(
    invite_id: int,
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    invite = await invite_interactor.reject_chat_invite(invite_id, current_user)
    await event_dispatcher.dispatch(
        InviteResponded(
            invite_id=invite.id,
            kind="chat",
            status=InviteStatus.REJECTED.value,
            notify_user_id=invite.from_user_id,
        )
    )
    return invite


@router.post("/group", response_model=schemas.InviteRefs)
async def send_group_invites(
    invite: schemas.GroupInviteCreate,
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    created = await invite_interactor.send_group_invites(invite, current_user)
    invite_ids = [invite_id for invite_id, _ in created]
    if created:
        await event_dispatcher.dispatch(
            GroupInviteCreated(
                invite_ids=invite_ids,
                conversation_id=invite.conversation_id,
                invited_by_user_id=current_user.id,
                invited_user_ids=[user_id for _, user_id in created],
            )
        )
    return schemas.InviteRefs(invite_ids=invite_ids)


@router.get("/group/incoming", response_model=List[schemas.GroupChatInvite])
async def read_incoming_group_invites(
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await invite_interactor.get_incoming_group_invites(viewer)


@router.post("/group/{invite_id}/accept", response_model=schemas.ConversationRef)
async def accept_group_invite(
    invite_id: int,
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    invite = await invite_interactor.accept_group_invite(invite_id, current_user)
    await event_dispatcher.dispatch(
        InviteResponded(
            invite_id=invite.id,
            kind="group",
            status=InviteStatus.ACCEPTED.value,
            notify_user_id=invite.invited_by_user_id,
            conversation_id=invite.conversation_id,
        )
    )
    await event_dispatcher.dispatch(
        ConversationChanged(
            conversation_id=invite.conversation_id,
            user_ids=[current_user.id],
            reason="joined",
        )
    )
    return schemas.ConversationRef(conversation_id=invite.conversation_id)


@router.post("/group/{invite_id}/reject", response_model=schemas.GroupChatInvite)
async def reject_group_invite(
    invite_id: int,
    invite_interactor: InviteInteractor = Depends(get_invite_interactor),
    current_user: schemas.User = Depends(get_current_user),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    invite = await invite_interactor.reject_group_invite(invite_id, current_user)
    await event_dispatcher.dispatch(
        InviteResponded(
            invite_id=invite.id,
            kind="group",
            status=InviteStatus.REJECTED.value,
            notify_user_id=invite.invited_by_user_id,
            conversation_id=invite.conversation_id,
        )
    )
    return invite
