# pulsechat/api/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pulsechat.api.dependencies import (
    get_caller,
    get_current_user,
    get_event_dispatcher,
    get_user_interactor,
    get_viewer,
)
from pulsechat.domain.entities import Caller
from pulsechat.domain.events import PresenceUpdated
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.event_dispatcher import PendingEvents
from pulsechat.interactors.user_interactor import UserInteractor

router = APIRouter()


@router.get("/me", response_model=Optional[schemas.User])
async def read_users_me(viewer: Optional[schemas.User] = Depends(get_viewer)):
    return viewer


@router.post("/me", response_model=schemas.User)
async def resolve_user_me(current_user: schemas.User = Depends(get_current_user)):
    return current_user


@router.post("/me/presence", response_model=schemas.UserPresence)
async def update_presence(
    caller: Optional[Caller] = Depends(get_caller),
    user_interactor: UserInteractor = Depends(get_user_interactor),
    event_dispatcher: PendingEvents = Depends(get_event_dispatcher),
):
    user = await user_interactor.update_presence(caller)
    await event_dispatcher.dispatch(
        PresenceUpdated(user_id=user.id, last_seen_at=user.last_seen_at)
    )
    return user


@router.get("/search", response_model=List[schemas.UserPresence])
async def search_users(
    query: str = Query("", description="Substring of the user's name"),
    user_interactor: UserInteractor = Depends(get_user_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await user_interactor.search_users(query, viewer)


@router.get("/suggested", response_model=List[schemas.UserPresence])
async def suggested_users(
    caller: Optional[Caller] = Depends(get_caller),
    user_interactor: UserInteractor = Depends(get_user_interactor),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await user_interactor.get_suggested_users(caller, viewer)
