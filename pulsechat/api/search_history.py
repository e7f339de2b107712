# pulsechat/api/search_history.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from pulsechat.api.dependencies import (
    get_current_user,
    get_search_history_interactor,
    get_viewer,
)
from pulsechat.infrastructure import schemas
from pulsechat.interactors.search_history_interactor import SearchHistoryInteractor

router = APIRouter()


@router.get("/", response_model=List[schemas.SearchHistoryEntry])
async def read_search_history(
    search_history_interactor: SearchHistoryInteractor = Depends(
        get_search_history_interactor
    ),
    viewer: Optional[schemas.User] = Depends(get_viewer),
):
    return await search_history_interactor.get_recent(viewer)


@router.post("/", response_model=Optional[schemas.SearchHistoryEntry])
async def add_search_history(
    entry: schemas.SearchHistoryCreate,
    search_history_interactor: SearchHistoryInteractor = Depends(
        get_search_history_interactor
    ),
    current_user: schemas.User = Depends(get_current_user),
):
    return await search_history_interactor.add(entry.query, current_user)
