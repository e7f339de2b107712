# pulsechat/interactors/search_history_interactor.py
from typing import List, Optional

from pulsechat.domain.clock import utcnow
from pulsechat.gateways.interfaces import ISearchHistoryGateway
from pulsechat.infrastructure import schemas


class SearchHistoryInteractor:
    def __init__(self, search_history_gateway: ISearchHistoryGateway, limit: int):
        self.search_history_gateway = search_history_gateway
        self.limit = limit

    async def get_recent(
        self, viewer: Optional[schemas.User]
    ) -> List[schemas.SearchHistoryEntry]:
        if viewer is None:
            return []
        entries = await self.search_history_gateway.get_recent(viewer.id, self.limit)
        return [schemas.SearchHistoryEntry.model_validate(e._model) for e in entries]

    async def add(
        self, query: str, user: schemas.User
    ) -> Optional[schemas.SearchHistoryEntry]:
        normalized = query.strip()
        if not normalized:
            return None
        entry = await self.search_history_gateway.upsert(user.id, normalized, utcnow())
        return schemas.SearchHistoryEntry.model_validate(entry._model)
