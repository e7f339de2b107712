# pulsechat/gateways/search_history_gateway.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pulsechat.gateways.interfaces import ISearchHistoryGateway
from pulsechat.infrastructure import models
from pulsechat.infrastructure.data_mappers import register_mappers
from pulsechat.infrastructure.uow import UnitOfWork, UoWModel


class SearchHistoryGateway(ISearchHistoryGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        register_mappers(uow, session, models.SearchHistory)

    async def get_recent(self, user_id: int, limit: int) -> list[UoWModel]:
        stmt = (
            select(models.SearchHistory)
            .filter(models.SearchHistory.user_id == user_id)
            .order_by(
                models.SearchHistory.created_at.desc(), models.SearchHistory.id.desc()
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        entries = result.scalars().all()
        return [UoWModel(entry, self.uow) for entry in entries]

    async def upsert(self, user_id: int, query: str, created_at: datetime) -> UoWModel:
        stmt = select(models.SearchHistory).filter(
            models.SearchHistory.user_id == user_id,
            models.SearchHistory.query == query,
        )
        result = await self.session.execute(stmt)
        existing = result.scalar_one_or_none()
        if existing:
            entry = UoWModel(existing, self.uow)
            entry.created_at = created_at
        else:
            entry = self.uow.register_new(
                models.SearchHistory(user_id=user_id, query=query, created_at=created_at)
            )
        await self.uow.commit()
        return entry
