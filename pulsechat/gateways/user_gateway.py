# pulsechat/gateways/user_gateway.py

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pulsechat.domain.entities import Caller
from pulsechat.gateways.interfaces import IUserGateway
from pulsechat.infrastructure import models
from pulsechat.infrastructure.data_mappers import register_mappers
from pulsechat.infrastructure.uow import UnitOfWork, UoWModel


class UserGateway(IUserGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        register_mappers(uow, session, models.User)

    async def get_user(self, user_id: int) -> UoWModel | None:
        stmt = select(models.User).filter(models.User.id == user_id)
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        return UoWModel(user, self.uow) if user else None

    async def get_by_token_identifier(self, token_identifier: str) -> UoWModel | None:
        stmt = select(models.User).filter(
            models.User.token_identifier == token_identifier
        )
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        return UoWModel(user, self.uow) if user else None

    async def get_many(self, user_ids: list[int]) -> dict[int, UoWModel]:
        if not user_ids:
            return {}
        stmt = select(models.User).filter(models.User.id.in_(set(user_ids)))
        result = await self.session.execute(stmt)
        return {user.id: UoWModel(user, self.uow) for user in result.scalars().all()}

    async def create_user(self, caller: Caller, seen_at: datetime) -> UoWModel:
        db_user = models.User(
            token_identifier=caller.token_identifier,
            name=caller.name,
            email=caller.email,
            image_url=caller.picture_url,
            last_seen_at=seen_at,
            created_at=seen_at,
        )
        uow_user = self.uow.register_new(db_user)
        await self.uow.commit()
        return uow_user

    async def refresh_user(
        self, user: UoWModel, caller: Caller, seen_at: datetime
    ) -> UoWModel:
        user.name = caller.name
        user.email = caller.email
        user.image_url = caller.picture_url
        user.last_seen_at = seen_at
        await self.uow.commit()
        return user

    async def search_users(self, query: str, current_user_id: int) -> list[UoWModel]:
        stmt = (
            select(models.User)
            .filter(
                models.User.id != current_user_id,
                models.User.name.icontains(query, autoescape=True),
            )
            .order_by(models.User.name)
        )
        result = await self.session.execute(stmt)
        users = result.scalars().all()
        return [UoWModel(user, self.uow) for user in users]

    async def get_suggested(
        self, current_user_id: int | None, limit: int
    ) -> list[UoWModel]:
        stmt = select(models.User).order_by(models.User.id)
        if current_user_id is not None:
            stmt = stmt.filter(models.User.id != current_user_id).limit(limit)
        result = await self.session.execute(stmt)
        users = result.scalars().all()
        return [UoWModel(user, self.uow) for user in users]
