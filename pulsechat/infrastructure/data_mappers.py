# pulsechat/infrastructure/data_mappers.py

from typing import Any, Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

ModelT_contra = TypeVar("ModelT_contra", contravariant=True)


class DataMapper(Protocol[ModelT_contra]):
    async def insert(self, model: ModelT_contra):
        raise NotImplementedError

    async def delete(self, model: ModelT_contra):
        raise NotImplementedError

    async def update(self, model: ModelT_contra):
        raise NotImplementedError


class SessionMapper(DataMapper[Any]):
    """Persists any mapped model through the request's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, model: Any):
        self.session.add(model)
        await self.session.flush()

    async def delete(self, model: Any):
        await self.session.delete(model)
        await self.session.flush()

    async def update(self, model: Any):
        await self.session.merge(model)
        await self.session.flush()


def register_mappers(uow, session: AsyncSession, *model_types: type) -> None:
    mapper = SessionMapper(session)
    for model_type in model_types:
        uow.mappers.setdefault(model_type, mapper)
