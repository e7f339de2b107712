# pulsechat/interactors/user_interactor.py
from datetime import timedelta

from pulsechat.config import AppConfig
from pulsechat.domain.clock import is_within, utcnow
from pulsechat.domain.entities import Caller
from pulsechat.domain.errors import Unauthenticated
from pulsechat.gateways.interfaces import IUserGateway
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.uow import UoWModel


class UserInteractor:
    def __init__(self, config: AppConfig, user_gateway: IUserGateway):
        self.config = config
        self.user_gateway = user_gateway

    @property
    def online_window(self) -> timedelta:
        return timedelta(seconds=self.config.ONLINE_WINDOW_SECONDS)

    def to_presence(self, user: UoWModel) -> schemas.UserPresence:
        presence = schemas.UserPresence.model_validate(user._model)
        presence.is_online = is_within(user.last_seen_at, self.online_window)
        return presence

    async def resolve_caller(self, caller: Caller | None) -> schemas.User:
        """Find or create the caller's user row and refresh it.

        Runs at the top of every mutation so profile changes made at the
        identity provider show up on next use.
        """
        if caller is None:
            raise Unauthenticated()
        now = utcnow()
        user = await self.user_gateway.get_by_token_identifier(caller.token_identifier)
        if user is None:
            user = await self.user_gateway.create_user(caller, now)
        else:
            user = await self.user_gateway.refresh_user(user, caller, now)
        return schemas.User.model_validate(user._model)

    async def current_user(self, caller: Caller | None) -> schemas.User | None:
        # read-only: queries must never write
        if caller is None:
            return None
        user = await self.user_gateway.get_by_token_identifier(caller.token_identifier)
        return schemas.User.model_validate(user._model) if user else None

    async def update_presence(self, caller: Caller | None) -> schemas.UserPresence:
        # resolving the caller already stamps last_seen_at
        user = await self.resolve_caller(caller)
        return schemas.UserPresence(**user.model_dump(), is_online=True)

    async def search_users(
        self, query: str, viewer: schemas.User | None
    ) -> list[schemas.UserPresence]:
        query = query.strip()
        if viewer is None or not query:
            return []
        users = await self.user_gateway.search_users(query, viewer.id)
        return [self.to_presence(user) for user in users]

    async def get_suggested_users(
        self, caller: Caller | None, viewer: schemas.User | None
    ) -> list[schemas.UserPresence]:
        if caller is None:
            return []
        users = await self.user_gateway.get_suggested(
            viewer.id if viewer else None, self.config.SUGGESTED_USERS_LIMIT
        )
        return [self.to_presence(user) for user in users]
