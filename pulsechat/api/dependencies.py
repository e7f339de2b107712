# pulsechat/api/dependencies.py
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pulsechat.config import AppConfig
from pulsechat.domain.entities import Caller
from pulsechat.gateways.conversation_gateway import ConversationGateway
from pulsechat.gateways.invite_gateway import InviteGateway
from pulsechat.gateways.message_gateway import MessageGateway
from pulsechat.gateways.search_history_gateway import SearchHistoryGateway
from pulsechat.gateways.user_gateway import UserGateway
from pulsechat.infrastructure import schemas
from pulsechat.infrastructure.event_dispatcher import PendingEvents
from pulsechat.infrastructure.security import SecurityService
from pulsechat.infrastructure.suggestion_client import SuggestionClient
from pulsechat.infrastructure.uow import UnitOfWork
from pulsechat.interactors.conversation_interactor import ConversationInteractor
from pulsechat.interactors.invite_interactor import InviteInteractor
from pulsechat.interactors.message_interactor import MessageInteractor
from pulsechat.interactors.search_history_interactor import SearchHistoryInteractor
from pulsechat.interactors.user_interactor import UserInteractor

bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


def get_pending_events(request: Request) -> PendingEvents:
    return PendingEvents(request.app.state.event_dispatcher)


def get_suggestion_client(request: Request) -> SuggestionClient:
    return request.app.state.suggestion_client


async def get_session(
    request: Request, pending_events: PendingEvents = Depends(get_pending_events)
) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            pending_events.discard()
            raise
    # live updates go out only once the write is durable
    await pending_events.flush()


async def get_event_dispatcher(
    pending_events: PendingEvents = Depends(get_pending_events),
    session: AsyncSession = Depends(get_session),
) -> PendingEvents:
    return pending_events


async def get_uow() -> UnitOfWork:
    return UnitOfWork()


async def get_user_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return UserGateway(session, uow)


async def get_conversation_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return ConversationGateway(session, uow)


async def get_message_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return MessageGateway(session, uow)


async def get_invite_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return InviteGateway(session, uow)


async def get_search_history_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return SearchHistoryGateway(session, uow)


async def get_user_interactor(
    config: AppConfig = Depends(get_config),
    user_gateway: UserGateway = Depends(get_user_gateway),
):
    return UserInteractor(config, user_gateway)


async def get_conversation_interactor(
    config: AppConfig = Depends(get_config),
    conversation_gateway: ConversationGateway = Depends(get_conversation_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
    invite_gateway: InviteGateway = Depends(get_invite_gateway),
):
    return ConversationInteractor(
        config, conversation_gateway, user_gateway, invite_gateway
    )


async def get_message_interactor(
    conversation_gateway: ConversationGateway = Depends(get_conversation_gateway),
    message_gateway: MessageGateway = Depends(get_message_gateway),
):
    return MessageInteractor(conversation_gateway, message_gateway)


async def get_invite_interactor(
    invite_gateway: InviteGateway = Depends(get_invite_gateway),
    conversation_gateway: ConversationGateway = Depends(get_conversation_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
):
    return InviteInteractor(invite_gateway, conversation_gateway, user_gateway)


async def get_search_history_interactor(
    config: AppConfig = Depends(get_config),
    search_history_gateway: SearchHistoryGateway = Depends(get_search_history_gateway),
):
    return SearchHistoryInteractor(search_history_gateway, config.SEARCH_HISTORY_LIMIT)


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    security_service: SecurityService = Depends(get_security_service),
) -> Optional[Caller]:
    if credentials is None:
        return None
    return security_service.decode_identity_token(credentials.credentials)


async def get_current_user(
    caller: Optional[Caller] = Depends(get_caller),
    user_interactor: UserInteractor = Depends(get_user_interactor),
) -> schemas.User:
    """Acting user for mutations: created or refreshed on every call."""
    return await user_interactor.resolve_caller(caller)


async def get_viewer(
    caller: Optional[Caller] = Depends(get_caller),
    user_interactor: UserInteractor = Depends(get_user_interactor),
) -> Optional[schemas.User]:
    """Viewer for queries; never writes and may be None."""
    return await user_interactor.current_user(caller)
