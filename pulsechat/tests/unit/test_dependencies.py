# pulsechat/tests/unit/test_dependencies.py
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from pulsechat.api.dependencies import get_session
from pulsechat.domain.errors import NotAuthorized
from pulsechat.domain.events import TypingChanged
from pulsechat.infrastructure.event_dispatcher import PendingEvents


def _request(session):
    @asynccontextmanager
    async def session_scope():
        yield session

    database = SimpleNamespace(session=session_scope)
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(database=database)))


@pytest.fixture
def calls():
    return []


@pytest.fixture
def session(calls):
    session = Mock()
    session.commit = AsyncMock(side_effect=lambda: calls.append("commit"))
    session.rollback = AsyncMock(side_effect=lambda: calls.append("rollback"))
    return session


@pytest.fixture
def pending_events(calls):
    dispatcher = Mock()
    dispatcher.dispatch = AsyncMock(side_effect=lambda event: calls.append("publish"))
    return PendingEvents(dispatcher)


@pytest.mark.asyncio
async def test_events_are_published_after_commit(session, pending_events, calls):
    dependency = get_session(_request(session), pending_events)

    assert await dependency.__anext__() is session
    await pending_events.dispatch(TypingChanged(conversation_id=1, user_id=2, is_typing=True))
    assert calls == []

    with pytest.raises(StopAsyncIteration):
        await dependency.__anext__()

    assert calls == ["commit", "publish"]


@pytest.mark.asyncio
async def test_failed_request_rolls_back_and_drops_events(session, pending_events, calls):
    dependency = get_session(_request(session), pending_events)

    await dependency.__anext__()
    await pending_events.dispatch(TypingChanged(conversation_id=1, user_id=2, is_typing=True))

    with pytest.raises(NotAuthorized):
        await dependency.athrow(NotAuthorized("You are not a participant of this conversation"))

    assert calls == ["rollback"]
    session.commit.assert_not_awaited()
