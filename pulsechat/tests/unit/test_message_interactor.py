from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from pulsechat.domain.entities import DELETED_MESSAGE_PLACEHOLDER
from pulsechat.domain.errors import InvalidInput, NotAuthorized, NotFound
from pulsechat.gateways.interfaces import IConversationGateway, IMessageGateway
from pulsechat.infrastructure import schemas
from pulsechat.interactors.message_interactor import MessageInteractor

NOW = datetime.now(UTC)
ALICE = schemas.User(id=1, name="Alice", last_seen_at=NOW, created_at=NOW)
BOB = schemas.User(id=2, name="Bob", last_seen_at=NOW, created_at=NOW)


@pytest.fixture
def conversation_gateway():
    return Mock(spec=IConversationGateway)


@pytest.fixture
def message_gateway():
    return Mock(spec=IMessageGateway)


@pytest.fixture
def interactor(conversation_gateway, message_gateway):
    return MessageInteractor(conversation_gateway, message_gateway)


def conversation(member_ids=(1, 2), last_message_at=NOW, last_sender=1):
    return SimpleNamespace(
        id=10,
        members=[SimpleNamespace(user_id=i) for i in member_ids],
        last_message="hello",
        last_message_at=last_message_at,
        last_message_sender_id=last_sender,
    )


def reaction(user_id, emoji):
    return SimpleNamespace(user_id=user_id, emoji=emoji)


def message(message_id=1, sender_id=1, body="hello", reactions=(), is_deleted=False):
    return SimpleNamespace(
        id=message_id,
        conversation_id=10,
        sender_id=sender_id,
        sender=SimpleNamespace(id=sender_id, name="Alice", image_url=None),
        body=body,
        created_at=NOW,
        is_deleted=is_deleted,
        reply_to=None,
        reply_to_user=None,
        reactions=list(reactions),
    )


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_body_is_trimmed(self, interactor, conversation_gateway, message_gateway):
        conversation_gateway.get_conversation.return_value = conversation()
        message_gateway.create_message.return_value = message(body="hi there")

        result = await interactor.send_message(
            schemas.MessageCreate(conversation_id=10, body="  hi there  "), ALICE
        )

        assert result.id == 1
        assert message_gateway.create_message.call_args[0][1:] == (1, "hi there")

    @pytest.mark.asyncio
    async def test_blank_body_is_dropped(
        self, interactor, conversation_gateway, message_gateway
    ):
        conversation_gateway.get_conversation.return_value = conversation()

        result = await interactor.send_message(
            schemas.MessageCreate(conversation_id=10, body="   \n "), ALICE
        )

        assert result is None
        message_gateway.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_member_rejected(self, interactor, conversation_gateway):
        conversation_gateway.get_conversation.return_value = conversation((2, 3))

        with pytest.raises(NotAuthorized):
            await interactor.send_message(
                schemas.MessageCreate(conversation_id=10, body="hi"), ALICE
            )

    @pytest.mark.asyncio
    async def test_missing_conversation(self, interactor, conversation_gateway):
        conversation_gateway.get_conversation.return_value = None

        with pytest.raises(NotFound):
            await interactor.send_message(
                schemas.MessageCreate(conversation_id=10, body="hi"), ALICE
            )


class TestListMessages:
    @pytest.mark.asyncio
    async def test_missing_conversation_is_empty(self, interactor, conversation_gateway):
        conversation_gateway.get_conversation.return_value = None
        assert await interactor.get_messages(10, ALICE) == []

    @pytest.mark.asyncio
    async def test_non_member_rejected(self, interactor, conversation_gateway):
        conversation_gateway.get_conversation.return_value = conversation((2, 3))
        with pytest.raises(NotAuthorized):
            await interactor.get_messages(10, ALICE)

    @pytest.mark.asyncio
    async def test_reaction_summary(self, interactor, conversation_gateway, message_gateway):
        conversation_gateway.get_conversation.return_value = conversation()
        message_gateway.get_all.return_value = [
            message(reactions=[reaction(1, "👍"), reaction(2, "👍"), reaction(3, "❤️")])
        ]

        [view] = await interactor.get_messages(10, BOB)

        assert [(r.emoji, r.count) for r in view.reactions] == [("👍", 2), ("❤️", 1)]
        assert view.my_reaction == "👍"

    @pytest.mark.asyncio
    async def test_anonymous_viewer_has_no_highlight(
        self, interactor, conversation_gateway, message_gateway
    ):
        conversation_gateway.get_conversation.return_value = conversation()
        message_gateway.get_all.return_value = [message(reactions=[reaction(1, "👍")])]

        [view] = await interactor.get_messages(10, None)

        assert view.my_reaction is None

    @pytest.mark.asyncio
    async def test_deleted_messages_are_redacted(
        self, interactor, conversation_gateway, message_gateway
    ):
        conversation_gateway.get_conversation.return_value = conversation()
        message_gateway.get_all.return_value = [message(body="secret", is_deleted=True)]

        [view] = await interactor.get_messages(10, ALICE)

        assert view.body == DELETED_MESSAGE_PLACEHOLDER
        assert view.is_deleted is True


class TestDeleteMessage:
    @pytest.mark.asyncio
    async def test_only_sender_may_delete(self, interactor, message_gateway):
        message_gateway.get_message.return_value = message(sender_id=2)

        with pytest.raises(NotAuthorized):
            await interactor.delete_message(1, ALICE)
        message_gateway.soft_delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_message(self, interactor, message_gateway):
        message_gateway.get_message.return_value = None

        with pytest.raises(NotFound):
            await interactor.delete_message(1, ALICE)

    @pytest.mark.asyncio
    async def test_latest_message_updates_preview(
        self, interactor, conversation_gateway, message_gateway
    ):
        msg = message()
        conv = conversation(last_message_at=NOW.replace(tzinfo=None))
        message_gateway.get_message.return_value = msg
        conversation_gateway.get_conversation.return_value = conv

        async def soft_delete(m):
            m.is_deleted = True
            return m

        message_gateway.soft_delete.side_effect = soft_delete

        view = await interactor.delete_message(1, ALICE)

        assert conv.last_message == DELETED_MESSAGE_PLACEHOLDER
        assert view.body == DELETED_MESSAGE_PLACEHOLDER
        conversation_gateway.save.assert_called_once()

    @pytest.mark.asyncio
    async def test_older_message_keeps_preview(
        self, interactor, conversation_gateway, message_gateway
    ):
        message_gateway.get_message.return_value = message()
        conv = conversation(last_message_at=NOW + timedelta(minutes=1))
        conversation_gateway.get_conversation.return_value = conv

        await interactor.delete_message(1, ALICE)

        assert conv.last_message == "hello"
        conversation_gateway.save.assert_not_called()


class TestToggleReaction:
    @pytest.mark.asyncio
    async def test_add_new_reaction(self, interactor, conversation_gateway, message_gateway):
        msg = message()
        message_gateway.get_message.return_value = msg
        conversation_gateway.get_conversation.return_value = conversation()

        state = await interactor.toggle_reaction(1, "👍", BOB)

        assert state.emoji == "👍"
        assert state.conversation_id == 10
        message_gateway.set_reaction.assert_called_once_with(msg, 2, "👍")

    @pytest.mark.asyncio
    async def test_same_emoji_removes(
        self, interactor, conversation_gateway, message_gateway
    ):
        msg = message(reactions=[reaction(2, "👍")])
        message_gateway.get_message.return_value = msg
        conversation_gateway.get_conversation.return_value = conversation()

        state = await interactor.toggle_reaction(1, "👍", BOB)

        assert state.emoji is None
        message_gateway.set_reaction.assert_called_once_with(msg, 2, None)

    @pytest.mark.asyncio
    async def test_different_emoji_replaces(
        self, interactor, conversation_gateway, message_gateway
    ):
        msg = message(reactions=[reaction(2, "👍")])
        message_gateway.get_message.return_value = msg
        conversation_gateway.get_conversation.return_value = conversation()

        state = await interactor.toggle_reaction(1, "❤️", BOB)

        assert state.emoji == "❤️"
        message_gateway.set_reaction.assert_called_once_with(msg, 2, "❤️")

    @pytest.mark.asyncio
    async def test_blank_emoji_rejected(self, interactor, message_gateway):
        with pytest.raises(InvalidInput):
            await interactor.toggle_reaction(1, "  ", BOB)
        message_gateway.get_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_member_rejected(
        self, interactor, conversation_gateway, message_gateway
    ):
        message_gateway.get_message.return_value = message()
        conversation_gateway.get_conversation.return_value = conversation((1, 3))

        with pytest.raises(NotAuthorized):
            await interactor.toggle_reaction(1, "👍", BOB)
