from datetime import UTC, datetime

import pytest

from pulsechat.domain.entities import Caller
from pulsechat.gateways.conversation_gateway import ConversationGateway
from pulsechat.gateways.message_gateway import MessageGateway
from pulsechat.gateways.user_gateway import UserGateway


@pytest.fixture
def message_gateway(db_session, uow):
    return MessageGateway(db_session, uow)


@pytest.fixture
def conversation_gateway(db_session, uow):
    return ConversationGateway(db_session, uow)


@pytest.fixture
async def alice_and_bob(db_session, uow):
    user_gateway = UserGateway(db_session, uow)
    now = datetime.now(UTC)
    alice = await user_gateway.create_user(Caller(token_identifier="iss|alice", name="Alice"), now)
    bob = await user_gateway.create_user(Caller(token_identifier="iss|bob", name="Bob"), now)
    return alice, bob


@pytest.fixture
async def conversation(conversation_gateway, alice_and_bob):
    alice, bob = alice_and_bob
    return await conversation_gateway.create_direct(alice.id, bob.id)


@pytest.mark.asyncio
async def test_create_message_updates_conversation(
    message_gateway, conversation_gateway, conversation, alice_and_bob
):
    alice, bob = alice_and_bob
    bob_member = await conversation_gateway.get_member(conversation.id, bob.id)
    bob_member.is_hidden = True
    alice_member = await conversation_gateway.get_member(conversation.id, alice.id)
    alice_member.typing_at = datetime.now(UTC)
    await conversation_gateway.save()

    message = await message_gateway.create_message(
        conversation, alice.id, "Hello", reply_to="Earlier", reply_to_user="Bob"
    )

    assert message.id is not None
    assert message.reply_to == "Earlier"
    assert conversation.last_message == "Hello"
    assert conversation.last_message_sender_id == alice.id
    assert conversation.last_message_at == message.created_at
    assert bob_member.is_hidden is False
    assert alice_member.typing_at is None
    assert alice_member.last_read_at == message.created_at


@pytest.mark.asyncio
async def test_get_all_is_chronological(message_gateway, conversation, alice_and_bob):
    alice, bob = alice_and_bob
    for i, sender in enumerate((alice, bob, alice)):
        await message_gateway.create_message(conversation, sender.id, f"m{i}")

    messages = await message_gateway.get_all(conversation.id)

    assert [m.body for m in messages] == ["m0", "m1", "m2"]
    assert messages[1].sender.name == "Bob"


@pytest.mark.asyncio
async def test_soft_delete_keeps_row(message_gateway, conversation, alice_and_bob):
    alice, _ = alice_and_bob
    message = await message_gateway.create_message(conversation, alice.id, "oops")

    await message_gateway.soft_delete(message)

    reloaded = await message_gateway.get_message(message.id)
    assert reloaded.is_deleted is True
    assert reloaded.body == "oops"


@pytest.mark.asyncio
async def test_set_reaction_add_replace_remove(
    message_gateway, conversation, alice_and_bob
):
    alice, bob = alice_and_bob
    message = await message_gateway.create_message(conversation, alice.id, "hi")
    message = await message_gateway.get_message(message.id)

    await message_gateway.set_reaction(message, bob.id, "👍")
    assert [(r.user_id, r.emoji) for r in message.reactions] == [(bob.id, "👍")]

    await message_gateway.set_reaction(message, bob.id, "❤️")
    assert [(r.user_id, r.emoji) for r in message.reactions] == [(bob.id, "❤️")]

    await message_gateway.set_reaction(message, alice.id, "❤️")
    assert len(message.reactions) == 2

    await message_gateway.set_reaction(message, bob.id, None)
    assert [(r.user_id, r.emoji) for r in message.reactions] == [(alice.id, "❤️")]
