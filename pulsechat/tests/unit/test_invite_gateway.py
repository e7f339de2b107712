from datetime import UTC, datetime

import pytest

from pulsechat.domain.entities import Caller, InviteStatus
from pulsechat.gateways.conversation_gateway import ConversationGateway
from pulsechat.gateways.invite_gateway import InviteGateway
from pulsechat.gateways.user_gateway import UserGateway


@pytest.fixture
def invite_gateway(db_session, uow):
    return InviteGateway(db_session, uow)


@pytest.fixture
async def users(db_session, uow):
    user_gateway = UserGateway(db_session, uow)
    now = datetime.now(UTC)
    return [
        await user_gateway.create_user(Caller(token_identifier=f"iss|{name}", name=name), now)
        for name in ("alice", "bob", "carol")
    ]


@pytest.mark.asyncio
async def test_pending_chat_invite_between_either_direction(invite_gateway, users):
    alice, bob, carol = users
    created = await invite_gateway.create_chat_invite(alice.id, bob.id, "hi")

    assert (await invite_gateway.get_pending_chat_invite_between(alice.id, bob.id)).id == created.id
    assert (await invite_gateway.get_pending_chat_invite_between(bob.id, alice.id)).id == created.id
    assert await invite_gateway.get_pending_chat_invite_between(alice.id, carol.id) is None


@pytest.mark.asyncio
async def test_responded_invites_leave_inboxes(invite_gateway, users):
    alice, bob, carol = users
    first = await invite_gateway.create_chat_invite(alice.id, bob.id, None)
    await invite_gateway.create_chat_invite(carol.id, bob.id, None)

    assert len(await invite_gateway.get_incoming_chat_invites(bob.id)) == 2
    assert [i.id for i in await invite_gateway.get_outgoing_chat_invites(alice.id)] == [first.id]

    first.status = InviteStatus.REJECTED
    await invite_gateway.save()

    incoming = await invite_gateway.get_incoming_chat_invites(bob.id)
    assert [i.from_user_id for i in incoming] == [carol.id]
    assert await invite_gateway.get_outgoing_chat_invites(alice.id) == []
    assert await invite_gateway.get_pending_chat_invite_between(alice.id, bob.id) is None


@pytest.mark.asyncio
async def test_chat_invite_loads_both_users(invite_gateway, users):
    alice, bob, _ = users
    created = await invite_gateway.create_chat_invite(alice.id, bob.id, None)

    invite = await invite_gateway.get_chat_invite(created.id)

    assert invite.from_user.name == "alice"
    assert invite.to_user.name == "bob"
    assert invite.status == InviteStatus.PENDING


@pytest.mark.asyncio
async def test_group_invites(db_session, uow, invite_gateway, users):
    alice, bob, carol = users
    group = await ConversationGateway(db_session, uow).create_group("Team", alice.id)

    created = await invite_gateway.create_group_invites(
        group.id, alice.id, [bob.id, carol.id], "join us"
    )

    assert len(created) == 2
    assert await invite_gateway.has_pending_group_invite(group.id, bob.id) is True
    assert await invite_gateway.has_pending_group_invite(group.id, alice.id) is False

    incoming = await invite_gateway.get_incoming_group_invites(bob.id)
    assert [i.conversation.name for i in incoming] == ["Team"]
    assert incoming[0].invited_by.name == "alice"

    incoming[0].status = InviteStatus.ACCEPTED
    await invite_gateway.save()

    assert await invite_gateway.has_pending_group_invite(group.id, bob.id) is False
    assert await invite_gateway.get_incoming_group_invites(bob.id) == []
