# pulsechat/gateways/invite_gateway.py
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pulsechat.domain.clock import utcnow
from pulsechat.domain.entities import InviteStatus
from pulsechat.gateways.interfaces import IInviteGateway
from pulsechat.infrastructure import models
from pulsechat.infrastructure.data_mappers import register_mappers
from pulsechat.infrastructure.uow import UnitOfWork, UoWModel


class InviteGateway(IInviteGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        register_mappers(uow, session, models.ChatInvite, models.GroupChatInvite)

    async def get_chat_invite(self, invite_id: int) -> UoWModel | None:
        stmt = select(models.ChatInvite).filter(models.ChatInvite.id == invite_id)
        result = await self.session.execute(stmt)
        invite = result.unique().scalar_one_or_none()
        return UoWModel(invite, self.uow) if invite else None

    async def get_pending_chat_invite_between(
        self, user_id: int, other_user_id: int
    ) -> UoWModel | None:
        invite = models.ChatInvite
        stmt = (
            select(invite)
            .filter(
                invite.status == InviteStatus.PENDING,
                or_(
                    and_(
                        invite.from_user_id == user_id,
                        invite.to_user_id == other_user_id,
                    ),
                    and_(
                        invite.from_user_id == other_user_id,
                        invite.to_user_id == user_id,
                    ),
                ),
            )
            .order_by(invite.created_at.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        pending = result.unique().scalar_one_or_none()
        return UoWModel(pending, self.uow) if pending else None

    async def create_chat_invite(
        self, from_user_id: int, to_user_id: int, message: str | None
    ) -> UoWModel:
        db_invite = models.ChatInvite(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            status=InviteStatus.PENDING,
            message=message,
            created_at=utcnow(),
        )
        uow_invite = self.uow.register_new(db_invite)
        await self.uow.commit()
        return uow_invite

    async def _pending_chat_invites(self, column, user_id: int) -> list[UoWModel]:
        stmt = (
            select(models.ChatInvite)
            .filter(column == user_id, models.ChatInvite.status == InviteStatus.PENDING)
            .order_by(models.ChatInvite.created_at.desc())
        )
        result = await self.session.execute(stmt)
        invites = result.unique().scalars().all()
        return [UoWModel(invite, self.uow) for invite in invites]

    async def get_incoming_chat_invites(self, user_id: int) -> list[UoWModel]:
        return await self._pending_chat_invites(models.ChatInvite.to_user_id, user_id)

    async def get_outgoing_chat_invites(self, user_id: int) -> list[UoWModel]:
        return await self._pending_chat_invites(
            models.ChatInvite.from_user_id, user_id
        )

    async def get_group_invite(self, invite_id: int) -> UoWModel | None:
        stmt = select(models.GroupChatInvite).filter(
            models.GroupChatInvite.id == invite_id
        )
        result = await self.session.execute(stmt)
        invite = result.unique().scalar_one_or_none()
        return UoWModel(invite, self.uow) if invite else None

    async def has_pending_group_invite(self, conversation_id: int, user_id: int) -> bool:
        stmt = select(models.GroupChatInvite.id).filter(
            models.GroupChatInvite.conversation_id == conversation_id,
            models.GroupChatInvite.invited_user_id == user_id,
            models.GroupChatInvite.status == InviteStatus.PENDING,
        )
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def create_group_invites(
        self,
        conversation_id: int,
        invited_by_user_id: int,
        user_ids: list[int],
        message: str | None,
    ) -> list[UoWModel]:
        now = utcnow()
        invites = [
            self.uow.register_new(
                models.GroupChatInvite(
                    conversation_id=conversation_id,
                    invited_user_id=user_id,
                    invited_by_user_id=invited_by_user_id,
                    status=InviteStatus.PENDING,
                    message=message,
                    created_at=now,
                )
            )
            for user_id in user_ids
        ]
        await self.uow.commit()
        return invites

    async def get_incoming_group_invites(self, user_id: int) -> list[UoWModel]:
        stmt = (
            select(models.GroupChatInvite)
            .filter(
                models.GroupChatInvite.invited_user_id == user_id,
                models.GroupChatInvite.status == InviteStatus.PENDING,
            )
            .order_by(models.GroupChatInvite.created_at.desc())
        )
        result = await self.session.execute(stmt)
        invites = result.unique().scalars().all()
        return [UoWModel(invite, self.uow) for invite in invites]

    async def save(self) -> None:
        await self.uow.commit()
