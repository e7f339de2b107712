# pulsechat/gateways/interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from pulsechat.domain.entities import Caller
from pulsechat.infrastructure.uow import UoWModel


class IUserGateway(ABC):
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_by_token_identifier(self, token_identifier: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_many(self, user_ids: List[int]) -> dict[int, UoWModel]:
        pass

    @abstractmethod
    async def create_user(self, caller: Caller, seen_at: datetime) -> UoWModel:
        pass

    @abstractmethod
    async def refresh_user(
        self, user: UoWModel, caller: Caller, seen_at: datetime
    ) -> UoWModel:
        pass

    @abstractmethod
    async def search_users(self, query: str, current_user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_suggested(
        self, current_user_id: Optional[int], limit: int
    ) -> List[UoWModel]:
        pass


class IConversationGateway(ABC):
    @abstractmethod
    async def get_conversation(self, conversation_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_visible_for_user(self, user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_direct(self, user_id: int, other_user_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def create_direct(self, user_id: int, other_user_id: int) -> UoWModel:
        pass

    @abstractmethod
    async def create_group(self, name: str, creator_id: int) -> UoWModel:
        pass

    @abstractmethod
    async def get_member(self, conversation_id: int, user_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def add_member(self, conversation: UoWModel, user_id: int) -> UoWModel:
        pass

    @abstractmethod
    async def save(self) -> None:
        pass

    @abstractmethod
    async def get_unread_counts(
        self, user_id: int, conversation_ids: List[int]
    ) -> dict[int, int]:
        pass


class IMessageGateway(ABC):
    @abstractmethod
    async def get_message(self, message_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_all(self, conversation_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def create_message(
        self,
        conversation: UoWModel,
        sender_id: int,
        body: str,
        reply_to: Optional[str] = None,
        reply_to_user: Optional[str] = None,
    ) -> UoWModel:
        pass

    @abstractmethod
    async def soft_delete(self, message: UoWModel) -> UoWModel:
        pass

    @abstractmethod
    async def set_reaction(
        self, message: UoWModel, user_id: int, emoji: Optional[str]
    ) -> None:
        pass


class IInviteGateway(ABC):
    @abstractmethod
    async def get_chat_invite(self, invite_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_pending_chat_invite_between(
        self, user_id: int, other_user_id: int
    ) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def create_chat_invite(
        self, from_user_id: int, to_user_id: int, message: Optional[str]
    ) -> UoWModel:
        pass

    @abstractmethod
    async def get_incoming_chat_invites(self, user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_outgoing_chat_invites(self, user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_group_invite(self, invite_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def has_pending_group_invite(self, conversation_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    async def create_group_invites(
        self,
        conversation_id: int,
        invited_by_user_id: int,
        user_ids: List[int],
        message: Optional[str],
    ) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_incoming_group_invites(self, user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def save(self) -> None:
        pass


class ISearchHistoryGateway(ABC):
    @abstractmethod
    async def get_recent(self, user_id: int, limit: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def upsert(self, user_id: int, query: str, created_at: datetime) -> UoWModel:
        pass
