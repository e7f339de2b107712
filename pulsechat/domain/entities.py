# pulsechat/domain/entities.py
import enum
from dataclasses import dataclass

DELETED_MESSAGE_PLACEHOLDER = "This message was deleted"


class InviteStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Caller:
    """Verified identity of the requester, resolved once per request."""

    token_identifier: str
    name: str | None = None
    email: str | None = None
    picture_url: str | None = None


def direct_key(user_a: int, user_b: int) -> str:
    """Canonical key of the unordered pair of a direct conversation."""
    low, high = sorted((user_a, user_b))
    return f"{low}:{high}"
