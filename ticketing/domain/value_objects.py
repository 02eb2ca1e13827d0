"""Domain primitives that enforce validity at creation time."""

import secrets
import string
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID

TICKET_PREFIX = "TICKET"
TICKET_SUFFIX_LENGTH = 6
INVITE_CODE_LENGTH = 8
_ALPHABET = string.ascii_uppercase + string.digits


def _random_code(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TeamId:
    """Unique identifier for a Team."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Opaque, human-presentable ticket identifier.

    Rendered as ``TICKET-<epoch millis>-<random suffix>``. Consumers must not
    parse it; only ``generate`` knows the layout.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Ticket ID cannot be empty")

    @classmethod
    def generate(cls) -> Self:
        millis = int(time.time() * 1000)
        return cls(value=f"{TICKET_PREFIX}-{millis}-{_random_code(TICKET_SUFFIX_LENGTH)}".upper())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class InviteCode:
    """Token that gates membership in a forming team."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Invite code cannot be empty")

    @classmethod
    def generate(cls) -> Self:
        return cls(value=_random_code(INVITE_CODE_LENGTH))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __mul__(self, factor: int) -> "Money":
        return Money(amount=self.amount * factor)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class VariantKey:
    """The (size, color) pair that identifies a merchandise variant."""

    size: str
    color: str

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        return cls(size=str(data.get("size", "")), color=str(data.get("color", "")))

    def to_dict(self) -> dict[str, str]:
        return {"size": self.size, "color": self.color}
