from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from typestore.errors import EncodingError


class FieldCommand(Enum):
    DELETE = "DELETE"
    SERVER_TIMESTAMP = "SERVER_TIMESTAMP"


DELETE = FieldCommand.DELETE
SERVER_TIMESTAMP = FieldCommand.SERVER_TIMESTAMP


@dataclass(frozen=True)
class Increment:
    amount: int | float

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
            raise EncodingError(f"Increment amount must be int or float: {self.amount!r}")


@dataclass(frozen=True)
class ArrayUnion:
    items: tuple[Any, ...]


@dataclass(frozen=True)
class ArrayRemove:
    items: tuple[Any, ...]


def increment(amount: int | float) -> Increment:
    return Increment(amount)


def array_union(*items: Any) -> ArrayUnion:
    return ArrayUnion(items)


def array_remove(*items: Any) -> ArrayRemove:
    return ArrayRemove(items)
