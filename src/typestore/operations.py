from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from typestore.batch import Batch
from typestore.model import Collection


class OperationKind(str, Enum):
    SET = "set"
    UPDATE = "update"
    CLEAR = "clear"


class BatchOperation(BaseModel):
    op: OperationKind
    collection: str = Field(min_length=1, description="Collection path")
    id: str = Field(min_length=1, description="Document id")
    data: dict[str, Any] | list[Any] | None = None
    merge: bool = False

    @model_validator(mode="after")
    def _check_data(self) -> "BatchOperation":
        if self.op is OperationKind.SET and not isinstance(self.data, dict):
            raise ValueError("set requires object data")
        if self.op is OperationKind.UPDATE and self.data is None:
            raise ValueError("update requires object or list data")
        if self.op is not OperationKind.SET and self.merge:
            raise ValueError("merge is only valid for set")
        return self


_OPERATIONS_ADAPTER = TypeAdapter(list[BatchOperation])


def parse_operations(raw: Any) -> list[BatchOperation]:
    """Validate decoded JSON. Raises pydantic.ValidationError on malformed input."""

    return _OPERATIONS_ADAPTER.validate_python(raw)


def stage_operations(writes: Batch, operations: list[BatchOperation]) -> int:
    collections: dict[str, Collection[Any]] = {}
    for operation in operations:
        target_collection = collections.setdefault(operation.collection, Collection(path=operation.collection))
        target = target_collection.at(operation.id)
        if operation.op is OperationKind.SET:
            writes.set(target, operation.data, merge=operation.merge)
        elif operation.op is OperationKind.UPDATE:
            writes.update(target, operation.data)
        else:
            writes.clear(target)
    return len(operations)
