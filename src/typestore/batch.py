"""Atomic batched writes over Firestore.

Example::

    counters = collection("counters")

    writes = batch(client)
    for count in range(500):
        writes.set(counters.at(str(count)), {"count": count})
        writes.update(counters.ref(str(count)), [("count", count + 1), (("meta", "updatedAt"), now)])
    writes.commit()
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
import logging
from typing import Any

from typestore.codec import unwrap_data
from typestore.errors import BatchStateError, CommitError, EncodingError
from typestore.model import Doc, ModelT, Ref, Target, doc, resolve_target
from typestore.update import Field, normalize_update


LOGGER = logging.getLogger(__name__)


class BatchState(str, Enum):
    OPEN = "OPEN"
    COMMITTING = "COMMITTING"
    COMMITTED = "COMMITTED"


class _BatchBase:
    def __init__(self, client: Any) -> None:
        self._client = client
        self._native = client.batch()
        self._state = BatchState.OPEN
        self._staged = 0

    @property
    def state(self) -> BatchState:
        return self._state

    def __len__(self) -> int:
        return self._staged

    def set(self, target: Target, data: ModelT, *, merge: bool = False) -> Doc[ModelT]:
        """Stage a full write of ``data``; with ``merge`` unspecified fields survive.

        The returned document echoes the input data. It is not confirmed until
        ``commit`` returns.
        """

        self._ensure_open()
        resolved = resolve_target(target)
        if not isinstance(data, Mapping):
            raise EncodingError(f"Document data must be a mapping: {type(data).__name__}")
        wire_data = unwrap_data(data, self._client)
        self._native.set(self._pointer(resolved), wire_data, merge=merge)
        self._staged += 1
        return doc(resolved, data)

    def update(self, target: Target, data: Mapping[str, Any] | Sequence[Field | Sequence[Any]]) -> None:
        self._ensure_open()
        resolved = resolve_target(target)
        wire_data = unwrap_data(normalize_update(data), self._client)
        self._native.update(self._pointer(resolved), wire_data)
        self._staged += 1

    def clear(self, target: Target) -> None:
        self._ensure_open()
        resolved = resolve_target(target)
        self._native.delete(self._pointer(resolved))
        self._staged += 1

    def _pointer(self, resolved: Ref[Any]) -> Any:
        return self._client.collection(resolved.collection.path).document(resolved.id)

    def _ensure_open(self) -> None:
        if self._state is not BatchState.OPEN:
            raise BatchStateError(f"Batch is {self._state.value}; create a new batch for further writes.")

    def _begin_commit(self) -> None:
        self._ensure_open()
        self._state = BatchState.COMMITTING
        LOGGER.debug("batch commit: operations=%s", self._staged)

    def _commit_failed(self, exc: Exception) -> CommitError:
        # The native batch cannot be replayed once sent.
        self._state = BatchState.COMMITTED
        return CommitError(f"Batch commit failed ({self._staged} operations): {exc}", cause=exc)

    def _commit_succeeded(self) -> None:
        self._state = BatchState.COMMITTED
        LOGGER.debug("batch committed: operations=%s", self._staged)


class Batch(_BatchBase):
    """Single-use batch bound to a synchronous ``firestore.Client``."""

    def commit(self) -> None:
        self._begin_commit()
        try:
            self._native.commit()
        except Exception as exc:
            raise self._commit_failed(exc) from exc
        self._commit_succeeded()

    def __enter__(self) -> Batch:
        return self

    def __exit__(self, exc_type: Any, exc: Any, traceback: Any) -> None:
        if exc_type is None and self._state is BatchState.OPEN:
            self.commit()


class AsyncBatch(_BatchBase):
    """Single-use batch bound to a ``firestore.AsyncClient``."""

    async def commit(self) -> None:
        self._begin_commit()
        try:
            await self._native.commit()
        except Exception as exc:
            raise self._commit_failed(exc) from exc
        self._commit_succeeded()

    async def __aenter__(self) -> AsyncBatch:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, traceback: Any) -> None:
        if exc_type is None and self._state is BatchState.OPEN:
            await self.commit()


def batch(client: Any) -> Batch:
    return Batch(client)


def async_batch(client: Any) -> AsyncBatch:
    return AsyncBatch(client)
