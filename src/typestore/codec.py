"""Conversion between application values and Firestore wire values.

``unwrap_data`` prepares application data for a write; ``wrap_data`` turns data
read from Firestore back into application values. Both walk the same value
domain so that ``unwrap_data(wrap_data(v), client) == v``.

Timestamps read back from Firestore are plain ``datetime`` values with
microsecond precision; any nanosecond part is dropped by ``wrap_data``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from google.cloud import firestore
from google.cloud.firestore_v1.base_document import BaseDocumentReference

from typestore.errors import EncodingError
from typestore.model import Collection, Ref
from typestore.values import ArrayRemove, ArrayUnion, FieldCommand, Increment


_PASSTHROUGH_TYPES = (bool, int, float, str, bytes, datetime, firestore.GeoPoint)


def unwrap_data(value: Any, client: Any) -> Any:
    """Convert an application value to the form Firestore accepts for writes."""

    return _unwrap(value, client, path=(), active=set())


def wrap_data(value: Any) -> Any:
    """Convert a value read from Firestore to the application value domain."""

    if isinstance(value, BaseDocumentReference):
        collection_path, _, document_id = value.path.rpartition("/")
        return Ref(collection=Collection(path=collection_path), id=document_id)
    if isinstance(value, datetime) and type(value) is not datetime:
        # DatetimeWithNanoseconds from the client library.
        return datetime(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            tzinfo=value.tzinfo,
        )
    if isinstance(value, list):
        return [wrap_data(item) for item in value]
    if isinstance(value, dict):
        return {key: wrap_data(item) for key, item in value.items()}
    return value


def _unwrap(value: Any, client: Any, *, path: tuple[str, ...], active: set[int]) -> Any:
    if value is None or isinstance(value, _PASSTHROUGH_TYPES):
        return value
    if isinstance(value, Ref):
        return client.collection(value.collection.path).document(value.id)
    if isinstance(value, FieldCommand):
        if value is FieldCommand.DELETE:
            return firestore.DELETE_FIELD
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, Increment):
        return firestore.Increment(value.amount)
    if isinstance(value, (ArrayUnion, ArrayRemove)) and not value.items:
        raise EncodingError(f"Array transform needs at least one item at {_describe(path)}")
    if isinstance(value, ArrayUnion):
        return firestore.ArrayUnion(_unwrap_items(value.items, client, path=path, active=active))
    if isinstance(value, ArrayRemove):
        return firestore.ArrayRemove(_unwrap_items(value.items, client, path=path, active=active))
    if isinstance(value, (list, tuple)):
        return _guarded(value, path, active, lambda: _unwrap_items(value, client, path=path, active=active))
    if isinstance(value, Mapping):
        return _guarded(value, path, active, lambda: _unwrap_mapping(value, client, path=path, active=active))
    raise EncodingError(f"Unsupported value type {type(value).__name__} at {_describe(path)}")


def _unwrap_items(items: Any, client: Any, *, path: tuple[str, ...], active: set[int]) -> list[Any]:
    return [
        _unwrap(item, client, path=(*path, str(index)), active=active)
        for index, item in enumerate(items)
    ]


def _unwrap_mapping(
    value: Mapping[Any, Any],
    client: Any,
    *,
    path: tuple[str, ...],
    active: set[int],
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise EncodingError(f"Map keys must be str, got {type(key).__name__} at {_describe(path)}")
        result[key] = _unwrap(item, client, path=(*path, key), active=active)
    return result


def _guarded(value: Any, path: tuple[str, ...], active: set[int], convert: Callable[[], Any]) -> Any:
    marker = id(value)
    if marker in active:
        raise EncodingError(f"Cyclic value at {_describe(path)}")
    active.add(marker)
    try:
        return convert()
    finally:
        active.discard(marker)


def _describe(path: tuple[str, ...]) -> str:
    return ".".join(path) if path else "<root>"
