"""Partial update forms and their normalization to Firestore field paths."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from typestore.errors import EncodingError


FieldKey = Union[str, tuple[str, ...]]


@dataclass(frozen=True)
class Field:
    """One ``(key, value)`` entry of a list-form update.

    ``key`` is either a single field name or a sequence of names for nested traversal.
    """

    key: FieldKey
    value: Any


def field(key: str | Sequence[str], value: Any) -> Field:
    return Field(key=_normalize_key(key), value=value)


def normalize_update(data: Mapping[str, Any] | Sequence[Field | Sequence[Any]]) -> dict[str, Any]:
    """Flatten an update into ``{field_path: value}``.

    List form joins nested keys with ``.``; later entries overwrite earlier ones
    with the same path. Mapping form is returned as a shallow copy and nested
    values stay nested.
    """

    if isinstance(data, Mapping):
        return dict(data)
    if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
        raise EncodingError(f"Update data must be a mapping or a list of fields: {type(data).__name__}")

    flattened: dict[str, Any] = {}
    for entry in data:
        update_field = _as_field(entry)
        key = update_field.key
        field_path = key if isinstance(key, str) else ".".join(key)
        flattened[field_path] = update_field.value
    return flattened


def _as_field(entry: Any) -> Field:
    if isinstance(entry, Field):
        return Field(key=_normalize_key(entry.key), value=entry.value)
    if isinstance(entry, (str, bytes)) or not isinstance(entry, Sequence) or len(entry) != 2:
        raise EncodingError(f"Update entry must be Field or (key, value): {entry!r}")
    key, value = entry
    return field(key, value)


def _normalize_key(key: Any) -> FieldKey:
    if isinstance(key, str):
        if not key:
            raise EncodingError("Field key must not be empty.")
        return key
    if isinstance(key, Sequence) and not isinstance(key, bytes):
        segments = tuple(key)
        if not segments or not all(isinstance(segment, str) and segment for segment in segments):
            raise EncodingError(f"Field key segments must be non-empty str: {key!r}")
        return segments
    raise EncodingError(f"Field key must be str or a sequence of str: {key!r}")
