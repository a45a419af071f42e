from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from typestore.errors import ResolutionError


ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class Collection(Generic[ModelT]):
    """Named group of documents sharing the ``ModelT`` shape."""

    path: str

    def ref(self, document_id: str) -> Ref[ModelT]:
        return Ref(collection=self, id=document_id)

    def at(self, document_id: str) -> Located[ModelT]:
        return Located(collection=self, id=document_id)


@dataclass(frozen=True)
class Ref(Generic[ModelT]):
    collection: Collection[ModelT]
    id: str

    @property
    def path(self) -> str:
        return f"{self.collection.path}/{self.id}"


@dataclass(frozen=True)
class Doc(Generic[ModelT]):
    ref: Ref[ModelT]
    data: ModelT


@dataclass(frozen=True)
class Located(Generic[ModelT]):
    """Write target addressed by collection and document id."""

    collection: Collection[ModelT]
    id: str


Target = Union[Ref[Any], Located[Any]]


def collection(path: str) -> Collection[Any]:
    return Collection(path=path)


def ref(collection: Collection[ModelT], document_id: str) -> Ref[ModelT]:
    return Ref(collection=collection, id=document_id)


def doc(ref: Ref[ModelT], data: ModelT) -> Doc[ModelT]:
    return Doc(ref=ref, data=data)


def resolve_target(target: Target) -> Ref[Any]:
    """Resolve either target variant to a canonical ``Ref``.

    Document ids are not validated here; Firestore rejects malformed ids at commit.
    """

    if isinstance(target, Ref):
        resolved_collection, document_id = target.collection, target.id
    elif isinstance(target, Located):
        resolved_collection, document_id = target.collection, target.id
    else:
        raise ResolutionError(f"Write target must be Ref or Located: {target!r}")

    if not isinstance(resolved_collection, Collection):
        raise ResolutionError(f"Target collection must be Collection: {resolved_collection!r}")
    if not isinstance(document_id, str):
        raise ResolutionError(f"Document id must be str: {document_id!r}")
    if isinstance(target, Ref):
        return target
    return Ref(collection=resolved_collection, id=document_id)
