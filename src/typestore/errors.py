from __future__ import annotations


class TypestoreError(Exception):
    """Base error for the typed document-store layer."""


class ResolutionError(TypestoreError, TypeError):
    """Raised when a write target cannot be resolved to a document reference."""


class EncodingError(TypestoreError, TypeError):
    """Raised when a value cannot be converted to its Firestore wire form."""


class BatchStateError(TypestoreError, RuntimeError):
    """Raised when a batch is used outside of its OPEN state."""


class CommitError(TypestoreError, RuntimeError):
    """Raised when Firestore rejects a batch commit.

    The original transport exception is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, message: str, *, cause: BaseException) -> None:
        super().__init__(message)
        self.cause = cause
