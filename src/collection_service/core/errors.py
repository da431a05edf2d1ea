"""Error taxonomy for collection operations.

``NotFoundError``, ``ConflictError`` and ``TypeMismatchError`` are expected
conditions that callers turn into user-facing messages. ``StoreError`` wraps a
failure of the backing database and is never retried here.
"""


class CollectionServiceError(Exception):
    """Base class for all errors raised by the core."""


class NotFoundError(CollectionServiceError):
    """A referenced collection, property, page or filter does not exist."""

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class TypeMismatchError(CollectionServiceError):
    """A value does not fit the declared type of its property."""


class ConflictError(CollectionServiceError):
    """A second filter was requested for a property that already has one."""


class StoreError(CollectionServiceError):
    """The backing store failed."""
