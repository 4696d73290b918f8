"""
VocabList Backend - Abstract Document Store Interface
=======================================================

What:  Abstract base classes defining the contract of the hierarchical
       document store the list & sharing core runs against.
How:   Concrete implementations inherit from DocumentStore / WriteBatch.
       SQLDocumentStore (sql_document_store.py) is the production one; tests
       use it on SQLite or replace it with AsyncMock doubles.
Who:   ListStore, ItemStore, LanguageListManager, MultiListInserter,
       ShareCodeRegistry, ImportEngine and StoreTranslationLookup.

Document paths:
    Paths alternate collection and document segments:
        users/{owner}/lists/{listId}/items/{wordId}
        └─ collection ─┘└ doc ┘
    A collection path has an odd number of segments, a document path an even one.

Consistency:
    Single-document reads and writes are strongly consistent. Separate calls
    are independent round trips; only a committed WriteBatch is atomic
    across documents.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


class DocumentSnapshot(NamedTuple):
    """A document read from a collection listing or query."""

    id: str
    path: str
    data: Dict[str, Any]


def split_path(path: str) -> Tuple[str, str]:
    """
    Split a document path into (collection path, document id).

    Raises:
        ValueError: If the path is empty or names a collection instead of a document.
    """
    segments = [s for s in path.split("/") if s]
    if not segments or len(segments) % 2 != 0:
        raise ValueError(f"Not a document path: '{path}'")
    return "/".join(segments[:-1]), segments[-1]


class WriteBatch(ABC):
    """
    A group of writes applied atomically by commit().

    Writes are queued in call order and nothing reaches the store before
    commit(). If any queued write fails (a create conflict, an update or
    increment on a missing document) the whole batch is rolled back.
    """

    @abstractmethod
    def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        """Queue an overwrite (or a top-level merge when merge=True)."""
        ...

    @abstractmethod
    def create(self, path: str, data: Dict[str, Any]) -> "WriteBatch":
        """Queue a create; commit() raises AlreadyExistsError if the document exists."""
        ...

    @abstractmethod
    def update(self, path: str, data: Dict[str, Any]) -> "WriteBatch":
        """Queue a merge into an existing document; commit() raises NotFoundError if absent."""
        ...

    @abstractmethod
    def increment(
        self,
        path: str,
        field: str,
        amount: int = 1,
        extra: Optional[Dict[str, Any]] = None,
    ) -> "WriteBatch":
        """Queue an atomic counter change plus optional extra merged fields."""
        ...

    @abstractmethod
    def delete(self, path: str) -> "WriteBatch":
        """Queue a delete; deleting a missing document is not an error."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Apply every queued write in one transaction."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class DocumentStore(ABC):
    """
    Abstract interface of the multi-writer document store.

    Contract:
        - Every method is one independent round trip to the backing store.
        - No method retries on failure; unanticipated store errors propagate
          as DatabaseError.
        - Business conditions are expressed through return values (get → None,
          create → False) or NotFoundError (update/increment on a missing document).
    """

    @abstractmethod
    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Return the document body, or None if it does not exist."""
        ...

    @abstractmethod
    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        """
        Write a document.

        merge=False replaces the whole body; merge=True updates only the given
        top-level fields and creates the document if it is missing.
        """
        ...

    @abstractmethod
    async def create(self, path: str, data: Dict[str, Any]) -> bool:
        """
        Conditionally create a document.

        Returns:
            True if this call created the document, False if it already existed.
            Exactly one of several concurrent callers observes True.
        """
        ...

    @abstractmethod
    async def update(self, path: str, data: Dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            NotFoundError: The document does not exist.
        """
        ...

    @abstractmethod
    async def increment(
        self,
        path: str,
        field: str,
        amount: int = 1,
        extra: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Atomically add `amount` to a numeric field.

        Concurrent increments on the same document never lose an update.
        `extra` fields (e.g. updatedAt) are merged in the same write.

        Returns:
            The new value of the field.

        Raises:
            NotFoundError: The document does not exist.
        """
        ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a document; deleting a missing document is not an error."""
        ...

    @abstractmethod
    async def list_collection(self, collection: str) -> List[DocumentSnapshot]:
        """Return every document directly inside a collection, ordered by id."""
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Dict[str, Any],
        limit: Optional[int] = None,
    ) -> List[DocumentSnapshot]:
        """
        Return documents of a collection whose top-level fields equal `filters`.

        Supported filter values: str, bool, int.
        """
        ...

    @abstractmethod
    def batch(self) -> WriteBatch:
        """Start a new atomic write batch."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the backing store is reachable."""
        ...
