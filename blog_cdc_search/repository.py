"""Abstract interfaces for storage, messaging and search backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from blog_cdc_search.post import Post


class PostRepository(ABC):
    """Persistent storage for blog posts."""

    @abstractmethod
    def create(self, post: Post) -> None:
        """Store a new post and assign its id."""

    @abstractmethod
    def get_by_id(self, post_id: int) -> Post:
        """Return the post with the given id or raise PostNotFoundError."""

    @abstractmethod
    def get_all(self) -> list[Post]:
        """Return every stored post."""

    @abstractmethod
    def update(self, post: Post) -> None:
        """Persist changes to an existing post."""

    @abstractmethod
    def delete(self, post_id: int) -> None:
        """Remove the post with the given id."""


class _Connectable(ABC):
    """A backend that is connected before use and closed afterwards."""

    @abstractmethod
    def connect(self) -> None:
        """Open the connection to the backend."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection to the backend."""

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class MessageQueueRepository(_Connectable):
    """A message broker that delivers change events."""

    @abstractmethod
    def connect(self) -> None:
        """Open the connection to the broker."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection to the broker."""

    @abstractmethod
    def consume_messages(self, queue_name: str, handler: Callable[[bytes], None]) -> None:
        """Deliver each message from the queue to the handler, which raises on failure."""

    @abstractmethod
    def publish_message(self, exchange: str, routing_key: str, message: bytes) -> None:
        """Publish a message to an exchange under a routing key."""


class SearchIndexRepository(_Connectable):
    """A full-text search engine holding indexed documents."""

    @abstractmethod
    def connect(self) -> None:
        """Open the connection to the search engine."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection to the search engine."""

    @abstractmethod
    def create_collection(self, schema: dict[str, Any]) -> None:
        """Create a collection described by the schema."""

    @abstractmethod
    def upsert_document(self, collection_name: str, document: Any) -> None:
        """Insert the document, replacing any with the same id."""

    @abstractmethod
    def delete_document(self, collection_name: str, document_id: str) -> None:
        """Remove the document with the given id."""

    @abstractmethod
    def search_documents(
        self, collection_name: str, query: str, search_params: dict[str, Any]
    ) -> list[Any]:
        """Return the hits matching the query."""

    @abstractmethod
    def get_all_documents(self, collection_name: str) -> list[Any]:
        """Return every document in the collection."""