"""Keeps the search index in step with change events from the blog database."""

from __future__ import annotations

import logging
from typing import Any

from blog_cdc_search.cdc_event import CDCEvent, EventType, from_json
from blog_cdc_search.repository import MessageQueueRepository, SearchIndexRepository
from blog_cdc_search.search_index import SearchDocument

logger = logging.getLogger(__name__)

POSTS_COLLECTION = "posts"

POSTS_SCHEMA: dict[str, Any] = {
    "name": POSTS_COLLECTION,
    "fields": [
        {"name": "id", "type": "string"},
        {"name": "title", "type": "string", "facet": False, "index": True},
        {"name": "image", "type": "string", "optional": True, "facet": False, "index": False},
        {"name": "excerpt", "type": "string", "optional": True, "facet": False, "index": True},
        {"name": "body", "type": "string", "facet": False, "index": True},
        {"name": "created_at", "type": "int64", "facet": False, "index": True},
        {"name": "updated_at", "type": "int64", "facet": False, "index": False},
    ],
    "default_sorting_field": "created_at",
}

_UPSERT_TYPES = {EventType.INSERT.value, EventType.UPDATE.value, EventType.BOOTSTRAP_INSERT.value}


class CDCError(Exception):
    """Raised when the change pipeline cannot start or an event cannot be applied."""


class CDCService:
    """Consumes change events from a queue and applies them to the search index."""

    def __init__(
        self, message_queue: MessageQueueRepository, search_index: SearchIndexRepository
    ) -> None:
        self.message_queue = message_queue
        self.search_index = search_index

    def start_cdc(self, queue_name: str) -> None:
        """Connect both backends, prepare the collection and consume the queue."""
        logger.info("Starting CDC service, listening to queue: %s", queue_name)
        try:
            self.message_queue.connect()
        except Exception as err:
            raise CDCError(f"failed to connect to RabbitMQ: {err}") from err
        try:
            try:
                self.search_index.connect()
            except Exception as err:
                raise CDCError(f"failed to connect to Typesense: {err}") from err
            try:
                self._ensure_posts_collection()
                self.message_queue.consume_messages(queue_name, self.handle_message)
            finally:
                self.search_index.close()
        finally:
            self.message_queue.close()

    def handle_message(self, message: bytes) -> None:
        """Apply one raw change message to the search index.

        Raises ValueError for malformed JSON and CDCError for invalid or unknown events.
        """
        try:
            event = from_json(message)
        except ValueError as err:
            logger.error("Failed to parse CDC event: %s", err)
            raise

        if not event.is_valid():
            logger.error("Invalid CDC event: %r", event)
            raise CDCError("invalid CDC event")

        if event.table != POSTS_COLLECTION:
            logger.info("Skipping non-posts table event: %s.%s", event.database, event.table)
            return

        if event.type in _UPSERT_TYPES:
            self._handle_upsert(event)
        elif event.type == EventType.DELETE.value:
            self._handle_delete(event)
        elif event.type == EventType.BOOTSTRAP_START.value:
            logger.info("Bootstrap start event received")
        elif event.type == EventType.BOOTSTRAP_COMPLETE.value:
            logger.info("Bootstrap complete event received")
        else:
            logger.error("Unknown event type: %s", event.type)
            raise CDCError(f"unknown event type: {event.type}")

    def _handle_upsert(self, event: CDCEvent) -> None:
        data = event.data or {}
        logger.info("Processing %s event for post ID: %s", event.type, data.get("id"))
        document = SearchDocument.from_map(data)
        self.search_index.upsert_document(POSTS_COLLECTION, document)
        logger.info("Successfully indexed post ID: %s", document.id)

    def _handle_delete(self, event: CDCEvent) -> None:
        logger.info("Processing delete event for post ID: %s", (event.data or {}).get("id"))
        post_id = event.get_id()
        if post_id is None:
            logger.error("Failed to extract ID from delete event")
            raise CDCError("failed to extract ID from delete event")
        self.search_index.delete_document(POSTS_COLLECTION, str(post_id))
        logger.info("Successfully removed post ID: %d from index", post_id)

    def _ensure_posts_collection(self) -> None:
        try:
            self.search_index.create_collection(POSTS_SCHEMA)
        except Exception as err:
            logger.warning("Collection creation failed (might already exist): %s", err)