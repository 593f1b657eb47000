"""Blog posts, change-data-capture events, and services for indexing and searching posts."""

__version__ = "0.1.0"