"""The blog post entity and its validation rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


class PostNotFoundError(LookupError):
    """Raised when a post cannot be found."""

    def __init__(self, message: str = "post not found") -> None:
        super().__init__(message)


class PostValidationError(ValueError):
    """Raised when a post's fields break a validation rule."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check(title: str, body: str) -> None:
    if not title:
        raise PostValidationError("title cannot be empty")
    if not body:
        raise PostValidationError("body cannot be empty")


@dataclass
class Post:
    """A blog post. Timestamps are None until set."""

    id: int = 0
    title: str = ""
    image: str = ""
    excerpt: str = ""
    body: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(cls, title: str, image: str, excerpt: str, body: str) -> Post:
        """Build a new, unsaved post stamped with the current time."""
        _check(title, body)
        now = _now()
        return cls(
            title=title,
            image=image,
            excerpt=excerpt,
            body=body,
            created_at=now,
            updated_at=now,
        )

    def update(self, title: str, image: str, excerpt: str, body: str) -> None:
        """Replace the post's content and refresh its update time."""
        _check(title, body)
        self.title = title
        self.image = image
        self.excerpt = excerpt
        self.body = body
        self.updated_at = _now()

    def validate(self) -> None:
        """Raise PostValidationError if the title or body is empty."""
        _check(self.title, self.body)