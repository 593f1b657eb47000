"""Documents stored in the search index for blog posts."""

from __future__ import annotations

import math
import re
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from blog_cdc_search.post import Post, PostNotFoundError

# Unix time of the zero calendar instant (0001-01-01T00:00:00Z), used for unset times.
_ZERO_TIME_UNIX = -62135596800

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _unix(moment: datetime | None) -> int:
    if moment is None:
        return _ZERO_TIME_UNIX
    return math.floor(moment.timestamp())


def _parse_rfc3339(text: str) -> int | None:
    match = _RFC3339.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours > 23 or minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    try:
        moment = datetime(year, month, day, hour, minute, second, tzinfo=tz)
    except ValueError:
        return None
    return _unix(moment)


def _number_as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    return None


def _timestamp(value: Any) -> int:
    if isinstance(value, str):
        return _parse_rfc3339(value) or 0
    return _number_as_int(value) or 0


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class SearchDocument:
    """A post as stored in the search index, with Unix-second timestamps."""

    id: str
    title: str
    image: str
    excerpt: str
    body: str
    created_at: int
    updated_at: int

    @classmethod
    def from_post(cls, post: Post) -> SearchDocument:
        """Build the index document for a post."""
        return cls(
            id=str(post.id),
            title=post.title,
            image=post.image,
            excerpt=post.excerpt,
            body=post.body,
            created_at=_unix(post.created_at),
            updated_at=_unix(post.updated_at),
        )

    @classmethod
    def from_map(cls, data: dict[str, Any]) -> SearchDocument:
        """Build the index document from a raw row mapping.

        Raises PostNotFoundError when the mapping has no numeric ``id``.
        Missing or unreadable timestamps default to the current time.
        """
        if "id" not in data:
            raise PostNotFoundError()
        post_id = _number_as_int(data["id"])
        if post_id is None:
            raise PostNotFoundError()

        created_at = _timestamp(data.get("created_at"))
        updated_at = _timestamp(data.get("updated_at"))
        now = int(time.time())

        return cls(
            id=str(post_id),
            title=_text(data.get("title")),
            image=_text(data.get("image")),
            excerpt=_text(data.get("excerpt")),
            body=_text(data.get("body")),
            created_at=created_at or now,
            updated_at=updated_at or now,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the document as a plain mapping ready for the index."""
        return asdict(self)