"""Change-data-capture events describing row changes in the blog database."""

from __future__ import annotations

import json
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Kinds of change events the capture stream produces."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    BOOTSTRAP_START = "bootstrap-start"
    BOOTSTRAP_INSERT = "bootstrap-insert"
    BOOTSTRAP_COMPLETE = "bootstrap-complete"


def _now_unix() -> int:
    return int(time.time())


@dataclass
class CDCEvent:
    """A single row change captured from the database binlog."""

    database: str = ""
    table: str = ""
    type: str = ""
    data: dict[str, Any] | None = None
    old: dict[str, Any] | None = None
    ts: int = field(default_factory=_now_unix)
    xid: int = 0
    xoffset: int = 0

    def is_valid(self) -> bool:
        """Return True when database, table, type and data are all present."""
        return bool(self.database and self.table and self.type) and self.data is not None

    def get_id(self) -> int | None:
        """Return the numeric ``id`` from the row data, or None if absent or not numeric."""
        value = (self.data or {}).get("id")
        if isinstance(value, bool):
            return None
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else None
        if isinstance(value, int):
            return value
        return None

    def to_json(self) -> bytes:
        """Serialise the event as JSON, leaving out empty optional fields."""
        document: dict[str, Any] = {
            "database": self.database,
            "table": self.table,
            "type": self.type,
            "data": self.data,
        }
        if self.old:
            document["old"] = self.old
        document["ts"] = self.ts
        if self.xid:
            document["xid"] = self.xid
        if self.xoffset:
            document["xoffset"] = self.xoffset
        return json.dumps(document).encode("utf-8")


def _field(payload: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = payload.get(key)
    if value is None:
        return default
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    elif not isinstance(value, kind):
        raise ValueError(f"field {key!r} must be of type {kind.__name__}, got {value!r}")
    return value


def from_json(data: bytes | str) -> CDCEvent:
    """Parse a CDC event from its JSON form.

    Raises ValueError when the text is not JSON or a field has the wrong type.
    """
    payload = json.loads(data)
    if payload is None:
        return CDCEvent(ts=0)
    if not isinstance(payload, dict):
        raise ValueError("CDC event must be a JSON object")
    return CDCEvent(
        database=_field(payload, "database", str, ""),
        table=_field(payload, "table", str, ""),
        type=_field(payload, "type", str, ""),
        data=_field(payload, "data", dict, None),
        old=_field(payload, "old", dict, None),
        ts=_field(payload, "ts", int, 0),
        xid=_field(payload, "xid", int, 0),
        xoffset=_field(payload, "xoffset", int, 0),
    )