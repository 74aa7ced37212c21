"""Block and transaction events and lookups over them."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


class EventNotFoundError(LookupError):
    """Raised when an event or attribute being looked up does not exist."""


@dataclass(frozen=True)
class EventAttribute:
    """A single key/value attribute of an event."""

    key: str
    value: str
    index: bool = False


@dataclass(frozen=True)
class Event:
    """An event emitted during block or transaction execution."""

    type: str
    attributes: tuple[EventAttribute, ...] = field(default_factory=tuple)


def parse_event(data: Mapping[str, Any]) -> Event:
    """Build an Event from its JSON representation."""
    attributes = tuple(
        EventAttribute(
            key=str(attr.get("key") or ""),
            value=str(attr.get("value") or ""),
            index=bool(attr.get("index", False)),
        )
        for attr in data.get("attributes") or ()
    )
    return Event(type=str(data.get("type") or ""), attributes=attributes)


def find_event_by_type(events: Iterable[Event], event_type: str) -> Event:
    """Return the first event of the given type."""
    for event in events:
        if event.type == event_type:
            return event
    raise EventNotFoundError(f"no event with type {event_type} found")


def find_events_by_type(events: Iterable[Event], event_type: str) -> list[Event]:
    """Return every event of the given type, in order."""
    return [event for event in events if event.type == event_type]


def find_attribute_by_key(event: Event, attr_key: str) -> EventAttribute:
    """Return the first attribute of the event having the given key."""
    for attr in event.attributes:
        if attr.key == attr_key:
            return attr
    raise EventNotFoundError(
        f"no attribute with key {attr_key} found inside event with type {event.type}"
    )


def max_int64(a: int, b: int) -> int:
    """Return the larger of two integers."""
    return a if a > b else b