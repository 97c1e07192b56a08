"""Pure event domain logic - no I/O dependencies."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

EVENT_CATEGORIES = ("general", "service", "youth", "community")

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class EventStatus(Enum):
    """Where an event sits relative to today."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    PAST = "past"


@dataclass
class Event:
    """A church event as published by the API."""

    id: str
    title: str
    description: str
    date: str
    time: str
    location: str
    speaker: str | None = None
    category: str = "general"
    thumbnail_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Event":
        """Create Event from an API record.

        Date and time are kept as raw strings, whatever JSON type they arrive
        as, so a malformed record still loads and gets classified instead of
        being dropped here.
        """
        category = (data.get("category") or "general").lower()
        if category not in EVENT_CATEGORIES:
            category = "general"
        thumbnail = data.get("thumbnail") or {}
        return cls(
            id=data.get("_id") or data.get("id") or "",
            title=data.get("title", ""),
            description=data.get("description", ""),
            date=str(data.get("date") or ""),
            time=str(data.get("time") or ""),
            location=data.get("location", ""),
            speaker=data.get("speaker") or None,
            category=category,
            thumbnail_url=thumbnail.get("url") or data.get("thumbnailUrl") or None,
        )

    def format_when(self) -> str:
        """Format date and time for display, falling back to the raw strings."""
        instant = event_instant(self)
        if instant is None:
            return f"{self.date} {self.time}".strip() or "Date TBA"
        return instant.strftime("%a %b %d, %H:%M")


@dataclass
class EventBuckets:
    """Events split by status, each bucket in display order."""

    upcoming: list[Event] = field(default_factory=list)
    ongoing: list[Event] = field(default_factory=list)
    past: list[Event] = field(default_factory=list)

    def get(self, status: EventStatus) -> list[Event]:
        match status:
            case EventStatus.UPCOMING:
                return self.upcoming
            case EventStatus.ONGOING:
                return self.ongoing
            case EventStatus.PAST:
                return self.past

    @property
    def total(self) -> int:
        return len(self.upcoming) + len(self.ongoing) + len(self.past)


def _parse_date(value: str) -> date | None:
    """Calendar date of an ISO date or timestamp string, as written."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
    except ValueError:
        return None


def event_instant(event: Event) -> datetime | None:
    """
    Combine the event's date and time into a single naive datetime.

    Pure function - no I/O. Returns None when either part is unparsable.
    """
    day = _parse_date(event.date)
    time_text = event.time if isinstance(event.time, str) else ""
    match = _TIME_PATTERN.match(time_text.strip())
    if day is None or match is None:
        return None
    return datetime(day.year, day.month, day.day, int(match.group(1)), int(match.group(2)))


def event_status(event: Event, now: datetime) -> EventStatus:
    """
    Classify an event by calendar day against `now`.

    Time of day is ignored. Events without a valid instant are upcoming so
    they stay visible.
    """
    instant = event_instant(event)
    if instant is None:
        return EventStatus.UPCOMING

    event_day = instant.date()
    today = now.date()
    if event_day < today:
        return EventStatus.PAST
    if event_day == today:
        return EventStatus.ONGOING
    return EventStatus.UPCOMING


def sort_events(events: list[Event]) -> list[Event]:
    """
    Sort events by combined date-time, ascending.

    Events without a valid instant keep their positions; the dated events are
    sorted into the remaining slots. Stable for equal instants.
    """
    instants = [event_instant(e) for e in events]
    dated = sorted(
        (i for i, instant in enumerate(instants) if instant is not None),
        key=lambda i: instants[i],
    )
    slots = iter(dated)

    result = []
    for i, instant in enumerate(instants):
        if instant is None:
            result.append(events[i])
        else:
            result.append(events[next(slots)])
    return result


def classify_events(events: list[Event], now: datetime) -> EventBuckets:
    """
    Partition events into upcoming, ongoing and past.

    Pure function - no I/O. Each bucket is sorted ascending, except past
    which is reversed so the most recent event comes first.
    """
    buckets = EventBuckets()
    for event in events:
        buckets.get(event_status(event, now)).append(event)

    return EventBuckets(
        upcoming=sort_events(buckets.upcoming),
        ongoing=sort_events(buckets.ongoing),
        past=list(reversed(sort_events(buckets.past))),
    )


def featured_event(buckets: EventBuckets) -> Event | None:
    """First ongoing event, else the nearest upcoming one."""
    if buckets.ongoing:
        return buckets.ongoing[0]
    if buckets.upcoming:
        return buckets.upcoming[0]
    return None


def count_upcoming(events: list[Event], now: datetime) -> int:
    """Events dated today or later, as shown on the admin dashboard."""
    return sum(1 for e in events if event_status(e, now) is not EventStatus.PAST)
