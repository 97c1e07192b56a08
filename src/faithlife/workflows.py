"""Shared workflow layer between the CLI and the poller.

Each function wires config, adapters and the pure core together for one
user-facing action.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable
from zoneinfo import ZoneInfo

from .adapters.file_visitor import FileVisitorStore
from .adapters.rest_api import RestChurchAPI
from .config import Config
from .core.admin import (
    GalleryImage,
    Pastor,
    lead_pastor,
    order_pastors,
    subscribers_with_reminders,
    unread_notifications,
)
from .core.events import Event, EventBuckets, classify_events, count_upcoming
from .core.forms import (
    validate_broadcast,
    validate_event_form,
    validate_gallery_form,
    validate_pastor_form,
    validate_sermon_form,
)
from .core.mutations import Toast
from .core.sermons import Sermon
from .ports import ChurchAPI
from .query_cache import QueryCache, QueryResult
from .sermon_store import SermonStore

logger = logging.getLogger(__name__)


def get_api(config: Config) -> RestChurchAPI:
    return RestChurchAPI(config)


def get_visitor_store(config: Config) -> FileVisitorStore:
    return FileVisitorStore(config.visitor_path)


def get_cache(config: Config) -> QueryCache:
    return QueryCache(stale_time=config.stale_time)


def current_time(config: Config) -> datetime:
    """Wall-clock time in the church's timezone, as a naive datetime."""
    return datetime.now(ZoneInfo(config.timezone)).replace(tzinfo=None)


# ============== Events ==============


@dataclass
class EventsView:
    """Classified events plus the fetch status behind them."""

    buckets: EventBuckets
    error: str | None = None


def load_events(api: ChurchAPI, cache: QueryCache, now: datetime) -> EventsView:
    """Fetch (or reuse) the event list and classify it against `now`."""
    result = cache.get("events", api.list_events)
    return EventsView(buckets=classify_events(result.data, now), error=result.error)


# ============== Sermons ==============


def build_sermon_store(
    config: Config,
    api: ChurchAPI,
    cache: QueryCache,
    notify: Callable[[Toast], None],
) -> tuple[SermonStore, QueryResult]:
    """Create a sermon store for this visitor and load the sermon list into it."""
    store: SermonStore

    def refresh() -> None:
        store.load(cache.refetch("sermons", api.list_sermons).data)

    store = SermonStore.from_visitor_store(api, get_visitor_store(config), notify=notify, refresh=refresh)
    result = cache.get("sermons", api.list_sermons)
    store.load(result.data)
    return store, result


# ============== Admin ==============


def _with_image(api: ChurchAPI, route: str, payload: dict, image: Path | None, key: str) -> dict:
    """Upload the image first, if any, and attach its CDN reference."""
    if image is None:
        return payload
    uploaded = api.upload_image(route, image)
    payload = {**payload, key: {"url": uploaded["url"], "public_id": uploaded["public_id"]}}
    if "thumbnailUrl" in payload:
        payload["thumbnailUrl"] = ""
    if "imageUrl" in payload:
        payload["imageUrl"] = ""
    return payload


def create_event(api: ChurchAPI, data: dict, image: Path | None = None) -> list[Event]:
    payload = _with_image(api, "events", validate_event_form(data), image, "thumbnail")
    return api.create_event(payload)


def update_event(api: ChurchAPI, event_id: str, data: dict, image: Path | None = None) -> list[Event] | None:
    payload = _with_image(api, "events", validate_event_form(data), image, "thumbnail")
    return api.update_event(event_id, payload)


def create_sermon(api: ChurchAPI, data: dict, image: Path | None = None) -> list[Sermon]:
    payload = _with_image(api, "sermons", validate_sermon_form(data), image, "thumbnail")
    return api.create_sermon(payload)


def update_sermon(api: ChurchAPI, sermon_id: str, data: dict, image: Path | None = None) -> list[Sermon] | None:
    payload = _with_image(api, "sermons", validate_sermon_form(data), image, "thumbnail")
    return api.update_sermon(sermon_id, payload)


def create_pastor(api: ChurchAPI, data: dict, image: Path | None = None) -> list[Pastor]:
    payload = _with_image(api, "pastors", validate_pastor_form(data), image, "profileImg")
    return order_pastors(api.create_pastor(payload))


def update_pastor(api: ChurchAPI, pastor_id: str, data: dict, image: Path | None = None) -> list[Pastor] | None:
    payload = _with_image(api, "pastors", validate_pastor_form(data), image, "profileImg")
    pastors = api.update_pastor(pastor_id, payload)
    return order_pastors(pastors) if pastors is not None else None


def create_gallery_image(api: ChurchAPI, data: dict, image: Path | None = None) -> list[GalleryImage]:
    payload = _with_image(api, "gallery", validate_gallery_form(data), image, "image")
    return api.create_gallery_image(payload)


def send_broadcast(api: ChurchAPI, subject: str, message: str) -> tuple[str, int]:
    """Send a newsletter to every subscriber. Returns (server message, recipient count)."""
    cleaned = validate_broadcast(subject, message)
    recipients = len(api.list_subscribers())
    reply = api.broadcast(cleaned["subject"], cleaned["message"], recipients)
    logger.info(f"Broadcast '{cleaned['subject']}' sent to {recipients} subscribers")
    return reply, recipients


def load_notifications(api: ChurchAPI, cache: QueryCache) -> QueryResult:
    """Fetch notifications; on failure the inbox is empty and carries the error."""
    return cache.refetch("notifications", api.list_notifications)


@dataclass
class Dashboard:
    """Headline numbers for the admin dashboard."""

    upcoming_events: int
    unread_notifications: int
    subscribers: int
    reminders: int
    lead_pastor: Pastor | None = None
    errors: list[str] = field(default_factory=list)


def load_dashboard(api: ChurchAPI, cache: QueryCache, now: datetime) -> Dashboard:
    """Gather dashboard counts. A failed source counts as empty and adds an error."""
    results = {
        "events": cache.get("events", api.list_events),
        "notifications": load_notifications(api, cache),
        "subscribers": cache.get("subscribers", api.list_subscribers),
        "pastors": cache.get("pastors", api.list_pastors),
    }
    subscribers = results["subscribers"].data
    return Dashboard(
        upcoming_events=count_upcoming(results["events"].data, now),
        unread_notifications=len(unread_notifications(results["notifications"].data)),
        subscribers=len(subscribers),
        reminders=len(subscribers_with_reminders(subscribers)),
        lead_pastor=lead_pastor(results["pastors"].data),
        errors=[f"{key}: {result.error}" for key, result in results.items() if result.error],
    )
