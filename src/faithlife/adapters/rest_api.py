"""REST API adapter - HTTP client for the church backend."""

import logging
from pathlib import Path

import requests

from faithlife.config import Config, load_config
from faithlife.core.admin import GalleryImage, Notification, Pastor, Subscriber, normalize_subscribers
from faithlife.core.events import Event
from faithlife.core.sermons import LikeResult, SaveResult, Sermon, VisitorProfile

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when a request fails or the server answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(resp: requests.Response) -> str:
    """Prefer the server's own error text over the HTTP reason."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("err", "error", "message"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {resp.status_code}: {resp.reason or resp.text}"


def _record(data: dict, key: str) -> dict | None:
    """A nested record from a reply; a value that is not an object is a bad reply."""
    value = data.get(key)
    if not value:
        return None
    if not isinstance(value, dict):
        raise ApiError(f"Malformed {key} in server reply: {value!r}")
    return value


class RestChurchAPI:
    """
    Church REST API adapter.

    Implements ChurchAPI protocol. No business logic - just I/O and record
    parsing.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        self.base_url = f"{self.config.api_url.rstrip('/')}/api"
        self._session = session or requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs) -> dict:
        """Make an API request and return the JSON body."""
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url}")
        try:
            resp = self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise ApiError(f"Request to {endpoint} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise ApiError(_error_message(resp), resp.status_code)

        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {endpoint}", resp.status_code) from e
        return data if isinstance(data, dict) else {}

    # ============== Events ==============

    @staticmethod
    def _events(data: dict) -> list[Event]:
        return [Event.from_api(e) for e in data.get("events") or []]

    def list_events(self) -> list[Event]:
        return self._events(self._request("GET", "/events/all"))

    def create_event(self, payload: dict) -> list[Event]:
        return self._events(self._request("POST", "/events/new-event", json=payload))

    def update_event(self, event_id: str, payload: dict) -> list[Event] | None:
        data = self._request("PUT", f"/events/update-event/{event_id}", json=payload)
        return self._events(data) if "events" in data else None

    def delete_event(self, event_id: str) -> list[Event]:
        return self._events(self._request("DELETE", f"/events/delete-event/{event_id}"))

    # ============== Sermons ==============

    @staticmethod
    def _sermons(data: dict) -> list[Sermon]:
        return [Sermon.from_api(s) for s in data.get("sermons") or []]

    def list_sermons(self) -> list[Sermon]:
        return self._sermons(self._request("GET", "/sermons/all"))

    def get_sermon(self, sermon_id: str) -> Sermon:
        record = _record(self._request("GET", f"/sermons/sermon/{sermon_id}"), "sermon")
        if record is None:
            raise ApiError(f"Sermon {sermon_id} not found", 404)
        return Sermon.from_api(record)

    def like_sermon(self, sermon_id: str, user_id: str) -> LikeResult:
        data = self._request("POST", f"/sermons/like/sermon/{sermon_id}", json={"userId": user_id})
        sermon = _record(data, "sermon")
        return LikeResult(
            message=data.get("message", ""),
            sermon=Sermon.from_api(sermon) if sermon else None,
        )

    def save_sermon(self, sermon_id: str, user_id: str) -> SaveResult:
        data = self._request("POST", f"/sermons/save/sermon/{sermon_id}", json={"userId": user_id})
        user = _record(data, "user")
        return SaveResult(
            message=data.get("message", ""),
            user=VisitorProfile.from_api(user) if user else None,
        )

    def create_sermon(self, payload: dict) -> list[Sermon]:
        return self._sermons(self._request("POST", "/sermons/new-sermon", json=payload))

    def update_sermon(self, sermon_id: str, payload: dict) -> list[Sermon] | None:
        data = self._request("PUT", f"/sermons/update-sermon/{sermon_id}", json=payload)
        return self._sermons(data) if "sermons" in data else None

    def delete_sermon(self, sermon_id: str) -> list[Sermon]:
        return self._sermons(self._request("DELETE", f"/sermons/delete-sermon/{sermon_id}"))

    # ============== Pastors ==============

    @staticmethod
    def _pastors(data: dict) -> list[Pastor]:
        return [Pastor.from_api(p) for p in data.get("pastors") or []]

    def list_pastors(self) -> list[Pastor]:
        return self._pastors(self._request("GET", "/pastors/all"))

    def create_pastor(self, payload: dict) -> list[Pastor]:
        return self._pastors(self._request("POST", "/pastors/new-pastor", json=payload))

    def update_pastor(self, pastor_id: str, payload: dict) -> list[Pastor] | None:
        data = self._request("PUT", f"/pastors/update-profile/{pastor_id}", json=payload)
        return self._pastors(data) if "pastors" in data else None

    def delete_pastor(self, pastor_id: str) -> list[Pastor]:
        return self._pastors(self._request("DELETE", f"/pastors/delete-pastor/{pastor_id}"))

    # ============== Gallery ==============

    @staticmethod
    def _gallery(data: dict) -> list[GalleryImage]:
        return [GalleryImage.from_api(g) for g in data.get("gallery") or []]

    def list_gallery(self) -> list[GalleryImage]:
        return self._gallery(self._request("GET", "/gallery/all"))

    def create_gallery_image(self, payload: dict) -> list[GalleryImage]:
        return self._gallery(self._request("POST", "/gallery/new", json=payload))

    def delete_gallery_image(self, image_id: str) -> list[GalleryImage]:
        return self._gallery(self._request("DELETE", f"/gallery/delete/{image_id}"))

    def upload_image(self, route: str, path: Path) -> dict:
        """Upload an image to the CDN through the API."""
        path = Path(path)
        with path.open("rb") as fh:
            data = self._request("POST", f"/{route}/upload/image", files={"image": (path.name, fh)})
        if not data.get("url"):
            raise ApiError(f"Image upload to {route} returned no URL")
        return {"url": data["url"], "public_id": data.get("public_id", "")}

    # ============== Notifications ==============

    @staticmethod
    def _notifications(data: dict) -> list[Notification]:
        return [Notification.from_api(n) for n in data.get("notifications") or []]

    def list_notifications(self) -> list[Notification]:
        return self._notifications(self._request("GET", "/notifications/get-notifications"))

    def archive_notification(self, notification_id: str) -> list[Notification]:
        return self._notifications(
            self._request("PUT", f"/notifications/archive-notification/{notification_id}")
        )

    def delete_notification(self, notification_id: str) -> None:
        self._request("DELETE", f"/notifications/delete-notification/{notification_id}")

    def unarchive_notifications(self) -> list[Notification]:
        return self._notifications(self._request("PUT", "/notifications/unarchive-notifications"))

    def clear_notifications(self) -> None:
        self._request("DELETE", "/notifications/clear-notifications")

    # ============== Newsletter ==============

    def list_subscribers(self) -> list[Subscriber]:
        data = self._request("GET", "/news-letter/subscribers")
        records = data.get("subscribers")
        return normalize_subscribers(records if isinstance(records, list) else [])

    def broadcast(self, subject: str, message: str, recipient_count: int) -> str:
        data = self._request(
            "POST",
            "/news-letter/broadcast",
            json={"subject": subject, "message": message, "recipientCount": recipient_count},
        )
        return data.get("message", "")
