"""Church API interface."""

from pathlib import Path
from typing import Protocol

from faithlife.core.admin import GalleryImage, Notification, Pastor, Subscriber
from faithlife.core.events import Event
from faithlife.core.sermons import LikeResult, SaveResult, Sermon


class ChurchAPI(Protocol):
    """Interface to the church REST backend."""

    def list_events(self) -> list[Event]:
        ...

    def create_event(self, payload: dict) -> list[Event]:
        ...

    def update_event(self, event_id: str, payload: dict) -> list[Event] | None:
        """Update an event. Returns the refreshed list when the server sends one."""
        ...

    def delete_event(self, event_id: str) -> list[Event]:
        ...

    def list_sermons(self) -> list[Sermon]:
        ...

    def get_sermon(self, sermon_id: str) -> Sermon:
        ...

    def like_sermon(self, sermon_id: str, user_id: str) -> LikeResult:
        """Toggle the user's like. Raises on any non-success response."""
        ...

    def save_sermon(self, sermon_id: str, user_id: str) -> SaveResult:
        """Toggle the sermon in the user's saved list."""
        ...

    def create_sermon(self, payload: dict) -> list[Sermon]:
        ...

    def update_sermon(self, sermon_id: str, payload: dict) -> list[Sermon] | None:
        ...

    def delete_sermon(self, sermon_id: str) -> list[Sermon]:
        ...

    def list_pastors(self) -> list[Pastor]:
        ...

    def create_pastor(self, payload: dict) -> list[Pastor]:
        ...

    def update_pastor(self, pastor_id: str, payload: dict) -> list[Pastor] | None:
        ...

    def delete_pastor(self, pastor_id: str) -> list[Pastor]:
        ...

    def list_gallery(self) -> list[GalleryImage]:
        ...

    def create_gallery_image(self, payload: dict) -> list[GalleryImage]:
        ...

    def delete_gallery_image(self, image_id: str) -> list[GalleryImage]:
        ...

    def upload_image(self, route: str, path: Path) -> dict:
        """Upload an image file. Returns {"url": ..., "public_id": ...}."""
        ...

    def list_notifications(self) -> list[Notification]:
        ...

    def archive_notification(self, notification_id: str) -> list[Notification]:
        ...

    def delete_notification(self, notification_id: str) -> None:
        ...

    def unarchive_notifications(self) -> list[Notification]:
        ...

    def clear_notifications(self) -> None:
        ...

    def list_subscribers(self) -> list[Subscriber]:
        ...

    def broadcast(self, subject: str, message: str, recipient_count: int) -> str:
        """Send a newsletter. Returns the server's message."""
        ...
