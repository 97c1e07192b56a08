"""Pure admin-dashboard domain logic - no I/O dependencies."""

from dataclasses import dataclass

GALLERY_CATEGORIES = ("general", "events", "worship", "community")
NOTIFICATION_TYPES = ("donation", "event", "system", "user", "sermon", "gallery")


def _image_url(data: dict, nested_key: str) -> str | None:
    nested = data.get(nested_key) or {}
    return nested.get("url") or data.get("imageUrl") or None


@dataclass
class Pastor:
    """A member of the pastoral team."""

    id: str
    name: str
    title: str
    bio: str
    email: str
    is_lead: bool = False
    order: int = 0
    image_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Pastor":
        try:
            order = int(data.get("order") or 0)
        except (TypeError, ValueError):
            order = 0
        return cls(
            id=data.get("_id") or data.get("id") or "",
            name=data.get("name", ""),
            title=data.get("title", ""),
            bio=data.get("bio", ""),
            email=data.get("email", ""),
            is_lead=bool(data.get("isLead", False)),
            order=order,
            image_url=_image_url(data, "profileImg"),
        )


@dataclass
class GalleryImage:
    id: str
    title: str
    category: str = "general"
    image_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "GalleryImage":
        category = (data.get("category") or "general").lower()
        return cls(
            id=data.get("_id") or data.get("id") or "",
            title=data.get("title", ""),
            category=category if category in GALLERY_CATEGORIES else "general",
            image_url=_image_url(data, "image"),
        )


@dataclass
class Notification:
    """An admin inbox notification."""

    id: str
    title: str
    description: str
    type: str
    created_at: str
    read: bool = False
    archived: bool = False

    @property
    def is_unread(self) -> bool:
        return not self.read and not self.archived

    @classmethod
    def from_api(cls, data: dict) -> "Notification":
        kind = data.get("type") or "system"
        return cls(
            id=data.get("_id") or data.get("id") or "",
            title=data.get("title", ""),
            description=data.get("description", ""),
            type=kind if kind in NOTIFICATION_TYPES else "system",
            created_at=data.get("createdAt") or "",
            read=bool(data.get("read", False)),
            archived=bool(data.get("archived", False)),
        )


@dataclass
class Subscriber:
    """A newsletter subscriber, normalised from loosely shaped records."""

    id: str
    name: str
    email: str
    contact: str | None = None
    created_at: str | None = None
    banned: bool = False
    reminder: bool = False

    @classmethod
    def from_api(cls, data: dict, index: int = 0) -> "Subscriber":
        """
        Normalise one subscriber record.

        Ids fall back to `{email}-{index}` and names to the email's local part
        so every row can be rendered.
        """
        email = data.get("email") or ""
        name = (
            data.get("name")
            or data.get("fullName")
            or data.get("displayName")
            or (email.split("@")[0] if email else "")
            or f"User {index}"
        )
        return cls(
            id=data.get("_id") or data.get("id") or f"{email or 'user'}-{index}",
            name=name,
            email=email,
            contact=data.get("contact") or None,
            created_at=data.get("createdAt") or None,
            banned=bool(data.get("banned")),
            reminder=bool(data.get("reminder")),
        )


def normalize_subscribers(records: list[dict]) -> list[Subscriber]:
    return [Subscriber.from_api(r, i) for i, r in enumerate(records)]


def order_pastors(pastors: list[Pastor]) -> list[Pastor]:
    """Lead pastor first, then by display order."""
    return sorted(pastors, key=lambda p: (not p.is_lead, p.order))


def lead_pastor(pastors: list[Pastor]) -> Pastor | None:
    ordered = order_pastors(pastors)
    return ordered[0] if ordered else None


def unread_notifications(notifications: list[Notification]) -> list[Notification]:
    return [n for n in notifications if n.is_unread]


def archived_notifications(notifications: list[Notification]) -> list[Notification]:
    return [n for n in notifications if n.archived]


def filter_gallery(images: list[GalleryImage], category: str | None) -> list[GalleryImage]:
    if not category:
        return list(images)
    return [i for i in images if i.category == category.lower()]


def subscribers_with_reminders(subscribers: list[Subscriber]) -> list[Subscriber]:
    """Subscribers who asked to be reminded about upcoming events."""
    return [s for s in subscribers if s.reminder]
