"""Admin form validation - pure, no I/O.

Each validator returns the cleaned payload in the API's field names, or
raises FormValidationError listing every bad field.
"""

import re
from urllib.parse import urlparse

from .admin import GALLERY_CATEGORIES
from .events import EVENT_CATEGORIES

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FormValidationError(ValueError):
    """Raised when admin input fails validation."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class _Checker:
    """Collects field errors so a form reports all of them at once."""

    def __init__(self, data: dict):
        self.data = data
        self.errors: dict[str, str] = {}

    def text(self, key: str) -> str:
        return str(self.data.get(key) or "").strip()

    def required(self, key: str, label: str, max_len: int | None = None) -> str:
        value = self.text(key)
        if not value:
            self.errors[key] = f"{label} is required"
        elif max_len and len(value) > max_len:
            self.errors[key] = f"{label} is too long"
        return value

    def pattern(self, key: str, label: str, regex: re.Pattern, message: str) -> str:
        value = self.required(key, label)
        if value and not regex.match(value):
            self.errors[key] = message
        return value

    def url(self, key: str, label: str) -> str:
        value = self.text(key)
        if value and not _is_url(value):
            self.errors[key] = f"Invalid {label} URL"
        return value

    def choice(self, key: str, choices: tuple[str, ...], default: str | None) -> str:
        value = self.text(key).lower() or default
        if value not in choices:
            self.errors[key] = f"Must be one of: {', '.join(choices)}"
        return value or ""

    def done(self, payload: dict) -> dict:
        if self.errors:
            raise FormValidationError(self.errors)
        return payload


def validate_event_form(data: dict) -> dict:
    c = _Checker(data)
    return c.done(
        {
            "title": c.required("title", "Title", max_len=100),
            "description": c.required("description", "Description"),
            "date": c.pattern("date", "Date", _DATE_PATTERN, "Invalid date format"),
            "time": c.pattern("time", "Time", _TIME_PATTERN, "Invalid time format"),
            "location": c.required("location", "Location"),
            "speaker": c.text("speaker"),
            "thumbnailUrl": c.text("thumbnailUrl"),
            "category": c.choice("category", EVENT_CATEGORIES, "general"),
        }
    )


def validate_sermon_form(data: dict) -> dict:
    c = _Checker(data)
    return c.done(
        {
            "title": c.required("title", "Title", max_len=100),
            "speaker": c.required("speaker", "Speaker"),
            "date": c.pattern("date", "Date", _DATE_PATTERN, "Invalid date format"),
            "description": c.required("description", "Description"),
            "videoUrl": c.url("videoUrl", "video"),
            "audioUrl": c.url("audioUrl", "audio"),
            "thumbnailUrl": c.url("thumbnailUrl", "thumbnail"),
            "scripture": c.text("scripture"),
            "series": c.text("series"),
            "isLive": bool(data.get("isLive", False)),
        }
    )


def validate_gallery_form(data: dict) -> dict:
    c = _Checker(data)
    return c.done(
        {
            "title": c.required("title", "Title", max_len=100),
            "imageUrl": c.url("imageUrl", "image"),
            "category": c.choice("category", GALLERY_CATEGORIES, None),
        }
    )


def validate_pastor_form(data: dict) -> dict:
    c = _Checker(data)
    order = data.get("order", 0)
    if isinstance(order, bool) or not isinstance(order, int):
        try:
            order = int(str(order).strip() or 0)
        except ValueError:
            c.errors["order"] = "Order must be a whole number"
            order = 0
    if order < 0:
        c.errors["order"] = "Order must be 0 or greater"

    email = c.required("email", "Email")
    if email and not _EMAIL_PATTERN.match(email):
        c.errors["email"] = "Invalid email format"

    bio = c.required("bio", "Bio", max_len=1000)
    return c.done(
        {
            "name": c.required("name", "Name", max_len=100),
            "title": c.required("title", "Title"),
            "bio": bio,
            "imageUrl": c.url("imageUrl", "image"),
            "email": email,
            "isLead": bool(data.get("isLead", False)),
            "order": order,
        }
    )


def validate_broadcast(subject: str, message: str) -> dict:
    errors = {}
    if not (subject or "").strip():
        errors["subject"] = "Subject cannot be empty"
    if not (message or "").strip():
        errors["message"] = "Message cannot be empty"
    if errors:
        raise FormValidationError(errors)
    return {"subject": subject.strip(), "message": message.strip()}
