"""Functional core - pure business logic with no I/O."""

from .events import Event, EventBuckets, EventStatus, classify_events, featured_event
from .sermons import Sermon, VisitorProfile, LikeResult, SaveResult, search_sermons
from .mutations import Mutation, MutationKind, MutationStatus, SermonState, Toast
from .pagination import Page, paginate
from .admin import GalleryImage, Notification, Pastor, Subscriber
from .forms import FormValidationError

__all__ = [
    # Events
    "Event",
    "EventBuckets",
    "EventStatus",
    "classify_events",
    "featured_event",
    # Sermons
    "Sermon",
    "VisitorProfile",
    "LikeResult",
    "SaveResult",
    "search_sermons",
    # Mutations
    "Mutation",
    "MutationKind",
    "MutationStatus",
    "SermonState",
    "Toast",
    # Pagination
    "Page",
    "paginate",
    # Admin
    "GalleryImage",
    "Notification",
    "Pastor",
    "Subscriber",
    "FormValidationError",
]
