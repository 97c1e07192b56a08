"""FaithLife CLI - church events, sermons and admin tools."""

import json
import logging
import sys
import uuid
from dataclasses import asdict
from pathlib import Path

import click

from . import workflows
from .adapters.rest_api import ApiError
from .config import load_config
from .core.admin import (
    archived_notifications,
    filter_gallery,
    order_pastors,
    subscribers_with_reminders,
    unread_notifications,
)
from .core.events import Event, EventStatus, featured_event
from .core.forms import FormValidationError
from .core.mutations import MutationStatus, Toast
from .core.pagination import paginate
from .core.sermons import Sermon
from .query_cache import Poller


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _echo_toast(toast: Toast) -> None:
    text = f"{toast.title}: {toast.description}" if toast.description else toast.title
    click.echo(text, err=toast.is_error)


def _show_event(event: Event) -> None:
    speaker = f" ({event.speaker})" if event.speaker else ""
    click.echo(f"  {event.format_when():22} {event.title}{speaker}")
    if event.location:
        click.echo(f"  {'':22} @ {event.location} [{event.category}]")


def _show_sermon(sermon: Sermon, visitor_id: str | None = None) -> None:
    live = " [LIVE]" if sermon.is_live else ""
    liked = "♥" if sermon.is_liked_by(visitor_id) else " "
    series = f" - {sermon.series}" if sermon.series else ""
    click.echo(f"{liked} {sermon.date[:10]:10} {sermon.title}{live} ({sermon.speaker}{series}) "
               f"[{sermon.like_count} likes] id={sermon.id}")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="faithlife")
@click.pass_context
def main(ctx, debug: bool):
    """FaithLife - church events and sermons."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    try:
        ctx.obj = load_config()
    except ValueError as e:
        _fail(f"Invalid configuration: {e}")


# ============== Events ==============


@main.command()
@click.option("--tab", type=click.Choice([s.value for s in EventStatus]), default="upcoming",
              help="Which events to list")
@click.option("--page", default=1, help="Page number (from 1)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def events(config, tab: str, page: int, as_json: bool):
    """List upcoming, ongoing or past events."""
    api = workflows.get_api(config)
    view = workflows.load_events(api, workflows.get_cache(config), workflows.current_time(config))
    if view.error:
        click.echo(f"(Events unavailable: {view.error})", err=True)

    bucket = view.buckets.get(EventStatus(tab))
    if as_json:
        click.echo(json.dumps([asdict(e) for e in bucket], indent=2))
        return

    if not bucket:
        click.echo(f"No {tab} events.")
        return

    listing = paginate(bucket, page - 1, config.events_per_page)
    for event in listing.items:
        _show_event(event)
    click.echo(f"\n{listing.format()}")


@main.command()
@click.pass_obj
def featured(config):
    """Show today's event, or the next one coming up."""
    api = workflows.get_api(config)
    view = workflows.load_events(api, workflows.get_cache(config), workflows.current_time(config))
    event = featured_event(view.buckets)
    if event is None:
        click.echo("No upcoming events at this time. Check back soon!")
        return
    click.echo(f"{event.title}\n{event.format_when()} @ {event.location}\n\n{event.description}")


# ============== Sermons ==============


def _sermon_store(config):
    api = workflows.get_api(config)
    store, result = workflows.build_sermon_store(config, api, workflows.get_cache(config), _echo_toast)
    if result.error:
        click.echo(f"(Sermons unavailable: {result.error})", err=True)
    return store


@main.command()
@click.option("--search", "query", default="", help="Filter by title, speaker or series")
@click.option("--page", default=1, help="Page number (from 1)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def sermons(config, query: str, page: int, as_json: bool):
    """List sermons."""
    store = _sermon_store(config)
    found = store.search(query)

    if as_json:
        click.echo(json.dumps([asdict(s) for s in found], indent=2))
        return

    if not found:
        click.echo("No sermons found.")
        return

    displayed = store.displayed
    if displayed is not None and not query:
        click.echo("Now showing:")
        _show_sermon(displayed, store.visitor_id)
        click.echo()

    listing = paginate(found, page - 1, config.sermons_per_page)
    for sermon in listing.items:
        _show_sermon(sermon, store.visitor_id)
    click.echo(f"\n{listing.format()}")


@main.command()
@click.argument("sermon_id")
@click.pass_obj
def sermon(config, sermon_id: str):
    """Open a sermon and mark it watched."""
    store = _sermon_store(config)
    found = store.open_sermon(sermon_id)
    if found is None:
        sys.exit(1)

    _show_sermon(found, store.visitor_id)
    for label, value in (
        ("Scripture", found.scripture),
        ("Video", found.video_url),
        ("Audio", found.audio_url),
    ):
        if value:
            click.echo(f"  {label}: {value}")
    if store.is_saved(found):
        click.echo("  (saved)")
    if found.description:
        click.echo(f"\n{found.description}")


def _run_mutation(config, sermon_id: str, action: str) -> None:
    store = _sermon_store(config)
    mutation = store.like(sermon_id) if action == "like" else store.save(sermon_id)
    if mutation is None or mutation.status is not MutationStatus.COMMITTED:
        sys.exit(1)

    current = next((s for s in store.state.sermons if s.id == sermon_id), None)
    if current is not None:
        _show_sermon(current, store.visitor_id)


@main.command()
@click.argument("sermon_id")
@click.pass_obj
def like(config, sermon_id: str):
    """Like or unlike a sermon."""
    _run_mutation(config, sermon_id, "like")


@main.command()
@click.argument("sermon_id")
@click.pass_obj
def save(config, sermon_id: str):
    """Save or unsave a sermon."""
    _run_mutation(config, sermon_id, "save")


@main.command()
@click.option("--set", "new_id", default=None, help="Use this visitor id")
@click.option("--new", "generate", is_flag=True, help="Generate a fresh visitor id")
@click.pass_obj
def visitor(config, new_id: str | None, generate: bool):
    """Show or set the local visitor identity."""
    store = workflows.get_visitor_store(config)
    if generate:
        new_id = uuid.uuid4().hex
    if new_id:
        store.set_visitor_id(new_id)

    visitor_id = store.visitor_id()
    click.echo(f"Visitor: {visitor_id or '(anonymous)'}")
    profile = store.profile()
    if profile:
        click.echo(f"Profile: {profile.get('name') or profile.get('email') or '(unnamed)'}")
        click.echo(f"Saved sermons: {len(profile.get('savedSermons') or [])}")
    click.echo(f"Watched sermons: {len(store.watched())}")


@main.command()
@click.pass_obj
def watch(config):
    """Poll events and sermons, printing changes as they arrive."""
    api = workflows.get_api(config)
    cache = workflows.get_cache(config)
    poller = Poller(cache, interval=config.refetch_interval)
    seen: dict[str, int] = {}

    def report(key: str):
        def on_result(result) -> None:
            if result.error:
                click.echo(f"[{key}] fetch failed: {result.error}", err=True)
                return
            if seen.get(key) != len(result.data):
                seen[key] = len(result.data)
                click.echo(f"[{key}] {len(result.data)} records")
        return on_result

    def report_events(result) -> None:
        report("events")(result)
        view = workflows.load_events(api, cache, workflows.current_time(config))
        event = featured_event(view.buckets)
        if event is not None:
            click.echo(f"[events] featured: {event.title} ({event.format_when()})")

    poller.register("events", api.list_events, report_events)
    poller.register("sermons", api.list_sermons, report("sermons"))
    click.echo("Press Ctrl+C to stop")
    try:
        poller.start()
    except KeyboardInterrupt:
        poller.stop()
        click.echo("\nStopped.")


# ============== About ==============


@main.command()
@click.pass_obj
def pastors(config):
    """List the pastoral team."""
    try:
        team = order_pastors(workflows.get_api(config).list_pastors())
    except ApiError as e:
        _fail(str(e))
    for p in team:
        lead = " (lead)" if p.is_lead else ""
        click.echo(f"{p.name}{lead} - {p.title}  <{p.email}>  id={p.id}")


@main.command()
@click.option("--category", default=None, help="Only this category")
@click.pass_obj
def gallery(config, category: str | None):
    """List gallery images."""
    try:
        images = filter_gallery(workflows.get_api(config).list_gallery(), category)
    except ApiError as e:
        _fail(str(e))
    if not images:
        click.echo("No images.")
    for image in images:
        click.echo(f"[{image.category:9}] {image.title}  {image.image_url or ''}  id={image.id}")


# ============== Admin ==============


@main.group()
def admin():
    """Manage events, sermons, pastors, gallery and notifications."""


@admin.command()
@click.pass_obj
def dashboard(config):
    """Show the admin dashboard summary."""
    api = workflows.get_api(config)
    summary = workflows.load_dashboard(api, workflows.get_cache(config), workflows.current_time(config))
    for error in summary.errors:
        click.echo(f"(Unavailable: {error})", err=True)

    click.echo(f"Upcoming events:      {summary.upcoming_events}")
    click.echo(f"Unread notifications: {summary.unread_notifications}")
    click.echo(f"Subscribers:          {summary.subscribers} ({summary.reminders} want reminders)")
    if summary.lead_pastor is not None:
        click.echo(f"Lead pastor:          {summary.lead_pastor.name}")


def _admin_call(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except FormValidationError as e:
        for field_name, message in e.errors.items():
            click.echo(f"Invalid {field_name}: {message}", err=True)
        sys.exit(1)
    except (ApiError, OSError) as e:
        _fail(str(e))


_image_option = click.option("--image", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                             default=None, help="Image file to upload")


def _event_options(fn):
    for option in reversed([
        click.option("--title", required=True),
        click.option("--description", required=True),
        click.option("--date", "date_", required=True, help="YYYY-MM-DD"),
        click.option("--time", "time_", required=True, help="HH:MM, 24h"),
        click.option("--location", required=True),
        click.option("--speaker", default=""),
        click.option("--category", default="general"),
        click.option("--thumbnail-url", default=""),
        _image_option,
    ]):
        fn = option(fn)
    return fn


def _event_data(kw: dict) -> dict:
    return {
        "title": kw["title"],
        "description": kw["description"],
        "date": kw["date_"],
        "time": kw["time_"],
        "location": kw["location"],
        "speaker": kw["speaker"],
        "category": kw["category"],
        "thumbnailUrl": kw["thumbnail_url"],
    }


@admin.command("event-add")
@_event_options
@click.pass_obj
def event_add(config, image, **kw):
    """Create an event."""
    result = _admin_call(workflows.create_event, workflows.get_api(config), _event_data(kw), image)
    click.echo(f"Event created successfully! ({len(result)} events)")


@admin.command("event-update")
@click.argument("event_id")
@_event_options
@click.pass_obj
def event_update(config, event_id: str, image, **kw):
    """Update an event."""
    _admin_call(workflows.update_event, workflows.get_api(config), event_id, _event_data(kw), image)
    click.echo("Event updated successfully!")


@admin.command("event-delete")
@click.argument("event_id")
@click.pass_obj
def event_delete(config, event_id: str):
    """Delete an event."""
    _admin_call(workflows.get_api(config).delete_event, event_id)
    click.echo("Event deleted successfully!")


def _sermon_options(fn):
    for option in reversed([
        click.option("--title", required=True),
        click.option("--speaker", required=True),
        click.option("--date", "date_", required=True, help="YYYY-MM-DD"),
        click.option("--description", required=True),
        click.option("--video-url", default=""),
        click.option("--audio-url", default=""),
        click.option("--thumbnail-url", default=""),
        click.option("--scripture", default=""),
        click.option("--series", default=""),
        click.option("--live/--not-live", default=False),
        _image_option,
    ]):
        fn = option(fn)
    return fn


def _sermon_data(kw: dict) -> dict:
    return {
        "title": kw["title"],
        "speaker": kw["speaker"],
        "date": kw["date_"],
        "description": kw["description"],
        "videoUrl": kw["video_url"],
        "audioUrl": kw["audio_url"],
        "thumbnailUrl": kw["thumbnail_url"],
        "scripture": kw["scripture"],
        "series": kw["series"],
        "isLive": kw["live"],
    }


@admin.command("sermon-add")
@_sermon_options
@click.pass_obj
def sermon_add(config, image, **kw):
    """Create a sermon."""
    _admin_call(workflows.create_sermon, workflows.get_api(config), _sermon_data(kw), image)
    click.echo("Sermon created successfully!")


@admin.command("sermon-update")
@click.argument("sermon_id")
@_sermon_options
@click.pass_obj
def sermon_update(config, sermon_id: str, image, **kw):
    """Update a sermon."""
    _admin_call(workflows.update_sermon, workflows.get_api(config), sermon_id, _sermon_data(kw), image)
    click.echo("Sermon updated successfully!")


@admin.command("sermon-delete")
@click.argument("sermon_id")
@click.pass_obj
def sermon_delete(config, sermon_id: str):
    """Delete a sermon."""
    _admin_call(workflows.get_api(config).delete_sermon, sermon_id)
    click.echo("Sermon deleted successfully!")


def _pastor_options(fn):
    for option in reversed([
        click.option("--name", required=True),
        click.option("--title", required=True),
        click.option("--bio", required=True),
        click.option("--email", required=True),
        click.option("--lead/--not-lead", default=False),
        click.option("--order", default=0, type=int),
        click.option("--image-url", default=""),
        _image_option,
    ]):
        fn = option(fn)
    return fn


def _pastor_data(kw: dict) -> dict:
    return {
        "name": kw["name"],
        "title": kw["title"],
        "bio": kw["bio"],
        "email": kw["email"],
        "isLead": kw["lead"],
        "order": kw["order"],
        "imageUrl": kw["image_url"],
    }


@admin.command("pastor-add")
@_pastor_options
@click.pass_obj
def pastor_add(config, image, **kw):
    """Add a pastor."""
    _admin_call(workflows.create_pastor, workflows.get_api(config), _pastor_data(kw), image)
    click.echo("Pastor added successfully!")


@admin.command("pastor-update")
@click.argument("pastor_id")
@_pastor_options
@click.pass_obj
def pastor_update(config, pastor_id: str, image, **kw):
    """Update a pastor's profile."""
    _admin_call(workflows.update_pastor, workflows.get_api(config), pastor_id, _pastor_data(kw), image)
    click.echo("Pastor updated successfully!")


@admin.command("pastor-delete")
@click.argument("pastor_id")
@click.pass_obj
def pastor_delete(config, pastor_id: str):
    """Remove a pastor."""
    _admin_call(workflows.get_api(config).delete_pastor, pastor_id)
    click.echo("Pastor deleted successfully!")


@admin.command("gallery-add")
@click.option("--title", required=True)
@click.option("--category", required=True)
@click.option("--image-url", default="")
@_image_option
@click.pass_obj
def gallery_add(config, title: str, category: str, image_url: str, image):
    """Add a gallery image."""
    data = {"title": title, "category": category, "imageUrl": image_url}
    _admin_call(workflows.create_gallery_image, workflows.get_api(config), data, image)
    click.echo("Image added to gallery!")


@admin.command("gallery-delete")
@click.argument("image_id")
@click.pass_obj
def gallery_delete(config, image_id: str):
    """Delete a gallery image."""
    _admin_call(workflows.get_api(config).delete_gallery_image, image_id)
    click.echo("Image deleted successfully!")


@admin.command()
@click.option("--archived", is_flag=True, help="Show archived notifications")
@click.pass_obj
def notifications(config, archived: bool):
    """List notifications."""
    result = workflows.load_notifications(workflows.get_api(config), workflows.get_cache(config))
    if result.error:
        _fail(f"Failed to fetch notifications: {result.error}")

    items = archived_notifications(result.data) if archived else unread_notifications(result.data)
    click.echo(f"{len(unread_notifications(result.data))} unread, "
               f"{len(archived_notifications(result.data))} archived\n")
    for n in items:
        click.echo(f"[{n.type:8}] {n.title} - {n.description}  ({n.created_at[:10]}) id={n.id}")


@admin.command("notification-archive")
@click.argument("notification_id")
@click.pass_obj
def notification_archive(config, notification_id: str):
    """Archive a notification."""
    _admin_call(workflows.get_api(config).archive_notification, notification_id)
    click.echo("Notification archived.")


@admin.command("notification-delete")
@click.argument("notification_id")
@click.pass_obj
def notification_delete(config, notification_id: str):
    """Delete a notification."""
    _admin_call(workflows.get_api(config).delete_notification, notification_id)
    click.echo("Notification deleted.")


@admin.command("notifications-unarchive")
@click.pass_obj
def notifications_unarchive(config):
    """Unarchive every notification."""
    _admin_call(workflows.get_api(config).unarchive_notifications)
    click.echo("All notifications unarchived.")


@admin.command("notifications-clear")
@click.confirmation_option(prompt="Delete every notification?")
@click.pass_obj
def notifications_clear(config):
    """Delete every notification."""
    _admin_call(workflows.get_api(config).clear_notifications)
    click.echo("All notifications cleared.")


@admin.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--reminders", is_flag=True, help="Only subscribers who want event reminders")
@click.pass_obj
def subscribers(config, reminders: bool, as_json: bool):
    """List newsletter subscribers."""
    subs = _admin_call(workflows.get_api(config).list_subscribers)
    if reminders:
        subs = subscribers_with_reminders(subs)
    if as_json:
        click.echo(json.dumps([asdict(s) for s in subs], indent=2))
        return
    if not subs:
        click.echo("No subscribers yet.")
    for s in subs:
        banned = " [banned]" if s.banned else ""
        click.echo(f"{s.name:24} {s.email}{banned}")


@admin.command()
@click.option("--subject", required=True)
@click.option("--message", required=True)
@click.pass_obj
def broadcast(config, subject: str, message: str):
    """Send a newsletter to every subscriber."""
    _, count = _admin_call(workflows.send_broadcast, workflows.get_api(config), subject, message)
    click.echo(f'Broadcast Sent! Message with subject "{subject}" sent to {count} users.')


if __name__ == "__main__":
    main()
