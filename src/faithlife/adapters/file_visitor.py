"""File-based visitor storage adapter."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileVisitorStore:
    """
    File-based visitor storage.

    Implements VisitorStore protocol. All keys live in one JSON file; each
    write replaces a whole value and rewrites the file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"Ignoring unreadable visitor file {self.path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _set(self, key: str, value) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))

    def visitor_id(self) -> str | None:
        return self._load().get("visitor_id") or None

    def set_visitor_id(self, visitor_id: str) -> None:
        self._set("visitor_id", visitor_id)

    def profile(self) -> dict | None:
        profile = self._load().get("visitor_profile")
        return profile if isinstance(profile, dict) else None

    def set_profile(self, profile: dict) -> None:
        self._set("visitor_profile", profile)

    def watched(self) -> list[str]:
        watched = self._load().get("watched_sermons")
        return [str(i) for i in watched] if isinstance(watched, list) else []

    def set_watched(self, sermon_ids: list[str]) -> None:
        self._set("watched_sermons", list(sermon_ids))
