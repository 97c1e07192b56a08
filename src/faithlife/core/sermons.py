"""Pure sermon domain logic - no I/O dependencies."""

from dataclasses import dataclass, field


def _dedupe(ids: list[str]) -> list[str]:
    """Drop repeated ids, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            result.append(i)
    return result


@dataclass
class Sermon:
    """A sermon record with its liker ids."""

    id: str
    title: str
    speaker: str
    date: str
    description: str = ""
    video_url: str | None = None
    audio_url: str | None = None
    thumbnail_url: str | None = None
    scripture: str | None = None
    series: str | None = None
    is_live: bool = False
    likes: list[str] = field(default_factory=list)
    created_at: str = ""

    def __post_init__(self):
        self.likes = _dedupe(list(self.likes))

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def is_liked_by(self, user_id: str | None) -> bool:
        return bool(user_id) and user_id in self.likes

    def matches(self, query: str) -> bool:
        """Case-insensitive match on title, speaker or series."""
        q = query.lower()
        return (
            q in self.title.lower()
            or q in self.speaker.lower()
            or bool(self.series and q in self.series.lower())
        )

    @classmethod
    def from_api(cls, data: dict) -> "Sermon":
        """Create Sermon from an API record."""
        thumbnail = data.get("thumbnail") or {}
        return cls(
            id=data.get("_id") or data.get("id") or "",
            title=data.get("title", ""),
            speaker=data.get("speaker", ""),
            date=data.get("date") or "",
            description=data.get("description", ""),
            video_url=data.get("videoUrl") or None,
            audio_url=data.get("audioUrl") or None,
            thumbnail_url=thumbnail.get("url") or data.get("thumbnailUrl") or None,
            scripture=data.get("scripture") or None,
            series=data.get("series") or None,
            is_live=bool(data.get("isLive", False)),
            likes=[str(u) for u in data.get("likes") or []],
            created_at=data.get("createdAt") or "",
        )


@dataclass
class VisitorProfile:
    """The server-side user record for a visitor."""

    id: str
    name: str = ""
    email: str = ""
    contact: str = ""
    visitor_id: str = ""
    is_verified: bool = False
    saved_sermons: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    def has_saved(self, sermon_id: str) -> bool:
        return sermon_id in self.saved_sermons

    @classmethod
    def from_api(cls, data: dict) -> "VisitorProfile":
        return cls(
            id=data.get("_id") or data.get("id") or "",
            name=data.get("name") or "",
            email=data.get("email") or "",
            contact=data.get("contact") or "",
            visitor_id=data.get("visitorId") or "",
            is_verified=bool(data.get("isVerified", False)),
            saved_sermons=[str(s) for s in data.get("savedSermons") or []],
            raw=dict(data),
        )


@dataclass
class LikeResult:
    """Server reply to a like toggle. `sermon` is the authoritative record, if sent."""

    message: str
    sermon: Sermon | None = None


@dataclass
class SaveResult:
    """Server reply to a save toggle. `user` is the updated profile, if sent."""

    message: str
    user: VisitorProfile | None = None


def search_sermons(sermons: list[Sermon], query: str) -> list[Sermon]:
    """Filter sermons by query. An empty query returns everything."""
    if not query:
        return list(sermons)
    return [s for s in sermons if s.matches(query)]


def default_sermon(sermons: list[Sermon]) -> Sermon | None:
    """First live sermon, else the first sermon."""
    live = [s for s in sermons if s.is_live]
    if live:
        return live[0]
    return sermons[0] if sermons else None


def find_sermon(sermons: list[Sermon], sermon_id: str) -> Sermon | None:
    return next((s for s in sermons if s.id == sermon_id), None)
