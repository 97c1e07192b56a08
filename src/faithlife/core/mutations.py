"""Sermon state reducers and the optimistic mutation state machine.

Pure logic - no I/O. Reducers never mutate their input; they return a new
SermonState so any earlier state can serve as a rollback snapshot.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from .sermons import Sermon, VisitorProfile, default_sermon


@dataclass(frozen=True)
class SermonState:
    """Everything the sermon pages render from."""

    sermons: list[Sermon] = field(default_factory=list)
    current: Sermon | None = None
    profile: VisitorProfile | None = None
    watched: list[str] = field(default_factory=list)


@dataclass
class Toast:
    """A user-facing notification."""

    title: str
    description: str = ""
    variant: str = "default"  # or "destructive"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class MutationKind(Enum):
    LIKE = "like"
    SAVE = "save"


class MutationStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Mutation:
    """
    One like/save submission.

    IDLE -> PENDING -> COMMITTED | ROLLED_BACK. A submission rejected before
    any request (no visitor id) stays IDLE with `error` set.
    """

    kind: MutationKind
    sermon_id: str
    status: MutationStatus = MutationStatus.IDLE
    snapshot: SermonState | None = None
    error: str | None = None

    def begin(self, snapshot: SermonState) -> None:
        self._require(MutationStatus.IDLE, "begin")
        self.snapshot = snapshot
        self.status = MutationStatus.PENDING

    def commit(self) -> None:
        self._require(MutationStatus.PENDING, "commit")
        self.status = MutationStatus.COMMITTED

    def roll_back(self, error: str) -> SermonState:
        """Mark rolled back and hand back the snapshot to restore."""
        self._require(MutationStatus.PENDING, "roll back")
        self.status = MutationStatus.ROLLED_BACK
        self.error = error
        return self.snapshot

    def reject(self, error: str) -> None:
        self._require(MutationStatus.IDLE, "reject")
        self.error = error

    @property
    def is_pending(self) -> bool:
        return self.status is MutationStatus.PENDING

    def _require(self, expected: MutationStatus, action: str) -> None:
        if self.status is not expected:
            raise RuntimeError(
                f"Cannot {action} {self.kind.value} mutation in state {self.status.value}"
            )


def toggle_like_ids(likes: list[str], user_id: str) -> list[str]:
    """Remove user_id if present, else append it."""
    if user_id in likes:
        return [i for i in likes if i != user_id]
    return [*likes, user_id]


def apply_optimistic_like(state: SermonState, sermon_id: str, user_id: str) -> SermonState:
    """Toggle the visitor's like on the list entry and the displayed sermon."""

    def toggle(s: Sermon) -> Sermon:
        return replace(s, likes=toggle_like_ids(s.likes, user_id))

    sermons = [toggle(s) if s.id == sermon_id else s for s in state.sermons]
    current = state.current
    if current is not None and current.id == sermon_id:
        current = toggle(current)
    return replace(state, sermons=sermons, current=current)


def apply_server_sermon(state: SermonState, sermon: Sermon) -> SermonState:
    """Replace the record by id with the server's copy."""
    sermons = [sermon if s.id == sermon.id else s for s in state.sermons]
    current = state.current
    if current is not None and current.id == sermon.id:
        current = sermon
    return replace(state, sermons=sermons, current=current)


def apply_profile(state: SermonState, profile: VisitorProfile) -> SermonState:
    return replace(state, profile=profile)


def apply_fetched_sermons(state: SermonState, sermons: list[Sermon]) -> SermonState:
    """
    Overwrite the list with a fresh fetch.

    The displayed sermon follows its fresh copy when it is still listed.
    """
    current = state.current
    if current is not None:
        current = next((s for s in sermons if s.id == current.id), current)
    return replace(state, sermons=list(sermons), current=current)


def select_sermon(state: SermonState, sermon: Sermon) -> SermonState:
    """Display a sermon and record it as watched."""
    watched = state.watched
    if sermon.id not in watched:
        watched = [*watched, sermon.id]
    return replace(state, current=sermon, watched=watched)


def displayed_sermon(state: SermonState) -> Sermon | None:
    if state.current is not None:
        return state.current
    return state.sermons[0] if state.sermons else None


def pick_initial(state: SermonState) -> SermonState:
    """Show the live (or first) sermon when nothing is displayed yet."""
    if state.current is not None:
        return state
    return replace(state, current=default_sermon(state.sermons))
