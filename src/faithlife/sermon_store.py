"""Sermon store - applies like/save optimistically and reconciles with the API.

The store owns the SermonState. Every change goes through a reducer from
faithlife.core.mutations; this module only sequences reducers around API
calls.
"""

import logging
from typing import Callable

from .adapters.rest_api import ApiError
from .core.mutations import (
    Mutation,
    MutationKind,
    SermonState,
    Toast,
    apply_fetched_sermons,
    apply_optimistic_like,
    apply_profile,
    apply_server_sermon,
    displayed_sermon,
    pick_initial,
    select_sermon,
)
from .core.sermons import Sermon, VisitorProfile, find_sermon, search_sermons
from .ports import ChurchAPI, VisitorStore

logger = logging.getLogger(__name__)


def _ignore(_toast: Toast) -> None:
    pass


class SermonStore:
    """
    State container for the sermon pages.

    One mutation per kind may be in flight. A second like while a like is
    pending is dropped even for another sermon, but a save may run alongside
    it.
    """

    def __init__(
        self,
        api: ChurchAPI,
        visitor_id: str | None = None,
        visitor_store: VisitorStore | None = None,
        notify: Callable[[Toast], None] | None = None,
        refresh: Callable[[], None] | None = None,
        state: SermonState | None = None,
    ):
        self.api = api
        self.visitor_id = visitor_id
        self.visitor_store = visitor_store
        self.notify = notify or _ignore
        self._refresh = refresh
        self.state = state or SermonState()
        self._in_flight: dict[MutationKind, Mutation] = {}
        self._loaded = False

    @classmethod
    def from_visitor_store(cls, api: ChurchAPI, visitor_store: VisitorStore, **kwargs) -> "SermonStore":
        """Build a store seeded with the visitor's id, profile and watch history."""
        profile = visitor_store.profile()
        state = SermonState(
            profile=VisitorProfile.from_api(profile) if profile else None,
            watched=visitor_store.watched(),
        )
        return cls(
            api,
            visitor_id=visitor_store.visitor_id(),
            visitor_store=visitor_store,
            state=state,
            **kwargs,
        )

    # ============== Reads ==============

    @property
    def displayed(self) -> Sermon | None:
        return displayed_sermon(self.state)

    def is_busy(self, kind: MutationKind) -> bool:
        mutation = self._in_flight.get(kind)
        return mutation is not None and mutation.is_pending

    def search(self, query: str) -> list[Sermon]:
        return search_sermons(self.state.sermons, query)

    def is_liked(self, sermon: Sermon) -> bool:
        return sermon.is_liked_by(self.visitor_id)

    def is_saved(self, sermon: Sermon) -> bool:
        profile = self.state.profile
        return profile is not None and profile.has_saved(sermon.id)

    # ============== Loading ==============

    def load(self, sermons: list[Sermon]) -> None:
        """Apply a fetched sermon list. The first load picks what to display."""
        self.state = apply_fetched_sermons(self.state, sermons)
        if not self._loaded and sermons:
            self.state = pick_initial(self.state)
            self._loaded = True

    def reload(self) -> None:
        """Fetch the full list again. Failures keep the current list."""
        try:
            sermons = self.api.list_sermons()
        except ApiError as e:
            logger.warning(f"Failed to refresh sermons: {e}")
            return
        self.load(sermons)

    def refresh(self) -> None:
        if self._refresh is not None:
            self._refresh()
        else:
            self.reload()

    def select(self, sermon: Sermon) -> None:
        """Display a sermon and remember it as watched."""
        before = self.state.watched
        self.state = select_sermon(self.state, sermon)
        if self.state.watched != before and self.visitor_store is not None:
            self.visitor_store.set_watched(self.state.watched)

    def open_sermon(self, sermon_id: str) -> Sermon | None:
        """Open a sermon by id, falling back to the loaded list if the fetch fails."""
        try:
            sermon = self.api.get_sermon(sermon_id)
        except ApiError as e:
            logger.warning(f"Failed to fetch sermon {sermon_id}: {e}")
            self.notify(
                Toast(
                    "Error loading sermon",
                    "Could not load the requested sermon. Please try again.",
                    variant="destructive",
                )
            )
            sermon = find_sermon(self.state.sermons, sermon_id)
            if sermon is None:
                self.notify(
                    Toast(
                        "Sermon not found",
                        "The requested sermon could not be found.",
                        variant="destructive",
                    )
                )
                return None
        self.select(sermon)
        return sermon

    # ============== Mutations ==============

    def _start(self, kind: MutationKind, sermon_id: str) -> Mutation | None:
        """Check preconditions and open a mutation. None means dropped."""
        mutation = Mutation(kind, sermon_id)
        if not self.visitor_id:
            message = f"You must be signed in to {kind.value} a sermon"
            mutation.reject(message)
            self.notify(Toast(message, variant="destructive"))
            return mutation
        if self.is_busy(kind):
            logger.debug(f"Ignoring {kind.value} on {sermon_id}: one already in flight")
            return None
        mutation.begin(self.state)
        self._in_flight[kind] = mutation
        return mutation

    def _fail(self, mutation: Mutation, error: Exception, title: str) -> None:
        self.state = mutation.roll_back(str(error))
        logger.warning(f"{mutation.kind.value} on {mutation.sermon_id} rolled back: {error}")
        self.notify(Toast(title, str(error), variant="destructive"))

    def like(self, sermon_id: str) -> Mutation | None:
        """
        Toggle the visitor's like on a sermon.

        The toggle shows immediately. A server copy of the sermon replaces it
        on success; any failure restores the state from before the call.
        """
        mutation = self._start(MutationKind.LIKE, sermon_id)
        if mutation is None or not mutation.is_pending:
            return mutation

        try:
            self.state = apply_optimistic_like(self.state, sermon_id, self.visitor_id)
            try:
                result = self.api.like_sermon(sermon_id, self.visitor_id)
            except ApiError as e:
                self._fail(mutation, e, "An error occurred while liking the sermon.")
                return mutation

            mutation.commit()
            logger.info(f"Like on {sermon_id} committed")
            if result.message:
                self.notify(Toast(result.message))
            if result.sermon is not None:
                self.state = apply_server_sermon(self.state, result.sermon)
            else:
                self.refresh()
            return mutation
        finally:
            self._in_flight.pop(MutationKind.LIKE, None)

    def save(self, sermon_id: str) -> Mutation | None:
        """
        Toggle a sermon in the visitor's saved list.

        Nothing changes locally until the server answers; the saved list lives
        on the profile the server sends back.
        """
        mutation = self._start(MutationKind.SAVE, sermon_id)
        if mutation is None or not mutation.is_pending:
            return mutation

        try:
            try:
                result = self.api.save_sermon(sermon_id, self.visitor_id)
            except ApiError as e:
                self._fail(mutation, e, "An error occurred while saving the sermon, please try again!")
                return mutation

            mutation.commit()
            logger.info(f"Save on {sermon_id} committed")
            if result.message:
                self.notify(Toast(result.message))
            if result.user is not None:
                self.state = apply_profile(self.state, result.user)
                if self.visitor_store is not None:
                    self.visitor_store.set_profile(result.user.raw)
            self.refresh()
            return mutation
        finally:
            self._in_flight.pop(MutationKind.SAVE, None)
