"""Tests for the optimistic like/save coordinator."""

from unittest.mock import MagicMock

import pytest

from faithlife.adapters.rest_api import ApiError
from faithlife.core.mutations import MutationKind, MutationStatus, SermonState
from faithlife.core.sermons import LikeResult, SaveResult, Sermon, VisitorProfile
from faithlife.sermon_store import SermonStore


def sermon(sermon_id: str, likes=None, **kwargs) -> Sermon:
    return Sermon(id=sermon_id, title=f"Sermon {sermon_id}", speaker="Ann", date="2025-01-12",
                  likes=list(likes or []), **kwargs)


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def toasts():
    return []


@pytest.fixture
def make_store(api, toasts):
    """Factory for a store with s1 loaded and displayed."""
    def _make(visitor_id="u1", **kwargs) -> SermonStore:
        store = SermonStore(api, visitor_id=visitor_id, notify=toasts.append, **kwargs)
        store.load([sermon("s1"), sermon("s2")])
        return store
    return _make


class TestLike:
    def test_optimistic_state_visible_before_response(self, api, make_store):
        store = make_store()
        seen = {}

        def like_sermon(sermon_id, user_id):
            seen["list"] = store.state.sermons[0].likes
            seen["current"] = store.state.current.likes
            return LikeResult(message="Sermon liked", sermon=sermon("s1", likes=["u1"]))

        api.like_sermon.side_effect = like_sermon

        store.like("s1")

        assert seen == {"list": ["u1"], "current": ["u1"]}
        api.like_sermon.assert_called_once_with("s1", "u1")

    def test_failure_rolls_back_exactly(self, api, make_store, toasts):
        store = make_store()
        before = store.state
        api.like_sermon.side_effect = ApiError("Server down", 500)

        mutation = store.like("s1")

        assert mutation.status is MutationStatus.ROLLED_BACK
        assert store.state is before
        assert store.state.sermons[0].likes == []
        assert store.state.current.likes == []
        assert toasts[-1].is_error

    def test_server_record_overrides_guess(self, api, make_store, toasts):
        store = make_store()
        api.like_sermon.return_value = LikeResult(
            message="Sermon liked", sermon=sermon("s1", likes=["u1", "u2"])
        )

        mutation = store.like("s1")

        assert mutation.status is MutationStatus.COMMITTED
        assert store.state.sermons[0].likes == ["u1", "u2"]
        assert store.state.current.likes == ["u1", "u2"]
        assert toasts[-1].title == "Sermon liked"
        assert not toasts[-1].is_error

    def test_unlike_removes_visitor(self, api, make_store):
        store = make_store()
        store.load([sermon("s1", likes=["u1", "u2"])])
        seen = []
        api.like_sermon.side_effect = lambda sid, uid: seen.append(store.state.sermons[0].likes) or LikeResult("ok")
        store.refresh = MagicMock()

        store.like("s1")

        assert seen == [["u2"]]

    def test_no_record_in_response_triggers_refresh(self, api, make_store):
        refresh = MagicMock()
        store = make_store(refresh=refresh)
        api.like_sermon.return_value = LikeResult(message="ok", sermon=None)

        store.like("s1")

        refresh.assert_called_once()
        # Optimistic guess stands until the refresh lands
        assert store.state.sermons[0].likes == ["u1"]

    def test_default_refresh_reloads_list(self, api, make_store):
        store = make_store()
        api.like_sermon.return_value = LikeResult(message="ok")
        api.list_sermons.return_value = [sermon("s1", likes=["u1", "u7"])]

        store.like("s1")

        assert store.state.sermons[0].likes == ["u1", "u7"]

    def test_no_visitor_rejects_without_request(self, api, make_store, toasts):
        store = make_store(visitor_id=None)
        before = store.state

        mutation = store.like("s1")

        assert mutation.status is MutationStatus.IDLE
        assert mutation.error == "You must be signed in to like a sermon"
        api.like_sermon.assert_not_called()
        assert store.state is before
        assert toasts[-1].is_error

    def test_like_on_another_sermon_while_pending_is_dropped(self, api, make_store):
        store = make_store()
        nested = {}

        def like_sermon(sermon_id, user_id):
            nested["like"] = store.like("s2")
            return LikeResult("ok", sermon=sermon(sermon_id, likes=["u1"]))

        api.like_sermon.side_effect = like_sermon

        store.like("s1")

        assert nested["like"] is None
        assert api.like_sermon.call_count == 1
        assert store.state.sermons[1].likes == []
        assert not store.is_busy(MutationKind.LIKE)

    def test_save_allowed_while_like_pending(self, api, make_store):
        store = make_store()
        nested = {}

        def like_sermon(sermon_id, user_id):
            assert store.is_busy(MutationKind.LIKE)
            nested["save"] = store.save("s1")
            return LikeResult("ok", sermon=sermon(sermon_id, likes=["u1"]))

        api.like_sermon.side_effect = like_sermon
        api.save_sermon.return_value = SaveResult("Saved")
        store.refresh = MagicMock()

        store.like("s1")

        assert nested["save"].status is MutationStatus.COMMITTED

    def test_busy_flag_cleared_after_failure(self, api, make_store):
        store = make_store()
        api.like_sermon.side_effect = ApiError("nope")
        store.like("s1")
        assert not store.is_busy(MutationKind.LIKE)


class TestSave:
    def test_save_never_touches_sermon_records(self, api, make_store):
        store = make_store()
        before = store.state.sermons
        seen = {}

        def save_sermon(sermon_id, user_id):
            seen["sermons"] = store.state.sermons
            return SaveResult("Sermon saved", user=VisitorProfile(id="p1", saved_sermons=["s1"]))

        api.save_sermon.side_effect = save_sermon
        store.refresh = MagicMock()

        mutation = store.save("s1")

        assert mutation.status is MutationStatus.COMMITTED
        assert seen["sermons"] is before
        assert store.state.sermons == before
        assert store.state.profile.saved_sermons == ["s1"]
        store.refresh.assert_called_once()

    def test_profile_persisted(self, api, make_store):
        visitor_store = MagicMock()
        store = make_store(visitor_store=visitor_store)
        profile = VisitorProfile.from_api({"_id": "p1", "savedSermons": ["s1"]})
        api.save_sermon.return_value = SaveResult("Saved", user=profile)
        api.list_sermons.return_value = []

        store.save("s1")

        visitor_store.set_profile.assert_called_once_with({"_id": "p1", "savedSermons": ["s1"]})
        assert store.is_saved(sermon("s1"))

    def test_failure_keeps_profile(self, api, make_store, toasts):
        store = make_store(state=SermonState(profile=VisitorProfile(id="p1", saved_sermons=["s2"])))
        before = store.state
        api.save_sermon.side_effect = ApiError("fail")

        mutation = store.save("s1")

        assert mutation.status is MutationStatus.ROLLED_BACK
        assert store.state is before
        assert toasts[-1].is_error

    def test_no_visitor_rejects_without_request(self, api, make_store):
        store = make_store(visitor_id="")
        mutation = store.save("s1")
        assert mutation.error == "You must be signed in to save a sermon"
        api.save_sermon.assert_not_called()


class TestLoadAndOpen:
    def test_first_load_picks_live_sermon(self, api):
        store = SermonStore(api)
        store.load([sermon("s1"), sermon("s2", is_live=True)])
        assert store.displayed.id == "s2"

    def test_later_loads_keep_selection(self, api):
        store = SermonStore(api)
        store.load([sermon("s1"), sermon("s2")])
        store.select(store.state.sermons[1])
        store.load([sermon("s1", is_live=True), sermon("s2")])
        assert store.displayed.id == "s2"

    def test_poll_overwrites_optimistic_state(self, api, make_store):
        store = make_store()
        store.state = SermonState(sermons=[sermon("s1", likes=["u1"])])
        store.load([sermon("s1", likes=[])])
        assert store.state.sermons[0].likes == []

    def test_open_fetches_and_marks_watched(self, api):
        visitor_store = MagicMock()
        store = SermonStore(api, visitor_store=visitor_store)
        api.get_sermon.return_value = sermon("s9")

        opened = store.open_sermon("s9")

        assert opened.id == "s9"
        assert store.displayed.id == "s9"
        assert store.state.watched == ["s9"]
        visitor_store.set_watched.assert_called_once_with(["s9"])

    def test_open_falls_back_to_loaded_list(self, api, make_store, toasts):
        store = make_store()
        api.get_sermon.side_effect = ApiError("timeout")

        opened = store.open_sermon("s2")

        assert opened.id == "s2"
        assert toasts[-1].title == "Error loading sermon"

    def test_open_unknown_sermon(self, api, make_store, toasts):
        store = make_store()
        api.get_sermon.side_effect = ApiError("missing", 404)

        assert store.open_sermon("nope") is None
        assert toasts[-1].title == "Sermon not found"

    def test_reload_failure_keeps_list(self, api, make_store):
        store = make_store()
        api.list_sermons.side_effect = ApiError("down")
        store.reload()
        assert [s.id for s in store.state.sermons] == ["s1", "s2"]

    def test_from_visitor_store(self, api):
        visitor_store = MagicMock()
        visitor_store.visitor_id.return_value = "u5"
        visitor_store.profile.return_value = {"_id": "p1", "savedSermons": ["s3"]}
        visitor_store.watched.return_value = ["s1"]

        store = SermonStore.from_visitor_store(api, visitor_store)

        assert store.visitor_id == "u5"
        assert store.state.profile.saved_sermons == ["s3"]
        assert store.state.watched == ["s1"]
