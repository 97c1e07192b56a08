"""Tests for the REST API adapter."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from faithlife.adapters.rest_api import ApiError, RestChurchAPI
from faithlife.config import Config
from faithlife.core.mutations import MutationStatus
from faithlife.core.sermons import Sermon
from faithlife.sermon_store import SermonStore


def response(status_code: int = 200, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = "Error" if status_code >= 400 else "OK"
    resp.content = json.dumps(body).encode() if body is not None else b""
    resp.text = resp.content.decode()
    if body is None:
        resp.json.side_effect = ValueError("no body")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api(session):
    return RestChurchAPI(Config(api_url="https://church.test/"), session=session)


class TestRequests:
    def test_base_url_has_api_prefix(self, api, session):
        session.request.return_value = response(body={"events": []})
        api.list_events()
        session.request.assert_called_once_with("GET", "https://church.test/api/events/all")

    def test_list_events_parses_records(self, api, session):
        session.request.return_value = response(
            body={"events": [{"_id": "e1", "title": "Service", "date": "2025-01-19", "time": "10:00"}]}
        )
        events = api.list_events()
        assert events[0].id == "e1"
        assert events[0].time == "10:00"

    def test_missing_list_key_is_empty(self, api, session):
        session.request.return_value = response(body={})
        assert api.list_sermons() == []

    def test_like_posts_user_id(self, api, session):
        session.request.return_value = response(
            body={"message": "Sermon liked", "sermon": {"_id": "s1", "likes": ["u1", "u2"]}}
        )

        result = api.like_sermon("s1", "u1")

        session.request.assert_called_once_with(
            "POST", "https://church.test/api/sermons/like/sermon/s1", json={"userId": "u1"}
        )
        assert result.message == "Sermon liked"
        assert result.sermon.likes == ["u1", "u2"]

    def test_like_without_sermon(self, api, session):
        session.request.return_value = response(body={"message": "ok"})
        assert api.like_sermon("s1", "u1").sermon is None

    def test_save_returns_profile(self, api, session):
        session.request.return_value = response(
            body={"message": "Saved", "user": {"_id": "p1", "savedSermons": ["s1"]}}
        )
        result = api.save_sermon("s1", "u1")
        assert result.user.saved_sermons == ["s1"]

    def test_malformed_sermon_in_like_reply_raises(self, api, session):
        session.request.return_value = response(body={"message": "ok", "sermon": "s1"})
        with pytest.raises(ApiError, match="Malformed sermon"):
            api.like_sermon("s1", "u1")

    def test_malformed_user_in_save_reply_raises(self, api, session):
        session.request.return_value = response(body={"message": "ok", "user": ["p1"]})
        with pytest.raises(ApiError, match="Malformed user"):
            api.save_sermon("s1", "u1")

    def test_get_sermon_without_record_raises(self, api, session):
        session.request.return_value = response(body={})
        with pytest.raises(ApiError) as exc:
            api.get_sermon("s1")
        assert exc.value.status_code == 404

    def test_update_event_without_list(self, api, session):
        session.request.return_value = response(body={"message": "updated"})
        assert api.update_event("e1", {"title": "X"}) is None

    def test_subscribers_are_normalised(self, api, session):
        session.request.return_value = response(
            body={"subscribers": [{"email": "ruth@example.com"}, {"name": "Boaz", "_id": "b1"}]}
        )
        subs = api.list_subscribers()
        assert subs[0].name == "ruth"
        assert subs[0].id == "ruth@example.com-0"
        assert subs[1].id == "b1"

    def test_broadcast_payload(self, api, session):
        session.request.return_value = response(body={"message": "sent"})
        assert api.broadcast("Hello", "Body", 3) == "sent"
        _, kwargs = session.request.call_args
        assert kwargs["json"] == {"subject": "Hello", "message": "Body", "recipientCount": 3}

    def test_empty_body_is_ok(self, api, session):
        session.request.return_value = response(body=None)
        api.clear_notifications()

    def test_upload_image(self, api, session, tmp_path):
        image = tmp_path / "photo.png"
        image.write_bytes(b"\x89PNG")
        session.request.return_value = response(body={"url": "https://cdn.test/p.png", "public_id": "p"})

        result = api.upload_image("gallery", image)

        assert result == {"url": "https://cdn.test/p.png", "public_id": "p"}
        args, kwargs = session.request.call_args
        assert args == ("POST", "https://church.test/api/gallery/upload/image")
        assert "image" in kwargs["files"]


class TestLikeThroughAdapter:
    def test_malformed_reply_rolls_like_back(self, api, session):
        session.request.return_value = response(body={"message": "ok", "sermon": "s1"})
        toasts = []
        store = SermonStore(api, visitor_id="u1", notify=toasts.append)
        store.load([Sermon(id="s1", title="Grace", speaker="Ann", date="2025-01-12")])
        before = store.state

        mutation = store.like("s1")

        assert mutation.status is MutationStatus.ROLLED_BACK
        assert store.state == before
        assert store.state.sermons[0].likes == []
        assert toasts[-1].is_error


class TestErrors:
    def test_error_status_raises_with_server_message(self, api, session):
        session.request.return_value = response(400, body={"err": "Title is required"})
        with pytest.raises(ApiError, match="Title is required") as exc:
            api.create_event({})
        assert exc.value.status_code == 400

    def test_error_without_body(self, api, session):
        session.request.return_value = response(503, body=None)
        with pytest.raises(ApiError, match="HTTP 503"):
            api.list_events()

    def test_transport_failure_wrapped(self, api, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ApiError, match="refused"):
            api.like_sermon("s1", "u1")
