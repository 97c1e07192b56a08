"""Tests for admin form validation."""

import pytest

from faithlife.core.forms import (
    FormValidationError,
    validate_broadcast,
    validate_event_form,
    validate_gallery_form,
    validate_pastor_form,
    validate_sermon_form,
)


@pytest.fixture
def event_data():
    return {
        "title": "Community Picnic",
        "description": "Bring a dish",
        "date": "2025-06-01",
        "time": "13:00",
        "location": "Park",
    }


class TestEventForm:
    def test_valid_defaults_category(self, event_data):
        payload = validate_event_form(event_data)
        assert payload["category"] == "general"
        assert payload["speaker"] == ""

    def test_reports_all_errors(self):
        with pytest.raises(FormValidationError) as exc:
            validate_event_form({"date": "01/06/2025", "time": "25:00"})
        errors = exc.value.errors
        assert errors["title"] == "Title is required"
        assert errors["date"] == "Invalid date format"
        assert errors["time"] == "Invalid time format"
        assert "location" in errors

    def test_title_too_long(self, event_data):
        with pytest.raises(FormValidationError, match="Title is too long"):
            validate_event_form({**event_data, "title": "x" * 101})

    def test_bad_category(self, event_data):
        with pytest.raises(FormValidationError) as exc:
            validate_event_form({**event_data, "category": "party"})
        assert "category" in exc.value.errors

    def test_single_digit_hour_accepted(self, event_data):
        assert validate_event_form({**event_data, "time": "9:30"})["time"] == "9:30"


class TestSermonForm:
    def test_valid(self):
        payload = validate_sermon_form(
            {
                "title": "Grace",
                "speaker": "Ann",
                "date": "2025-01-12",
                "description": "On grace",
                "videoUrl": "https://youtube.com/watch?v=1",
                "isLive": True,
            }
        )
        assert payload["isLive"] is True
        assert payload["audioUrl"] == ""

    def test_bad_urls(self):
        with pytest.raises(FormValidationError) as exc:
            validate_sermon_form(
                {
                    "title": "Grace",
                    "speaker": "Ann",
                    "date": "2025-01-12",
                    "description": "On grace",
                    "videoUrl": "youtube",
                    "audioUrl": "ftp://files/a.mp3",
                }
            )
        assert exc.value.errors == {
            "videoUrl": "Invalid video URL",
            "audioUrl": "Invalid audio URL",
        }


class TestGalleryForm:
    def test_category_required(self):
        with pytest.raises(FormValidationError) as exc:
            validate_gallery_form({"title": "Choir"})
        assert "category" in exc.value.errors

    def test_valid(self):
        payload = validate_gallery_form({"title": "Choir", "category": "Worship"})
        assert payload["category"] == "worship"


class TestPastorForm:
    @pytest.fixture
    def pastor_data(self):
        return {"name": "John", "title": "Lead Pastor", "bio": "Pastor since 2015", "email": "john@church.org"}

    def test_valid_defaults(self, pastor_data):
        payload = validate_pastor_form(pastor_data)
        assert payload["order"] == 0
        assert payload["isLead"] is False

    def test_order_from_string(self, pastor_data):
        assert validate_pastor_form({**pastor_data, "order": "3"})["order"] == 3

    def test_negative_order(self, pastor_data):
        with pytest.raises(FormValidationError) as exc:
            validate_pastor_form({**pastor_data, "order": -1})
        assert exc.value.errors["order"] == "Order must be 0 or greater"

    def test_bad_email(self, pastor_data):
        with pytest.raises(FormValidationError) as exc:
            validate_pastor_form({**pastor_data, "email": "john"})
        assert exc.value.errors["email"] == "Invalid email format"

    def test_bio_too_long(self, pastor_data):
        with pytest.raises(FormValidationError) as exc:
            validate_pastor_form({**pastor_data, "bio": "x" * 1001})
        assert exc.value.errors["bio"] == "Bio is too long"


class TestBroadcast:
    def test_requires_subject_and_message(self):
        with pytest.raises(FormValidationError) as exc:
            validate_broadcast("  ", "")
        assert set(exc.value.errors) == {"subject", "message"}

    def test_strips(self):
        assert validate_broadcast(" Hi ", " Body ") == {"subject": "Hi", "message": "Body"}
