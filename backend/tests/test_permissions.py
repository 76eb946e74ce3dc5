import pytest
from unittest.mock import MagicMock

from backend.auth_service.permissions import (
    validate_rating,
    validate_platform,
    validate_rsvp_status,
    require_event_organizer,
    ensure_no_existing_comment,
    json_object_body,
    require_own_comment,
    VALID_PLATFORMS,
)
from backend.errors import ValidationError, AuthorizationError, NotFoundError, ConflictError


@pytest.mark.parametrize("rating", [1, 3, 5])
def test_validate_rating_accepts_range(rating):
    assert validate_rating(rating) == rating


@pytest.mark.parametrize("rating", [0, 6, -1, None, "3", 2.5, True])
def test_validate_rating_rejects(rating):
    with pytest.raises(ValidationError) as exc:
        validate_rating(rating)
    assert exc.value.status_code == 400
    assert exc.value.message == "Rating must be between 1 and 5"


def test_validate_platform():
    assert validate_platform("whatsapp") == "whatsapp"

    with pytest.raises(ValidationError) as exc:
        validate_platform("myspace")
    assert exc.value.to_dict() == {"error": "Invalid sharing platform", "validPlatforms": VALID_PLATFORMS}


def test_validate_rsvp_status():
    assert validate_rsvp_status("maybe") == "maybe"
    with pytest.raises(ValidationError):
        validate_rsvp_status("perhaps")


def test_require_event_organizer_allows_organizer():
    cur = MagicMock()
    cur.fetchone.return_value = {"event_id": 10, "organizer_id": 1}

    event = require_event_organizer(cur, 10, 1)
    assert event["event_id"] == 10


def test_require_event_organizer_forbids_others():
    cur = MagicMock()
    cur.fetchone.return_value = {"event_id": 10, "organizer_id": 1}

    with pytest.raises(AuthorizationError) as exc:
        require_event_organizer(cur, 10, 2, message="Only event organizers can update attendance")
    assert exc.value.status_code == 403
    assert exc.value.message == "Only event organizers can update attendance"


def test_require_event_organizer_missing_event():
    cur = MagicMock()
    cur.fetchone.return_value = None

    with pytest.raises(NotFoundError):
        require_event_organizer(cur, 10, 1)


def test_ensure_no_existing_comment():
    cur = MagicMock()
    cur.fetchone.return_value = None
    ensure_no_existing_comment(cur, 10, 1)

    cur.fetchone.return_value = {"comment_id": 3}
    with pytest.raises(ConflictError) as exc:
        ensure_no_existing_comment(cur, 10, 1)
    assert exc.value.status_code == 400


def test_require_own_comment_conflates_missing_and_foreign():
    cur = MagicMock()
    cur.fetchone.return_value = None

    with pytest.raises(NotFoundError) as exc:
        require_own_comment(cur, 3, 10, 2)
    assert exc.value.message == "Comment not found or unauthorized"

    # The lookup is scoped to the caller, so another user's comment is never loaded
    args, _ = cur.execute.call_args
    assert args[1] == (3, 10, 2)


def test_json_object_body(app):
    with app.test_request_context(json={"rating": 5}):
        assert json_object_body() == {"rating": 5}

    # No body, or a body that is not JSON, reads as empty
    with app.test_request_context():
        assert json_object_body() == {}
    with app.test_request_context(data="not json", content_type="application/json"):
        assert json_object_body() == {}


@pytest.mark.parametrize("body", [["Meetup"], "Meetup", 5])
def test_json_object_body_rejects_other_json(app, body):
    with app.test_request_context(json=body):
        with pytest.raises(ValidationError):
            json_object_body()
