"""
Per-resource authorization and input checks.

Each helper raises an ApiError subclass; route handlers call them after the
auth gate and before touching state. Validators run before any store access.
"""

from typing import Any, Dict

from flask import request

from backend.errors import ValidationError, AuthorizationError, NotFoundError, ConflictError

MIN_RATING = 1
MAX_RATING = 5
VALID_PLATFORMS = ["facebook", "twitter", "email", "whatsapp", "other"]
VALID_RSVP_STATUSES = ["going", "maybe", "not_going"]

RATING_ERROR = "Rating must be between 1 and 5"
DUPLICATE_COMMENT_ERROR = "You have already commented on this event"
COMMENT_NOT_FOUND_ERROR = "Comment not found or unauthorized"


def json_object_body() -> Dict[str, Any]:
    """
    Return the request's JSON body as a dict. A missing or unparseable body
    counts as empty; any other JSON value (list, string, number) is a 400.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def validate_rating(rating: Any) -> int:
    # bool is an int subclass; True must not pass as a rating of 1.
    if not isinstance(rating, int) or isinstance(rating, bool):
        raise ValidationError(RATING_ERROR)
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(RATING_ERROR)
    return rating


def validate_platform(shared_via: Any) -> str:
    if shared_via not in VALID_PLATFORMS:
        raise ValidationError("Invalid sharing platform", payload={"validPlatforms": VALID_PLATFORMS})
    return shared_via


def validate_rsvp_status(rsvp_status: Any) -> str:
    if rsvp_status not in VALID_RSVP_STATUSES:
        raise ValidationError("Invalid RSVP status", payload={"validStatuses": VALID_RSVP_STATUSES})
    return rsvp_status


def require_event_organizer(cur, event_id: int, user_id: int,
                            message: str = "Not authorized") -> Dict[str, Any]:
    """
    Load an event and make sure user_id organizes it.

    Args:
        cur: Open database cursor.
        event_id (int): Event to check.
        user_id (int): Authenticated caller.
        message (str): Error text for the 403 case.

    Returns:
        dict: The event row.

    Raises:
        NotFoundError: The event does not exist.
        AuthorizationError: The caller is not the organizer.
    """
    cur.execute("SELECT event_id, organizer_id FROM events WHERE event_id = %s;", (event_id,))
    event = cur.fetchone()
    if not event:
        raise NotFoundError("Event not found")
    if event["organizer_id"] != user_id:
        raise AuthorizationError(message)
    return dict(event)


def ensure_no_existing_comment(cur, event_id: int, user_id: int) -> None:
    """
    Reject a second comment by the same user on the same event.
    The UNIQUE (user_id, event_id) constraint still backs this up under races.
    """
    cur.execute(
        "SELECT comment_id FROM event_comments WHERE user_id = %s AND event_id = %s;",
        (user_id, event_id),
    )
    if cur.fetchone():
        raise ConflictError(DUPLICATE_COMMENT_ERROR)


def require_own_comment(cur, comment_id: int, event_id: int, user_id: int) -> Dict[str, Any]:
    """
    Load a comment the caller wrote on this event.

    A comment that does not exist, belongs to another event, or belongs to
    another user all produce the same 404.
    """
    cur.execute(
        """
        SELECT comment_id, user_id, event_id, rating, comment
        FROM event_comments
        WHERE comment_id = %s AND event_id = %s AND user_id = %s;
        """,
        (comment_id, event_id, user_id),
    )
    comment = cur.fetchone()
    if not comment:
        raise NotFoundError(COMMENT_NOT_FOUND_ERROR)
    return dict(comment)
