"""
Events service routes: create, read, update and delete events.
Only an event's organizer may update or delete it.
"""

import logging
from datetime import date, time
from typing import Tuple, Dict, Any, Optional

from flask import Blueprint, jsonify, g, Response

from backend.database.db_connection import get_db, row_to_dict
from backend.auth_service.utils import token_required
from backend.auth_service.permissions import json_object_body, require_event_organizer
from backend.errors import ApiError, ValidationError

logger = logging.getLogger(__name__)

events_bp = Blueprint("events", __name__)

# --- CONSTANTS FOR VALIDATION ---
TITLE_MAX_LENGTH = 200
UPDATABLE_FIELDS = ["title", "description", "date", "time", "location"]


def parse_date(val: Optional[str]) -> Optional[date]:
    """
    Parse a 'YYYY-MM-DD' string. Returns None if invalid.
    """
    try:
        return date.fromisoformat(val)
    except (ValueError, TypeError):
        return None


def parse_time(val: Optional[str]) -> Optional[time]:
    """
    Parse an 'HH:MM' or 'HH:MM:SS' string. Returns None if invalid.
    """
    try:
        return time.fromisoformat(val)
    except (ValueError, TypeError):
        return None


def validate_event_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check the event fields present in `data` and return them normalized.

    Raises:
        ValidationError: On an empty/oversized title or a malformed date/time.
    """
    fields = {key: data[key] for key in UPDATABLE_FIELDS if key in data}

    if "title" in fields:
        title = fields["title"]
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required")
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(f"Title must be {TITLE_MAX_LENGTH} characters or less.")

    if fields.get("date") is not None:
        parsed = parse_date(fields["date"])
        if parsed is None:
            raise ValidationError("Invalid date format. Use YYYY-MM-DD.")
        fields["date"] = parsed

    if fields.get("time") is not None:
        parsed = parse_time(fields["time"])
        if parsed is None:
            raise ValidationError("Invalid time format. Use HH:MM.")
        fields["time"] = parsed

    return fields


@events_bp.route("/", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return all events with organizer name and participant count,
    ordered by date and time.

    Returns:
        200: List of event objects.
        500: Database error.
    """
    sql = """
        SELECT
            e.event_id AS id, e.title, e.description, e.date, e.time,
            e.location, e.organizer_id, e.created_at,
            u.name AS organizer_name,
            COUNT(DISTINCT ep.participation_id) AS participant_count
        FROM events e
        LEFT JOIN users u ON e.organizer_id = u.user_id
        LEFT JOIN event_participants ep ON e.event_id = ep.event_id
        GROUP BY e.event_id, u.name
        ORDER BY e.date, e.time;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                rows = [row_to_dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching events")
        return jsonify({"error": "Error fetching events"}), 500

    return jsonify(rows), 200


@events_bp.route("/<int:event_id>", methods=["GET"])
def get_event(event_id: int) -> Tuple[Response, int]:
    """
    Get a single event with its participants and comments.

    Returns:
        200: Event object with `participants` and `comments` lists.
        404: Event not found.
        500: Database error.
    """
    event_sql = """
        SELECT
            e.event_id AS id, e.title, e.description, e.date, e.time,
            e.location, e.organizer_id, e.created_at,
            u.name AS organizer_name
        FROM events e
        LEFT JOIN users u ON e.organizer_id = u.user_id
        WHERE e.event_id = %s;
    """
    participants_sql = """
        SELECT u.user_id AS id, u.name, ep.rsvp_status, ep.attended
        FROM event_participants ep
        JOIN users u ON ep.user_id = u.user_id
        WHERE ep.event_id = %s;
    """
    comments_sql = """
        SELECT ec.comment_id AS id, ec.user_id, ec.event_id, ec.rating,
               ec.comment, ec.created_at, u.name AS user_name
        FROM event_comments ec
        JOIN users u ON ec.user_id = u.user_id
        WHERE ec.event_id = %s
        ORDER BY ec.created_at DESC;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(event_sql, (event_id,))
                event = cur.fetchone()
                if not event:
                    return jsonify({"error": "Event not found"}), 404

                cur.execute(participants_sql, (event_id,))
                participants = [row_to_dict(r) for r in cur.fetchall()]

                cur.execute(comments_sql, (event_id,))
                comments = [row_to_dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching event %s", event_id)
        return jsonify({"error": "Error fetching event"}), 500

    event_dict = row_to_dict(event)
    event_dict["participants"] = participants
    event_dict["comments"] = comments
    return jsonify(event_dict), 200


@events_bp.route("/", methods=["POST"])
@token_required
def create_event() -> Tuple[Response, int]:
    """
    Create an event organized by the caller.

    Expects JSON with `title` (required) and optional `description`,
    `date` (YYYY-MM-DD), `time` (HH:MM) and `location`.

    Returns:
        201: {"id": int, "message": str}
        400: Validation error.
        401/403: Authentication failure.
        500: Database error.
    """
    data: Dict[str, Any] = json_object_body()

    if not data.get("title"):
        return jsonify({"error": "title is required", "missing": {"title": True}}), 400

    fields = validate_event_fields(data)

    sql = """
        INSERT INTO events (title, description, date, time, location, organizer_id)
        VALUES (%s, %s, %s, %s, %s, %s)
        RETURNING event_id;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    fields["title"],
                    fields.get("description"),
                    fields.get("date"),
                    fields.get("time"),
                    fields.get("location"),
                    g.user_id,
                ))
                new_event = cur.fetchone()
                conn.commit()
    except Exception:
        logger.exception("Error creating event")
        return jsonify({"error": "Error creating event"}), 500

    event_id = new_event["event_id"]
    logger.info("User %s created event %s", g.user_id, event_id)
    return jsonify({"id": event_id, "message": "Event created successfully"}), 201


@events_bp.route("/<int:event_id>", methods=["PUT"])
@token_required
def update_event(event_id: int) -> Tuple[Response, int]:
    """
    Update an event. Only the fields present in the body are changed.

    Permission: the event's organizer.

    Returns:
        200: Confirmation message.
        400: No updatable fields, or validation error.
        403: Caller is not the organizer.
        404: Event not found.
    """
    data: Dict[str, Any] = json_object_body()
    fields = validate_event_fields(data)
    if not fields:
        return jsonify({"error": "No valid fields to update"}), 400

    set_clause = ", ".join(f"{key} = %s" for key in fields)
    values = list(fields.values()) + [event_id]
    sql = f"UPDATE events SET {set_clause} WHERE event_id = %s;"

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                require_event_organizer(cur, event_id, g.user_id)
                cur.execute(sql, values)
                conn.commit()
    except ApiError:
        raise
    except Exception:
        logger.exception("Error updating event %s", event_id)
        return jsonify({"error": "Error updating event"}), 500

    return jsonify({"message": "Event updated successfully"}), 200


@events_bp.route("/<int:event_id>", methods=["DELETE"])
@token_required
def delete_event(event_id: int) -> Tuple[Response, int]:
    """
    Delete an event if the caller is its organizer.
    Participations, comments and shares go with it (ON DELETE CASCADE).
    """
    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                require_event_organizer(cur, event_id, g.user_id)
                cur.execute("DELETE FROM events WHERE event_id = %s;", (event_id,))
                conn.commit()
    except ApiError:
        raise
    except Exception:
        logger.exception("Error deleting event %s", event_id)
        return jsonify({"error": "Error deleting event"}), 500

    logger.info("User %s deleted event %s", g.user_id, event_id)
    return jsonify({"message": "Event deleted successfully"}), 200
