"""
Participants service routes: RSVP to an event, cancel, and record attendance.
Mounted under /api/events/<event_id>/participants.
"""

import logging
from typing import Tuple, Dict, Any

from flask import Blueprint, jsonify, g, Response

from backend.database.db_connection import get_db, row_to_dict
from backend.auth_service.utils import token_required
from backend.auth_service.permissions import (
    json_object_body,
    require_event_organizer,
    validate_rsvp_status,
)
from backend.errors import ApiError, NotFoundError

logger = logging.getLogger(__name__)

participants_bp = Blueprint("participants", __name__)

DEFAULT_RSVP_STATUS = "going"


@participants_bp.route("/", methods=["GET"])
def list_participants(event_id: int) -> Tuple[Response, int]:
    """
    Get all participants of an event, newest first.
    """
    sql = """
        SELECT ep.*, u.name, u.email
        FROM event_participants ep
        JOIN users u ON ep.user_id = u.user_id
        WHERE ep.event_id = %s
        ORDER BY ep.created_at DESC;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                participants = [row_to_dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching participants for event %s", event_id)
        return jsonify({"error": "Error fetching participants"}), 500

    return jsonify(participants), 200


@participants_bp.route("/", methods=["POST"])
@token_required
def register_participation(event_id: int) -> Tuple[Response, int]:
    """
    Register the caller for an event, or change their RSVP status.

    Upsert on (user_id, event_id) so concurrent requests never duplicate.
    `xmax = 0` on the returned row tells a fresh insert from an update.

    Returns:
        201: First registration.
        200: Existing participation updated.
        400: Invalid RSVP status.
        404: Event not found.
    """
    data: Dict[str, Any] = json_object_body()
    rsvp_status = validate_rsvp_status(data.get("rsvp_status", DEFAULT_RSVP_STATUS))

    sql = """
        INSERT INTO event_participants (user_id, event_id, rsvp_status)
        VALUES (%s, %s, %s)
        ON CONFLICT (user_id, event_id)
        DO UPDATE SET rsvp_status = EXCLUDED.rsvp_status
        RETURNING (xmax = 0) AS inserted;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT event_id FROM events WHERE event_id = %s;", (event_id,))
                if not cur.fetchone():
                    raise NotFoundError("Event not found")

                cur.execute(sql, (g.user_id, event_id, rsvp_status))
                result = cur.fetchone()
                conn.commit()
    except ApiError:
        raise
    except Exception:
        logger.exception("Error registering participation for event %s", event_id)
        return jsonify({"error": "Error registering participation"}), 500

    if result["inserted"]:
        return jsonify({"message": "Successfully registered for event"}), 201
    return jsonify({"message": "Participation status updated"}), 200


@participants_bp.route("/<int:user_id>/attendance", methods=["PATCH"])
@token_required
def update_attendance(event_id: int, user_id: int) -> Tuple[Response, int]:
    """
    Mark whether a participant attended. Organizer only.

    Expects JSON: {"attended": bool}

    Returns:
        200: Attendance updated.
        400: `attended` missing or not a boolean.
        403: Caller does not organize this event.
        404: Event or participation not found.
    """
    data: Dict[str, Any] = json_object_body()
    attended = data.get("attended")
    if not isinstance(attended, bool):
        return jsonify({"error": "attended must be true or false"}), 400

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                require_event_organizer(
                    cur, event_id, g.user_id,
                    message="Only event organizers can update attendance",
                )
                cur.execute(
                    "UPDATE event_participants SET attended = %s WHERE user_id = %s AND event_id = %s;",
                    (attended, user_id, event_id),
                )
                if cur.rowcount == 0:
                    raise NotFoundError("Participant not found")
                conn.commit()
    except ApiError:
        raise
    except Exception:
        logger.exception("Error updating attendance for event %s", event_id)
        return jsonify({"error": "Error updating attendance"}), 500

    return jsonify({"message": "Attendance status updated"}), 200


@participants_bp.route("/my-participation", methods=["GET"])
@token_required
def my_participation(event_id: int) -> Tuple[Response, int]:
    """
    Get the caller's participation in this event, or null.
    """
    sql = """
        SELECT ep.*, e.title AS event_title, e.date, e.time, e.location
        FROM event_participants ep
        JOIN events e ON ep.event_id = e.event_id
        WHERE ep.user_id = %s AND ep.event_id = %s;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (g.user_id, event_id))
                participation = cur.fetchone()
    except Exception:
        logger.exception("Error fetching participation for event %s", event_id)
        return jsonify({"error": "Error fetching participation"}), 500

    return jsonify(row_to_dict(participation)), 200


@participants_bp.route("/", methods=["DELETE"])
@token_required
def cancel_participation(event_id: int) -> Tuple[Response, int]:
    """
    Cancel the caller's participation in this event.
    """
    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM event_participants WHERE user_id = %s AND event_id = %s;",
                    (g.user_id, event_id),
                )
                conn.commit()
    except Exception:
        logger.exception("Error cancelling participation for event %s", event_id)
        return jsonify({"error": "Error cancelling participation"}), 500

    return jsonify({"message": "Successfully cancelled participation"}), 200
