from unittest.mock import MagicMock

from backend.database import init_db


def make_conn():
    conn = MagicMock()
    cursor = MagicMock()
    cursor.__enter__.return_value = cursor
    cursor.__exit__.return_value = None
    conn.cursor.return_value = cursor
    return conn, cursor


def test_apply_schema_runs_schema_file():
    conn, cursor = make_conn()

    init_db.apply_schema(conn)

    sql = cursor.execute.call_args[0][0]
    assert "CREATE TABLE IF NOT EXISTS event_comments" in sql
    assert "UNIQUE (user_id, event_id)" in sql
    assert conn.commit.called


def test_missing_tables():
    conn, cursor = make_conn()
    # users exists, everything else missing
    cursor.fetchone.side_effect = [["users"], [None], [None], [None], [None]]

    assert init_db.missing_tables(conn) == [
        "events", "event_participants", "event_comments", "event_shares",
    ]


def test_main_without_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert init_db.main() == 1
