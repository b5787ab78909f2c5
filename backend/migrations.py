import logging

from sqlalchemy import inspect, text

from database import Base

logger = logging.getLogger(__name__)

# (table, index name, columns, id aggregate kept per duplicate group)
UNIQUE_PAIR_INDEXES = [
    ("post_likes", "uq_post_likes_post_user", ("post_id", "user_id"), "MIN"),
    ("event_attendees", "uq_event_attendees_event_user", ("event_id", "user_id"), "MAX"),
]


def _table_exists(conn, table_name: str) -> bool:
    return inspect(conn).has_table(table_name)


def _column_exists(conn, table_name: str, column_name: str) -> bool:
    columns = inspect(conn).get_columns(table_name)
    return any(column["name"] == column_name for column in columns)


def ensure_tables(engine):
    Base.metadata.create_all(bind=engine)


def ensure_post_columns(engine):
    with engine.begin() as conn:
        if not _table_exists(conn, "posts"):
            return
        if not _column_exists(conn, "posts", "title"):
            conn.execute(text("ALTER TABLE posts ADD COLUMN title VARCHAR(255)"))
        if not _column_exists(conn, "posts", "location"):
            conn.execute(text("ALTER TABLE posts ADD COLUMN location VARCHAR(255)"))


def ensure_user_profile_columns(engine):
    with engine.begin() as conn:
        if not _table_exists(conn, "users"):
            return
        if not _column_exists(conn, "users", "bio"):
            conn.execute(text("ALTER TABLE users ADD COLUMN bio TEXT"))
        if not _column_exists(conn, "users", "location"):
            conn.execute(text("ALTER TABLE users ADD COLUMN location VARCHAR(255)"))


def dedupe_pair_rows(engine, table_name: str, columns, keep: str = "MIN") -> int:
    """Delete duplicate rows for a column pair, keeping the MIN (oldest) or MAX (latest) id."""
    if keep not in {"MIN", "MAX"}:
        raise ValueError("keep must be MIN or MAX")
    group_by = ", ".join(columns)
    with engine.begin() as conn:
        if not _table_exists(conn, table_name):
            return 0
        result = conn.execute(
            text(
                f"""
                DELETE FROM {table_name}
                WHERE id NOT IN (
                    SELECT kept_id FROM (
                        SELECT {keep}(id) AS kept_id FROM {table_name} GROUP BY {group_by}
                    ) AS kept
                )
                """
            )
        )
        removed = result.rowcount or 0
    if removed:
        logger.warning("Removed %s duplicate rows from %s", removed, table_name)
    return removed


def ensure_unique_pair_indexes(engine):
    for table_name, index_name, columns, keep in UNIQUE_PAIR_INDEXES:
        dedupe_pair_rows(engine, table_name, columns, keep=keep)
        with engine.begin() as conn:
            if not _table_exists(conn, table_name):
                continue
            conn.execute(
                text(
                    f"CREATE UNIQUE INDEX IF NOT EXISTS {index_name} "
                    f"ON {table_name} ({', '.join(columns)})"
                )
            )
    with engine.begin() as conn:
        # Superseded by the unique index on the same pair.
        conn.execute(text("DROP INDEX IF EXISTS idx_event_attendees_event_user"))
