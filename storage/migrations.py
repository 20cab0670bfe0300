"""Ad-hoc database migrations for TaskDesk."""

from __future__ import annotations

from sqlalchemy import text

from models.category import DEFAULT_CATEGORIES, DEFAULT_COLOR


def _column_exists(conn, table: str, column: str) -> bool:
    result = conn.execute(text(f"PRAGMA table_info('{table}')"))
    return any(row[1] == column for row in result)


def ensure_category_table(conn) -> None:
    conn.execute(
        text(
            f"""
            CREATE TABLE IF NOT EXISTS category (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                color TEXT NOT NULL DEFAULT '{DEFAULT_COLOR}'
            )
            """
        )
    )


def ensure_task_columns(conn) -> None:
    # Databases created before categories and priorities existed.
    columns = {
        "description": "TEXT NOT NULL DEFAULT ''",
        "completed_at": "DATETIME",
        "category_id": "INTEGER REFERENCES category(id) ON DELETE SET NULL",
        "priority": "INTEGER NOT NULL DEFAULT 1",
    }
    for name, ddl_type in columns.items():
        if not _column_exists(conn, "task", name):
            conn.execute(text(f"ALTER TABLE task ADD COLUMN {name} {ddl_type}"))

    conn.execute(text("CREATE INDEX IF NOT EXISTS ix_task_category_id ON task (category_id)"))


def seed_default_categories(conn) -> int:
    count = conn.execute(text("SELECT COUNT(*) FROM category")).scalar_one()
    if count:
        return 0
    for name, color in DEFAULT_CATEGORIES:
        conn.execute(
            text("INSERT INTO category (name, color) VALUES (:name, :color)"),
            {"name": name, "color": color},
        )
    return len(DEFAULT_CATEGORIES)


def run_all(engine) -> None:
    with engine.begin() as conn:
        ensure_category_table(conn)
        ensure_task_columns(conn)
        seed_default_categories(conn)


__all__ = ["run_all", "seed_default_categories"]
