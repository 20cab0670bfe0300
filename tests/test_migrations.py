from datetime import datetime

from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from core.priorities import Priority
from services.categories import CategoryService
from services.tasks import TaskService
from storage import migrations
from storage.db import init_db


def _legacy_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE task ("
                "id INTEGER PRIMARY KEY, "
                "title VARCHAR NOT NULL, "
                "is_completed BOOLEAN NOT NULL DEFAULT 0, "
                "created_at DATETIME NOT NULL)"
            )
        )
        conn.execute(
            text("INSERT INTO task (title, is_completed, created_at) VALUES ('Old task', 0, '2023-01-01 08:00:00')")
        )
    return engine


def _columns(engine, table):
    with engine.connect() as conn:
        return {row[1] for row in conn.execute(text(f"PRAGMA table_info('{table}')"))}


def test_legacy_task_table_gains_columns():
    engine = _legacy_engine()
    init_db(engine)

    assert {"description", "completed_at", "category_id", "priority"} <= _columns(engine, "task")

    tasks = TaskService(session_factory=lambda: Session(engine))
    (task,) = tasks.list_all()
    assert task.title == "Old task"
    assert task.description == ""
    assert task.priority == Priority.MEDIUM
    assert task.category_id is None
    assert task.created_at == datetime(2023, 1, 1, 8, 0, 0)
    engine.dispose()


def test_migrations_are_idempotent():
    engine = _legacy_engine()
    init_db(engine)
    init_db(engine)
    migrations.run_all(engine)

    categories = CategoryService(session_factory=lambda: Session(engine))
    assert len(categories.list()) == 6
    engine.dispose()


def test_seed_skips_non_empty_table(engine):
    with engine.begin() as conn:
        assert migrations.seed_default_categories(conn) == 0


def test_seed_fills_empty_table(engine):
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM category"))
        assert migrations.seed_default_categories(conn) == 6
