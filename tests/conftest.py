import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings create their directories at import time; keep them out of $HOME.
os.environ.setdefault("TASKDESK_DATA_DIR", tempfile.mkdtemp(prefix="taskdesk-tests-"))

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from services.categories import CategoryService
from services.importer import ImportService
from services.tasks import TaskService
from storage.db import init_db


def _memory_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def engine_factory():
    engines = []

    def _make():
        engine = _memory_engine()
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.dispose()


@pytest.fixture
def engine(engine_factory):
    return engine_factory()


@pytest.fixture
def session_factory(engine):
    return lambda: Session(engine)


@pytest.fixture
def task_service(session_factory):
    return TaskService(session_factory=session_factory)


@pytest.fixture
def category_service(session_factory):
    return CategoryService(session_factory=session_factory)


@pytest.fixture
def importer(task_service, category_service):
    return ImportService(task_service, category_service)
