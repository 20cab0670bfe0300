import pytest

from core.errors import ValidationError
from models.category import DEFAULT_CATEGORIES
from storage.db import init_db


def test_defaults_seeded_once(category_service, engine):
    names = sorted(c.name for c in category_service.list())
    assert names == sorted(name for name, _ in DEFAULT_CATEGORIES)
    assert len(names) == 6

    init_db(engine)
    assert len(category_service.list()) == 6


def test_list_is_ordered_by_name(category_service):
    category_service.add("Aardvark", "#000000")
    names = [c.name for c in category_service.list()]
    assert names == sorted(names)
    assert names[0] == "Aardvark"


def test_add_normalizes_color(category_service):
    category = category_service.add("  Garden ", "#a1b2c3")
    assert category.name == "Garden"
    assert category.color == "#A1B2C3"


def test_add_rejects_bad_input(category_service):
    with pytest.raises(ValidationError):
        category_service.add("", "#000000")
    with pytest.raises(ValidationError):
        category_service.add("Ok", "blue")


def test_update(category_service):
    category = category_service.add("Garden", "#00FF00")
    updated = category_service.update(category.id, "Yard", "#0000ff")
    assert updated.name == "Yard"
    assert updated.color == "#0000FF"
    assert category_service.update(9999, "x", "#000000") is None


def test_delete_detaches_tasks(category_service, task_service):
    category = category_service.add("Errands", "#123456")
    ids = [task_service.add(f"Task {n}", category_id=category.id).id for n in range(3)]
    other = task_service.add("Unrelated")

    assert task_service.count_for_category(category.id) == 3
    assert category_service.delete(category.id) is True

    assert category_service.get(category.id) is None
    for task_id in ids:
        task = task_service.get(task_id)
        assert task is not None
        assert task.category_id is None
    assert task_service.get(other.id) is not None
    assert len(task_service.list_all()) == 4


def test_delete_missing(category_service):
    assert category_service.delete(9999) is False


def test_insert_with_id_keeps_identity(category_service):
    category = category_service.insert_with_id(42, "Imported", "#abcdef")
    assert category.id == 42
    assert category_service.get(42).color == "#ABCDEF"
