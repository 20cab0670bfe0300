import json
from datetime import datetime

from sqlmodel import Session

from services.categories import CategoryService
from services.importer import ImportService
from services.serialization import CSV_HEADER, encode_backup
from services.tasks import TaskService


def _csv(*rows):
    return "\n".join((CSV_HEADER,) + rows) + "\n"


def test_csv_import_counts_and_skips(importer, task_service):
    text = _csv(
        '1,"First","",False,2024-01-01 10:00:00,,,2',
        '2,"Second, with comma","has ""quotes""",True,2024-01-02 10:00:00,2024-01-03 10:00:00,,0',
        '3,"Third","",False,2024-01-04 10:00:00,,,1',
        '4,"Broken",""',
    )
    result = importer.import_csv_text(text)

    assert result.success is True
    assert result.imported_task_count == 3
    assert result.skipped_task_count == 1
    assert result.total_task_count == 4
    assert result.message == "Imported 3 of 4 tasks"

    titles = sorted(t.title for t in task_service.list_all())
    assert titles == ["First", "Second, with comma", "Third"]
    second = next(t for t in task_service.list_all() if t.title.startswith("Second"))
    assert second.description == 'has "quotes"'
    assert second.completed_at == datetime(2024, 1, 3, 10, 0, 0)


def test_import_keeps_created_at_and_assigns_new_ids(importer, task_service):
    existing = task_service.add("Existing")
    payload = json.dumps(
        [{"id": existing.id, "title": "Incoming", "createdAt": "2023-02-03T04:05:06"}]
    )
    result = importer.import_json_text(payload)

    assert result.imported_task_count == 1
    tasks = task_service.list_all()
    assert len(tasks) == 2
    incoming = next(t for t in tasks if t.title == "Incoming")
    assert incoming.id != existing.id
    assert incoming.created_at == datetime(2023, 2, 3, 4, 5, 6)
    assert task_service.get(existing.id).title == "Existing"


def test_overwrite_replaces_matching_identity(importer, task_service):
    existing = task_service.add("Old title", "old")
    payload = json.dumps(
        [
            {"id": existing.id, "title": "New title", "description": "new", "isCompleted": True},
            {"id": 9999, "title": "Not present"},
        ]
    )
    result = importer.import_json_text(payload, overwrite_existing=True)

    assert result.imported_task_count == 2
    tasks = task_service.list_all()
    assert len(tasks) == 2
    replaced = task_service.get(existing.id)
    assert replaced.title == "New title"
    assert replaced.description == "new"
    assert replaced.is_completed is True
    assert replaced.completed_at is not None
    assert replaced.created_at == existing.created_at


def test_unknown_category_is_cleared(importer, task_service, category_service):
    known = category_service.add("Errands", "#123456")
    payload = json.dumps(
        [
            {"title": "Known", "categoryId": known.id},
            {"title": "Unknown", "categoryId": 9999},
        ]
    )
    importer.import_json_text(payload)
    by_title = {t.title: t for t in task_service.list_all()}
    assert by_title["Known"].category_id == known.id
    assert by_title["Unknown"].category_id is None


def test_invalid_rows_are_skipped_not_fatal(importer, task_service):
    payload = json.dumps([{"title": "x" * 201}, {"title": "   "}, {"title": "Fine"}])
    result = importer.import_json_text(payload)
    assert result.success is True
    assert result.imported_task_count == 1
    assert result.skipped_task_count == 2
    assert [t.title for t in task_service.list_all()] == ["Fine"]


def test_malformed_documents_fail(importer):
    assert importer.import_json_text("{}").success is False
    assert importer.import_csv_text("").message == "CSV file is empty or invalid"
    failed = importer.restore_backup_text("[1, 2]")
    assert failed.success is False
    assert failed.message == "Invalid backup file format"


def test_missing_file_reports_error(importer, tmp_path):
    result = importer.import_json_file(tmp_path / "missing.json")
    assert result.success is False
    assert result.message.startswith("Error importing JSON")
    result = importer.restore_backup_file(tmp_path / "missing.json")
    assert result.message.startswith("Error restoring backup")


def test_csv_file_with_bom(importer, task_service, tmp_path):
    path = tmp_path / "todos.csv"
    path.write_text("\ufeff" + _csv('1,"From file","",False,2024-01-01 10:00:00'), encoding="utf-8")
    result = importer.import_csv_file(path)
    assert result.imported_task_count == 1
    assert task_service.list_all()[0].title == "From file"


def test_backup_restore_into_fresh_store(engine_factory, task_service, category_service):
    errands = category_service.insert_with_id(42, "Errands", "#123456")
    task_service.add("Pick up parcel", category_id=errands.id)
    task_service.add("Loose end")
    text = encode_backup(task_service.list_all(), category_service.list())

    fresh = engine_factory()
    tasks = TaskService(session_factory=lambda: Session(fresh))
    categories = CategoryService(session_factory=lambda: Session(fresh))
    result = ImportService(tasks, categories).restore_backup_text(text)

    assert result.success is True
    assert result.imported_task_count == 2
    # six seeded defaults already exist under the same ids; only Errands is new
    assert result.imported_category_count == 1
    assert result.message == "Restored 2 of 2 tasks and 1 categories"
    assert categories.get(42).name == "Errands"
    parcel = next(t for t in tasks.list_all() if t.title == "Pick up parcel")
    assert parcel.category_id == 42


def test_backup_restore_overwrites_categories(importer, category_service):
    text = json.dumps(
        {
            "version": "1.0",
            "exportDate": "2024-06-01T12:00:00",
            "todos": [],
            "categories": [{"id": 1, "name": "Renamed", "color": "#000000"}],
        }
    )
    result = importer.restore_backup_text(text, overwrite_existing=True)
    assert result.imported_category_count == 1
    assert category_service.get(1).name == "Renamed"


def test_csv_broken_quote_row_skipped_alone(importer, task_service):
    text = _csv(
        '1,"Broken title,desc,False,2024-01-01 10:00:00,,,1',
        '2,"Good two","",False,2024-01-02 10:00:00,,,1',
        '3,"Good three","",False,2024-01-03 10:00:00,,,1',
        '4,"Good four","",False,2024-01-04 10:00:00,,,1',
    )
    result = importer.import_csv_text(text)

    assert result.success is True
    assert result.imported_task_count == 3
    assert result.skipped_task_count == 1
    assert result.total_task_count == 4
    assert sorted(t.title for t in task_service.list_all()) == ["Good four", "Good three", "Good two"]
