from datetime import datetime, timedelta

from core.priorities import Priority
from models.task import Task
from services.task_view import (
    FilterStatus,
    SortOption,
    TaskListView,
    apply_view,
    filter_tasks,
    sort_tasks,
)

BASE = datetime(2024, 1, 1, 9, 0)


def _tasks():
    return [
        Task(id=1, title="Buy milk", description="", created_at=BASE, priority=Priority.LOW),
        Task(
            id=2,
            title="Call plumber",
            description="Kitchen MILK pipe",
            created_at=BASE + timedelta(hours=1),
            is_completed=True,
            priority=Priority.HIGH,
        ),
        Task(id=3, title="Write report", description="", created_at=BASE + timedelta(hours=2), category_id=7),
        Task(
            id=4,
            title="alpha task",
            description="",
            created_at=BASE + timedelta(hours=3),
            priority=Priority.HIGH,
        ),
    ]


def _ids(tasks):
    return [t.id for t in tasks]


def test_search_is_case_insensitive_over_title_and_description():
    assert _ids(filter_tasks(_tasks(), search_text="milk")) == [1, 2]
    assert _ids(filter_tasks(_tasks(), search_text="   ")) == [1, 2, 3, 4]


def test_search_is_idempotent():
    once = filter_tasks(_tasks(), search_text="report")
    twice = filter_tasks(once, search_text="report")
    assert _ids(once) == _ids(twice) == [3]


def test_status_and_category_filters():
    assert _ids(filter_tasks(_tasks(), status=FilterStatus.PENDING)) == [1, 3, 4]
    assert _ids(filter_tasks(_tasks(), status=FilterStatus.COMPLETED)) == [2]
    assert _ids(filter_tasks(_tasks(), category_id=7)) == [3]


def test_date_sorts_are_reverses():
    newest = sort_tasks(_tasks(), SortOption.DATE_DESCENDING)
    oldest = sort_tasks(_tasks(), SortOption.DATE_ASCENDING)
    assert _ids(newest) == [4, 3, 2, 1]
    assert _ids(oldest) == list(reversed(_ids(newest)))


def test_title_sort_is_ordinal():
    # uppercase sorts before lowercase
    assert _ids(sort_tasks(_tasks(), SortOption.TITLE_ASCENDING)) == [1, 2, 3, 4]
    assert _ids(sort_tasks(_tasks(), SortOption.TITLE_DESCENDING)) == [4, 3, 2, 1]


def test_status_ties_keep_newest_first():
    assert _ids(sort_tasks(_tasks(), SortOption.STATUS_ASCENDING)) == [4, 3, 1, 2]
    assert _ids(sort_tasks(_tasks(), SortOption.STATUS_DESCENDING)) == [2, 4, 3, 1]


def test_priority_sorts():
    assert _ids(sort_tasks(_tasks(), SortOption.PRIORITY_HIGH_FIRST)) == [4, 2, 3, 1]
    assert _ids(sort_tasks(_tasks(), SortOption.PRIORITY_LOW_FIRST)) == [1, 3, 4, 2]


def test_apply_view_filters_then_sorts():
    result = apply_view(
        _tasks(),
        search_text="i",
        status=FilterStatus.PENDING,
        sort=SortOption.DATE_ASCENDING,
    )
    assert _ids(result) == [1, 3]


def test_labels_round_trip_with_defaults():
    assert FilterStatus.from_label("Completed") is FilterStatus.COMPLETED
    assert FilterStatus.from_label("bogus") is FilterStatus.ALL
    assert SortOption.from_label("Title (Z-A)") is SortOption.TITLE_DESCENDING
    assert SortOption.from_label(None) is SortOption.DATE_DESCENDING


def test_view_notifies_and_replaces_items():
    view = TaskListView(_tasks())
    received = []
    view.subscribe(received.append)

    view.set_status_filter("Completed")
    assert _ids(view.items) == [2]
    assert _ids(received[-1]) == [2]

    view.set_status_filter(FilterStatus.ALL)
    view.set_sort_option("Oldest First")
    assert _ids(view.items) == [1, 2, 3, 4]
    assert len(received) == 3


def test_selection_cleared_when_filtered_out():
    view = TaskListView(_tasks())
    assert view.select(3).id == 3

    view.set_search_text("report")
    assert view.selected_id == 3

    view.set_search_text("milk")
    assert view.selected_id is None
    assert view.selected is None

    view.set_search_text("")
    assert view.selected_id is None


def test_select_unknown_clears_selection():
    view = TaskListView(_tasks())
    view.select(1)
    assert view.select(99) is None
    assert view.selected_id is None


def test_selection_survives_reload_of_same_task():
    view = TaskListView(_tasks())
    view.select(2)
    view.set_tasks(_tasks())
    assert view.selected.id == 2
    view.set_tasks([t for t in _tasks() if t.id != 2])
    assert view.selected_id is None
