from services.confirmation import ConfirmationService, always
from services.notifications import NotificationCenter, NotificationType


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_newest_first_and_types():
    center = NotificationCenter(clock=FakeClock())
    center.success("saved")
    center.error("broken")
    center.info("fyi")

    notes = center.notifications
    assert [n.message for n in notes] == ["fyi", "broken", "saved"]
    assert [n.type for n in notes] == [
        NotificationType.INFO,
        NotificationType.ERROR,
        NotificationType.SUCCESS,
    ]
    assert center.latest.message == "fyi"


def test_notifications_expire_after_ttl():
    clock = FakeClock()
    center = NotificationCenter(ttl_sec=5.0, clock=clock)
    center.warning("first")
    clock.now += 3
    center.success("second")

    clock.now += 2.5
    assert [n.message for n in center.notifications] == ["second"]

    clock.now += 3
    assert center.notifications == []
    assert center.latest is None


def test_dismiss_and_clear():
    center = NotificationCenter(clock=FakeClock())
    keep = center.success("keep")
    drop = center.error("drop")
    center.dismiss(drop)
    assert center.notifications == [keep]
    center.clear()
    assert center.notifications == []


def test_subscribers_see_every_post_even_if_one_fails():
    center = NotificationCenter(clock=FakeClock())
    seen = []

    def broken(note):
        raise RuntimeError("ui gone")

    center.subscribe(broken)
    center.subscribe(seen.append)
    center.success("hello")
    assert [n.message for n in seen] == ["hello"]

    center.unsubscribe(seen.append)
    center.success("again")
    assert len(seen) == 1


def test_confirmation_without_handler_says_no():
    answers = []
    ConfirmationService().ask("Delete", "Sure?", answers.append)
    assert answers == [False]


def test_confirmation_routes_to_handler():
    asked = []

    def handler(title, message, on_result):
        asked.append((title, message))
        on_result(True)

    answers = []
    ConfirmationService(handler).ask("Restore", "Continue?", answers.append)
    assert asked == [("Restore", "Continue?")]
    assert answers == [True]

    ConfirmationService(always(False)).ask("x", "y", answers.append)
    assert answers == [True, False]
