from outline.notifications import Notifier


def test_listeners_receive_notifications_until_unsubscribed() -> None:
    notifier = Notifier()
    seen = []
    unsubscribe = notifier.subscribe(seen.append)

    notifier.success("Chapter moved")
    unsubscribe()
    unsubscribe()
    notifier.error("Failed to move chapter", "Connection error")

    assert [n.message for n in seen] == ["Chapter moved"]
    assert [n.level for n in notifier.history] == ["success", "error"]
    assert notifier.history[-1].description == "Connection error"


def test_failing_listener_does_not_block_others() -> None:
    notifier = Notifier()
    seen = []
    notifier.subscribe(lambda notification: 1 / 0)
    notifier.subscribe(seen.append)

    notifier.success("Modules order updated")
    assert len(seen) == 1


def test_history_is_bounded() -> None:
    notifier = Notifier(max_history=2)
    for index in range(3):
        notifier.success(f"saved {index}")
    assert [n.message for n in notifier.history] == ["saved 1", "saved 2"]
