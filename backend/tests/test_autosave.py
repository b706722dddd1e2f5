import threading

from website_admin.editor.autosave import AutosaveScheduler


def test_mutations_inside_the_window_produce_one_save(timers):
    saves = []
    scheduler = AutosaveScheduler(lambda: saves.append("saved"), delay=2.0, timer_factory=timers)

    for _ in range(5):
        scheduler.schedule()

    assert len(timers.created) == 5
    assert len(timers.active) == 1
    assert timers.active[0].interval == 2.0
    assert timers.active[0].daemon is True

    timers.advance()

    assert saves == ["saved"]
    assert not scheduler.pending


def test_superseded_timer_does_nothing_if_it_fires_late(timers):
    saves = []
    scheduler = AutosaveScheduler(lambda: saves.append("saved"), timer_factory=timers)

    scheduler.schedule()
    first = timers.created[0]
    scheduler.schedule()

    # threading.Timer.cancel cannot stop a callback that already started
    first.cancelled = False
    first.fire()
    assert saves == []

    timers.advance()
    assert saves == ["saved"]


def test_cancel_and_close_drop_the_pending_save(timers):
    saves = []
    scheduler = AutosaveScheduler(lambda: saves.append("saved"), timer_factory=timers)

    scheduler.schedule()
    scheduler.cancel()
    timers.advance()
    assert saves == []

    scheduler.schedule()
    scheduler.close()
    timers.advance()
    assert saves == []
    assert scheduler.schedule() is False


def test_disabled_scheduler_never_arms(timers):
    scheduler = AutosaveScheduler(lambda: None, timer_factory=timers, enabled=False)

    assert scheduler.schedule() is False
    assert timers.created == []


def test_saves_never_overlap():
    in_flight = []
    overlaps = []
    release = threading.Event()

    def slow_save():
        if in_flight:
            overlaps.append(True)
        in_flight.append(True)
        release.wait(1)
        in_flight.pop()

    scheduler = AutosaveScheduler(slow_save)
    worker = threading.Thread(target=scheduler.run_exclusive, args=(slow_save,))
    worker.start()

    manual = threading.Thread(target=scheduler.run_exclusive, args=(slow_save,))
    manual.start()

    release.set()
    worker.join(2)
    manual.join(2)

    assert overlaps == []


def test_a_failing_autosave_is_logged_not_raised(timers, caplog):
    def boom():
        raise RuntimeError("disk full")

    scheduler = AutosaveScheduler(boom, timer_factory=timers)
    scheduler.schedule()
    timers.advance()

    assert "Autosave raised unexpectedly" in caplog.text
