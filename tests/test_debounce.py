"""Tests for the debounced position reporter."""

from learnpath.classroom import PositionReporter


class Recorder:
    def __init__(self):
        self.sent = []

    def __call__(self, lesson_id, position):
        self.sent.append((lesson_id, position))


class TestDebounce:
    """Test coalescing of position ticks."""

    def test_burst_sends_once_with_last_position(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, delay=2.0, timer_factory=timers)

        for position in (10, 11, 12, 13, 14):
            reporter.report("l1", position)

        assert send.sent == []
        assert len(timers.active) == 1
        assert timers.last.interval == 2.0
        assert timers.last.daemon is True

        timers.last.fire()
        assert send.sent == [("l1", 14)]
        assert not reporter.has_pending

    def test_stale_timer_does_nothing(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, timer_factory=timers)

        reporter.report("l1", 5)
        first = timers.last
        reporter.report("l1", 6)

        # a cancelled timer thread may still wake up once
        first.function(*first.args)
        assert send.sent == []

        timers.last.fire()
        assert send.sent == [("l1", 6)]

    def test_separate_idle_periods(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, timer_factory=timers)

        reporter.report("l1", 5)
        timers.last.fire()
        reporter.report("l1", 30)
        timers.last.fire()
        assert send.sent == [("l1", 5), ("l1", 30)]


class TestFlushCancel:
    def test_flush_sends_immediately(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, timer_factory=timers)
        reporter.report("l1", 99)

        assert reporter.flush() is True
        assert send.sent == [("l1", 99)]
        assert timers.active == []

        timers.last.function(*timers.last.args)
        assert send.sent == [("l1", 99)]

    def test_flush_without_pending(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, timer_factory=timers)
        assert reporter.flush() is False
        assert send.sent == []

    def test_cancel_discards(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, timer_factory=timers)
        reporter.report("l1", 50)

        reporter.cancel()
        assert reporter.pending is None
        assert timers.active == []
        assert reporter.flush() is False
        assert send.sent == []

    def test_pending_keeps_lesson_of_report(self, timers):
        send = Recorder()
        reporter = PositionReporter(send, timer_factory=timers)
        reporter.report("l1", 7)
        assert reporter.pending == ("l1", 7)
