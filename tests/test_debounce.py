"""Tests for the debounce controller."""

from suggest.debounce import AsyncioScheduler, DebounceController
from fakes import FakeClock, FakeScheduler


def make_controller(cursor, interval_ms=100, throttle_ms=None):
    fired = []
    scheduler = FakeScheduler()
    clock = FakeClock()
    controller = DebounceController(
        callback=fired.append,
        interval_ms=interval_ms,
        throttle_ms=throttle_ms,
        scheduler=scheduler,
        clock=clock,
        cursor_getter=lambda: cursor[0]
    )
    return controller, scheduler, clock, fired


class TestDebounceController:
    """Test debounce collapsing, cursor stability and throttling."""

    def test_signals_collapse_to_one_fetch(self):
        """Test that N quick signals fire once with the last cursor."""
        cursor = [(3, 4)]
        controller, scheduler, _, fired = make_controller(cursor)

        for col in range(5):
            controller.on_edit_signal((3, col))

        assert len(scheduler.pending) == 1
        assert scheduler.pending[0].delay == 0.1
        scheduler.run_all()
        assert fired == [(3, 4)]
        assert not controller.pending

    def test_cursor_moved_to_other_line(self):
        """Test that a fetch is skipped when the cursor left the line."""
        cursor = [(3, 4)]
        controller, scheduler, _, fired = make_controller(cursor)
        controller.on_edit_signal((3, 4))
        cursor[0] = (4, 4)
        scheduler.run_all()
        assert fired == []

    def test_column_tolerance(self):
        """Test that small column drift still fires but five columns do not."""
        cursor = [(1, 14)]
        controller, scheduler, clock, fired = make_controller(cursor)
        controller.on_edit_signal((1, 10))
        scheduler.run_all()
        assert fired == [(1, 10)]

        clock.advance(1)
        cursor[0] = (1, 15)
        controller.on_edit_signal((1, 10))
        scheduler.run_all()
        assert fired == [(1, 10)]

    def test_throttle(self):
        """Test that no second fetch fires inside the throttle window."""
        cursor = [(1, 0)]
        controller, scheduler, clock, fired = make_controller(cursor, interval_ms=100, throttle_ms=500)

        controller.on_edit_signal((1, 0))
        scheduler.run_all()
        assert len(fired) == 1
        assert controller.throttled

        clock.advance(0.2)
        controller.on_edit_signal((1, 0))
        scheduler.run_all()
        assert len(fired) == 1

        clock.advance(0.4)
        controller.on_edit_signal((1, 0))
        scheduler.run_all()
        assert len(fired) == 2

    def test_throttle_defaults_to_interval(self):
        controller, _, _, _ = make_controller([(1, 0)], interval_ms=250)
        assert controller.throttle_ms == 250

    def test_cancel_and_reset(self):
        """Test that cancel drops the pending timer."""
        cursor = [(1, 0)]
        controller, scheduler, _, fired = make_controller(cursor)
        controller.on_edit_signal((1, 0))
        controller.cancel()
        assert not controller.pending
        assert scheduler.run_all() == 0

        controller.on_edit_signal((1, 0))
        controller.reset()
        assert controller.last_cursor is None
        scheduler.run_all()
        assert fired == []


def test_asyncio_scheduler_without_loop():
    """Test that scheduling outside an event loop is a no-op."""
    scheduler = AsyncioScheduler()
    assert scheduler.call_later(0.1, lambda: None) is None
