"""Tests for the stopwatch engine: anchor-derived elapsed time, laps, formatting."""

import os
import tempfile
import unittest

os.environ.setdefault("TIMEMASTER_HOME", tempfile.mkdtemp(prefix="timemaster_test_"))

from tm.core.clock import ManualClock
from tm.core.scheduler import ManualScheduler
from tm.core.stopwatch import (
    IDLE,
    PAUSED,
    RUNNING,
    Lap,
    StopwatchEngine,
    fastest_and_slowest,
    format_stopwatch,
)


class TestStopwatchEngine(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(1_700_000_000_000)
        self.scheduler = ManualScheduler(on_advance=self.clock.advance)
        self.sw = StopwatchEngine(self.scheduler, clock=self.clock)

    def test_fresh_engine_is_idle(self):
        self.assertEqual(self.sw.state, IDLE)
        self.assertEqual(self.sw.elapsed, 0)
        self.assertEqual(self.sw.laps, [])
        self.assertIsNone(self.sw.anchor)

    def test_start_sets_anchor_and_runs(self):
        self.sw.start()
        self.assertEqual(self.sw.state, RUNNING)
        self.assertEqual(self.sw.anchor, self.clock.now())
        self.assertEqual(len(self.scheduler.pending), 1)

    def test_ticks_recompute_elapsed_from_anchor(self):
        self.sw.start()
        self.scheduler.advance(1234)
        # Last tick landed at 1230, elapsed reflects that tick
        self.assertEqual(self.sw.elapsed, 1230)
        self.assertEqual(self.sw.current_elapsed, 1234)

    def test_pause_freezes_elapsed(self):
        self.sw.start()
        self.scheduler.advance(1234)
        self.sw.pause()
        self.assertEqual(self.sw.state, PAUSED)
        self.assertEqual(self.sw.elapsed, 1234)
        self.assertEqual(self.scheduler.pending, [])

        self.scheduler.advance(10_000)
        self.assertEqual(self.sw.elapsed, 1234)
        self.assertEqual(self.sw.current_elapsed, 1234)

    def test_elapsed_is_sum_of_running_intervals(self):
        self.sw.start()
        self.scheduler.advance(1000)
        self.sw.pause()
        self.scheduler.advance(5000)
        self.sw.start()
        self.scheduler.advance(250)
        self.sw.pause()
        self.scheduler.advance(42)
        self.sw.start()
        self.scheduler.advance(3)
        self.sw.pause()
        self.assertEqual(self.sw.elapsed, 1253)

    def test_dropped_ticks_do_not_drift(self):
        """The clock moves without any tick firing, elapsed still catches up."""
        self.sw.start()
        self.clock.advance(7_777)
        self.sw.pause()
        self.assertEqual(self.sw.elapsed, 7_777)

    def test_start_twice_keeps_one_tick(self):
        self.sw.start()
        self.sw.start()
        self.assertEqual(len(self.scheduler.pending), 1)

    def test_restart_leaves_one_tick(self):
        self.sw.start()
        self.sw.pause()
        self.sw.start()
        self.sw.pause()
        self.sw.start()
        self.assertEqual(len(self.scheduler.pending), 1)

    def test_stale_tick_is_ignored_after_pause(self):
        ticks = []
        self.sw.add_tick_listener(lambda engine: ticks.append(engine.elapsed))
        self.sw.start()
        handle = self.scheduler.pending[0]
        self.sw.pause()
        # Fire the old callback by hand, as if the cancel raced a pending timeout
        handle.callback()
        self.assertEqual(ticks, [])
        self.assertFalse(self.sw.running)

    def test_lap_while_paused_is_noop(self):
        self.sw.start()
        self.scheduler.advance(500)
        self.sw.lap()
        self.sw.pause()
        self.assertIsNone(self.sw.lap())
        self.assertEqual(len(self.sw.laps), 1)

    def test_lap_while_idle_is_noop(self):
        self.assertIsNone(self.sw.lap())
        self.assertEqual(self.sw.laps, [])

    def test_laps_record_split_and_cumulative(self):
        self.sw.start()
        for step in (300, 500, 200):
            self.scheduler.advance(step)
            self.sw.lap()
        laps = self.sw.laps
        self.assertEqual([l.number for l in laps], [1, 2, 3])
        self.assertEqual([l.split for l in laps], [300, 500, 200])
        self.assertEqual([l.cumulative for l in laps], [300, 800, 1000])
        self.assertEqual(sum(l.split for l in laps), laps[-1].cumulative)

    def test_laps_across_pause_keep_invariant(self):
        self.sw.start()
        self.scheduler.advance(120)
        self.sw.lap()
        self.sw.pause()
        self.scheduler.advance(9_000)
        self.sw.start()
        self.scheduler.advance(80)
        self.sw.lap()
        self.scheduler.advance(5)
        self.sw.lap()
        laps = self.sw.laps
        self.assertEqual([l.split for l in laps], [120, 80, 5])
        self.assertEqual(sum(l.split for l in laps), laps[-1].cumulative)

    def test_laps_are_immutable(self):
        lap = Lap(number=1, split=10, cumulative=10)
        with self.assertRaises(AttributeError):
            lap.split = 5

    def test_reset_from_running(self):
        self.sw.start()
        self.scheduler.advance(400)
        self.sw.lap()
        self.sw.reset()
        self.assertEqual(self.sw.state, IDLE)
        self.assertEqual(self.sw.elapsed, 0)
        self.assertEqual(self.sw.laps, [])
        self.assertEqual(self.scheduler.pending, [])

    def test_reset_then_start_counts_from_zero(self):
        self.sw.start()
        self.scheduler.advance(400)
        self.sw.reset()
        self.scheduler.advance(1000)
        self.sw.start()
        self.scheduler.advance(25)
        self.sw.pause()
        self.assertEqual(self.sw.elapsed, 25)

    def test_toggle(self):
        self.sw.toggle()
        self.assertTrue(self.sw.running)
        self.scheduler.advance(60)
        self.sw.toggle()
        self.assertFalse(self.sw.running)
        self.assertEqual(self.sw.elapsed, 60)

    def test_listeners_fire_on_changes_not_ticks(self):
        calls = []
        self.sw.add_listener(lambda engine: calls.append(engine.state))
        self.sw.start()
        self.scheduler.advance(1000)
        self.sw.lap()
        self.sw.pause()
        self.sw.reset()
        self.assertEqual(calls, [RUNNING, RUNNING, PAUSED, IDLE])

    def test_restore_lands_paused(self):
        laps = [Lap(1, 400, 400)]
        self.sw.start()
        self.sw.restore(900, laps)
        self.assertEqual(self.sw.state, PAUSED)
        self.assertEqual(self.sw.elapsed, 900)
        self.assertEqual(self.sw.laps, laps)
        self.assertEqual(self.scheduler.pending, [])

    def test_resume_after_restore_continues_from_elapsed(self):
        self.sw.restore(900, [])
        self.sw.start()
        self.assertEqual(self.sw.anchor, self.clock.now() - 900)
        self.scheduler.advance(100)
        self.sw.pause()
        self.assertEqual(self.sw.elapsed, 1000)


class TestFastestAndSlowest(unittest.TestCase):

    @staticmethod
    def _laps(*splits):
        laps = []
        total = 0
        for i, split in enumerate(splits, start=1):
            total += split
            laps.append(Lap(number=i, split=split, cumulative=total))
        return laps

    def test_no_laps(self):
        self.assertEqual(fastest_and_slowest([]), (-1, -1))

    def test_single_lap(self):
        self.assertEqual(fastest_and_slowest(self._laps(5)), (-1, -1))

    def test_ties_resolve_to_first_occurrence(self):
        self.assertEqual(fastest_and_slowest(self._laps(5, 2, 8, 2)), (1, 2))

    def test_all_equal(self):
        self.assertEqual(fastest_and_slowest(self._laps(3, 3, 3)), (0, 0))

    def test_two_laps(self):
        self.assertEqual(fastest_and_slowest(self._laps(9, 4)), (1, 0))


class TestFormatStopwatch(unittest.TestCase):

    def test_zero(self):
        self.assertEqual(format_stopwatch(0), "00:00:00.00")

    def test_centiseconds_truncate(self):
        self.assertEqual(format_stopwatch(3_723_456), "01:02:03.45")
        self.assertEqual(format_stopwatch(9), "00:00:00.00")
        self.assertEqual(format_stopwatch(59_999), "00:00:59.99")

    def test_hours_widen_past_99(self):
        self.assertEqual(format_stopwatch(100 * 3_600_000), "100:00:00.00")

    def test_negative_clamps(self):
        self.assertEqual(format_stopwatch(-50), "00:00:00.00")


if __name__ == "__main__":
    unittest.main()
