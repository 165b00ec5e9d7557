"""Snapshot codecs and startup reconciliation for both engines.

A snapshot is the engine's fields plus ``saved_at``, the wall-clock instant
of the write. On startup the gap between ``saved_at`` and now is credited to a
running stopwatch or debited from a running countdown, and both engines come
back paused.
"""

import json
import math
from dataclasses import dataclass, field
from tm.common.logger import log
from tm.core import config
from tm.core.clock import SYSTEM_CLOCK
from tm.core.stopwatch import IDLE, Lap


class SnapshotError(ValueError):
    """Raised when a stored snapshot can't be turned back into engine state."""


@dataclass
class StopwatchSnapshot:
    elapsed: int = 0
    running: bool = False
    laps: list = field(default_factory=list)
    saved_at: int = 0


@dataclass
class CountdownSnapshot:
    remaining: int = 0
    running: bool = False
    completed: bool = False
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    saved_at: int = 0


#region === Codecs ===

def _require(data, key, kind):
    if key not in data:
        raise SnapshotError(f"snapshot is missing '{key}'")
    value = data[key]
    # bool is an int subclass, keep the two apart
    if kind is int and (isinstance(value, bool) or not isinstance(value, (int, float))):
        raise SnapshotError(f"snapshot field '{key}' should be a number, got {value!r}")
    # json.loads lets NaN, Infinity and 1e400 through as floats
    if kind is int and isinstance(value, float) and not math.isfinite(value):
        raise SnapshotError(f"snapshot field '{key}' should be finite, got {value!r}")
    if kind is bool and not isinstance(value, bool):
        raise SnapshotError(f"snapshot field '{key}' should be a boolean, got {value!r}")
    return int(value) if kind is int else value


def _optional_int(data, key):
    if key not in data or data[key] is None:
        return 0
    return _require(data, key, int)


def _parse_object(raw):
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise SnapshotError(f"snapshot is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError("snapshot is not a JSON object")
    return data


def encode_stopwatch(snapshot):
    return json.dumps({
        "elapsed": snapshot.elapsed,
        "running": snapshot.running,
        "laps": [lap.to_dict() for lap in snapshot.laps],
        "saved_at": snapshot.saved_at,
    })


# Laps must read back exactly as the engine appends them: numbered 1..n, non-negative splits, and each cumulative
# equal to the previous cumulative plus its split.
def _decode_laps(laps_raw):
    if not isinstance(laps_raw, list):
        raise SnapshotError("snapshot field 'laps' should be a list")
    laps = []
    previous = 0
    for i, item in enumerate(laps_raw, start=1):
        if not isinstance(item, dict):
            raise SnapshotError(f"lap {i} is not a JSON object")
        lap = Lap(
            number=_require(item, "number", int),
            split=_require(item, "split", int),
            cumulative=_require(item, "cumulative", int),
        )
        if lap.number != i:
            raise SnapshotError(f"lap {i} is numbered {lap.number}, laps must be numbered 1..n in order")
        if lap.split < 0:
            raise SnapshotError(f"lap {i} has a negative split {lap.split}")
        if lap.cumulative != previous + lap.split:
            raise SnapshotError(f"lap {i} cumulative {lap.cumulative} doesn't match {previous} + {lap.split}")
        laps.append(lap)
        previous = lap.cumulative
    return laps


def decode_stopwatch(raw):
    data = _parse_object(raw)
    laps = _decode_laps(data.get("laps", []))
    elapsed = _require(data, "elapsed", int)
    if elapsed < 0:
        raise SnapshotError(f"snapshot field 'elapsed' is negative: {elapsed}")
    if laps and elapsed < laps[-1].cumulative:
        raise SnapshotError(f"elapsed {elapsed} is behind the last lap at {laps[-1].cumulative}")
    return StopwatchSnapshot(
        elapsed=elapsed,
        running=_require(data, "running", bool),
        laps=laps,
        saved_at=_require(data, "saved_at", int),
    )


def encode_countdown(snapshot):
    return json.dumps({
        "remaining": snapshot.remaining,
        "running": snapshot.running,
        "completed": snapshot.completed,
        "hours": snapshot.hours,
        "minutes": snapshot.minutes,
        "seconds": snapshot.seconds,
        "saved_at": snapshot.saved_at,
    })


def decode_countdown(raw):
    data = _parse_object(raw)
    return CountdownSnapshot(
        remaining=max(0, _require(data, "remaining", int)),
        running=_require(data, "running", bool),
        completed=_require(data, "completed", bool) if "completed" in data else False,
        hours=_optional_int(data, "hours"),
        minutes=_optional_int(data, "minutes"),
        seconds=_optional_int(data, "seconds"),
        saved_at=_require(data, "saved_at", int),
    )

#endregion === Codecs ===

#region === Reconciliation ===

# Credits the time a running stopwatch spent closed. The result is always paused.
def reconcile_stopwatch(snapshot, now):
    elapsed = snapshot.elapsed
    if snapshot.running:
        elapsed += max(0, now - snapshot.saved_at)
    return StopwatchSnapshot(elapsed=elapsed, running=False, laps=list(snapshot.laps), saved_at=now)


# Debits whole elapsed seconds from a running countdown. Hitting zero across the gap marks it completed; the result is
# always paused.
def reconcile_countdown(snapshot, now):
    remaining = snapshot.remaining
    completed = snapshot.completed
    if snapshot.running:
        gap_seconds = max(0, now - snapshot.saved_at) // 1000
        remaining = max(0, remaining - gap_seconds)
        if remaining == 0:
            completed = True
    return CountdownSnapshot(
        remaining=remaining,
        running=False,
        completed=completed and remaining == 0,
        hours=snapshot.hours,
        minutes=snapshot.minutes,
        seconds=snapshot.seconds,
        saved_at=now,
    )

#endregion === Reconciliation ===

#region === Bridge ===

class PersistenceBridge:

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or SYSTEM_CLOCK

    # Reads a snapshot once. Absent and malformed snapshots both mean "no prior state".
    def _read(self, key, decode):
        raw = self.store.get(key)
        if raw is None:
            log.info(f"No saved '{key}' snapshot, starting fresh.")
            return None
        try:
            return decode(raw)
        except SnapshotError:
            log.warning(f"Discarding malformed '{key}' snapshot, starting fresh.", exc_info=True)
            return None

    def load_stopwatch(self):
        snapshot = self._read(config.STOPWATCH_KEY, decode_stopwatch)
        if snapshot is None:
            return None
        return reconcile_stopwatch(snapshot, self.clock.now())

    def load_countdown(self):
        snapshot = self._read(config.TIMER_KEY, decode_countdown)
        if snapshot is None:
            return None
        return reconcile_countdown(snapshot, self.clock.now())

    def save_stopwatch(self, engine):
        if engine.state == IDLE:
            self.store.remove(config.STOPWATCH_KEY)
            return
        snapshot = StopwatchSnapshot(
            elapsed=engine.current_elapsed,
            running=engine.running,
            laps=list(engine.laps),
            saved_at=self.clock.now(),
        )
        self.store.set(config.STOPWATCH_KEY, encode_stopwatch(snapshot))

    def save_countdown(self, engine):
        snapshot = CountdownSnapshot(
            remaining=engine.remaining,
            running=engine.running,
            completed=engine.completed,
            hours=engine.hours,
            minutes=engine.minutes,
            seconds=engine.seconds,
            saved_at=self.clock.now(),
        )
        self.store.set(config.TIMER_KEY, encode_countdown(snapshot))

    # Restores both engines from their reconciled snapshots, then writes a fresh snapshot on every later change.
    def attach(self, stopwatch, countdown):
        sw = self.load_stopwatch()
        if sw is not None:
            stopwatch.restore(sw.elapsed, sw.laps)
            log.info(f"Resumed stopwatch at {sw.elapsed}ms with {len(sw.laps)} laps (paused).")
        cd = self.load_countdown()
        if cd is not None:
            countdown.restore(cd.hours, cd.minutes, cd.seconds, cd.remaining, cd.completed)
            log.info(f"Resumed countdown at {cd.remaining}s, completed={cd.completed} (paused).")

        stopwatch.add_listener(self.save_stopwatch)
        countdown.add_listener(self.save_countdown)

        # Record the reconciled state right away, the old running snapshot must not be credited twice.
        if sw is not None:
            self.save_stopwatch(stopwatch)
        if cd is not None:
            self.save_countdown(countdown)

#endregion === Bridge ===
