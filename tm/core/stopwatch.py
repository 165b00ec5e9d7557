from dataclasses import dataclass
from tm.common.logger import log
from tm.core.clock import SYSTEM_CLOCK

# Display refresh cadence while running. Purely cosmetic, elapsed is always derived from the anchor.
TICK_MS = 10

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"


# A single recorded lap. Never mutated once appended.
@dataclass(frozen=True)
class Lap:
    number: int
    split: int
    cumulative: int

    def to_dict(self):
        return {"number": self.number, "split": self.split, "cumulative": self.cumulative}


# Formats a millisecond duration as HH:MM:SS.CC. Hours only grow past 2 digits beyond 99 hours.
def format_stopwatch(ms):
    ms = max(0, int(ms))
    total_seconds, rem_ms = divmod(ms, 1000)
    h, rem = divmod(total_seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}.{rem_ms // 10:02d}"


# Returns (fastest_index, slowest_index) over lap splits, or (-1, -1) with fewer than two laps. A linear scan that
# only replaces on strict improvement, so ties go to the earliest lap.
def fastest_and_slowest(laps):
    if len(laps) < 2:
        return -1, -1
    fastest = slowest = 0
    for i, lap in enumerate(laps):
        if lap.split < laps[fastest].split:
            fastest = i
        if lap.split > laps[slowest].split:
            slowest = i
    return fastest, slowest


# Elapsed time and laps for the stopwatch. Running time is always now() - anchor, so a late or dropped tick can never
# make the stopwatch drift.
class StopwatchEngine:

    def __init__(self, scheduler, clock=None):
        self.clock = clock or SYSTEM_CLOCK
        self.scheduler = scheduler
        self.elapsed = 0
        self.laps = []
        self.running = False
        self.anchor = None

        self._tick_handle = None
        self._run_token = 0
        self._listeners = []
        self._tick_listeners = []

    #region === Observers ===

    # Listeners are called after every real state change (start, pause, lap, reset, restore).
    def add_listener(self, callback):
        self._listeners.append(callback)

    # Tick listeners are called on every display refresh while running.
    def add_tick_listener(self, callback):
        self._tick_listeners.append(callback)

    def _changed(self):
        for callback in list(self._listeners):
            callback(self)

    #endregion === Observers ===

    @property
    def state(self):
        if self.running:
            return RUNNING
        if self.elapsed == 0 and not self.laps:
            return IDLE
        return PAUSED

    # Live elapsed value, computed from the anchor while running.
    @property
    def current_elapsed(self):
        if self.running and self.anchor is not None:
            return max(0, self.clock.now() - self.anchor)
        return self.elapsed

    def start(self):
        if self.running:
            return
        self._cancel_tick()
        self.anchor = self.clock.now() - self.elapsed
        self.running = True
        self._run_token += 1
        self._tick_handle = self.scheduler.every(TICK_MS, self._make_tick(self._run_token))
        log.debug(f"Started stopwatch at anchor {self.anchor} with elapsed {self.elapsed}ms")
        self._changed()

    def pause(self):
        if not self.running:
            return
        self.elapsed = self.current_elapsed
        self.running = False
        self.anchor = None
        self._cancel_tick()
        log.debug(f"Paused stopwatch at {self.elapsed}ms")
        self._changed()

    def toggle(self):
        if self.running:
            self.pause()
        else:
            self.start()

    # Records a lap at the live elapsed value. Returns the new Lap, or None when not running.
    def lap(self):
        if not self.running:
            log.debug("Ignored lap while stopwatch is not running")
            return None
        self.elapsed = self.current_elapsed
        previous = self.laps[-1].cumulative if self.laps else 0
        new_lap = Lap(number=len(self.laps) + 1, split=self.elapsed - previous, cumulative=self.elapsed)
        self.laps.append(new_lap)
        log.debug(f"Recorded lap {new_lap.number}: split {new_lap.split}ms, total {new_lap.cumulative}ms")
        self._changed()
        return new_lap

    def reset(self):
        self._cancel_tick()
        self.running = False
        self.anchor = None
        self.elapsed = 0
        self.laps = []
        log.debug("Reset stopwatch to 0")
        self._changed()

    # Loads reconciled state from the persistence bridge. Always lands paused, never auto-resumes.
    def restore(self, elapsed, laps):
        self._cancel_tick()
        self.running = False
        self.anchor = None
        self.elapsed = max(0, int(elapsed))
        self.laps = list(laps)
        log.debug(f"Restored stopwatch with elapsed {self.elapsed}ms and {len(self.laps)} laps")
        self._changed()

    #region === Ticking ===

    # Each run gets its own token, a tick left over from a previous run applies nothing.
    def _make_tick(self, token):
        def tick():
            if not self.running or token != self._run_token:
                return
            self.elapsed = self.current_elapsed
            for callback in list(self._tick_listeners):
                callback(self)
        return tick

    def _cancel_tick(self):
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    #endregion === Ticking ===
