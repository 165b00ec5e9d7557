from tm.common.logger import log

TICK_MS = 1000
# How long `completed` stays true after the countdown hits zero.
COMPLETION_WINDOW_MS = 3000
PRESETS = (30, 60, 300, 600)

MAX_HOURS = 99
MAX_MINUTES = 59
MAX_SECONDS = 59
MAX_TOTAL = MAX_HOURS * 3600 + MAX_MINUTES * 60 + MAX_SECONDS

IDLE = "idle"
RUNNING = "running"
EXPIRED = "expired"


# Formats whole seconds as HH:MM:SS. Negative values clamp to zero.
def format_hms(seconds):
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def _clamp(value, upper):
    try:
        value = int(value)
    except (TypeError, ValueError):
        value = 0
    return max(0, min(upper, value))


# Splits a total number of seconds back into (hours, minutes, seconds) input fields.
def split_hms(total):
    total = max(0, int(total))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return h, m, s


# Remaining time toward zero from a configured duration. The tick decrements by exactly one second, and reaching zero
# is the single completion event of a run.
class CountdownEngine:

    def __init__(self, scheduler, alert=None):
        self.scheduler = scheduler
        self.alert = alert
        self.hours = 0
        self.minutes = 0
        self.seconds = 0
        self.remaining = 0
        self.running = False
        self.completed = False

        self._tick_handle = None
        self._clear_handle = None
        self._run_token = 0
        self._listeners = []

    #region === Observers ===

    def add_listener(self, callback):
        self._listeners.append(callback)

    def _changed(self):
        for callback in list(self._listeners):
            callback(self)

    #endregion === Observers ===

    @property
    def configured_duration(self):
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    @property
    def state(self):
        if self.running:
            return RUNNING
        if self.completed:
            return EXPIRED
        return IDLE

    # Whether start() would actually do something right now.
    @property
    def can_start(self):
        return not self.running and (self.remaining > 0 or self.configured_duration > 0)

    # Sets the hour/minute/second input fields, each clamped to its own range. Only allowed while idle with nothing
    # left on the clock, otherwise the current run owns the display.
    def configure(self, hours, minutes, seconds):
        if self.running or self.remaining > 0:
            log.debug("Ignored countdown configure while a run is in progress")
            return False
        self.hours = _clamp(hours, MAX_HOURS)
        self.minutes = _clamp(minutes, MAX_MINUTES)
        self.seconds = _clamp(seconds, MAX_SECONDS)
        log.debug(f"Configured countdown to {self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}")
        self._changed()
        return True

    def start(self):
        if self.running:
            return False
        if self.remaining == 0:
            if self.configured_duration <= 0:
                log.debug("Ignored countdown start with no configured duration")
                return False
            self.remaining = self.configured_duration
        self._cancel_tick()
        self._cancel_clear()
        self.completed = False
        self.running = True
        self._run_token += 1
        self._tick_handle = self.scheduler.every(TICK_MS, self._make_tick(self._run_token))
        log.debug(f"Started countdown with {self.remaining}s remaining")
        self._changed()
        return True

    def pause(self):
        if not self.running:
            return False
        self.running = False
        self._cancel_tick()
        log.debug(f"Paused countdown with {self.remaining}s remaining")
        self._changed()
        return True

    def toggle(self):
        if self.running:
            return self.pause()
        return self.start()

    # Clears the run, not the configured input fields.
    def reset(self):
        self._cancel_tick()
        self._cancel_clear()
        self.running = False
        self.remaining = 0
        self.completed = False
        log.debug("Reset countdown")
        self._changed()

    # Adds preset seconds to the remaining total and back-fills the input fields to match.
    def add_preset(self, seconds):
        if self.running:
            log.debug(f"Ignored +{seconds}s preset while countdown is running")
            return False
        self.remaining = max(0, min(MAX_TOTAL, self.remaining + int(seconds)))
        self.hours, self.minutes, self.seconds = split_hms(self.remaining)
        if self.remaining > 0:
            self._cancel_clear()
            self.completed = False
        log.debug(f"Added {seconds}s preset, countdown now at {self.remaining}s")
        self._changed()
        return True

    # Loads reconciled state from the persistence bridge. Lands paused; a completed restore still gets its display
    # window but never replays the tone.
    def restore(self, hours, minutes, seconds, remaining, completed):
        self._cancel_tick()
        self._cancel_clear()
        self.running = False
        self.hours = _clamp(hours, MAX_HOURS)
        self.minutes = _clamp(minutes, MAX_MINUTES)
        self.seconds = _clamp(seconds, MAX_SECONDS)
        self.remaining = max(0, min(MAX_TOTAL, int(remaining)))
        self.completed = bool(completed) and self.remaining == 0
        if self.completed:
            self._schedule_clear()
        log.debug(f"Restored countdown with {self.remaining}s remaining, completed={self.completed}")
        self._changed()

    #region === Ticking ===

    def _make_tick(self, token):
        def tick():
            if not self.running or token != self._run_token:
                return
            self.remaining = max(0, self.remaining - 1)
            if self.remaining == 0:
                self._complete()
            else:
                self._changed()
        return tick

    def _complete(self):
        self._cancel_tick()
        self.running = False
        if self.completed:
            return
        self.completed = True
        log.info("Countdown reached zero")
        if self.alert is not None:
            self.alert()
        self._schedule_clear()
        self._changed()

    def _schedule_clear(self):
        self._cancel_clear()
        token = self._run_token

        def clear():
            if token != self._run_token or not self.completed:
                return
            self._clear_handle = None
            self.completed = False
            log.debug("Cleared countdown completion display")
            self._changed()
        self._clear_handle = self.scheduler.after(COMPLETION_WINDOW_MS, clear)

    def _cancel_tick(self):
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _cancel_clear(self):
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    #endregion === Ticking ===
