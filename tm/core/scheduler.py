"""Tick scheduling seam between the engines and whatever event loop hosts them.

Engines only ever ask for two things: a repeating wake-up (the tick) and a
one-shot wake-up (the completion display window). Both come back as a
``TickHandle`` that the engine owns and cancels. The Qt implementation lives in
``tm.ui.scheduler``; tests drive ``ManualScheduler`` directly.
"""


class TickHandle:
    """A cancelable scheduled callback.  Cancelling twice is harmless."""

    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self):
        return not self.cancelled


class Scheduler:

    def every(self, interval_ms, callback):
        """Call ``callback()`` every ``interval_ms`` until the handle is cancelled."""
        raise NotImplementedError

    def after(self, delay_ms, callback):
        """Call ``callback()`` once after ``delay_ms`` unless the handle is cancelled first."""
        raise NotImplementedError


class _ManualHandle(TickHandle):

    def __init__(self, due, interval, callback):
        super().__init__()
        self.due = due
        self.interval = interval
        self.callback = callback


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by ``advance()``.

    Keeps its own notion of time, so it pairs with a fake clock that is
    advanced in lockstep (``on_advance`` is called with each step).
    """

    def __init__(self, on_advance=None):
        self.now = 0
        self._handles = []
        self._on_advance = on_advance

    def every(self, interval_ms, callback):
        handle = _ManualHandle(self.now + interval_ms, interval_ms, callback)
        self._handles.append(handle)
        return handle

    def after(self, delay_ms, callback):
        handle = _ManualHandle(self.now + delay_ms, None, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if h.active]

    # Moves time forward by `ms`, firing every due callback in due-time order. Callbacks may schedule or cancel
    # other handles while we're firing.
    def advance(self, ms):
        target = self.now + ms
        while True:
            live = [h for h in self._handles if h.active and h.due <= target]
            if not live:
                break
            handle = min(live, key=lambda h: h.due)
            self._step_to(handle.due)
            if handle.interval is None:
                handle.cancel()
            else:
                handle.due += handle.interval
            handle.callback()
        self._step_to(target)
        self._handles = [h for h in self._handles if h.active]

    def _step_to(self, when):
        if when > self.now:
            delta = when - self.now
            self.now = when
            if self._on_advance is not None:
                self._on_advance(delta)
