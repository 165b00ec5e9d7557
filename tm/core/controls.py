from enum import Enum
from tm.common.logger import log

STOPWATCH_MODE = "stopwatch"
TIMER_MODE = "timer"
MODES = (STOPWATCH_MODE, TIMER_MODE)


# Logical keys, named after the DOM key codes they stand for.
class Key(Enum):
    SPACE = "Space"
    L = "KeyL"
    R = "KeyR"

    @staticmethod
    def from_name(name):
        for key in Key:
            if key.value == name:
                return key
        return None


# Maps logical key events onto whichever engine is active. There is one handler for the lifetime of the app, and it
# always reads state straight off the engines, so it never acts on a stale `running` or `remaining`.
class ControlSurface:

    def __init__(self, stopwatch, countdown, mode=STOPWATCH_MODE):
        self.stopwatch = stopwatch
        self.countdown = countdown
        self.mode = mode if mode in MODES else STOPWATCH_MODE

    def set_mode(self, mode):
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}', expected one of {MODES}")
        self.mode = mode
        log.debug(f"Control surface switched to {mode} mode")

    # Returns True when the key was consumed, in which case the caller should suppress the key's default action.
    def handle(self, key):
        if isinstance(key, str):
            key = Key.from_name(key)
        if key is None:
            return False
        if self.mode == STOPWATCH_MODE:
            return self._handle_stopwatch(key)
        return self._handle_countdown(key)

    def _handle_stopwatch(self, key):
        sw = self.stopwatch
        if key is Key.SPACE:
            sw.toggle()
        elif key is Key.L:
            if sw.running:
                sw.lap()
        elif key is Key.R:
            sw.reset()
        return True

    def _handle_countdown(self, key):
        cd = self.countdown
        if key is Key.SPACE:
            if cd.running or cd.can_start:
                cd.toggle()
            return True
        if key is Key.R:
            cd.reset()
            return True
        return False
