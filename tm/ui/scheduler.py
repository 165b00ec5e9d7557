from PySide6.QtCore import QTimer
from tm.core.scheduler import Scheduler, TickHandle


# A TickHandle backed by its own QTimer. Cancelling stops the timer before any further timeout can be delivered.
class QtTickHandle(TickHandle):

    def __init__(self, timer):
        super().__init__()
        self._timer = timer

    def cancel(self):
        if self.cancelled:
            return
        super().cancel()
        self._timer.stop()
        self._timer.deleteLater()


class QtScheduler(Scheduler):

    def __init__(self, parent=None):
        self._parent = parent

    def _build(self, interval_ms, callback, single_shot):
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.setSingleShot(single_shot)
        handle = QtTickHandle(timer)

        def fire():
            if handle.cancelled:
                return
            if single_shot:
                handle.cancel()
            callback()
        timer.timeout.connect(fire)
        timer.start()
        return handle

    def every(self, interval_ms, callback):
        return self._build(interval_ms, callback, single_shot=False)

    def after(self, delay_ms, callback):
        return self._build(delay_ms, callback, single_shot=True)
