import sys
from PySide6.QtCore import Qt, QEvent
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)
from tm.common.logger import log
from tm.core import config
from tm.core.controls import ControlSurface, Key, STOPWATCH_MODE, TIMER_MODE
from tm.core.countdown import CountdownEngine
from tm.core.persistence import PersistenceBridge
from tm.core.stopwatch import StopwatchEngine, format_stopwatch
from tm.ui.alert import ToneAlert
from tm.ui.scheduler import QtScheduler
from tm.ui.theme import THEMES, LIGHT, DARK, build_stylesheet
from tm.ui.widgets import (
    build_countdown_panel,
    build_stopwatch_panel,
    fill_lap_table,
    update_countdown_panel,
    update_stopwatch_panel,
)

# Qt key codes for the logical keys the control surface understands.
_QT_KEYS = {
    Qt.Key_Space: Key.SPACE,
    Qt.Key_L: Key.L,
    Qt.Key_R: Key.R,
}


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

# Main window of Time Master. Hosts both engines; only the panel for the current mode is shown and receives keys.
class MainWindow(QMainWindow):

    def __init__(self, store=None):
        super().__init__()
        self.setWindowTitle("Time Master")

        # -- Load store and settings --
        self.store = store or config.JsonStore()
        self.dark_mode = config.load_dark_mode(self.store)

        # -- Engines --
        self.scheduler = QtScheduler(self)
        self.alert = ToneAlert(self)
        self.stopwatch = StopwatchEngine(self.scheduler)
        self.countdown = CountdownEngine(self.scheduler, alert=self.alert)
        self.bridge = PersistenceBridge(self.store)
        self.bridge.attach(self.stopwatch, self.countdown)
        self.controls = ControlSurface(self.stopwatch, self.countdown)

        # -- Build UI skeleton --
        central = QWidget()
        self.setCentralWidget(central)
        self._main_lay = QVBoxLayout(central)
        self._main_lay.setContentsMargins(16, 16, 16, 16)
        self._build_header()

        self._stack = QStackedWidget()
        self._sw_panel, self._sw = build_stopwatch_panel(
            on_toggle=self.stopwatch.toggle,
            on_lap=self.stopwatch.lap,
            on_reset=self.stopwatch.reset,
        )
        self._cd_panel, self._cd = build_countdown_panel(
            on_toggle=self.countdown.toggle,
            on_reset=self.countdown.reset,
            on_input=self._on_countdown_input,
            on_preset=self.countdown.add_preset,
        )
        self._stack.addWidget(self._sw_panel)
        self._stack.addWidget(self._cd_panel)
        self._main_lay.addWidget(self._stack)

        hint = QLabel('Press space to start/stop. Press "L" for a lap in stopwatch mode, "R" to reset.')
        hint.setObjectName("hint")
        hint.setAlignment(Qt.AlignCenter)
        self._main_lay.addWidget(hint)

        # -- Engine observers --
        self.stopwatch.add_listener(self._on_stopwatch_changed)
        self.stopwatch.add_tick_listener(self._on_stopwatch_tick)
        self.countdown.add_listener(self._on_countdown_changed)

        self._apply_style()
        self._set_mode(STOPWATCH_MODE)
        self._on_stopwatch_changed(self.stopwatch)
        self._on_countdown_changed(self.countdown)

        # Keys are watched app-wide so a focused spin box can't swallow them.
        QApplication.instance().installEventFilter(self)

    # ------------------------------------------------------------------ #
    #  Header / style                                                      #
    # ------------------------------------------------------------------ #

    def _build_header(self):
        top = QHBoxLayout()
        title = QLabel("Time Master")
        title.setStyleSheet("font-size: 24px; font-weight: bold; background: transparent;")
        top.addWidget(title)
        top.addStretch(1)
        self._theme_btn = QPushButton()
        self._theme_btn.setFocusPolicy(Qt.NoFocus)
        self._theme_btn.clicked.connect(self._on_theme_toggle)
        top.addWidget(self._theme_btn)
        self._main_lay.addLayout(top)

        modes = QHBoxLayout()
        self._mode_btns = {}
        for mode, label in ((STOPWATCH_MODE, "Stopwatch"), (TIMER_MODE, "Timer")):
            btn = QPushButton(label)
            btn.setObjectName("modeButton")
            btn.setCheckable(True)
            btn.setFocusPolicy(Qt.NoFocus)
            btn.clicked.connect(lambda _=False, m=mode: self._set_mode(m))
            modes.addWidget(btn)
            self._mode_btns[mode] = btn
        self._main_lay.addLayout(modes)

    @property
    def theme_name(self):
        return DARK if self.dark_mode else LIGHT

    def _apply_style(self):
        style = build_stylesheet(self.theme_name)
        self.setStyleSheet(style)
        self._theme_btn.setText("Light mode" if self.dark_mode else "Dark mode")
        fill_lap_table(self._sw["table"], self.stopwatch.laps, THEMES[self.theme_name])

    def _on_theme_toggle(self):
        self.dark_mode = not self.dark_mode
        config.save_dark_mode(self.store, self.dark_mode)
        log.info(f"Switched to {self.theme_name} theme")
        self._apply_style()

    def _set_mode(self, mode):
        self.controls.set_mode(mode)
        for m, btn in self._mode_btns.items():
            btn.setChecked(m == mode)
        self._stack.setCurrentWidget(self._sw_panel if mode == STOPWATCH_MODE else self._cd_panel)

    # ------------------------------------------------------------------ #
    #  Keyboard                                                            #
    # ------------------------------------------------------------------ #

    def eventFilter(self, obj, event):
        if event.type() == QEvent.KeyPress and self.isActiveWindow():
            key = _QT_KEYS.get(event.key())
            if key is not None and not event.isAutoRepeat():
                if self.controls.handle(key):
                    event.accept()
                    return True
        return super().eventFilter(obj, event)

    # ------------------------------------------------------------------ #
    #  Engine observers                                                    #
    # ------------------------------------------------------------------ #

    # Display refresh only, buttons and laps can't change between ticks.
    def _on_stopwatch_tick(self, engine):
        self._sw["display"].setText(format_stopwatch(engine.current_elapsed))

    def _on_stopwatch_changed(self, engine):
        update_stopwatch_panel(self._sw, engine)
        fill_lap_table(self._sw["table"], engine.laps, THEMES[self.theme_name])

    def _on_countdown_changed(self, engine):
        update_countdown_panel(self._cd, engine)

    def _on_countdown_input(self, _value=None):
        w = self._cd
        if not self.countdown.configure(w["hours"].value(), w["minutes"].value(), w["seconds"].value()):
            self._on_countdown_changed(self.countdown)

    # ------------------------------------------------------------------ #
    #  Window close                                                        #
    # ------------------------------------------------------------------ #

    def closeEvent(self, event):
        QApplication.instance().removeEventFilter(self)
        self.bridge.save_stopwatch(self.stopwatch)
        self.bridge.save_countdown(self.countdown)
        log.info("Saved engine snapshots on exit")
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())
