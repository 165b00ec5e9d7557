"""Panel builders — stopwatch panel, countdown panel, and lap table.

Each builder returns a (container, widget_dict) tuple. The container is a
QFrame with objectName "panel" that can be inserted into the main layout.
The widget_dict maps logical names to sub-widgets for later updates.
"""

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QAbstractItemView,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)
from tm.core.countdown import MAX_HOURS, MAX_MINUTES, MAX_SECONDS, PRESETS, format_hms
from tm.core.stopwatch import fastest_and_slowest, format_stopwatch


def _preset_label(seconds):
    if seconds % 60 == 0:
        return f"+{seconds // 60}m"
    return f"+{seconds}s"


def set_dynamic(widget, name, value):
    """Set a stylesheet-visible property and re-polish so the selector applies."""
    widget.setProperty(name, "true" if value else "false")
    widget.style().unpolish(widget)
    widget.style().polish(widget)


def _build_controls(on_toggle, on_reset):
    row = QHBoxLayout()
    row.setAlignment(Qt.AlignCenter)
    reset = QPushButton("Reset")
    reset.setObjectName("resetButton")
    reset.setFocusPolicy(Qt.NoFocus)
    reset.clicked.connect(on_reset)
    start = QPushButton("Start")
    start.setObjectName("startButton")
    start.setFocusPolicy(Qt.NoFocus)
    start.clicked.connect(on_toggle)
    row.addWidget(reset)
    row.addWidget(start)
    return row, reset, start


def build_stopwatch_panel(on_toggle, on_lap, on_reset):
    """Build the stopwatch display, its buttons, and the lap table.

    Returns (container, widget_dict).
    """
    panel = QFrame()
    panel.setObjectName("panel")
    lay = QVBoxLayout(panel)

    display = QLabel(format_stopwatch(0))
    display.setObjectName("display")
    display.setAlignment(Qt.AlignCenter)
    lay.addWidget(display)

    row, reset, start = _build_controls(on_toggle, on_reset)
    lap = QPushButton("Lap")
    lap.setObjectName("lapButton")
    lap.setFocusPolicy(Qt.NoFocus)
    lap.clicked.connect(on_lap)
    row.addWidget(lap)
    lay.addLayout(row)

    laps_label = QLabel("Laps")
    lay.addWidget(laps_label)
    table = QTableWidget(0, 3)
    table.setHorizontalHeaderLabels(["#", "Lap Time", "Total Time"])
    table.verticalHeader().setVisible(False)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
    table.setEditTriggers(QAbstractItemView.NoEditTriggers)
    table.setSelectionMode(QAbstractItemView.NoSelection)
    table.setFocusPolicy(Qt.NoFocus)
    lay.addWidget(table)

    return panel, {
        "display": display,
        "start": start,
        "reset": reset,
        "lap": lap,
        "laps_label": laps_label,
        "table": table,
    }


def update_stopwatch_panel(w, engine):
    w["display"].setText(format_stopwatch(engine.current_elapsed))
    w["start"].setText("Pause" if engine.running else "Start")
    set_dynamic(w["start"], "running", engine.running)
    w["lap"].setVisible(engine.running)
    w["reset"].setVisible(not engine.running and engine.current_elapsed > 0)
    has_laps = bool(engine.laps)
    w["laps_label"].setVisible(has_laps)
    w["table"].setVisible(has_laps)


def fill_lap_table(table, laps, theme):
    """Rebuild the lap rows, coloring the fastest and slowest splits."""
    fastest, slowest = fastest_and_slowest(laps)
    table.setRowCount(len(laps))
    for i, lap in enumerate(laps):
        cells = (str(lap.number), format_stopwatch(lap.split), format_stopwatch(lap.cumulative))
        for col, text in enumerate(cells):
            item = QTableWidgetItem(text)
            if i == fastest:
                item.setForeground(QColor(theme["fastest"]))
            elif i == slowest:
                item.setForeground(QColor(theme["slowest"]))
            table.setItem(i, col, item)
    if laps:
        table.scrollToBottom()


def _build_spin(label, maximum, on_change):
    box = QVBoxLayout()
    title = QLabel(label)
    title.setAlignment(Qt.AlignCenter)
    spin = QSpinBox()
    spin.setRange(0, maximum)
    spin.setAlignment(Qt.AlignCenter)
    spin.valueChanged.connect(on_change)
    box.addWidget(title)
    box.addWidget(spin)
    return box, spin


def build_countdown_panel(on_toggle, on_reset, on_input, on_preset):
    """Build the countdown display, h/m/s inputs, preset buttons and controls.

    Returns (container, widget_dict).
    """
    panel = QFrame()
    panel.setObjectName("panel")
    lay = QVBoxLayout(panel)

    display = QLabel("00:00:00")
    display.setObjectName("display")
    display.setAlignment(Qt.AlignCenter)
    lay.addWidget(display)

    inputs = QFrame()
    grid = QGridLayout(inputs)
    grid.setContentsMargins(0, 0, 0, 0)
    h_box, hours = _build_spin("Hours", MAX_HOURS, on_input)
    m_box, minutes = _build_spin("Minutes", MAX_MINUTES, on_input)
    s_box, seconds = _build_spin("Seconds", MAX_SECONDS, on_input)
    grid.addLayout(h_box, 0, 0)
    grid.addLayout(m_box, 0, 1)
    grid.addLayout(s_box, 0, 2)

    presets = QHBoxLayout()
    preset_buttons = []
    for amount in PRESETS:
        btn = QPushButton(_preset_label(amount))
        btn.setFocusPolicy(Qt.NoFocus)
        btn.clicked.connect(lambda _=False, a=amount: on_preset(a))
        presets.addWidget(btn)
        preset_buttons.append(btn)
    grid.addLayout(presets, 1, 0, 1, 3)
    lay.addWidget(inputs)

    row, reset, start = _build_controls(on_toggle, on_reset)
    lay.addLayout(row)

    return panel, {
        "display": display,
        "inputs": inputs,
        "hours": hours,
        "minutes": minutes,
        "seconds": seconds,
        "presets": preset_buttons,
        "start": start,
        "reset": reset,
    }


def update_countdown_panel(w, engine):
    w["display"].setText(format_hms(engine.remaining))
    set_dynamic(w["display"], "expired", engine.completed)

    # Mirror the engine's h/m/s without re-entering the input handler.
    for name in ("hours", "minutes", "seconds"):
        spin = w[name]
        spin.blockSignals(True)
        spin.setValue(getattr(engine, name))
        spin.blockSignals(False)
        spin.setEnabled(engine.remaining == 0)

    w["inputs"].setVisible(not engine.running)
    for btn in w["presets"]:
        btn.setEnabled(not engine.running)
    w["start"].setText("Pause" if engine.running else "Start")
    w["start"].setEnabled(engine.running or engine.can_start)
    set_dynamic(w["start"], "running", engine.running)
    w["reset"].setVisible(not engine.running and engine.remaining > 0)
