"""Tests for the panel refresh helpers, run against an offscreen Qt platform."""

import os
import tempfile
import unittest

os.environ.setdefault("TIMEMASTER_HOME", tempfile.mkdtemp(prefix="timemaster_test_"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication, QLabel
from tm.core.clock import ManualClock
from tm.core.countdown import CountdownEngine
from tm.core.scheduler import ManualScheduler
from tm.ui.widgets import build_countdown_panel, set_dynamic, update_countdown_panel


def _noop(*_args):
    pass


class TestCountdownPanel(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.clock = ManualClock(0)
        self.scheduler = ManualScheduler(on_advance=self.clock.advance)
        self.cd = CountdownEngine(self.scheduler)
        self.panel, self.w = build_countdown_panel(_noop, _noop, _noop, _noop)
        self.inputs = []
        for name in ("hours", "minutes", "seconds"):
            self.w[name].valueChanged.connect(self.inputs.append)

    def test_idle_panel_mirrors_configuration(self):
        self.cd.configure(1, 2, 3)
        update_countdown_panel(self.w, self.cd)
        self.assertEqual(self.w["display"].text(), "00:00:00")
        self.assertEqual((self.w["hours"].value(), self.w["minutes"].value(), self.w["seconds"].value()), (1, 2, 3))
        self.assertEqual(self.inputs, [])
        self.assertTrue(self.w["hours"].isEnabled())
        self.assertEqual(self.w["start"].text(), "Start")
        self.assertTrue(self.w["start"].isEnabled())
        self.assertTrue(self.w["reset"].isHidden())

    def test_running_panel_hides_inputs(self):
        self.cd.configure(0, 1, 0)
        self.cd.start()
        update_countdown_panel(self.w, self.cd)
        self.assertEqual(self.w["display"].text(), "00:01:00")
        self.assertTrue(self.w["inputs"].isHidden())
        self.assertFalse(any(btn.isEnabled() for btn in self.w["presets"]))
        self.assertEqual(self.w["start"].text(), "Pause")
        self.assertEqual(self.w["start"].property("running"), "true")
        self.assertTrue(self.w["reset"].isHidden())

    def test_paused_panel_offers_reset_and_locks_inputs(self):
        self.cd.configure(0, 1, 0)
        self.cd.start()
        self.scheduler.advance(2000)
        self.cd.pause()
        update_countdown_panel(self.w, self.cd)
        self.assertEqual(self.w["display"].text(), "00:00:58")
        self.assertFalse(self.w["inputs"].isHidden())
        self.assertFalse(self.w["minutes"].isEnabled())
        self.assertFalse(self.w["reset"].isHidden())
        self.assertEqual(self.w["start"].property("running"), "false")

    def test_empty_countdown_cannot_start(self):
        update_countdown_panel(self.w, self.cd)
        self.assertFalse(self.w["start"].isEnabled())
        self.assertEqual(self.w["display"].property("expired"), "false")

    def test_set_dynamic_writes_string_flag(self):
        label = QLabel()
        set_dynamic(label, "expired", True)
        self.assertEqual(label.property("expired"), "true")
        set_dynamic(label, "expired", False)
        self.assertEqual(label.property("expired"), "false")


if __name__ == "__main__":
    unittest.main()
