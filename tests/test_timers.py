# tests/test_timers.py
import unittest

from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer

from lighter.timers import ManualScheduler, QtScheduler


class TestManualScheduler(unittest.TestCase):
    def test_fires_in_due_order(self):
        clock = ManualScheduler()
        calls = []
        clock.call_later(20, lambda: calls.append("b"))
        clock.call_later(10, lambda: calls.append("a"))
        clock.call_later(10, lambda: calls.append("a2"))
        self.assertEqual(clock.advance(15), 2)
        self.assertEqual(calls, ["a", "a2"])
        self.assertEqual(clock.now, 15)
        clock.advance(5)
        self.assertEqual(calls, ["a", "a2", "b"])

    def test_cancel(self):
        clock = ManualScheduler()
        calls = []
        handle = clock.call_later(10, lambda: calls.append(1))
        clock.cancel(handle)
        clock.cancel(None)
        self.assertEqual(clock.pending, 0)
        self.assertEqual(clock.advance(10), 0)
        self.assertEqual(calls, [])

    def test_callbacks_scheduled_while_advancing(self):
        clock = ManualScheduler()
        calls = []

        def tick():
            calls.append(clock.now)
            if len(calls) < 3:
                clock.call_later(10, tick)

        clock.call_later(0, tick)
        clock.advance(100)
        self.assertEqual(calls, [0, 10, 20])

    def test_run_pending_only_runs_due(self):
        clock = ManualScheduler()
        calls = []
        clock.call_later(0, lambda: calls.append("now"))
        clock.call_later(1, lambda: calls.append("later"))
        clock.run_pending()
        self.assertEqual(calls, ["now"])
        self.assertEqual(clock.pending, 1)


class TestQtScheduler(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def run_loop(self, ms):
        loop = QEventLoop()
        QTimer.singleShot(ms, loop.quit)
        loop.exec()

    def test_call_later_fires_on_event_loop(self):
        scheduler = QtScheduler()
        calls = []
        scheduler.call_later(10, lambda: calls.append("fired"))
        self.assertEqual(scheduler.pending, 1)
        self.run_loop(100)
        self.assertEqual(calls, ["fired"])
        self.assertEqual(scheduler.pending, 0)

    def test_cancel(self):
        scheduler = QtScheduler()
        calls = []
        handle = scheduler.call_later(10, lambda: calls.append("fired"))
        scheduler.cancel(handle)
        scheduler.cancel(None)
        self.run_loop(50)
        self.assertEqual(calls, [])
        self.assertEqual(scheduler.pending, 0)


if __name__ == "__main__":
    unittest.main()
