import threading
import unittest
from infrastructure.autosave_scheduler import AutosaveScheduler


class TestAutosaveScheduler(unittest.TestCase):

    def setUp(self):
        # Long delay: timers never fire on their own during a test
        self.scheduler = AutosaveScheduler(delay=60)
        self.calls = []

    def tearDown(self):
        self.scheduler.cancel_all()

    def test_reschedule_replaces_pending_call(self):
        """Only the last call for a key runs."""
        self.scheduler.schedule("offer:1", self.calls.append, "first")
        self.scheduler.schedule("offer:1", self.calls.append, "second")

        self.assertTrue(self.scheduler.flush("offer:1"))
        self.assertEqual(self.calls, ["second"])
        self.assertFalse(self.scheduler.pending("offer:1"))

    def test_keys_are_independent(self):
        """Cancelling one key leaves the others pending."""
        self.scheduler.schedule("offer:1", self.calls.append, 1)
        self.scheduler.schedule("offer:2", self.calls.append, 2)
        self.scheduler.cancel("offer:1")

        self.assertFalse(self.scheduler.pending("offer:1"))
        self.assertTrue(self.scheduler.pending("offer:2"))
        self.scheduler.flush_all()
        self.assertEqual(self.calls, [2])

    def test_flush_without_pending_call(self):
        """Nothing pending means nothing to flush or cancel."""
        self.assertFalse(self.scheduler.flush("offer:1"))
        self.assertFalse(self.scheduler.cancel("offer:1"))

    def test_failing_callback_does_not_escape(self):
        """A failing save is logged, not raised."""
        def boom():
            raise OSError("disk full")

        self.scheduler.schedule("offer:1", boom)
        self.assertTrue(self.scheduler.flush("offer:1"))

    def test_timer_fires_after_delay(self):
        """The timer runs the call on its own."""
        done = threading.Event()
        scheduler = AutosaveScheduler(delay=0.01)
        scheduler.schedule("offer:1", done.set)

        self.assertTrue(done.wait(timeout=5))
        self.assertFalse(scheduler.pending("offer:1"))


if __name__ == '__main__':
    unittest.main()
