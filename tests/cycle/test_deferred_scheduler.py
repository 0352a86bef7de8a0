import unittest

from cycle import DeferredScheduler


class _FakeMonotonic:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DeferredSchedulerTests(unittest.TestCase):
    def test_tasks_fire_only_once_due_and_in_due_order(self) -> None:
        clock = _FakeMonotonic()
        scheduler = DeferredScheduler(monotonic_fn=clock)
        fired: list[str] = []
        scheduler.call_later(0.5, lambda: fired.append("late"))
        scheduler.call_later(0.2, lambda: fired.append("early"))

        self.assertEqual(0, scheduler.run_due())
        clock.advance(0.3)
        self.assertEqual(1, scheduler.run_due())
        clock.advance(0.3)
        self.assertEqual(1, scheduler.run_due())

        self.assertEqual(["early", "late"], fired)
        self.assertEqual(0, scheduler.pending())

    def test_same_due_time_keeps_insertion_order(self) -> None:
        clock = _FakeMonotonic()
        scheduler = DeferredScheduler(monotonic_fn=clock)
        fired: list[int] = []
        for index in range(3):
            scheduler.call_later(1.0, lambda index=index: fired.append(index))

        clock.advance(1.5)
        scheduler.run_due()

        self.assertEqual([0, 1, 2], fired)

    def test_cancelled_task_never_runs(self) -> None:
        clock = _FakeMonotonic()
        scheduler = DeferredScheduler(monotonic_fn=clock)
        fired: list[str] = []
        task = scheduler.call_later(0.1, lambda: fired.append("x"))
        task.cancel()

        clock.advance(1.0)

        self.assertEqual(0, scheduler.run_due())
        self.assertEqual([], fired)

    def test_failing_callback_is_logged_and_others_still_run(self) -> None:
        clock = _FakeMonotonic()
        scheduler = DeferredScheduler(monotonic_fn=clock)
        fired: list[str] = []

        def broken() -> None:
            raise ValueError("stale")

        scheduler.call_later(0.1, broken, name="broken")
        scheduler.call_later(0.1, lambda: fired.append("ok"))
        clock.advance(0.2)

        with self.assertLogs("cycle.deferred", level="ERROR"):
            self.assertEqual(2, scheduler.run_due())
        self.assertEqual(["ok"], fired)


if __name__ == "__main__":
    unittest.main()
