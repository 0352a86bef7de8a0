import unittest

from cycle import EventBus, EventKind, PhaseClock


class _FakeMonotonic:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _build(work: float = 1200, brk: float = 20):
    clock_fn = _FakeMonotonic()
    bus = EventBus()
    events = []
    bus.subscribe_all(events.append)
    clock = PhaseClock(
        bus=bus,
        work_duration_seconds=work,
        break_duration_seconds=brk,
        monotonic_fn=clock_fn,
    )
    return clock, clock_fn, events


class PhaseClockTests(unittest.TestCase):
    def test_start_enters_work_and_publishes_work_start(self) -> None:
        clock, _, events = _build()

        result = clock.start()

        self.assertTrue(result.accepted)
        self.assertEqual("working", clock.mode)
        self.assertEqual("work", clock.phase)
        self.assertEqual([EventKind.WORK_START], [event.kind for event in events])
        self.assertEqual(1200, events[0].duration_seconds)
        self.assertEqual(0, events[0].session_id)

    def test_start_rejected_when_not_idle(self) -> None:
        clock, _, events = _build()
        clock.start()

        result = clock.start()

        self.assertFalse(result.accepted)
        self.assertEqual("not_idle", result.reason)
        self.assertEqual(1, len(events))

    def test_irregular_ticks_sum_to_real_elapsed_time(self) -> None:
        clock, fn, _ = _build()
        clock.start()
        gaps = [0.1, 0.07, 2.5, 0.0, 0.33, 7.0, 0.11]

        for gap in gaps:
            fn.advance(gap)
            clock.tick()

        self.assertAlmostEqual(sum(gaps), clock.elapsed, places=9)

    def test_skipped_ticks_do_not_lose_time(self) -> None:
        clock, fn, _ = _build()
        clock.start()

        fn.advance(30.0)
        clock.tick()

        self.assertAlmostEqual(1170.0, clock.remaining_seconds())

    def test_second_pause_is_a_no_op(self) -> None:
        clock, fn, events = _build()
        clock.start()
        fn.advance(1.0)
        clock.tick()

        first = clock.pause()
        second = clock.pause()

        self.assertTrue(first.accepted)
        self.assertFalse(second.accepted)
        self.assertEqual("not_running", second.reason)
        self.assertEqual("paused", clock.mode)
        self.assertEqual([EventKind.WORK_START], [event.kind for event in events])

    def test_pause_freezes_elapsed_until_resume(self) -> None:
        clock, fn, events = _build()
        clock.start()
        for _ in range(50):
            fn.advance(0.1)
            clock.tick()

        clock.pause()
        for _ in range(100):
            fn.advance(0.1)
            self.assertEqual((), clock.tick())
        resumed = clock.resume()

        self.assertTrue(resumed.accepted)
        self.assertEqual("working", clock.mode)
        self.assertAlmostEqual(1195.0, clock.remaining_seconds(), places=6)
        self.assertEqual(1, len(events))

    def test_resume_rejected_when_not_paused(self) -> None:
        clock, _, _ = _build()

        result = clock.resume()

        self.assertFalse(result.accepted)
        self.assertEqual("not_paused", result.reason)

    def test_full_cycle_emits_boundary_events_in_order(self) -> None:
        clock, fn, events = _build(work=2, brk=1)
        clock.start()

        emitted = []
        for gap in (0.5, 0.5, 0.5, 0.6):
            fn.advance(gap)
            emitted.extend(clock.tick())

        self.assertEqual(
            [EventKind.WORK_COMPLETE, EventKind.BREAK_START],
            [event.kind for event in emitted],
        )
        self.assertEqual("break_reminder", clock.mode)
        self.assertEqual("break", clock.phase)
        self.assertEqual(0.0, clock.elapsed)
        self.assertEqual(0, clock.session_count)

        fn.advance(1.2)
        final = clock.tick()

        self.assertEqual([EventKind.BREAK_COMPLETE], [event.kind for event in final])
        self.assertEqual(1, final[0].session_id)
        self.assertEqual(1, clock.session_count)
        self.assertEqual("idle", clock.mode)
        self.assertIsNone(clock.phase)
        self.assertEqual(
            [
                EventKind.WORK_START,
                EventKind.WORK_COMPLETE,
                EventKind.BREAK_START,
                EventKind.BREAK_COMPLETE,
            ],
            [event.kind for event in events],
        )

    def test_state_is_committed_before_listeners_run(self) -> None:
        fn = _FakeMonotonic()
        bus = EventBus()
        clock = PhaseClock(
            bus=bus,
            work_duration_seconds=1,
            break_duration_seconds=1,
            monotonic_fn=fn,
        )
        seen = []
        bus.subscribe(EventKind.WORK_COMPLETE, lambda event: seen.append(clock.mode))
        clock.start()

        fn.advance(1.0)
        clock.tick()

        self.assertEqual(["break_reminder"], seen)

    def test_held_events_wait_for_publish_pending(self) -> None:
        fn = _FakeMonotonic()
        bus = EventBus()
        events = []
        bus.subscribe_all(events.append)
        clock = PhaseClock(
            bus=bus,
            work_duration_seconds=1,
            break_duration_seconds=1,
            monotonic_fn=fn,
            auto_publish=False,
        )
        clock.start()
        fn.advance(1.0)
        returned = clock.tick()

        self.assertEqual([], events)
        published = clock.publish_pending()

        self.assertEqual(
            [EventKind.WORK_START, EventKind.WORK_COMPLETE, EventKind.BREAK_START],
            [event.kind for event in events],
        )
        self.assertEqual(returned, published[1:])
        self.assertEqual((), clock.publish_pending())

    def test_reset_returns_to_idle_without_counting_a_session(self) -> None:
        clock, fn, _ = _build(work=2, brk=1)
        clock.start()
        fn.advance(2.5)
        clock.tick()

        result = clock.reset()

        self.assertTrue(result.accepted)
        self.assertEqual("idle", clock.mode)
        self.assertIsNone(clock.reference_timestamp)
        self.assertEqual(0, clock.session_count)
        self.assertEqual(2.0, clock.remaining_seconds())
        self.assertEqual(0.0, clock.progress_fraction())

    def test_tick_while_idle_does_nothing(self) -> None:
        clock, fn, events = _build()
        fn.advance(5.0)

        self.assertEqual((), clock.tick())
        self.assertEqual([], events)

    def test_non_positive_durations_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PhaseClock(bus=EventBus(), work_duration_seconds=0)
        with self.assertRaises(ValueError):
            PhaseClock(bus=EventBus(), break_duration_seconds=-1)


if __name__ == "__main__":
    unittest.main()
