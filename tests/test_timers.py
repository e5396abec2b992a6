import unittest

from leadsync.timers import (
    CANCELLED,
    FOUND,
    TIMED_OUT,
    ElementWaitTimeout,
    PollTask,
    RepeatingTask,
    TimerLoop,
    VirtualClock,
    wait_for_element,
)


def _loop() -> tuple[TimerLoop, VirtualClock]:
    clock = VirtualClock()
    return TimerLoop(clock=clock, sleep=clock.sleep), clock


class TimerLoopTests(unittest.TestCase):
    def test_callbacks_fire_in_due_order(self) -> None:
        loop, clock = _loop()
        fired: list[tuple[str, float]] = []
        loop.call_later(2.0, lambda: fired.append(("b", clock.now)))
        loop.call_later(1.0, lambda: fired.append(("a", clock.now)))
        loop.run()
        self.assertEqual(fired, [("a", 1.0), ("b", 2.0)])

    def test_cancelled_handle_never_fires(self) -> None:
        loop, _ = _loop()
        fired: list[str] = []
        handle = loop.call_later(1.0, lambda: fired.append("x"))
        handle.cancel()
        loop.run()
        self.assertEqual(fired, [])
        self.assertEqual(loop.pending(), 0)

    def test_run_respects_max_seconds(self) -> None:
        loop, clock = _loop()
        fired: list[float] = []
        loop.call_later(5.0, lambda: fired.append(clock.now))
        loop.run(max_seconds=2.0)
        self.assertEqual(fired, [])
        self.assertEqual(clock.now, 2.0)
        self.assertEqual(loop.pending(), 1)

    def test_stop_ends_run(self) -> None:
        loop, _ = _loop()
        fired: list[int] = []
        loop.call_later(1.0, loop.stop)
        loop.call_later(2.0, lambda: fired.append(1))
        loop.run()
        self.assertTrue(loop.stopped)
        self.assertEqual(fired, [])


class PollTaskTests(unittest.TestCase):
    def test_samples_immediately_then_every_interval(self) -> None:
        loop, clock = _loop()
        samples: list[float] = []
        results: list[str] = []

        def check():
            samples.append(clock.now)
            return "hit" if len(samples) == 3 else None

        task = PollTask(loop, check=check, interval=1.0, on_found=results.append).start()
        loop.run()
        self.assertEqual(samples, [0.0, 1.0, 2.0])
        self.assertEqual(results, ["hit"])
        self.assertEqual(task.outcome, FOUND)
        self.assertTrue(task.done)

    def test_timeout_reported_once_at_ceiling(self) -> None:
        loop, clock = _loop()
        timeouts: list[float] = []
        samples: list[float] = []

        def check():
            samples.append(clock.now)
            return None

        task = PollTask(
            loop,
            check=check,
            interval=1.0,
            ceiling=60.0,
            on_found=lambda _: self.fail("unexpected hit"),
            on_timeout=lambda: timeouts.append(clock.now),
        ).start()
        loop.run()
        self.assertEqual(timeouts, [60.0])
        self.assertEqual(len(samples), 61)
        self.assertEqual(task.outcome, TIMED_OUT)

    def test_cancel_from_outside_stops_sampling(self) -> None:
        loop, _ = _loop()
        samples: list[int] = []
        task = PollTask(loop, check=lambda: samples.append(1), interval=1.0, on_found=lambda _: None).start()
        loop.call_later(2.5, task.cancel)
        loop.run()
        self.assertEqual(len(samples), 3)
        self.assertEqual(task.outcome, CANCELLED)
        self.assertFalse(task.active)

    def test_task_cannot_start_twice(self) -> None:
        loop, _ = _loop()
        task = PollTask(loop, check=lambda: 1, interval=1.0, on_found=lambda _: None).start()
        with self.assertRaises(RuntimeError):
            task.start()


class RepeatingTaskTests(unittest.TestCase):
    def test_runs_every_interval_until_cancelled(self) -> None:
        loop, clock = _loop()
        ticks: list[float] = []
        task = RepeatingTask(loop, callback=lambda: ticks.append(clock.now), interval=3.0).start()
        loop.call_later(10.0, task.cancel)
        loop.run()
        self.assertEqual(ticks, [3.0, 6.0, 9.0])
        self.assertTrue(task.done)


class WaitForElementTests(unittest.TestCase):
    def test_found_after_a_few_polls(self) -> None:
        loop, clock = _loop()
        found: list[tuple[str, float]] = []
        calls: list[str] = []

        def exists(selector: str) -> bool:
            calls.append(selector)
            return len(calls) == 4

        wait_for_element(
            loop,
            selector="#dialog",
            exists=exists,
            timeout=5.0,
            on_found=lambda selector: found.append((selector, round(clock.now, 3))),
            on_timeout=lambda exc: self.fail(str(exc)),
        )
        loop.run()
        self.assertEqual(found, [("#dialog", 0.3)])

    def test_timeout_carries_selector(self) -> None:
        loop, clock = _loop()
        errors: list[ElementWaitTimeout] = []
        wait_for_element(
            loop,
            selector="#dialog",
            exists=lambda _selector: False,
            timeout=5.0,
            on_found=lambda _: self.fail("unexpected"),
            on_timeout=errors.append,
        )
        loop.run()
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].selector, "#dialog")
        self.assertIn("5000ms", str(errors[0]))
        self.assertGreaterEqual(clock.now, 5.0 - 1e-6)


if __name__ == "__main__":
    unittest.main()
