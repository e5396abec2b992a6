"""Lead-change detection: bounded detection sequence and continuous monitor."""

from __future__ import annotations

from typing import Callable

from leadsync.config import DEFAULT_TIMINGS, SyncTimings
from leadsync.session_state import SessionState
from leadsync.timers import PollTask, RepeatingTask, TimerLoop


class LeadChangeDetector:
    """Sample the identifying key and raise transition callbacks.

    Both tasks are tracked in ``SessionState``; starting one cancels the task
    of the same kind that was running before.
    """

    def __init__(
        self,
        loop: TimerLoop,
        state: SessionState,
        *,
        read_lead_number: Callable[[], str],
        on_lead_found: Callable[[str], None],
        on_lead_changed: Callable[[str, str], None],
        on_detection_timeout: Callable[[], None],
        on_monitor_tick: Callable[[], None] | None = None,
        timings: SyncTimings = DEFAULT_TIMINGS,
    ) -> None:
        self.loop = loop
        self.state = state
        self.read_lead_number = read_lead_number
        self.on_lead_found = on_lead_found
        self.on_lead_changed = on_lead_changed
        self.on_detection_timeout = on_detection_timeout
        self.on_monitor_tick = on_monitor_tick
        self.timings = timings

    def start_detection(self) -> PollTask:
        task = PollTask(
            self.loop,
            check=self._new_lead,
            interval=self.timings.detection_interval,
            ceiling=self.timings.detection_ceiling,
            on_found=self._detected,
            on_timeout=self._detection_timed_out,
            name="lead-detection",
        )
        self.state.replace_detection(task)
        return task.start()

    def start_monitor(self) -> RepeatingTask:
        task = RepeatingTask(
            self.loop,
            callback=self._monitor_tick,
            interval=self.timings.monitor_interval,
            name="lead-monitor",
        )
        self.state.replace_monitor(task)
        return task.start()

    def stop(self) -> None:
        self.state.replace_detection(None)
        self.state.replace_monitor(None)

    def _sample(self) -> str:
        try:
            return str(self.read_lead_number() or "")
        except Exception:
            return ""

    def _new_lead(self) -> str | None:
        lead = self._sample()
        return lead if self.state.needs_resync(lead) else None

    def _detected(self, lead: str) -> None:
        self.on_lead_found(lead)

    def _detection_timed_out(self) -> None:
        self.state.detection_timed_out = True
        self.on_detection_timeout()

    def _monitor_tick(self) -> None:
        lead = self._sample()
        if self.state.needs_resync(lead):
            self.on_lead_changed(self.state.current_lead_number, lead)
        if self.on_monitor_tick is not None:
            self.on_monitor_tick()
