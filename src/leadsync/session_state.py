"""Overlay-lifetime session state: bound lead key, override flag, live tasks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

EMPTY = "empty"
BOUND = "bound"
STALE = "stale"
TIMED_OUT = "timed_out"


@dataclass
class SessionState:
    current_lead_number: str = ""
    language_overridden: bool = False
    detection_timed_out: bool = False
    detection_task: Any | None = None
    monitor_task: Any | None = None
    next_lead_task: Any | None = None

    def phase(self, observed_lead: str | None = None) -> str:
        if not self.current_lead_number:
            return TIMED_OUT if self.detection_timed_out else EMPTY
        if observed_lead and observed_lead != self.current_lead_number:
            return STALE
        return BOUND

    def needs_resync(self, observed_lead: str) -> bool:
        return bool(observed_lead) and observed_lead != self.current_lead_number

    def commit(self, lead_number: str) -> None:
        self.current_lead_number = lead_number
        if lead_number:
            self.detection_timed_out = False

    def clear(self) -> None:
        self.current_lead_number = ""
        self.language_overridden = False

    def replace_detection(self, task: Any | None) -> None:
        _cancel(self.detection_task)
        self.detection_task = task
        self.detection_timed_out = False

    def replace_monitor(self, task: Any | None) -> None:
        _cancel(self.monitor_task)
        self.monitor_task = task

    def replace_next_lead(self, task: Any | None) -> None:
        _cancel(self.next_lead_task)
        self.next_lead_task = task

    def live_tasks(self) -> list[Any]:
        tasks = (self.detection_task, self.monitor_task, self.next_lead_task)
        return [task for task in tasks if task is not None and getattr(task, "active", False)]

    def cancel_all(self) -> None:
        self.replace_detection(None)
        self.replace_monitor(None)
        self.replace_next_lead(None)


def _cancel(task: Any | None) -> None:
    if task is None:
        return
    cancel = getattr(task, "cancel", None)
    if callable(cancel):
        cancel()
