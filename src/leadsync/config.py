"""Timing configuration for polling, waits and settle delays."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SyncTimings:
    detection_interval: float = 1.0
    detection_ceiling: float = 60.0
    monitor_interval: float = 3.0
    next_lead_interval: float = 1.0
    next_lead_ceiling: float = 60.0
    dialog_timeout: float = 5.0
    element_poll_interval: float = 0.1
    dialog_render_settle: float = 0.5
    status_settle: float = 0.5
    order_id_settle: float = 0.3
    pump_interval: float = 0.2


DEFAULT_TIMINGS = SyncTimings()
