"""Next-case automation against the host's "Change status" dialog."""

from __future__ import annotations

from typing import Any, Callable

from leadsync.config import DEFAULT_TIMINGS, SyncTimings
from leadsync.constants import (
    CHANGE_STATUS_MISSING_MESSAGE,
    DIALOG_TIMEOUT_MESSAGE,
    EXTERNAL_ORDER_FIELD_SELECTOR,
    STATUS_DIALOG_SELECTOR,
    STATUS_FIELD_SELECTOR,
    STATUS_FIELD_VALUE,
    UPDATED_SYSTEM_FIELD_SELECTOR,
    UPDATED_SYSTEM_FIELD_VALUE,
)
from leadsync.field_writer import ForeignFieldWriter
from leadsync.session_state import SessionState
from leadsync.timers import ElementWaitTimeout, PollTask, TimerLoop, wait_for_element

IDLE = "idle"
AWAITING_DIALOG = "awaiting_dialog"
SETTING_FIELDS = "setting_fields"
AWAITING_USER_SUBMIT = "awaiting_user_submit"
MONITORING_FOR_NEXT_LEAD = "monitoring_for_next_lead"
FAILED = "failed"


class NextCaseDriver:
    """Open the status dialog, prefill it, then watch for the next lead.

    The dialog is never submitted here; the operator submits it and the
    next-lead poll picks up the resulting case change.
    """

    def __init__(
        self,
        loop: TimerLoop,
        host: Any,
        writer: ForeignFieldWriter,
        session: SessionState,
        *,
        on_prompt: Callable[[str], None],
        on_next_lead: Callable[[str], None],
        on_next_lead_timeout: Callable[[], None],
        log: Callable[[str], None] | None = None,
        timings: SyncTimings = DEFAULT_TIMINGS,
    ) -> None:
        self.loop = loop
        self.host = host
        self.writer = writer
        self.session = session
        self.on_prompt = on_prompt
        self.on_next_lead = on_next_lead
        self.on_next_lead_timeout = on_next_lead_timeout
        self._log = log
        self.timings = timings
        self.phase = IDLE
        self.origin_lead = ""
        self._pending: Any | None = None

    @property
    def running(self) -> bool:
        return self.phase not in {IDLE, FAILED}

    @property
    def awaiting_next_lead(self) -> bool:
        return self.phase in {AWAITING_USER_SUBMIT, MONITORING_FOR_NEXT_LEAD}

    def start(self, origin_lead: str) -> bool:
        if self.running:
            self.log("next case: automation already running")
            return False
        self.origin_lead = origin_lead
        self.log(f"next case: starting automation for lead={origin_lead or '-'}")
        if not self.host.click_change_status():
            return self._fail(CHANGE_STATUS_MISSING_MESSAGE)
        self.log("next case: change status clicked")
        self.phase = AWAITING_DIALOG
        task = wait_for_element(
            self.loop,
            selector=STATUS_DIALOG_SELECTOR,
            exists=self.host.exists,
            timeout=self.timings.dialog_timeout,
            interval=self.timings.element_poll_interval,
            on_found=self._dialog_ready,
            on_timeout=self._dialog_missing,
        )
        if not task.done:
            self._pending = task
        return True

    def cancel(self) -> None:
        pending = self._pending
        self._pending = None
        if pending is not None:
            pending.cancel()
        if self.awaiting_next_lead:
            self.session.replace_next_lead(None)
        self.phase = IDLE

    def log(self, message: str) -> None:
        if self._log is not None:
            self._log(message)

    def _dialog_missing(self, exc: ElementWaitTimeout) -> None:
        self.log(f"next case: {exc}")
        self._fail(DIALOG_TIMEOUT_MESSAGE)

    def _dialog_ready(self, _selector: str) -> None:
        self.log("next case: status dialog appeared")
        self.phase = SETTING_FIELDS
        self._pending = self.loop.call_later(self.timings.dialog_render_settle, self._set_status)

    def _set_status(self) -> None:
        if not self._write(STATUS_FIELD_SELECTOR, STATUS_FIELD_VALUE, "Change status to"):
            return
        self._pending = self.loop.call_later(self.timings.status_settle, self._set_updated_system)

    def _set_updated_system(self) -> None:
        if not self._write(UPDATED_SYSTEM_FIELD_SELECTOR, UPDATED_SYSTEM_FIELD_VALUE, "System updated in"):
            return
        self._pending = self.loop.call_later(self.timings.order_id_settle, self._set_order_id)

    def _set_order_id(self) -> None:
        assignee = str(self.host.assigned_to() or "")
        if not self._write(EXTERNAL_ORDER_FIELD_SELECTOR, assignee, "External system order ID"):
            return
        self.log("next case: fields set, waiting for operator to submit the dialog")
        self._await_next_lead()

    def _write(self, selector: str, value: str, label: str) -> bool:
        result = self.writer.write(selector, value)
        if result.ok:
            self.log(f"next case: {label} set to {value!r}")
            return True
        self.log(f"next case: write failed field={label!r} fault={result.fault} {result.detail}".rstrip())
        self._fail(
            f'Could not set "{label}" automatically ({result.fault}). '
            f'Please set it to "{value}" manually and submit the dialog.'
        )
        return False

    def _await_next_lead(self) -> None:
        self.phase = AWAITING_USER_SUBMIT
        task = PollTask(
            self.loop,
            check=self._check_next_lead,
            interval=self.timings.next_lead_interval,
            ceiling=self.timings.next_lead_ceiling,
            on_found=self._next_lead_found,
            on_timeout=self._next_lead_timed_out,
            name="next-lead",
        )
        self.session.replace_next_lead(task)
        self._pending = task
        task.start()

    def _check_next_lead(self) -> str | None:
        if self.phase == AWAITING_USER_SUBMIT and not self.host.exists(STATUS_DIALOG_SELECTOR):
            self.phase = MONITORING_FOR_NEXT_LEAD
            self.log("next case: status dialog closed, monitoring for next lead")
        lead = str(self.host.lead_number() or "")
        if lead and lead != self.origin_lead:
            return lead
        return None

    def _next_lead_found(self, lead: str) -> None:
        self._pending = None
        self.phase = IDLE
        self.log(f"next case: next lead detected {self.origin_lead or '-'} -> {lead}")
        self.on_next_lead(lead)

    def _next_lead_timed_out(self) -> None:
        self._pending = None
        self.phase = FAILED
        self.log("next case: timed out waiting for next lead")
        self.on_next_lead_timeout()

    def _fail(self, message: str) -> bool:
        self._pending = None
        self.phase = FAILED
        self.log(f"next case: halted: {message}")
        self.on_prompt(message)
        return False
