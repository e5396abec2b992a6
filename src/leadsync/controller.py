"""Overlay controller: re-sync cycle, operator actions and teardown."""

from __future__ import annotations

from typing import Any, Callable

from leadsync.automation import NextCaseDriver
from leadsync.config import DEFAULT_TIMINGS, SyncTimings
from leadsync.constants import (
    ASSIGN_TO_ME_MESSAGE,
    DETECTION_TIMEOUT_MESSAGE,
    NEXT_LEAD_TIMEOUT_MESSAGE,
    WAITING_MESSAGE,
)
from leadsync.detector import LeadChangeDetector
from leadsync.extract import assign_to_me_required, extract_record, infer_language
from leadsync.field_writer import ForeignFieldWriter
from leadsync.form_url import build_form_url
from leadsync.models import EMPTY_RECORD, ExtractedRecord, OperatorInput
from leadsync.session_state import SessionState
from leadsync.timers import RepeatingTask, TimerLoop


class LeadSyncController:
    """Keeps the overlay bound to the case the host page currently shows.

    ``host`` is a ``HostPage``-shaped adapter and ``view`` an
    ``OverlayView``-shaped one; both are duck-typed so tests can use fakes.
    """

    def __init__(
        self,
        loop: TimerLoop,
        host: Any,
        view: Any,
        writer: ForeignFieldWriter,
        *,
        log: Callable[[str], None] | None = None,
        timings: SyncTimings = DEFAULT_TIMINGS,
    ) -> None:
        self.loop = loop
        self.host = host
        self.view = view
        self.timings = timings
        self._log = log
        self.state = SessionState()
        self.detector = LeadChangeDetector(
            loop,
            self.state,
            read_lead_number=host.lead_number,
            on_lead_found=self._lead_found,
            on_lead_changed=self._lead_changed,
            on_detection_timeout=self._detection_timed_out,
            on_monitor_tick=self._refresh_next_availability,
            timings=timings,
        )
        self.driver = NextCaseDriver(
            loop,
            host,
            writer,
            self.state,
            on_prompt=view.prompt,
            on_next_lead=self._next_lead_found,
            on_next_lead_timeout=self._next_lead_timed_out,
            log=log,
            timings=timings,
        )
        self.record: ExtractedRecord = EMPTY_RECORD
        self.collapsed = False
        self.closed = False
        self.pinned_top_right = False
        self.next_enabled = False
        self.notice = ("", "waiting")
        self._submit_enabled: bool | None = None
        self._pump: RepeatingTask | None = None

    def log(self, message: str) -> None:
        if self._log is not None:
            self._log(message)

    def start(self) -> None:
        if not self.view.install():
            self.log("overlay install failed; retrying on the next pump tick")
        self.resync("attach")
        self.detector.start_monitor()
        self._pump = RepeatingTask(
            self.loop,
            callback=self.pump,
            interval=self.timings.pump_interval,
            name="overlay-pump",
        ).start()

    def resync(self, reason: str) -> ExtractedRecord:
        """Extract from a fresh snapshot and bind the overlay to it.

        The key is committed only after the record has been rendered, so a
        failure mid-way leaves the previous binding in place.
        """
        self.state.replace_detection(None)
        if self.driver.running:
            self.log(f"next case: abandoned in phase {self.driver.phase}")
            self.driver.cancel()
        previous = self.state.current_lead_number
        self.view.reset_form()
        self.state.language_overridden = False
        record = self.host.extract(log=self._log)
        self.record = record
        self.view.render(record)
        self._apply_language(record)
        self._submit_enabled = None
        self.state.commit(record.lead_number)
        if record.lead_number and record.lead_number != previous:
            self._set_next_enabled(False)
        self.log(f"resync ({reason}): lead {previous or '-'} -> {record.lead_number or '-'}")
        if record.lead_number:
            self._set_notice("")
        else:
            self._set_notice(WAITING_MESSAGE)
            self.detector.start_detection()
        return record

    def pump(self) -> None:
        if self.closed:
            return
        if self.host.is_closed():
            self.log("host page closed")
            self.teardown()
            return
        if not self.view.installed():
            self._reinstall()
        self._refresh_submit_availability()
        for action in self.view.drain_actions():
            self.handle_action(action)
            if self.closed:
                return

    def handle_action(self, action: str) -> None:
        if action == "submit":
            self.submit()
        elif action == "reset":
            self.reset()
        elif action == "next":
            self.next_case()
        elif action == "toggle":
            self.toggle()
        elif action == "close":
            self.teardown()
        elif action == "language_changed":
            self.state.language_overridden = True
            self.log("language set manually; auto-detection off until next reset")
        else:
            self.log(f"ignored overlay action {action!r}")

    def read_operator(self) -> OperatorInput:
        try:
            return OperatorInput.from_dict(self.view.read_form())
        except ValueError as exc:
            self.log(f"unreadable operator form: {exc}")
            return OperatorInput()

    def submit(self) -> str | None:
        operator = self.read_operator()
        missing = operator.missing_fields()
        if missing:
            self.log(f"submit ignored: missing={missing}")
            return None
        snapshot = self.host.snapshot()
        if assign_to_me_required(snapshot):
            self.log("submit refused: case not assigned yet")
            self.view.prompt(ASSIGN_TO_ME_MESSAGE)
            return None
        record = extract_record(snapshot, log=self._log)
        url = build_form_url(record, operator)
        opened = self.host.open_in_new_tab(url)
        self.log(
            f"submit: lead={record.lead_number or '-'} url_length={len(url)} "
            f"verbatim_length={len(record.verbatim)} opened={opened}"
        )
        self._set_next_enabled(True)
        return url

    def reset(self) -> None:
        """Clear the form and the binding; the monitor re-syncs on its next tick."""
        self.view.reset_form()
        self.record = EMPTY_RECORD
        self.view.render(EMPTY_RECORD)
        self.state.clear()
        self._submit_enabled = None
        self.log("overlay reset")

    def next_case(self) -> bool:
        if not self.next_enabled:
            self.log("next ignored: submit the form first")
            return False
        origin = self.state.current_lead_number
        self.view.reset_form()
        self.state.language_overridden = False
        self._submit_enabled = None
        self.collapse()
        self.pinned_top_right = True
        self.view.move_top_right()
        return self.driver.start(origin)

    def toggle(self) -> None:
        if self.collapsed:
            self.expand()
        else:
            self.collapse()

    def collapse(self) -> None:
        self.collapsed = True
        self.view.collapse()

    def expand(self) -> None:
        self.collapsed = False
        self.view.expand()

    def teardown(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.driver.cancel()
        self.state.cancel_all()
        if self._pump is not None:
            self._pump.cancel()
            self._pump = None
        self.view.destroy()
        self.log("overlay closed")

    def _lead_found(self, lead: str) -> None:
        self.log(f"lead detected: {lead}")
        self.resync("detected")

    def _lead_changed(self, old: str, new: str) -> None:
        self.log(f"lead changed: {old or '-'} -> {new}")
        self.expand()
        self.resync("changed")

    def _detection_timed_out(self) -> None:
        self.log("lead detection timed out")
        self._set_notice(DETECTION_TIMEOUT_MESSAGE, "error")

    def _next_lead_found(self, lead: str) -> None:
        self.expand()
        if self.state.needs_resync(lead):
            self.resync("next case")

    def _next_lead_timed_out(self) -> None:
        self.expand()
        self.view.replace_content(NEXT_LEAD_TIMEOUT_MESSAGE)

    def _refresh_next_availability(self) -> None:
        if self.next_enabled and not self.host.change_status_available():
            self._set_next_enabled(False)

    def _refresh_submit_availability(self) -> None:
        enabled = self.read_operator().is_complete()
        if enabled != self._submit_enabled:
            self._submit_enabled = enabled
            self.view.set_submit_enabled(enabled)

    def _apply_language(self, record: ExtractedRecord) -> None:
        if self.state.language_overridden:
            return
        language = infer_language(record.confirmation_email)
        self.view.set_language(language)
        self.log(f"language auto-set to {language}")

    def _set_notice(self, text: str, tone: str = "waiting") -> None:
        self.notice = (text, tone)
        self.view.set_notice(text, tone)

    def _set_next_enabled(self, enabled: bool) -> None:
        self.next_enabled = enabled
        self.view.set_next_enabled(enabled)

    def _reinstall(self) -> None:
        if not self.view.install():
            return
        self.log("overlay re-installed after host navigation")
        self.view.render(self.record)
        self.view.set_notice(*self.notice)
        self.view.set_next_enabled(self.next_enabled)
        if self.pinned_top_right:
            self.view.move_top_right()
        if self.collapsed:
            self.view.collapse()
        self._submit_enabled = None
