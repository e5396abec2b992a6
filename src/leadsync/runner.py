"""Attach to a running browser over CDP and drive the overlay until it closes."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from leadsync.browser import cdp_alive
from leadsync.config import DEFAULT_TIMINGS, SyncTimings
from leadsync.controller import LeadSyncController
from leadsync.field_writer import ReactPropsFieldWriter
from leadsync.host_page import HostPage, page_is_closed
from leadsync.overlay_view import OverlayView
from leadsync.storage import RunLog, open_run, write_status
from leadsync.timers import RepeatingTask, TimerLoop

STATUS_REFRESH_SECONDS = 1.0


def select_page(pages: Iterable[Any], url_contains: str | None = None) -> Any | None:
    candidates = [page for page in pages if not page_is_closed(page)]
    if url_contains:
        candidates = [page for page in candidates if url_contains in str(getattr(page, "url", "") or "")]
    return candidates[0] if candidates else None


def build_controller(
    page: Any,
    loop: TimerLoop,
    *,
    log: Callable[[str], None] | None = None,
    timings: SyncTimings = DEFAULT_TIMINGS,
) -> LeadSyncController:
    return LeadSyncController(
        loop,
        HostPage(page),
        OverlayView(page),
        ReactPropsFieldWriter(page),
        log=log,
        timings=timings,
    )


def run_controller(
    controller: LeadSyncController,
    loop: TimerLoop,
    *,
    on_lead: Callable[[str], None] | None = None,
) -> None:
    """Start the controller and run the loop until teardown.

    ``on_lead`` is told about every change of the bound key.
    """
    controller.start()
    reported = {"lead": None}

    def report() -> None:
        lead = controller.state.current_lead_number
        if lead != reported["lead"]:
            reported["lead"] = lead
            if on_lead is not None:
                on_lead(lead)

    report()
    watcher = RepeatingTask(loop, callback=report, interval=STATUS_REFRESH_SECONDS, name="status").start()
    try:
        loop.run(until=lambda: controller.closed)
    finally:
        watcher.cancel()
        controller.teardown()


def attach(
    port: int,
    page_url_contains: str | None = None,
    *,
    timings: SyncTimings = DEFAULT_TIMINGS,
) -> dict[str, Any]:
    from playwright.sync_api import sync_playwright

    if not cdp_alive(port):
        raise SystemExit(f"No browser DevTools endpoint on port {port}. Start one with `leadsync browser-open`.")

    ctx = open_run()
    log = RunLog(ctx.log_path)
    log(f"attach: port={port} page_filter={page_url_contains or '-'}")

    with sync_playwright() as p:
        try:
            browser = p.chromium.connect_over_cdp(f"http://127.0.0.1:{port}")
        except Exception as exc:
            log(f"attach failed: {exc}")
            raise SystemExit(f"Could not connect to the browser on port {port}: {exc}") from exc
        pages = [page for context in browser.contexts for page in context.pages]
        page = select_page(pages, page_url_contains)
        if page is None:
            log("attach failed: no matching page")
            raise SystemExit("No open page matches; open the case-management app first.")
        page_url = str(getattr(page, "url", "") or "")
        log(f"attached to {page_url or '-'}")

        def on_lead(lead: str) -> None:
            write_status(
                run_id=ctx.run_id,
                run_dir=ctx.run_dir,
                state="running",
                lead_number=lead,
                page_url=page_url,
            )

        loop = TimerLoop()
        controller = build_controller(page, loop, log=log, timings=timings)
        try:
            run_controller(controller, loop, on_lead=on_lead)
        except KeyboardInterrupt:
            log("interrupted by operator")
        finally:
            lead = controller.state.current_lead_number
            write_status(
                run_id=ctx.run_id,
                run_dir=ctx.run_dir,
                state="closed",
                lead_number=lead,
                page_url=page_url,
            )
    return {
        "run_id": ctx.run_id,
        "run_dir": str(ctx.run_dir),
        "page_url": page_url,
        "lead_number": lead,
    }
