import json
import subprocess
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from leadsync.browser import find_chromium, launch_browser
from leadsync.runner import attach, run_controller, select_page
from leadsync.session_state import SessionState
from leadsync.storage import RunLog, latest_status, open_run, tail_lines, write_status
from leadsync.timers import TimerLoop, VirtualClock


class StorageTests(unittest.TestCase):
    def test_run_context_and_timestamped_log(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch("leadsync.storage.RUNS_DIR", Path(tmp) / "runs"):
                ctx = open_run()
            self.assertTrue(ctx.run_dir.is_dir())
            self.assertEqual(ctx.log_path.name, "leadsync.log")
            log = RunLog(ctx.log_path)
            log("resync (attach): lead - -> AB12")
            lines = tail_lines(ctx.log_path, 5)
        self.assertEqual(len(lines), 1)
        self.assertRegex(lines[0], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z resync")

    def test_same_second_runs_get_suffixed_dirs(self) -> None:
        started = datetime(2026, 2, 5, 13, 2, 0, tzinfo=timezone.utc)
        with tempfile.TemporaryDirectory() as tmp:
            with patch("leadsync.storage.RUNS_DIR", Path(tmp) / "runs"):
                first = open_run(started)
                second = open_run(started)
        self.assertEqual(first.run_id, "20260205-130200")
        self.assertEqual(second.run_id, "20260205-130200-01")

    def test_tail_keeps_last_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "leadsync.log"
            path.write_text("one\ntwo\nthree\n", encoding="utf-8")
            self.assertEqual(tail_lines(path, 2), ["two", "three"])
            self.assertEqual(tail_lines(path, 0), [])
            self.assertEqual(tail_lines(Path(tmp) / "missing.log", 5), [])

    def test_missing_status_reports_no_runs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch("leadsync.storage.STATUS_PATH", Path(tmp) / "status.json"):
                self.assertEqual(latest_status(), {"status": "no-runs"})

    def test_status_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            status_path = Path(tmp) / "status.json"
            with patch("leadsync.storage.STATUS_PATH", status_path):
                write_status(run_id="r1", run_dir=Path(tmp), state="running", lead_number="AB12")
                payload = latest_status()
        self.assertEqual(payload["state"], "running")
        self.assertEqual(payload["lead_number"], "AB12")
        self.assertIn("updated_at_utc", payload)
        self.assertNotIn("page_url", payload)


class BrowserLaunchTests(unittest.TestCase):
    def test_launch_is_detached_with_remote_debugging(self) -> None:
        captured = {}

        class _Proc:
            pid = 4242

        def fake_popen(cmd, **kwargs):
            captured["cmd"] = cmd
            captured["kwargs"] = kwargs
            return _Proc()

        with tempfile.TemporaryDirectory() as tmp:
            profile = Path(tmp) / "browser-profile"
            with patch("leadsync.browser.BROWSER_PROFILE_DIR", profile), patch(
                "leadsync.browser.find_chromium", return_value="/usr/bin/chromium"
            ), patch("leadsync.browser.cdp_alive", return_value=False), patch(
                "leadsync.browser.wait_for_devtools"
            ), patch("leadsync.browser.subprocess.Popen", side_effect=fake_popen):
                launched = launch_browser("https://leads.example.com", 9333)
            self.assertTrue(profile.is_dir())

        self.assertEqual(launched.pid, 4242)
        self.assertEqual(launched.port, 9333)
        self.assertIn("--remote-debugging-port=9333", captured["cmd"])
        self.assertIn("https://leads.example.com", captured["cmd"])
        self.assertTrue(captured["kwargs"]["start_new_session"])

    def test_busy_port_is_refused(self) -> None:
        with patch("leadsync.browser.find_chromium", return_value="/usr/bin/chromium"), patch(
            "leadsync.browser.cdp_alive", return_value=True
        ):
            with self.assertRaises(SystemExit):
                launch_browser(None, 9222)

    def test_missing_chromium_names_the_candidates(self) -> None:
        with patch("leadsync.browser.shutil.which", return_value=None):
            with self.assertRaises(SystemExit) as ctx:
                find_chromium()
        self.assertIn("chromium-browser", str(ctx.exception))

    def test_browser_output_goes_to_profile_log(self) -> None:
        captured = {}

        class _Proc:
            pid = 1

        def fake_popen(cmd, **kwargs):
            captured.update(kwargs)
            return _Proc()

        with tempfile.TemporaryDirectory() as tmp:
            profile = Path(tmp) / "browser-profile"
            with patch("leadsync.browser.BROWSER_PROFILE_DIR", profile), patch(
                "leadsync.browser.find_chromium", return_value="/usr/bin/chromium"
            ), patch("leadsync.browser.cdp_alive", return_value=False), patch(
                "leadsync.browser.wait_for_devtools"
            ), patch("leadsync.browser.subprocess.Popen", side_effect=fake_popen):
                launch_browser()
            self.assertTrue((profile / "browser.log").exists())

        self.assertIs(captured["stderr"], subprocess.STDOUT)
        self.assertIs(captured["stdin"], subprocess.DEVNULL)


class RunnerTests(unittest.TestCase):
    def test_select_page_filters_closed_and_url(self) -> None:
        closed = SimpleNamespace(url="https://leads.example.com/1", is_closed=lambda: True)
        other = SimpleNamespace(url="https://mail.example.com", is_closed=lambda: False)
        match = SimpleNamespace(url="https://leads.example.com/2", is_closed=lambda: False)
        pages = [closed, other, match]
        self.assertIs(select_page(pages, "leads.example"), match)
        self.assertIs(select_page(pages), other)
        self.assertIsNone(select_page([closed]))

    def test_run_controller_reports_leads_until_closed(self) -> None:
        clock = VirtualClock()
        loop = TimerLoop(clock=clock, sleep=clock.sleep)
        reported: list[str] = []

        class _Controller:
            def __init__(self) -> None:
                self.state = SessionState()
                self.closed = False
                self.teardowns = 0

            def start(self) -> None:
                self.state.commit("AB12")
                loop.call_later(2.5, lambda: self.state.commit("CD34"))
                loop.call_later(4.5, self.close)

            def close(self) -> None:
                self.closed = True

            def teardown(self) -> None:
                self.teardowns += 1

        controller = _Controller()
        run_controller(controller, loop, on_lead=reported.append)  # type: ignore[arg-type]
        self.assertEqual(reported, ["AB12", "CD34"])
        self.assertEqual(controller.teardowns, 1)

    def test_attach_requires_devtools_endpoint(self) -> None:
        with patch("leadsync.runner.cdp_alive", return_value=False):
            with self.assertRaises(SystemExit):
                attach(9333)


if __name__ == "__main__":
    unittest.main()
