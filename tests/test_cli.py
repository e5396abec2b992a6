import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from case_pages import case_page
from leadsync.cli import logs_command, main
from leadsync.constants import ENTRY_BAN_CID, FORM_BASE_URL


class CLITests(unittest.TestCase):
    def test_extract_prints_record_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "case.html"
            path.write_text(case_page(lead="AB12"), encoding="utf-8")
            buf = io.StringIO()
            with redirect_stdout(buf):
                main(["extract", "--html", str(path)])
        payload = json.loads(buf.getvalue())
        self.assertEqual(payload["lead_number"], "AB12")
        self.assertEqual(payload["primary_phone"], "6045550199")
        self.assertEqual(payload["received_date"], {"year": 2026, "month": 2, "day": 5, "hour": 13, "minute": 2})

    def test_build_url_prints_form_link(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "case.html"
            path.write_text(case_page(), encoding="utf-8")
            buf = io.StringIO()
            with redirect_stdout(buf):
                main(
                    [
                        "build-url",
                        "--html",
                        str(path),
                        "--ban-cid",
                        "987654321",
                        "--brand",
                        "TELUS",
                        "--product",
                        "Postpaid",
                        "--lob",
                        "Wireline",
                        "--customer-type",
                        "Business",
                        "--language",
                        "FR",
                    ]
                )
        url = buf.getvalue().strip()
        self.assertTrue(url.startswith(FORM_BASE_URL + "?"))
        self.assertIn(f"{ENTRY_BAN_CID}=987654321", url)

    def test_build_url_rejects_long_ban(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "case.html"
            path.write_text(case_page(), encoding="utf-8")
            with self.assertRaises(SystemExit):
                main(
                    [
                        "build-url",
                        "--html",
                        str(path),
                        "--ban-cid",
                        "1234567890",
                        "--brand",
                        "TELUS",
                        "--product",
                        "Postpaid",
                        "--lob",
                        "Wireline",
                        "--customer-type",
                        "Business",
                        "--language",
                        "EN",
                    ]
                )

    def test_missing_html_file_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["extract", "--html", "/nonexistent/case.html"])
        self.assertIn("Could not read HTML file", str(ctx.exception))

    def test_status_without_runs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch("leadsync.storage.STATUS_PATH", Path(tmp) / "status.json"):
                buf = io.StringIO()
                with redirect_stdout(buf):
                    main(["status"])
        self.assertEqual(json.loads(buf.getvalue()), {"status": "no-runs"})

    def test_logs_without_runs_exits(self) -> None:
        with patch("leadsync.cli.latest_status", return_value={"status": "no-runs"}):
            with self.assertRaises(SystemExit):
                logs_command(10)

    def test_logs_tail_latest_run(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            run_dir = Path(tmp)
            (run_dir / "leadsync.log").write_text("one\ntwo\nthree\n", encoding="utf-8")
            buf = io.StringIO()
            with patch("leadsync.cli.latest_status", return_value={"run_dir": str(run_dir)}), redirect_stdout(buf):
                logs_command(2)
        self.assertEqual(buf.getvalue().strip().splitlines(), ["two", "three"])

    def test_attach_is_delegated_to_runner(self) -> None:
        summary = {"run_id": "r1", "run_dir": "runs/r1", "page_url": "", "lead_number": "AB12"}
        buf = io.StringIO()
        with patch("leadsync.runner.attach", return_value=summary) as attach_mock, redirect_stdout(buf):
            main(["attach", "--port", "9333", "--page-url-contains", "leads"])
        attach_mock.assert_called_once_with(9333, "leads")
        self.assertEqual(json.loads(buf.getvalue())["lead_number"], "AB12")


if __name__ == "__main__":
    unittest.main()
