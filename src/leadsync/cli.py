"""CLI entrypoint for leadsync."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from leadsync.browser import DEFAULT_CDP_PORT, launch_browser
from leadsync.constants import (
    BRAND_OPTIONS,
    CUSTOMER_TYPE_OPTIONS,
    LANGUAGE_OPTIONS,
    LINE_OF_BUSINESS_OPTIONS,
    PRODUCT_OPTIONS,
)
from leadsync.extract import as_tree, extract_record
from leadsync.form_url import build_form_url
from leadsync.models import OperatorInput
from leadsync.storage import latest_status, tail_lines


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "browser-open":
        launched = launch_browser(args.url, args.port)
        print(json.dumps(launched.to_dict(), indent=2, ensure_ascii=False))
        return
    if args.command == "attach":
        from leadsync.runner import attach

        summary = attach(args.port, args.page_url_contains)
        print(json.dumps(summary, indent=2, ensure_ascii=False))
        return
    if args.command == "extract":
        extract_command(args.html)
        return
    if args.command == "build-url":
        build_url_command(args)
        return
    if args.command == "status":
        print(json.dumps(latest_status(), indent=2, ensure_ascii=False))
        return
    if args.command == "logs":
        logs_command(args.tail)
        return

    parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="leadsync", description="Case-view sync overlay for the lead tracker.")
    subparsers = parser.add_subparsers(dest="command")

    open_parser = subparsers.add_parser("browser-open", help="Launch Chromium with remote debugging enabled")
    open_parser.add_argument("--url", type=str, default=None)
    open_parser.add_argument("--port", type=int, default=DEFAULT_CDP_PORT)

    attach_parser = subparsers.add_parser("attach", help="Inject the overlay and keep it in sync")
    attach_parser.add_argument("--port", type=int, default=DEFAULT_CDP_PORT)
    attach_parser.add_argument(
        "--page-url-contains",
        type=str,
        default=None,
        help="Pick the first open page whose URL contains this text",
    )

    extract_parser = subparsers.add_parser("extract", help="Extract case fields from a saved page")
    extract_parser.add_argument("--html", type=Path, required=True)

    url_parser = subparsers.add_parser("build-url", help="Build the submission URL for a saved page")
    url_parser.add_argument("--html", type=Path, required=True)
    url_parser.add_argument("--ban-cid", type=str, required=True)
    url_parser.add_argument("--brand", choices=BRAND_OPTIONS, required=True)
    url_parser.add_argument("--product", choices=PRODUCT_OPTIONS, required=True)
    url_parser.add_argument("--lob", choices=LINE_OF_BUSINESS_OPTIONS, required=True)
    url_parser.add_argument("--customer-type", choices=CUSTOMER_TYPE_OPTIONS, required=True)
    url_parser.add_argument("--language", choices=LANGUAGE_OPTIONS, required=True)
    url_parser.add_argument("--note", type=str, default="")

    subparsers.add_parser("status", help="Show latest run status")

    logs_parser = subparsers.add_parser("logs", help="Tail the log of the latest run")
    logs_parser.add_argument("--tail", type=int, default=200)
    return parser


def _read_html(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SystemExit(f"Could not read HTML file {path}: {exc}") from exc


def extract_command(path: Path) -> None:
    record = extract_record(as_tree(_read_html(path)))
    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))


def build_url_command(args: argparse.Namespace) -> None:
    operator = OperatorInput(
        ban_cid=args.ban_cid,
        brand=args.brand,
        product=args.product,
        line_of_business=args.lob,
        customer_type=args.customer_type,
        language=args.language,
        agent_note=args.note,
    )
    missing = operator.missing_fields()
    if missing:
        raise SystemExit(f"Operator input incomplete: missing={missing}")
    record = extract_record(as_tree(_read_html(path=args.html)))
    print(build_form_url(record, operator))


def logs_command(tail_count: int) -> None:
    payload = latest_status()
    if payload.get("status") == "no-runs":
        raise SystemExit("No runs available yet.")
    run_log = Path(payload["run_dir"]) / "leadsync.log"
    print("\n".join(tail_lines(run_log, tail_count)))
