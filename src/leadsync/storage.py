"""Run directories, run logs and the latest-run status file."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


RUNS_DIR = Path("runs")
STATUS_PATH = RUNS_DIR / "status.json"
BROWSER_PROFILE_DIR = RUNS_DIR / "browser-profile"
RUN_LOG_NAME = "leadsync.log"
MAX_RUN_DIR_ATTEMPTS = 100


@dataclass(frozen=True)
class RunContext:
    run_id: str
    run_dir: Path
    log_path: Path


def open_run(started_at: datetime | None = None) -> RunContext:
    """Allocate ``runs/<UTC stamp>`` (suffixed ``-NN`` on collision)."""
    RUNS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = (started_at or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
    for attempt in range(MAX_RUN_DIR_ATTEMPTS):
        run_id = stamp if attempt == 0 else f"{stamp}-{attempt:02d}"
        run_dir = RUNS_DIR / run_id
        try:
            run_dir.mkdir()
        except FileExistsError:
            continue
        return RunContext(run_id=run_id, run_dir=run_dir, log_path=run_dir / RUN_LOG_NAME)
    raise RuntimeError(f"No free run directory for {stamp} after {MAX_RUN_DIR_ATTEMPTS} attempts")


def append_line(path: Path, line: str) -> None:
    with path.open("a", encoding="utf-8") as fh:
        fh.write(line.rstrip() + "\n")


class RunLog:
    """Callable log sink that timestamps each line in UTC."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __call__(self, message: str) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        append_line(self.path, f"{stamp} {message}")


def write_status(
    *,
    run_id: str,
    run_dir: Path,
    state: str,
    lead_number: str = "",
    page_url: str | None = None,
) -> None:
    payload: dict[str, Any] = {
        "run_id": run_id,
        "run_dir": str(run_dir),
        "state": state,
        "lead_number": lead_number,
        "updated_at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if page_url:
        payload["page_url"] = page_url
    STATUS_PATH.parent.mkdir(parents=True, exist_ok=True)
    STATUS_PATH.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def latest_status() -> dict[str, Any]:
    if not STATUS_PATH.exists():
        return {"status": "no-runs"}
    return json.loads(STATUS_PATH.read_text(encoding="utf-8"))


def tail_lines(path: Path, line_count: int) -> list[str]:
    if line_count <= 0 or not path.exists():
        return []
    with path.open("r", encoding="utf-8") as fh:
        return [line.rstrip("\n") for line in deque(fh, maxlen=line_count)]
