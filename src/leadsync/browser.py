"""Launching a debuggable Chromium and checking its DevTools endpoint."""

from __future__ import annotations

import os
import shutil
import socket
import subprocess
import time
import urllib.error
import urllib.request
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from leadsync.storage import BROWSER_PROFILE_DIR

DEFAULT_CDP_PORT = 9222
DEVTOOLS_STARTUP_SECONDS = 15.0
CHROMIUM_EXECUTABLES = (
    "google-chrome",
    "google-chrome-stable",
    "chromium",
    "chromium-browser",
)


@dataclass(frozen=True)
class LaunchedBrowser:
    pid: int
    port: int
    browser_binary: str
    user_data_dir: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def launch_browser(url: str | None = None, port: int | None = None) -> LaunchedBrowser:
    """Start a detached browser with remote debugging; the profile is reused across launches."""
    executable = find_chromium()
    port = port or pick_free_port()
    if cdp_alive(port):
        raise SystemExit(f"Port {port} already serves DevTools; run `leadsync attach --port {port}` instead.")
    profile_dir = Path(BROWSER_PROFILE_DIR)
    profile_dir.mkdir(parents=True, exist_ok=True)
    start_url = url or "about:blank"
    cmd = [
        executable,
        f"--remote-debugging-port={port}",
        f"--user-data-dir={profile_dir.resolve()}",
        "--no-first-run",
        "--no-default-browser-check",
        "--new-window",
        start_url,
    ]
    with (profile_dir / "browser.log").open("w", encoding="utf-8") as log_fh:
        proc = subprocess.Popen(cmd, stdout=log_fh, stderr=subprocess.STDOUT, **_detached_kwargs())
    wait_for_devtools(port)
    return LaunchedBrowser(
        pid=proc.pid,
        port=port,
        browser_binary=executable,
        user_data_dir=str(profile_dir),
        url=start_url,
    )


def cdp_alive(port: int) -> bool:
    try:
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/json/version", timeout=1.5) as resp:
            return resp.status == 200
    except (urllib.error.URLError, TimeoutError, OSError):
        return False


def wait_for_devtools(port: int, timeout: float = DEVTOOLS_STARTUP_SECONDS) -> None:
    deadline = time.monotonic() + timeout
    while not cdp_alive(port):
        if time.monotonic() >= deadline:
            raise SystemExit(f"Chromium did not open DevTools on port {port} within {timeout:.0f}s")
        time.sleep(0.2)


def find_chromium() -> str:
    for name in CHROMIUM_EXECUTABLES:
        found = shutil.which(name)
        if found:
            return found
    raise SystemExit(f"No Chromium executable on PATH (looked for {', '.join(CHROMIUM_EXECUTABLES)}).")


def pick_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


def _detached_kwargs() -> dict[str, Any]:
    """Popen options that let the browser outlive the CLI process."""
    if os.name == "nt":
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"stdin": subprocess.DEVNULL, "close_fds": True, "creationflags": flags}
    return {"stdin": subprocess.DEVNULL, "close_fds": True, "start_new_session": True}
