"""Received-date parsing for the case timeline caption."""

from __future__ import annotations

import re

from leadsync.constants import MONTHS
from leadsync.models import DateParts

_DATE_RE = re.compile(r"(\w+)\s+(\d+),\s+(\d+)\s+(\d+):(\d+)\s+(am|pm)", flags=re.IGNORECASE)


def parse_received_date(text: str) -> DateParts | None:
    """Parse ``"Feb 05, 2026 11:04 am PST"`` into 24-hour date parts.

    The host timeline sometimes prints an hour that is already on the
    24-hour clock while still carrying an am/pm suffix ("13:02 pm"). Such
    hours are folded back by twelve instead of being shifted again; this
    mirrors a known source-data anomaly and is not a time-zone rule.
    """
    try:
        match = _DATE_RE.search(str(text or ""))
        if not match:
            return None
        month = MONTHS.get(match.group(1))
        if month is None:
            return None
        day = int(match.group(2))
        year = int(match.group(3))
        hour = int(match.group(4))
        minute = int(match.group(5))
        meridiem = match.group(6).lower()

        if hour > 12:
            hour -= 12
        elif meridiem == "pm" and hour != 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0

        return DateParts(year=year, month=month, day=day, hour=hour, minute=minute)
    except Exception:
        return None
