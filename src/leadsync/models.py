"""Data models for extracted case data and operator form input."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from leadsync.constants import BAN_CID_MAX_LENGTH

OPERATOR_INPUT_KEYS = (
    "ban_cid",
    "brand",
    "product",
    "line_of_business",
    "customer_type",
    "language",
    "agent_note",
)


@dataclass(frozen=True)
class DateParts:
    year: int
    month: int
    day: int
    hour: int
    minute: int

    def display(self) -> str:
        return f"{self.month}/{self.day}/{self.year} {self.hour}:{self.minute:02d}"

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ExtractedRecord:
    """One read of the case view. Only ``lead_number`` identifies the case."""

    lead_number: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    primary_phone: str = ""
    preferred_phone: str = ""
    verbatim: str = ""
    received_date: DateParts | None = None
    confirmation_email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


EMPTY_RECORD = ExtractedRecord()


@dataclass(frozen=True)
class OperatorInput:
    ban_cid: str = ""
    brand: str = ""
    product: str = ""
    line_of_business: str = ""
    customer_type: str = ""
    language: str = ""
    agent_note: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "OperatorInput":
        extra = sorted(set(payload.keys()) - set(OPERATOR_INPUT_KEYS))
        if extra:
            raise ValueError(f"Invalid keys. extra={extra}")
        return cls(**{key: _expect_str(payload, key) for key in OPERATOR_INPUT_KEYS})

    def missing_fields(self) -> list[str]:
        missing = [
            key
            for key in ("brand", "product", "line_of_business", "customer_type", "language")
            if not getattr(self, key)
        ]
        ban = self.ban_cid.strip()
        if not ban or len(ban) > BAN_CID_MAX_LENGTH:
            missing.insert(0, "ban_cid")
        return missing

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _expect_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value
