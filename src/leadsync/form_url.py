"""Deep-link URL construction for the external submission form."""

from __future__ import annotations

from urllib.parse import urlencode

from leadsync.constants import (
    ENTRY_BAN_CID,
    ENTRY_BRAND,
    ENTRY_CUSTOMER_TYPE,
    ENTRY_FULL_NAME,
    ENTRY_LANGUAGE,
    ENTRY_LINE_OF_BUSINESS,
    ENTRY_PREFERRED_PHONE,
    ENTRY_PRIMARY_PHONE,
    ENTRY_PRODUCT,
    ENTRY_RECEIVED_DATE,
    ENTRY_VERBATIM,
    FORM_BASE_URL,
)
from leadsync.models import ExtractedRecord, OperatorInput


def compose_verbatim(verbatim: str, agent_note: str = "") -> str:
    note = str(agent_note or "").strip()
    text = str(verbatim or "")
    if note:
        return f"[NOTE FOR AGENT: {note}] {text}"
    return text


def build_form_payload(
    record: ExtractedRecord,
    operator: OperatorInput,
    agent_note: str | None = None,
) -> list[tuple[str, str]]:
    missing = operator.missing_fields()
    if missing:
        raise ValueError(f"Operator input incomplete: missing={missing}")

    params: list[tuple[str, str]] = []
    date = record.received_date
    if date is not None:
        params.extend(
            [
                (f"{ENTRY_RECEIVED_DATE}_year", str(date.year)),
                (f"{ENTRY_RECEIVED_DATE}_month", str(date.month)),
                (f"{ENTRY_RECEIVED_DATE}_day", str(date.day)),
                (f"{ENTRY_RECEIVED_DATE}_hour", str(date.hour)),
                (f"{ENTRY_RECEIVED_DATE}_minute", str(date.minute)),
            ]
        )

    params.extend(
        [
            (ENTRY_LINE_OF_BUSINESS, operator.line_of_business),
            (ENTRY_BRAND, operator.brand),
            (ENTRY_CUSTOMER_TYPE, operator.customer_type),
            (ENTRY_PRODUCT, operator.product),
            (ENTRY_LANGUAGE, operator.language),
            (ENTRY_BAN_CID, operator.ban_cid.strip()),
        ]
    )

    if record.full_name:
        params.append((ENTRY_FULL_NAME, record.full_name))
    if record.primary_phone:
        params.append((ENTRY_PRIMARY_PHONE, record.primary_phone))
    if record.preferred_phone:
        params.append((ENTRY_PREFERRED_PHONE, record.preferred_phone))

    note = operator.agent_note if agent_note is None else agent_note
    verbatim = compose_verbatim(record.verbatim, note)
    if verbatim:
        params.append((ENTRY_VERBATIM, verbatim))
    return params


def build_form_url(
    record: ExtractedRecord,
    operator: OperatorInput,
    agent_note: str | None = None,
) -> str:
    """Serialize a fresh extraction plus operator input into the form URL.

    Callers pass a record read immediately before the call; the verbatim
    field is recomputed from it every time.
    """
    return f"{FORM_BASE_URL}?{urlencode(build_form_payload(record, operator, agent_note))}"
