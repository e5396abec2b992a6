"""Field extraction from a snapshot of the host case view."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from bs4 import BeautifulSoup
from bs4.element import Tag

from leadsync.constants import (
    ASSIGN_TO_ME_ICON_SELECTOR,
    ASSIGNED_LABEL_SELECTOR,
    ASSIGNED_LABEL_TEXT,
    ASSIGNED_VALUE_SELECTOR,
    CONTAINER_CLASS,
    LABEL_CONFIRMATION_EMAIL,
    LABEL_EMAIL,
    LABEL_FIRST_NAME,
    LABEL_LAST_NAME,
    LABEL_PREFERRED_PHONE,
    LABEL_PRIMARY_PHONE,
    LABEL_SELECTOR,
    LABEL_VERBATIM,
    LEAD_HEADING_SELECTOR,
    LEAD_NUMBER_RE,
    LEAD_PREFIX,
    PHONE_DIGITS,
    TIMELINE_DATE_SELECTOR,
    TIMELINE_ITEM_SELECTOR,
    TIMELINE_NEW_LEAD_MARKER,
    VALUE_SELECTOR,
)
from leadsync.dates import parse_received_date
from leadsync.models import DateParts, ExtractedRecord

_NON_DIGIT_RE = re.compile(r"\D")


def as_tree(root: Any) -> Tag | None:
    if root is None:
        return None
    if isinstance(root, Tag):
        return root
    if isinstance(root, (str, bytes)):
        try:
            return BeautifulSoup(root, "lxml")
        except Exception:
            return None
    return None


def extract_record(root: Any, *, log: Callable[[str], None] | None = None) -> ExtractedRecord:
    tree = as_tree(root)
    if tree is None:
        return ExtractedRecord()
    return ExtractedRecord(
        lead_number=lead_number(tree),
        first_name=text_by_label(tree, *LABEL_FIRST_NAME),
        last_name=text_by_label(tree, *LABEL_LAST_NAME),
        email=text_by_label(tree, *LABEL_EMAIL),
        primary_phone=clean_phone(text_by_label(tree, *LABEL_PRIMARY_PHONE)),
        preferred_phone=clean_phone(text_by_label(tree, *LABEL_PREFERRED_PHONE)),
        verbatim=text_by_label(tree, *LABEL_VERBATIM),
        received_date=received_date(tree, log=log),
        confirmation_email=text_by_label(tree, *LABEL_CONFIRMATION_EMAIL),
    )


def lead_number_from_headings(texts: Iterable[Any]) -> str:
    for raw in texts:
        text = str(raw or "")
        if LEAD_PREFIX not in text:
            continue
        match = LEAD_NUMBER_RE.search(text)
        if match:
            return match.group(1)
    return ""


def lead_number(root: Any) -> str:
    tree = as_tree(root)
    if tree is None:
        return ""
    try:
        headings = tree.select(LEAD_HEADING_SELECTOR)
    except Exception:
        return ""
    return lead_number_from_headings(_text(el) for el in headings)


def text_by_label(root: Any, *labels: str) -> str:
    """Value of the first labeled field whose label contains any of ``labels``.

    Labels and values share the nearest ``MuiBox-root`` container; a label
    without a container or a value is skipped.
    """
    tree = as_tree(root)
    if tree is None or not labels:
        return ""
    try:
        candidates = tree.select(LABEL_SELECTOR)
    except Exception:
        return ""
    for el in candidates:
        text = _text(el)
        for label in labels:
            if label not in text:
                continue
            value = _value_in_container(el, VALUE_SELECTOR)
            if value is not None:
                return value
    return ""


def assigned_to(root: Any) -> str:
    tree = as_tree(root)
    if tree is None:
        return ""
    try:
        candidates = tree.select(ASSIGNED_LABEL_SELECTOR)
    except Exception:
        return ""
    for el in candidates:
        if _text(el) != ASSIGNED_LABEL_TEXT:
            continue
        value = _value_in_container(el, ASSIGNED_VALUE_SELECTOR)
        if value:
            return value
    return ""


def assign_to_me_required(root: Any) -> bool:
    tree = as_tree(root)
    if tree is None:
        return False
    if assigned_to(tree):
        return False
    try:
        return tree.select_one(ASSIGN_TO_ME_ICON_SELECTOR) is not None
    except Exception:
        return False


def received_date(root: Any, *, log: Callable[[str], None] | None = None) -> DateParts | None:
    tree = as_tree(root)
    if tree is None:
        return None
    try:
        items = tree.select(TIMELINE_ITEM_SELECTOR)
    except Exception:
        return None
    for item in items:
        if TIMELINE_NEW_LEAD_MARKER not in _text(item):
            continue
        caption = item.select_one(TIMELINE_DATE_SELECTOR)
        if caption is None:
            continue
        raw = _text(caption).strip()
        parsed = parse_received_date(raw)
        if parsed is None and log is not None:
            log(f"unparsed received date: {raw!r}")
        return parsed
    return None


def clean_phone(text: str) -> str:
    if not text:
        return ""
    digits = _NON_DIGIT_RE.sub("", str(text))
    return digits[-PHONE_DIGITS:]


def infer_language(confirmation_email: str) -> str:
    return "FR" if "fr" in str(confirmation_email or "").lower() else "EN"


def _value_in_container(el: Tag, value_selector: str) -> str | None:
    container = _closest_with_class(el, CONTAINER_CLASS)
    if container is None:
        return None
    value_el = container.select_one(value_selector)
    if value_el is None:
        return None
    return _text(value_el).strip()


def _closest_with_class(el: Tag, class_name: str) -> Tag | None:
    node: Any = el
    while isinstance(node, Tag):
        classes = node.get("class") or []
        if class_name in classes:
            return node
        node = node.parent
    return None


def _text(el: Tag) -> str:
    try:
        return el.get_text()
    except Exception:
        return ""
