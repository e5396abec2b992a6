"""Adapter for the live host page driven through Playwright."""

from __future__ import annotations

from typing import Any, Callable

from bs4.element import Tag

from leadsync.constants import CHANGE_STATUS_ICON_SELECTOR, LEAD_HEADING_SELECTOR
from leadsync.extract import as_tree, assigned_to, extract_record, lead_number_from_headings
from leadsync.models import ExtractedRecord


def page_is_closed(page: Any | None) -> bool:
    if page is None:
        return True
    checker = getattr(page, "is_closed", None)
    if callable(checker):
        try:
            return bool(checker())
        except Exception:
            return True
    return False


class HostPage:
    """Every call degrades to an empty or false result when the page faults."""

    def __init__(self, page: Any) -> None:
        self.page = page

    def is_closed(self) -> bool:
        return page_is_closed(self.page)

    def snapshot(self) -> Tag | None:
        if self.is_closed():
            return None
        try:
            html = self.page.content()
        except Exception:
            return None
        return as_tree(html)

    def extract(self, *, log: Callable[[str], None] | None = None) -> ExtractedRecord:
        return extract_record(self.snapshot(), log=log)

    def lead_number(self) -> str:
        if self.is_closed():
            return ""
        try:
            texts = self.page.evaluate(
                "([selector]) => Array.from(document.querySelectorAll(selector))"
                ".map((el) => el.textContent || '')",
                [LEAD_HEADING_SELECTOR],
            )
        except Exception:
            return ""
        if not isinstance(texts, list):
            return ""
        return lead_number_from_headings(texts)

    def assigned_to(self) -> str:
        return assigned_to(self.snapshot())

    def exists(self, selector: str) -> bool:
        if self.is_closed():
            return False
        try:
            return bool(self.page.evaluate("([selector]) => !!document.querySelector(selector)", [selector]))
        except Exception:
            return False

    def change_status_available(self) -> bool:
        if self.is_closed():
            return False
        try:
            return bool(
                self.page.evaluate(
                    """
                    ([selector]) => {
                      const button = document.querySelector(selector)?.closest('button');
                      if (!button) return false;
                      return button.offsetParent !== null && !button.disabled;
                    }
                    """,
                    [CHANGE_STATUS_ICON_SELECTOR],
                )
            )
        except Exception:
            return False

    def click_change_status(self) -> bool:
        if self.is_closed():
            return False
        try:
            return bool(
                self.page.evaluate(
                    """
                    ([selector]) => {
                      const button = document.querySelector(selector)?.closest('button');
                      if (!button) return false;
                      button.click();
                      return true;
                    }
                    """,
                    [CHANGE_STATUS_ICON_SELECTOR],
                )
            )
        except Exception:
            return False

    def open_in_new_tab(self, url: str) -> bool:
        if self.is_closed():
            return False
        try:
            tab = self.page.context.new_page()
            tab.goto(url, wait_until="commit")
        except Exception:
            return False
        return True
