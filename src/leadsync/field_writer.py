"""Writes into inputs whose displayed value is owned by the host's React tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

ELEMENT_MISSING = "element_missing"
HANDLER_MISSING = "handler_missing"
PAGE_ERROR = "page_error"

_REACT_WRITE_JS = """
([selector, value]) => {
  const input = document.querySelector(selector);
  if (!input) return { ok: false, fault: 'element_missing' };
  const reactKey = Object.keys(input).find((key) => key.startsWith('__reactProps'));
  if (!reactKey) return { ok: false, fault: 'handler_missing' };
  const props = input[reactKey];
  if (!props || typeof props.onChange !== 'function') {
    return { ok: false, fault: 'handler_missing' };
  }
  if (input.type === 'text') input.value = value;
  const target = { value, name: input.name };
  props.onChange({ target, currentTarget: target });
  input.dispatchEvent(new Event('input', { bubbles: true }));
  return { ok: true, fault: '' };
}
"""


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    fault: str = ""
    detail: str = ""


class ForeignFieldWriter(Protocol):
    def write(self, selector: str, value: str) -> WriteResult: ...


class ReactPropsFieldWriter:
    """Calls the ``onChange`` handler React keeps under ``__reactProps*``.

    A plain value assignment is overwritten on the next render, so the
    handler is invoked with a synthetic ``{value, name}`` event and a native
    ``input`` event is dispatched afterwards.
    """

    def __init__(self, page: Any) -> None:
        self.page = page

    def write(self, selector: str, value: str) -> WriteResult:
        try:
            raw = self.page.evaluate(_REACT_WRITE_JS, [selector, str(value)])
        except Exception as exc:
            return WriteResult(ok=False, fault=PAGE_ERROR, detail=str(exc)[:200])
        if not isinstance(raw, dict):
            return WriteResult(ok=False, fault=PAGE_ERROR, detail="unexpected evaluate result")
        if raw.get("ok"):
            return WriteResult(ok=True)
        return WriteResult(ok=False, fault=str(raw.get("fault") or PAGE_ERROR), detail=selector)
