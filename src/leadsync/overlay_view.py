"""Injected overlay panel and the thin Python bridge that drives it."""

from __future__ import annotations

import json
from typing import Any

from leadsync.constants import (
    BAN_CID_MAX_LENGTH,
    BRAND_OPTIONS,
    CUSTOMER_TYPE_OPTIONS,
    LANGUAGE_OPTIONS,
    LINE_OF_BUSINESS_OPTIONS,
    PRODUCT_OPTIONS,
)
from leadsync.host_page import page_is_closed
from leadsync.models import ExtractedRecord

OVERLAY_ID = "leadsync-overlay"
VERBATIM_PREVIEW_LENGTH = 100

_OVERLAY_SCRIPT = """
(() => {
  const opts = __OPTIONS_JSON__;
  const ROOT_ID = '__OVERLAY_ID__';
  const install = () => {
    if (document.getElementById(ROOT_ID) && window.__leadsyncOverlay) return true;
    if (!document.body) return false;
    document.getElementById(ROOT_ID)?.remove();
    const actions = [];
    const push = (type) => actions.push({ type });

    const root = document.createElement('div');
    root.id = ROOT_ID;
    Object.assign(root.style, {
      position: 'fixed', top: '75px', left: '50%', transform: 'translateX(-50%)',
      width: '420px', background: 'white', borderRadius: '8px',
      boxShadow: '0 4px 20px rgba(0,0,0,0.3)', zIndex: '999999',
      fontFamily: 'Arial, sans-serif', fontSize: '14px', color: '#222',
    });

    const header = document.createElement('div');
    Object.assign(header.style, {
      background: '#4285f4', color: 'white', padding: '12px', borderRadius: '8px 8px 0 0',
      display: 'flex', justifyContent: 'space-between', alignItems: 'center',
    });
    const title = document.createElement('strong');
    title.textContent = 'Submission Helper';
    const headerButtons = document.createElement('div');
    const mkHeaderBtn = (text, type) => {
      const btn = document.createElement('button');
      btn.textContent = text;
      Object.assign(btn.style, {
        background: 'none', border: 'none', color: 'white', cursor: 'pointer', fontSize: '18px',
        marginLeft: '8px',
      });
      btn.onclick = () => push(type);
      headerButtons.appendChild(btn);
      return btn;
    };
    const toggleBtn = mkHeaderBtn('\\u2212', 'toggle');
    mkHeaderBtn('\\u00d7', 'close');
    header.appendChild(title);
    header.appendChild(headerButtons);
    root.appendChild(header);

    const content = document.createElement('div');
    content.style.padding = '16px';
    root.appendChild(content);

    const dataSection = document.createElement('div');
    Object.assign(dataSection.style, {
      marginBottom: '12px', padding: '8px', background: '#f0f0f0', borderRadius: '4px',
      fontSize: '11px', border: '2px solid #555',
    });
    const dataHeading = document.createElement('strong');
    dataHeading.textContent = 'Extracted Data: ';
    const notice = document.createElement('span');
    notice.style.fontWeight = 'normal';
    notice.style.fontSize = '10px';
    dataHeading.appendChild(notice);
    const dataBody = document.createElement('div');
    dataBody.style.marginTop = '4px';
    dataBody.textContent = 'Loading...';
    dataSection.appendChild(dataHeading);
    dataSection.appendChild(dataBody);
    content.appendChild(dataSection);

    const form = document.createElement('div');
    content.appendChild(form);
    const field = (labelText, control) => {
      const label = document.createElement('label');
      label.style.display = 'block';
      label.style.marginBottom = '8px';
      const strong = document.createElement('strong');
      strong.textContent = labelText;
      label.appendChild(strong);
      label.appendChild(document.createElement('br'));
      label.appendChild(control);
      form.appendChild(label);
      return control;
    };
    const select = (values) => {
      const el = document.createElement('select');
      el.style.width = '100%';
      el.style.padding = '6px';
      const blank = document.createElement('option');
      blank.value = '';
      blank.textContent = 'Choose...';
      el.appendChild(blank);
      values.forEach((value) => {
        const option = document.createElement('option');
        option.value = value;
        option.textContent = value;
        el.appendChild(option);
      });
      return el;
    };
    const radios = (name, values, onChange) => {
      const wrap = document.createElement('span');
      values.forEach((value) => {
        const label = document.createElement('label');
        label.style.marginRight = '12px';
        const input = document.createElement('input');
        input.type = 'radio';
        input.name = `leadsync-${name}`;
        input.value = value;
        if (onChange) input.addEventListener('change', onChange);
        label.appendChild(input);
        label.appendChild(document.createTextNode(` ${value}`));
        wrap.appendChild(label);
      });
      return wrap;
    };
    const ban = document.createElement('input');
    ban.type = 'text';
    ban.maxLength = opts.banMaxLength;
    ban.style.width = 'calc(100% - 12px)';
    ban.style.padding = '6px';
    field('BAN/CID *', ban);
    const brand = field('Brand *', select(opts.brands));
    const product = field('Product/Service *', select(opts.products));
    field('LOB *', radios('lob', opts.linesOfBusiness));
    field('Customer Type *', radios('custType', opts.customerTypes));
    field('Customer Language *', radios('lang', opts.languages, () => push('language_changed')));
    const note = document.createElement('textarea');
    Object.assign(note.style, { width: 'calc(100% - 12px)', minHeight: '60px', padding: '6px', resize: 'none' });
    field('Note for Agent', note);

    const buttons = document.createElement('div');
    buttons.style.display = 'flex';
    buttons.style.gap = '6px';
    const mkButton = (text, type, color) => {
      const btn = document.createElement('button');
      btn.textContent = text;
      btn.dataset.color = color;
      Object.assign(btn.style, {
        flex: '1', padding: '8px', border: 'none', borderRadius: '4px', fontWeight: 'bold',
        fontSize: '12px', background: color, color: 'white', cursor: 'pointer',
      });
      btn.onclick = () => { if (!btn.disabled) push(type); };
      buttons.appendChild(btn);
      return btn;
    };
    mkButton('Reset', 'reset', '#f44336');
    const submitBtn = mkButton('Submit', 'submit', '#4285f4');
    const nextBtn = mkButton('Next', 'next', '#4caf50');
    content.appendChild(buttons);

    const setEnabled = (btn, enabled) => {
      btn.disabled = !enabled;
      btn.style.background = enabled ? btn.dataset.color : '#ccc';
      btn.style.color = enabled ? 'white' : '#666';
      btn.style.cursor = enabled ? 'pointer' : 'not-allowed';
    };
    setEnabled(submitBtn, false);
    setEnabled(nextBtn, false);

    const checked = (name) => {
      const el = root.querySelector(`input[name="leadsync-${name}"]:checked`);
      return el ? el.value : '';
    };
    const row = (label, value) => {
      const div = document.createElement('div');
      const strong = document.createElement('strong');
      strong.textContent = `${label}: `;
      div.appendChild(strong);
      div.appendChild(document.createTextNode(value));
      return div;
    };

    window.__leadsyncOverlay = {
      render: (view) => {
        dataBody.textContent = '';
        const grid = document.createElement('div');
        Object.assign(grid.style, { display: 'grid', gridTemplateColumns: '1fr 1fr', gap: '4px 12px' });
        grid.appendChild(row('Lead #', view.lead));
        grid.appendChild(row('Date', view.date));
        grid.appendChild(row('Name', view.name));
        grid.appendChild(row('Email', view.email));
        grid.appendChild(row('Phone', view.phone));
        grid.appendChild(row('Contact #', view.contact));
        const verbatim = row('Verbatim', view.verbatim_preview);
        verbatim.style.gridColumn = '1/-1';
        verbatim.title = view.verbatim;
        grid.appendChild(verbatim);
        dataBody.appendChild(grid);
      },
      setNotice: (text, tone) => {
        notice.textContent = text || '';
        notice.style.color = tone === 'error' ? '#f44336' : '#ff9800';
      },
      replaceContent: (text) => {
        dataBody.textContent = '';
        const span = document.createElement('span');
        span.style.color = '#f44336';
        span.textContent = text;
        dataBody.appendChild(span);
      },
      readForm: () => ({
        ban_cid: ban.value,
        brand: brand.value,
        product: product.value,
        line_of_business: checked('lob'),
        customer_type: checked('custType'),
        language: checked('lang'),
        agent_note: note.value,
      }),
      drainActions: () => actions.splice(0, actions.length),
      setSubmitEnabled: (enabled) => setEnabled(submitBtn, !!enabled),
      setNextEnabled: (enabled) => setEnabled(nextBtn, !!enabled),
      setLanguage: (value) => {
        const el = root.querySelector(`input[name="leadsync-lang"][value="${value}"]`);
        if (el) el.checked = true;
      },
      resetForm: () => {
        ban.value = '';
        brand.value = '';
        product.value = '';
        note.value = '';
        root.querySelectorAll('input[type="radio"]').forEach((el) => { el.checked = false; });
      },
      collapse: () => { content.style.display = 'none'; toggleBtn.textContent = '+'; },
      expand: () => { content.style.display = 'block'; toggleBtn.textContent = '\\u2212'; },
      moveTopRight: () => {
        Object.assign(root.style, { top: '75px', right: '10px', left: 'auto', transform: 'none' });
      },
      prompt: (text) => {
        const backdrop = document.createElement('div');
        Object.assign(backdrop.style, {
          position: 'fixed', inset: '0', background: 'rgba(0,0,0,0.5)', display: 'flex',
          alignItems: 'center', justifyContent: 'center', zIndex: '1000000',
        });
        const box = document.createElement('div');
        Object.assign(box.style, {
          background: 'white', padding: '24px', borderRadius: '8px', maxWidth: '400px',
          fontFamily: 'Arial, sans-serif',
        });
        const message = document.createElement('p');
        message.textContent = text;
        const ok = document.createElement('button');
        ok.textContent = 'OK, Got it!';
        Object.assign(ok.style, {
          width: '100%', padding: '10px', background: '#4285f4', color: 'white', border: 'none',
          borderRadius: '4px', cursor: 'pointer', fontWeight: 'bold',
        });
        ok.onclick = () => backdrop.remove();
        box.appendChild(message);
        box.appendChild(ok);
        backdrop.appendChild(box);
        document.body.appendChild(backdrop);
      },
      destroy: () => {
        root.remove();
        delete window.__leadsyncOverlay;
      },
    };
    document.body.appendChild(root);
    return true;
  };
  return install();
})()
"""


def record_view(record: ExtractedRecord) -> dict[str, str]:
    date = record.received_date.display() if record.received_date is not None else "N/A"
    verbatim = record.verbatim
    preview = verbatim
    if len(verbatim) > VERBATIM_PREVIEW_LENGTH:
        preview = verbatim[:VERBATIM_PREVIEW_LENGTH] + "..."
    return {
        "lead": record.lead_number or "N/A",
        "date": date,
        "name": record.full_name or "N/A",
        "email": record.email or "N/A",
        "phone": record.primary_phone or "N/A",
        "contact": record.preferred_phone or "N/A",
        "verbatim_preview": preview,
        "verbatim": verbatim or "N/A",
    }


def overlay_script() -> str:
    options = {
        "banMaxLength": BAN_CID_MAX_LENGTH,
        "brands": list(BRAND_OPTIONS),
        "products": list(PRODUCT_OPTIONS),
        "linesOfBusiness": list(LINE_OF_BUSINESS_OPTIONS),
        "customerTypes": list(CUSTOMER_TYPE_OPTIONS),
        "languages": list(LANGUAGE_OPTIONS),
    }
    script = _OVERLAY_SCRIPT.replace("__OPTIONS_JSON__", json.dumps(options, ensure_ascii=False))
    return script.replace("__OVERLAY_ID__", OVERLAY_ID)


class OverlayView:
    """Calls into ``window.__leadsyncOverlay``; page faults are swallowed."""

    def __init__(self, page: Any) -> None:
        self.page = page

    def install(self) -> bool:
        if page_is_closed(self.page):
            return False
        try:
            return bool(self.page.evaluate(overlay_script()))
        except Exception:
            return False

    def installed(self) -> bool:
        if page_is_closed(self.page):
            return False
        try:
            return bool(
                self.page.evaluate(
                    "([id]) => !!document.getElementById(id) && !!window.__leadsyncOverlay",
                    [OVERLAY_ID],
                )
            )
        except Exception:
            return False

    def render(self, record: ExtractedRecord) -> None:
        self._call("render", record_view(record))

    def set_notice(self, text: str, tone: str = "waiting") -> None:
        self._call("setNotice", text, tone)

    def replace_content(self, text: str) -> None:
        self._call("replaceContent", text)

    def read_form(self) -> dict[str, Any]:
        raw = self._call("readForm")
        return raw if isinstance(raw, dict) else {}

    def drain_actions(self) -> list[str]:
        raw = self._call("drainActions")
        if not isinstance(raw, list):
            return []
        return [str(item.get("type", "")) for item in raw if isinstance(item, dict)]

    def set_submit_enabled(self, enabled: bool) -> None:
        self._call("setSubmitEnabled", bool(enabled))

    def set_next_enabled(self, enabled: bool) -> None:
        self._call("setNextEnabled", bool(enabled))

    def set_language(self, language: str) -> None:
        self._call("setLanguage", language)

    def reset_form(self) -> None:
        self._call("resetForm")

    def collapse(self) -> None:
        self._call("collapse")

    def expand(self) -> None:
        self._call("expand")

    def move_top_right(self) -> None:
        self._call("moveTopRight")

    def prompt(self, message: str) -> None:
        self._call("prompt", message)

    def destroy(self) -> None:
        self._call("destroy")

    def _call(self, name: str, *args: Any) -> Any:
        if page_is_closed(self.page):
            return None
        try:
            return self.page.evaluate(
                "([name, args]) => window.__leadsyncOverlay?.[name]?.(...args)",
                [name, list(args)],
            )
        except Exception:
            return None
