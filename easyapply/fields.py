"""
Field assessment: decide whether a form field really holds an answer.

Sites pre-populate contact fields from the profile, sometimes through script
without a DOM ``value`` attribute, and show placeholders that read like
answers. A naive emptiness check escalates far too often; these rules keep
escalation for fields that are actually unanswered.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from easyapply.locators import LocatorSet, Resolver
from easyapply.log import get_logger
from easyapply.models import FieldState

log = get_logger(__name__)

GENERIC_PLACEHOLDERS: frozenset[str] = frozenset({
    "enter your email", "enter email", "enter your phone", "enter phone",
    "select country", "select region", "type your answer here", "add your answer",
    "please specify", "enter text", "your answer", "answer",
})

JUNK_TOKENS: frozenset[str] = frozenset({
    "n/a", "na", "-", "--", "---", ".", "..", "...", "_", "__", "?", "??", "???",
    "none", "null", "nil", "undefined", "tbd",
})

NUMERIC_PLACEHOLDERS: frozenset[str] = frozenset(
    {"123", "456", "789", "000"} | {str(d) * 3 for d in range(1, 10)}
)

SAMPLE_NAMES: tuple[str, ...] = (
    "johndoe", "janedoe", "testuser", "examplecom", "asdf", "qwerty", "loremipsum",
)

PLACEHOLDER_WORDS: frozenset[str] = frozenset({
    "enter", "type", "add", "your", "please", "optional", "example", "sample",
    "test", "default", "placeholder", "temp", "lorem", "ipsum", "foo", "bar",
    "baz", "xxx", "yyy", "zzz", "abc", "here", "answer", "text", "value",
})

SELECT_PROMPTS: tuple[str, ...] = ("select", "choose", "please select", "please choose", "pick", "--")

_PREFILLED_CLASSES = ("prefilled", "filled", "complete")

_CONTACT_TERMS = (
    r"e-?mail|tele-?phone|phone|mobile|first.?name|last.?name|full.?name|given.?name|"
    r"family.?name|country|city|address|zip|postal"
)
# Attribute words: "location-city", "phone_number", "firstName" (after camel split).
_CONTACT_ATTR_RE = re.compile(rf"(?<![a-z])(?:{_CONTACT_TERMS})", re.IGNORECASE)
# Labels only when they are a contact noun phrase, never a question about one.
_CONTACT_LABEL_RE = re.compile(
    rf"^\s*(?:(?:your|primary|home|work|mobile)\s+)?(?:{_CONTACT_TERMS})\b[^?]*$",
    re.IGNORECASE,
)
_CAMEL_RE = re.compile(r"(?<=[a-z])(?=[A-Z])")

SNAPSHOT_JS = """
el => {
  const tag = el.tagName.toLowerCase();
  const type = (el.getAttribute('type') || (tag === 'input' ? 'text' : tag)).toLowerCase();
  let checked = !!el.checked;
  if ((type === 'radio' || type === 'checkbox') && el.name) {
    const root = el.form || el.closest('fieldset, [role="dialog"]') || document;
    const sel = 'input[name="' + CSS.escape(el.name) + '"]';
    checked = Array.from(root.querySelectorAll(sel)).some(o => o.checked);
  }
  let selectedValue = '', selectedText = '';
  if (tag === 'select' && el.selectedIndex >= 0) {
    const opt = el.options[el.selectedIndex];
    selectedValue = opt.value;
    selectedText = opt.text;
  }
  let label = '';
  if (el.labels && el.labels.length) {
    label = el.labels[0].innerText;
  } else if (el.getAttribute('aria-label')) {
    label = el.getAttribute('aria-label');
  } else {
    const fs = el.closest('fieldset');
    const legend = fs && fs.querySelector('legend');
    if (legend) label = legend.innerText;
  }
  return {
    kind: tag === 'input' ? type : tag,
    value: tag === 'select' ? selectedValue : (el.value || ''),
    placeholder: el.getAttribute('placeholder') || '',
    checked: checked,
    selected_value: selectedValue,
    selected_text: selectedText,
    label: (label || '').trim(),
    name: el.getAttribute('name') || '',
    element_id: el.id || '',
    autocomplete: el.getAttribute('autocomplete') || '',
    required: !!el.required || el.getAttribute('aria-required') === 'true'
      || !!el.closest('fieldset[aria-required="true"]'),
    aria_valuetext: el.getAttribute('aria-valuetext') || '',
    data_value: el.getAttribute('data-value') || '',
    class_name: typeof el.className === 'string' ? el.className : '',
  };
}
"""


def _assessable(el: Any) -> bool:
    kind = (el.get_attribute("type") or "").lower()
    if kind in ("hidden", "submit", "button"):
        return False
    # Custom-styled radios and checkboxes are often zero-size.
    if kind in ("radio", "checkbox"):
        return True
    return el.is_visible()


FORM_FIELDS = LocatorSet.of("form field", "input, textarea, select", predicate=_assessable)


@dataclass(frozen=True)
class FieldSnapshot:
    kind: str = "text"
    value: str = ""
    placeholder: str = ""
    checked: bool = False
    selected_value: str = ""
    selected_text: str = ""
    label: str = ""
    name: str = ""
    element_id: str = ""
    autocomplete: str = ""
    required: bool = False
    aria_valuetext: str = ""
    data_value: str = ""
    class_name: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> FieldSnapshot:
        known = {k: v for k, v in raw.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    @property
    def display_name(self) -> str:
        return self.label or self.name or self.element_id or self.kind

    @property
    def group_key(self) -> str:
        if self.kind in ("radio", "checkbox") and self.name:
            return f"{self.kind}:{self.name}"
        return f"{self.kind}:{self.element_id or self.name or self.label}"

    @property
    def prefilled_in_dom(self) -> bool:
        tokens = self.class_name.lower().split()
        return any(re.split(r"[-_]", t)[-1] in _PREFILLED_CLASSES for t in tokens)

    def visible_value(self) -> str:
        if self.value.strip():
            return self.value
        return self.aria_valuetext or self.data_value


def _normalise(text: str) -> str:
    return " ".join(text.lower().split())


def _is_select_prompt(text: str) -> bool:
    return not text or text in ("0", "-1") or text.startswith(SELECT_PROMPTS)


def looks_synthetic(value: str) -> bool:
    """Sample/test data that a form shows but nobody actually typed."""
    low = _normalise(value)
    if low in JUNK_TOKENS or low in NUMERIC_PLACEHOLDERS:
        return True
    compact = re.sub(r"[\s._@-]", "", low)
    if len(compact) >= 3 and len(set(compact)) == 1 and not compact.isdigit():
        return True
    if any(name in compact for name in SAMPLE_NAMES):
        return True
    words = re.findall(r"[a-z]+", low)
    if len(low) < 20 and words and not re.search(r"\d", low):
        return all(w in PLACEHOLDER_WORDS for w in words)
    return False


def classify_snapshot(field: FieldSnapshot) -> FieldState:
    if field.kind in ("radio", "checkbox"):
        return FieldState.FILLED if field.checked else FieldState.EMPTY

    if field.kind == "select":
        value = _normalise(field.selected_value)
        text = _normalise(field.selected_text)
        if _is_select_prompt(value) and _is_select_prompt(text):
            return FieldState.EMPTY
        return FieldState.FILLED

    value = field.visible_value()
    if not value.strip():
        return FieldState.FILLED if field.prefilled_in_dom else FieldState.EMPTY

    low = _normalise(value)
    if low == _normalise(field.placeholder) or low in GENERIC_PLACEHOLDERS:
        return FieldState.PLACEHOLDER
    if looks_synthetic(low):
        return FieldState.EMPTY
    return FieldState.FILLED


def snapshot(el: Any) -> FieldSnapshot:
    return FieldSnapshot.from_dict(el.evaluate(SNAPSHOT_JS))


def classify(el: Any) -> FieldState:
    return classify_snapshot(snapshot(el))


def is_contact_field(field: FieldSnapshot) -> bool:
    if field.kind in ("email", "tel"):
        return True
    if any(token.startswith("tel") for token in field.autocomplete.lower().split()):
        return True
    attrs = " ".join(_CAMEL_RE.sub(" ", a) for a in (field.name, field.element_id, field.autocomplete))
    if _CONTACT_ATTR_RE.search(attrs):
        return True
    return bool(_CONTACT_LABEL_RE.match(field.label))


def question_fields(resolver: Resolver, container: Any) -> list[FieldSnapshot]:
    """Non-contact fields inside ``container``, one entry per radio/checkbox group."""
    fields: list[FieldSnapshot] = []
    seen: set[str] = set()
    for el in resolver.find_all(FORM_FIELDS, scope=container):
        try:
            snap = snapshot(el)
        except PlaywrightError as exc:
            log.debug("Could not read form field: %s", exc)
            continue
        if snap.kind == "file" or is_contact_field(snap):
            continue
        if snap.group_key in seen:
            continue
        seen.add(snap.group_key)
        fields.append(snap)
    return fields


def unanswered(fields: list[FieldSnapshot]) -> list[FieldSnapshot]:
    """Required fields whose assessment counts as empty."""
    out = []
    for f in fields:
        if not f.required:
            continue
        state = classify_snapshot(f)
        log.debug("Field %r → %s", f.display_name, state.value)
        if state.counts_as_empty:
            out.append(f)
    return out
