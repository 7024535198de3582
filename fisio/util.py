# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

SENTINEL = "--"

# Marker returned by the field formatters for "not recorded".
ABSENT = None


def is_absent(value: Any) -> bool:
    """True for None, blank text and the '--' sentinel."""
    if value is None:
        return True
    s = str(value).strip()
    return not s or s == SENTINEL


def text_or_none(value: Any) -> Optional[str]:
    if is_absent(value):
        return None
    return str(value).strip()


def _has_unit(txt: str, unit: str) -> bool:
    compact = re.sub(r"\s+", "", txt).lower()
    return compact.endswith(re.sub(r"\s+", "", unit).lower())


def fmt_value(raw: Any, unit: Optional[str] = None) -> Optional[str]:
    """
    Normalizes a numeric-as-text field into a display fragment.
    Returns ABSENT for empty values; appends the unit once.
    """
    txt = text_or_none(raw)
    if txt is None:
        return ABSENT
    if not unit or _has_unit(txt, unit):
        return txt
    if unit == "%":
        return f"{txt}%"
    return f"{txt} {unit}"


def fmt_percent(raw: Any) -> Optional[str]:
    return fmt_value(raw, "%")


def fmt_labeled(label: str, raw: Any, unit: Optional[str] = None) -> Optional[str]:
    v = fmt_value(raw, unit)
    if v is None:
        return ABSENT
    return f"{label} {v}"


def join_nonempty(parts: Sequence[Optional[str]], sep: str = " ") -> str:
    return sep.join([p for p in parts if p and str(p).strip()])


def split_head_tail(items: Iterable[str]) -> Tuple[Tuple[str, ...], Optional[str]]:
    """Splits into (all-but-last, last) on a private copy."""
    copy = tuple(items)
    if not copy:
        return (), None
    return copy[:-1], copy[-1]


def join_enumeration(items: Iterable[str], sep: str = ", ", last_sep: str = " e ") -> str:
    """'a, b e c' style enumeration."""
    head, last = split_head_tail(items)
    if last is None:
        return ""
    if not head:
        return last
    return sep.join(head) + last_sep + last


def ensure_period(text: str) -> str:
    t = (text or "").rstrip()
    if not t:
        return ""
    if t[-1] in ".!?":
        return t
    return t + "."


class SafeDict(dict):
    """Format-map helper that never raises KeyError."""

    def __missing__(self, key: str) -> str:  # type: ignore[override]
        return "{" + key + "}"


def clean_sentence(text: str) -> str:
    """Tidies spaces/punctuation for concatenated sentences."""
    t = (text or "").strip()
    t = re.sub(r"\s+", " ", t)
    t = re.sub(r"\s+([,.;:])", r"\1", t)
    t = re.sub(r"\(\s*\)", "", t)
    return t.strip()


def extract_pain_grade(value: str) -> str:
    """'10 - Pior dor possível' -> '10'."""
    return value.split(" - ")[0].strip()


def sentences(parts: List[str]) -> str:
    return join_nonempty([ensure_period(p) for p in parts], sep=" ")
