#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
textdb_store.py

YAML store for the vocabulary tables and sentence blocks of the
evolution narratives.

Design goals
------------
- core.yaml is read-only (release/versioning).
- overrides.yaml holds local adjustments (draft/approved); only approved ones are merged.
- Rendering never raises on missing placeholders.
- Unknown codes go through a named miss policy (fallback), never dropped.
"""

from __future__ import annotations

import copy
import logging
import string
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .util import SafeDict, is_absent

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

DEFAULT_FALLBACK = "{code}"

REQUIRED_VOCABULARIES = (
    "consciousness",
    "collaboration",
    "decubitus",
    "breathing",
    "oxygen_source",
    "ventilation_support",
    "ventilatory_pattern",
    "expansibility",
    "effort",
    "auscultation",
    "secretion",
    "gas_result",
    "hemodynamic",
    "perfusion",
    "extremity_temp",
    "adm",
)

REQUIRED_BLOCKS = (
    "conduct_none",
    "conduct_single",
    "conduct_multiple",
    "report_empty",
    "evolution_empty",
    "signature_default",
)


# ---------------------------
# Utilities
# ---------------------------

def extract_placeholders(text: str) -> List[str]:
    """Extracts python-format placeholders {name} from a template."""
    formatter = string.Formatter()
    fields: List[str] = []
    for _, field_name, _, _ in formatter.parse(text):
        if not field_name:
            continue
        fields.append(field_name)
    return sorted(set(fields))


def deep_merge_dict(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursive merge:
    - dict + dict -> merge
    - otherwise: patch wins
    """
    out = copy.deepcopy(base)
    for k, v in patch.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge_dict(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        obj = yaml.safe_load(f) or {}
    return obj


# ---------------------------
# Data classes
# ---------------------------

@dataclass(frozen=True)
class VocabularyTable:
    """
    Coded value -> text fragment, with an explicit miss policy.

    A code missing from `entries` is rendered through `fallback` with the
    lower-cased code (default: verbatim lower-cased echo). Blank codes and
    the '--' sentinel translate to None so the caller can drop the clause.
    """

    name: str
    entries: Dict[str, str] = field(default_factory=dict)
    fallback: str = DEFAULT_FALLBACK

    def get(self, code: Any) -> Optional[str]:
        """Strict lookup; no fallback."""
        if is_absent(code):
            return None
        return self.entries.get(str(code).strip())

    def translate(self, code: Any) -> Optional[str]:
        if is_absent(code):
            return None
        key = str(code).strip()
        hit = self.entries.get(key)
        if hit is not None:
            return hit
        logger.debug("vocabulary %s: no entry for %r, using fallback", self.name, key)
        return self.fallback.format_map(SafeDict(code=key.lower()))


@dataclass
class TextBlock:
    id: str
    title: str
    template: str
    inputs_used: List[str] = field(default_factory=list)

    def render(self, data: Optional[Dict[str, Any]] = None) -> str:
        return self.template.format_map(SafeDict(**(data or {})))


@dataclass
class TextDB:
    core_path: Path
    overrides_path: Optional[Path] = None
    core: Dict[str, Any] = field(default_factory=dict)
    overrides: Dict[str, Any] = field(default_factory=dict)
    merged: Dict[str, Any] = field(default_factory=dict)
    _tables: Dict[str, VocabularyTable] = field(default_factory=dict, repr=False)

    def load(self) -> "TextDB":
        self.core = load_yaml(self.core_path)
        self.overrides = load_yaml(self.overrides_path) if self.overrides_path else {}
        self._validate_schema(self.core, str(self.core_path.name))
        if self.overrides:
            self._validate_schema(self.overrides, "overrides.yaml", allow_empty=True)
        self.merged = self._merge(self.core, self.overrides)
        self._tables = {
            name: self._as_table(name, raw)
            for name, raw in (self.merged.get("vocabularies", {}) or {}).items()
        }
        return self

    # ---------- Schema / Merge ----------

    def _validate_schema(self, obj: Dict[str, Any], name: str, allow_empty: bool = False) -> None:
        if allow_empty and not obj:
            return
        ver = obj.get("schema_version")
        if ver != SCHEMA_VERSION:
            raise ValueError(f"{name}: expected schema_version {SCHEMA_VERSION}, found {ver}")

    def _merge(self, core: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge rules:
        - vocabularies.<name>: approved overrides patch entries/fallback
        - blocks.<id>: approved overrides patch the block (or add a new one)
        """
        merged = copy.deepcopy(core)
        ovr_root = (overrides or {}).get("overrides", {}) or {}

        vocab = merged.get("vocabularies", {}) or {}
        for name, patch in (ovr_root.get("vocabularies", {}) or {}).items():
            if (patch or {}).get("status", "approved") != "approved":
                logger.debug("override for vocabulary %s not approved, skipped", name)
                continue
            data = patch.get("data", patch)
            vocab[name] = deep_merge_dict(vocab.get(name, {}) or {}, data)
        merged["vocabularies"] = vocab

        blocks = merged.get("blocks", {}) or {}
        for bid, patch in (ovr_root.get("blocks", {}) or {}).items():
            if (patch or {}).get("status", "approved") != "approved":
                logger.debug("override for block %s not approved, skipped", bid)
                continue
            data = patch.get("data", patch)
            blocks[bid] = deep_merge_dict(blocks.get(bid, {}) or {}, data)
        merged["blocks"] = blocks

        return merged

    # ---------- Public API ----------

    def table(self, name: str) -> VocabularyTable:
        tbl = self._tables.get(name)
        if tbl is None:
            logger.debug("unknown vocabulary %s, echoing codes", name)
            return VocabularyTable(name=name)
        return tbl

    def translate(self, category: str, code: Any) -> Optional[str]:
        return self.table(category).translate(code)

    def lookup(self, category: str, code: Any) -> Optional[str]:
        return self.table(category).get(code)

    def vocabularies(self) -> List[str]:
        return sorted(self._tables)

    def get_block(self, block_id: str) -> Optional[TextBlock]:
        b = (self.merged.get("blocks", {}) or {}).get(block_id)
        if not b:
            return None
        return self._as_textblock(block_id, b)

    def render_block(self, block_id: str, data: Optional[Dict[str, Any]] = None) -> str:
        blk = self.get_block(block_id)
        if blk is None:
            return ""
        return blk.render(data)

    # ---------- Internal ----------

    def _as_table(self, name: str, raw: Dict[str, Any]) -> VocabularyTable:
        raw = raw or {}
        entries = {str(k): str(v) for k, v in (raw.get("entries", {}) or {}).items()}
        return VocabularyTable(
            name=name,
            entries=entries,
            fallback=str(raw.get("fallback", DEFAULT_FALLBACK) or DEFAULT_FALLBACK),
        )

    def _as_textblock(self, block_id: str, b: Dict[str, Any]) -> TextBlock:
        return TextBlock(
            id=str(b.get("id", block_id)),
            title=str(b.get("title", "")),
            template=str(b.get("template", "")),
            inputs_used=list(b.get("inputs_used", []) or []),
        )


def load_textdb(core_path: Path, overrides_path: Optional[Path] = None) -> TextDB:
    return TextDB(core_path=core_path, overrides_path=overrides_path).load()


def validate_textdb(raw: Dict[str, Any]) -> List[str]:
    """Returns a list of problems; empty list means the text DB is usable."""
    errors: List[str] = []

    if raw.get("schema_version") != SCHEMA_VERSION:
        errors.append(f"[schema] expected schema_version {SCHEMA_VERSION}, found {raw.get('schema_version')}")

    vocab = raw.get("vocabularies", {}) or {}
    blocks = raw.get("blocks", {}) or {}

    for name in REQUIRED_VOCABULARIES:
        if name not in vocab:
            errors.append(f"[vocabularies] missing table '{name}'")

    for name, tbl in vocab.items():
        if not isinstance(tbl, dict):
            errors.append(f"[vocabularies] {name}: expected mapping, got {type(tbl).__name__}")
            continue
        entries = tbl.get("entries", {}) or {}
        if not isinstance(entries, dict):
            errors.append(f"[vocabularies] {name}: entries must be a mapping")
            continue
        for code, frag in entries.items():
            if not isinstance(frag, str) or not frag.strip():
                errors.append(f"[vocabularies] {name}.{code}: empty fragment")
        fallback = tbl.get("fallback", DEFAULT_FALLBACK)
        if fallback is not None and set(extract_placeholders(str(fallback))) - {"code"}:
            errors.append(f"[vocabularies] {name}: fallback may only use {{code}}")

    for bid in REQUIRED_BLOCKS:
        if bid not in blocks:
            errors.append(f"[blocks] missing block '{bid}'")

    for bid, b in blocks.items():
        if not isinstance(b, dict):
            errors.append(f"[blocks] {bid}: expected mapping")
            continue
        if str(b.get("id", bid)) != bid:
            errors.append(f"[blocks] key '{bid}' != block.id '{b.get('id')}'")
        tpl = str(b.get("template", ""))
        ph = set(extract_placeholders(tpl))
        inputs_used = set(b.get("inputs_used", []) or [])
        if inputs_used != ph:
            errors.append(f"[placeholders] {bid}: inputs_used != extracted placeholders (diff={sorted(inputs_used ^ ph)})")
        try:
            tpl.format_map(SafeDict())
        except (ValueError, IndexError) as e:
            errors.append(f"[format] {bid}: template format error: {e}")

    return errors
