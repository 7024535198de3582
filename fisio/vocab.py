# -*- coding: utf-8 -*-
"""
Default text DB access.

Loads `textdb/core.yaml` (release, read-only) and, if the environment
variable FISIO_TEXTDB_OVERRIDES points to a file, its approved overrides.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from .textdb_store import TextDB, load_textdb

_BASE = Path(__file__).resolve().parent

CORE_PATH = _BASE / "textdb" / "core.yaml"
OVERRIDES_ENV = "FISIO_TEXTDB_OVERRIDES"

_DB: Optional[TextDB] = None


def _overrides_path() -> Optional[Path]:
    p = os.environ.get(OVERRIDES_ENV)
    return Path(p) if p else None


def reload() -> TextDB:
    global _DB
    _DB = load_textdb(CORE_PATH, _overrides_path())
    return _DB


def default_textdb() -> TextDB:
    if _DB is None:
        return reload()
    return _DB


def resolve(db: Optional[TextDB]) -> TextDB:
    return db if db is not None else default_textdb()


def translate(category: str, code: Any, db: Optional[TextDB] = None) -> Optional[str]:
    """
    Coded value -> text fragment.
    None for blank/'--' codes; lower-cased echo (per table fallback) for unknown codes.
    """
    return resolve(db).translate(category, code)
