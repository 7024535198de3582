# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from .record import ClinicalRecord
from .version import APP_VERSION, SCHEMA_VERSION

SCHEMA_NAME = "fisio_records"


def is_saved_batch(obj: Any) -> bool:
    return isinstance(obj, dict) and obj.get("schema") == SCHEMA_NAME


def migrate_payload(payload: Any) -> Tuple[List[Any], str]:
    """
    Accepts:
      - New format: {"schema":"fisio_records","schema_version":N,"records":[...]}
      - Storage dump: a JSON list of record dicts (legacy or extended shape).
      - A single flat record dict.
    Returns (records, info_message). Items are passed through unchanged;
    shape checks happen when the report is compiled.
    """
    if isinstance(payload, list):
        return list(payload), f"{len(payload)} registro(s) carregado(s) (lista)."

    if not isinstance(payload, dict):
        return [], "Arquivo inválido (nem objeto nem lista JSON)."

    if is_saved_batch(payload):
        records = payload.get("records")
        if not isinstance(records, list):
            return [], "Arquivo inválido (campo 'records' ausente)."
        ver = payload.get("schema_version", "?")
        return list(records), f"{len(records)} registro(s) carregado(s) (schema v{ver})."

    # v0: assume a single flat record
    if any(k in payload for k in ("id", "date", "consciousness", "breathing", "interventions")):
        return [payload], "1 registro carregado (formato legado)."

    return [], "Nenhum registro reconhecido no arquivo."


def _as_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, ClinicalRecord):
        out: Dict[str, Any] = {name: getattr(record, name) for name in ClinicalRecord.text_fields()}
        iv = record.interventions
        out["interventions"] = {name: getattr(iv, name) for name in iv.__dataclass_fields__}
        return out
    return dict(record)


def build_saved_batch(records: List[Any]) -> Dict[str, Any]:
    return {
        "schema": SCHEMA_NAME,
        "schema_version": SCHEMA_VERSION,
        "app_version": APP_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "records": [_as_dict(r) for r in records],
    }
