# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .interventions import render_interventions
from .record import ClinicalRecord, InvalidRecordShape, coerce_record, record_id
from .sections import SECTION_BUILDERS
from .textdb_store import TextDB
from .util import join_nonempty, text_or_none
from .vocab import resolve

logger = logging.getLogger(__name__)


def assemble_narrative(record: ClinicalRecord, db: Optional[TextDB] = None) -> str:
    """Non-empty section paragraphs in canonical order, single-space separated."""
    db = resolve(db)
    return join_nonempty([build(record, db) for _, build in SECTION_BUILDERS], sep=" ")


def section_texts(record: ClinicalRecord, db: Optional[TextDB] = None) -> Dict[str, str]:
    db = resolve(db)
    return {name: build(record, db) for name, build in SECTION_BUILDERS}


@dataclass(frozen=True)
class RenderedRecord:
    record_id: Optional[str]
    record: Optional[ClinicalRecord]
    narrative: str = ""
    conduct: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.record_id,
            "narrative": self.narrative,
            "conduct": self.conduct,
            "error": self.error,
        }


def _fmt_date_br(value: str) -> str:
    """'2024-03-01' -> '01/03/2024'; other text passes through."""
    txt = text_or_none(value)
    if txt is None:
        return "—"
    try:
        return datetime.strptime(txt, "%Y-%m-%d").date().strftime("%d/%m/%Y")
    except ValueError:
        return txt


@dataclass(frozen=True)
class Report:
    entries: Tuple[RenderedRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.entries]

    def to_markdown(self, db: Optional[TextDB] = None, issued: Optional[date] = None) -> str:
        db = resolve(db)
        lines: List[str] = ["# Evolução Fisioterapêutica"]
        if issued is not None:
            lines.append(f"Emissão: {issued.strftime('%d/%m/%Y')}")
        if not self.entries:
            lines.append(db.render_block("report_empty"))
            return "\n\n".join(lines)

        for entry in self.entries:
            lines.append("---")
            if not entry.ok or entry.record is None:
                lines.append(f"**Registro {entry.record_id or '?'} não renderizado:** {entry.error}")
                continue
            rec = entry.record
            lines.append(
                join_nonempty([
                    f"**Data:** {_fmt_date_br(rec.date)}",
                    f"**Horário:** {rec.time}" if text_or_none(rec.time) else "",
                    f"**Local:** {rec.ward}" if text_or_none(rec.ward) else "",
                ], sep=" | ")
            )
            lines.append("### Avaliação da Fisioterapia")
            lines.append(entry.narrative)
            if text_or_none(rec.complementary_exams):
                lines.append("### Exames Complementares")
                lines.append(rec.complementary_exams.strip())
            if text_or_none(rec.intercurrences):
                lines.append("### Intercorrências")
                lines.append(rec.intercurrences.strip())
            lines.append("### Plano Terapêutico & Condutas")
            lines.append(entry.conduct)
            lines.append("### Evolução do Paciente")
            lines.append(text_or_none(rec.evolution) or db.render_block("evolution_empty"))
            lines.append("_" + (text_or_none(rec.professional) or db.render_block("signature_default")) + "_ (Assinatura / Carimbo)")
        return "\n\n".join(lines)


def render_record(item: Any, db: Optional[TextDB] = None) -> RenderedRecord:
    """
    Renders one record (ClinicalRecord or raw mapping). A shape violation
    yields an entry carrying the error and no text.
    """
    db = resolve(db)
    rid = record_id(item)
    try:
        rec = coerce_record(item)
    except InvalidRecordShape as e:
        logger.warning("record %s rejected: %s", rid or "?", e)
        return RenderedRecord(record_id=rid, record=None, error=str(e))
    return RenderedRecord(
        record_id=rid,
        record=rec,
        narrative=assemble_narrative(rec, db),
        conduct=render_interventions(rec.interventions, db=db),
    )


def compile_report(records: Iterable[Any], db: Optional[TextDB] = None) -> Report:
    db = resolve(db)
    return Report(entries=tuple(render_record(item, db) for item in records))


class NarrativeGenerator:
    def __init__(self, db: Optional[TextDB] = None):
        self.db = resolve(db)

    def narrative(self, record: ClinicalRecord) -> str:
        return assemble_narrative(record, self.db)

    def conduct(self, record: ClinicalRecord) -> str:
        return render_interventions(record.interventions, db=self.db)

    def compile(self, records: Iterable[Any]) -> Report:
        return compile_report(records, self.db)
