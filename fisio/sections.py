# -*- coding: utf-8 -*-
"""
Section builders: one paragraph per clinical domain.

Every builder takes the full ClinicalRecord and returns display text. Absent
fields drop their clause; builders never raise on sparse records.
"""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple

from .record import ClinicalRecord
from .textdb_store import TextDB
from .util import (
    clean_sentence,
    extract_pain_grade,
    fmt_labeled,
    fmt_percent,
    fmt_value,
    sentences,
    text_or_none,
)
from .vocab import resolve

# (field, label, unit) in print order
VENTILATOR_PARAMS: Tuple[Tuple[str, str, Optional[str]], ...] = (
    ("vm_peep", "PEEP", "cmH₂O"),
    ("vm_fio2", "FiO₂", "%"),
    ("vm_vt", "Vt", "mL"),
    ("vm_rr_set", "f", "ipm"),
    ("vm_pressure_support", "PS", "cmH₂O"),
    ("vm_drive_pressure", "ΔP", "cmH₂O"),
    ("vm_plateau", "Pplatô", "cmH₂O"),
)

BLOOD_GAS_PARAMS: Tuple[Tuple[str, str, Optional[str]], ...] = (
    ("gas_ph", "pH", None),
    ("gas_pao2", "PaO₂", None),
    ("gas_paco2", "PaCO₂", None),
    ("gas_hco3", "HCO₃", None),
    ("gas_be", "BE", None),
    ("gas_lactate", "Lactato", None),
)

# presence of any of these triggers the blood gas paragraph
BLOOD_GAS_TRIGGERS = ("gas_ph", "gas_pao2", "gas_result")

EDEMA_SITES: Tuple[Tuple[str, str], ...] = (
    ("edema_msd", "MSD"),
    ("edema_mse", "MSE"),
    ("edema_mid", "MID"),
    ("edema_mie", "MIE"),
)

_DVA_RE = re.compile(r"^sim\s*\((.+)\)\s*$", re.IGNORECASE)


def parameter_list(record: ClinicalRecord, params: Sequence[Tuple[str, str, Optional[str]]]) -> List[str]:
    """Filters a fixed (field, label, unit) list down to the recorded values."""
    out: List[str] = []
    for name, label, unit in params:
        item = fmt_labeled(label, record.get(name), unit)
        if item is not None:
            out.append(item)
    return out


def _parenthetical(items: Sequence[str]) -> str:
    if not items:
        return ""
    return f" ({', '.join(items)})"


# ---------------------------------------------------------------------------
# Neuro / dor
# ---------------------------------------------------------------------------

def _pain_clause(pain: str) -> str:
    txt = text_or_none(pain)
    if txt is None:
        return ""
    if txt.lower() == "não avaliado":
        return "Dor não avaliada"
    grade = extract_pain_grade(txt)
    if grade == "0":
        return "Nega dor (EVA 0)"
    return f"Refere algia grau {grade} na Escala Visual Analógica (EVA)"


def _dva_clause(dva: str) -> str:
    txt = text_or_none(dva)
    if txt is None or txt.lower() in ("não", "nao"):
        return ""
    m = _DVA_RE.match(txt)
    if m:
        return f"Em uso de drogas vasoativas ({m.group(1).strip()})"
    if txt.lower() == "sim":
        return "Em uso de drogas vasoativas"
    return f"Em uso de drogas vasoativas ({txt})"


def _decubitus_phrase(code: str, db: TextDB) -> str:
    phrase = db.translate("decubitus", code)
    if phrase is None:
        return "em posicionamento não informado"
    if db.lookup("decubitus", code) is None:
        return f"em {phrase}"
    return phrase


def build_neuro(record: ClinicalRecord, db: Optional[TextDB] = None) -> str:
    db = resolve(db)
    head = "Paciente encontra-se " + (
        db.translate("consciousness", record.consciousness) or "com nível de consciência não informado"
    )
    collab = db.translate("collaboration", record.collaboration)
    if collab:
        head += f", {collab}"
    head += ", " + _decubitus_phrase(record.decubitus, db)
    return clean_sentence(sentences([head, _pain_clause(record.pain_score), _dva_clause(record.dva)]))


# ---------------------------------------------------------------------------
# Respiratório / ventilação
# ---------------------------------------------------------------------------

def _supported_clause(record: ClinicalRecord, db: TextDB) -> str:
    support = db.translate("ventilation_support", record.breathing) or "não especificado"
    if db.lookup("ventilation_support", record.breathing) is None and text_or_none(record.breathing):
        support = f"({support})"
    mode = text_or_none(record.vm_mode) or "não informado"
    clause = f"Em suporte ventilatório {support}, modo {mode}"
    return clause + _parenthetical(parameter_list(record, VENTILATOR_PARAMS))


def _spontaneous_clause(record: ClinicalRecord, db: TextDB) -> str:
    clause = "Apresenta ventilação " + (db.translate("breathing", record.breathing) or "espontânea")

    device = text_or_none(record.oxygen_device) or db.lookup("oxygen_source", record.breathing)
    if device:
        clause += f", via {device}"
        flow = fmt_value(record.flow, "L/min")
        if flow:
            clause += f" a {flow}"
    else:
        clause += " em ar ambiente"

    vitals: List[str] = []
    spo2 = fmt_percent(record.spo2)
    if spo2:
        vitals.append(f"SpO₂ de {spo2}")
    rr = fmt_value(record.respiratory_rate, "ipm")
    if rr:
        vitals.append(f"frequência respiratória de {rr}")
    if vitals:
        clause += ", mantendo " + " e ".join(vitals)
    return clause


def _secretion_clause(record: ClinicalRecord, db: TextDB) -> str:
    sec = text_or_none(record.secretion)
    if sec is None or sec.lower() == "ausente":
        return "Vias aéreas livres de secreção"
    clause = f"Presença de secreção {db.translate('secretion', sec)}"
    criteria = text_or_none(record.secretion_criteria)
    if criteria is not None and criteria.lower() == "sim":
        clause += " (com indicação para higiene brônquica)"
    return clause


def build_respiratory(record: ClinicalRecord, db: Optional[TextDB] = None) -> str:
    db = resolve(db)
    parts: List[str] = []

    if record.ventilation.is_supported:
        parts.append(_supported_clause(record, db))
    else:
        parts.append(_spontaneous_clause(record, db))

    adjustments = text_or_none(record.adjustments)
    if adjustments:
        parts.append(f"Ajustes realizados: {adjustments}")

    mechanics = ["Padrão ventilatório " + (db.translate("ventilatory_pattern", record.ventilatory_pattern) or "sem particularidades")]
    expansibility = db.translate("expansibility", record.expansibility)
    if expansibility:
        mechanics.append(f"expansibilidade {expansibility}")
    effort = db.translate("effort", record.effort)
    if effort:
        mechanics.append(f"esforço respiratório {effort}")
    parts.append(", ".join(mechanics))

    right = db.translate("auscultation", record.ausc_right) or "não avaliado"
    left = db.translate("auscultation", record.ausc_left) or "não avaliado"
    parts.append(f"Ausculta pulmonar: {right} à direita e {left} à esquerda")

    parts.append(_secretion_clause(record, db))
    return clean_sentence(sentences(parts))


# ---------------------------------------------------------------------------
# Gasometria arterial
# ---------------------------------------------------------------------------

def build_blood_gas(record: ClinicalRecord, db: Optional[TextDB] = None) -> str:
    if all(text_or_none(record.get(name)) is None for name in BLOOD_GAS_TRIGGERS):
        return ""
    db = resolve(db)
    result = db.translate("gas_result", record.gas_result) or "resultado pendente"
    clause = f"Gasometria arterial evidencia {result}"
    clause += _parenthetical(parameter_list(record, BLOOD_GAS_PARAMS))
    return clean_sentence(sentences([clause]))


# ---------------------------------------------------------------------------
# Cardiovascular
# ---------------------------------------------------------------------------

def edema_sites(record: ClinicalRecord) -> List[str]:
    sites: List[str] = []
    for name, label in EDEMA_SITES:
        value = text_or_none(record.get(name))
        if value is not None and value != "0":
            sites.append(f"{label}: {value}")
    return sites


def build_cardiovascular(record: ClinicalRecord, db: Optional[TextDB] = None) -> str:
    db = resolve(db)
    hemo = db.translate("hemodynamic", record.hemodynamic)
    head = f"Hemodinamicamente {hemo}" if hemo else "Estado hemodinâmico não informado"

    vitals: List[str] = []
    hr = fmt_value(record.heart_rate, "bpm")
    if hr:
        vitals.append(f"FC de {hr}")
    bp = fmt_value(record.blood_pressure, "mmHg")
    if bp:
        vitals.append(f"PA de {bp}")
    if vitals:
        head += ", apresentando " + " e ".join(vitals)

    peripheral: List[str] = []
    perfusion = db.translate("perfusion", record.perfusion)
    if perfusion:
        peripheral.append(f"perfusão periférica {perfusion}")
    temp = db.translate("extremity_temp", record.extremity_temp)
    if temp:
        peripheral.append(f"extremidades {temp}")
    if peripheral:
        head += ", com " + " e ".join(peripheral)

    sites = edema_sites(record)
    if sites:
        edema = "Edema observado em: " + ", ".join(sites)
    else:
        edema = "Ausência de edemas significativos"
    return clean_sentence(sentences([head, edema]))


# ---------------------------------------------------------------------------
# Funcionalidade
# ---------------------------------------------------------------------------

def build_functional(record: ClinicalRecord, db: Optional[TextDB] = None) -> str:
    db = resolve(db)
    passive = db.translate("adm", record.adm_passive) or "não avaliada"
    active = db.translate("adm", record.adm_active) or "não avaliada"
    parts: List[str] = [f"Funcionalidade: ADM passiva {passive} e ativa {active}"]

    force = text_or_none(record.muscle_force)
    if force:
        clause = f"Força muscular global grau {force}"
        reason = text_or_none(record.force_reason)
        if reason:
            clause += f" ({reason})"
        parts.append(clause)

    scales: List[str] = []
    ims = text_or_none(record.ims_score)
    if ims:
        scales.append(f"IMS: {ims}")
    mrc = text_or_none(record.mrc_score)
    if mrc:
        scales.append(f"MRC Score: {mrc}")
    if scales:
        parts.append("Escalas funcionais: " + ", ".join(scales))

    return clean_sentence(sentences(parts))


SectionBuilder = Callable[..., str]

# canonical paragraph order
SECTION_BUILDERS: Tuple[Tuple[str, SectionBuilder], ...] = (
    ("neuro", build_neuro),
    ("respiratory", build_respiratory),
    ("blood_gas", build_blood_gas),
    ("cardiovascular", build_cardiovascular),
    ("functional", build_functional),
)
