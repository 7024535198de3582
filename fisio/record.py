# -*- coding: utf-8 -*-
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .util import is_absent

logger = logging.getLogger(__name__)


class InvalidRecordShape(ValueError):
    """A record field has the wrong kind (not text / not boolean)."""

    def __init__(self, field_name: str, message: str):
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name


class VentilationMode(str, Enum):
    SPONTANEOUS = "spontaneous"
    INVASIVE = "mechanical-invasive"
    NONINVASIVE = "mechanical-noninvasive"

    @property
    def is_supported(self) -> bool:
        return self is not VentilationMode.SPONTANEOUS


_NONINVASIVE_MARKERS = ("vni", "não invasiv", "nao invasiv")
_INVASIVE_MARKERS = ("ventilação mecânica", "ventilacao mecanica", "(tot)", "(tqt)", "invasiv")


def classify_ventilation(breathing: Any) -> VentilationMode:
    """
    Maps the breathing option to the ventilation branch.
    Unrecognized text falls into the spontaneous branch.
    """
    if is_absent(breathing):
        return VentilationMode.SPONTANEOUS
    txt = str(breathing).strip().lower()
    if any(m in txt for m in _NONINVASIVE_MARKERS):
        return VentilationMode.NONINVASIVE
    if any(m in txt for m in _INVASIVE_MARKERS):
        return VentilationMode.INVASIVE
    if not txt.startswith("espontânea") and not txt.startswith("espontanea"):
        logger.debug("unrecognized breathing value %r, treating as spontaneous", breathing)
    return VentilationMode.SPONTANEOUS


INTERVENTION_FLAGS: Tuple[str, ...] = (
    "monitor",
    "oxygen_adjust",
    "incentive_ip",
    "ventilatory_training",
    "bronchial_hygiene",
    "passive_mobilization",
    "active_mobilization",
    "functional_training",
    "positioning",
    "orientation",
)


def _text(name: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        raise InvalidRecordShape(name, "expected text, got bool")
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise InvalidRecordShape(name, f"expected text, got {type(value).__name__}")


def _flag(name: str, value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise InvalidRecordShape(name, f"expected bool, got {type(value).__name__}")


@dataclass(frozen=True)
class Interventions:
    monitor: bool = False
    oxygen_adjust: bool = False
    incentive_ip: bool = False
    ventilatory_training: bool = False
    bronchial_hygiene: bool = False
    passive_mobilization: bool = False
    active_mobilization: bool = False
    functional_training: bool = False
    positioning: bool = False
    orientation: bool = False
    other: str = ""

    @classmethod
    def from_mapping(cls, payload: Any) -> "Interventions":
        if payload is None:
            return cls()
        if isinstance(payload, Interventions):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidRecordShape("interventions", f"expected mapping, got {type(payload).__name__}")
        kwargs: Dict[str, Any] = {
            name: _flag(f"interventions.{name}", payload.get(name)) for name in INTERVENTION_FLAGS
        }
        kwargs["other"] = _text("interventions.other", payload.get("other"))
        return cls(**kwargs)

    def active_flags(self) -> Tuple[str, ...]:
        return tuple(name for name in INTERVENTION_FLAGS if getattr(self, name))


@dataclass(frozen=True)
class ClinicalRecord:
    """
    One physiotherapy assessment. All fields are optional text ("" = not recorded);
    legacy records simply lack the vitals/ventilator/blood-gas fields.
    """

    id: str = ""
    date: str = ""
    time: str = ""
    professional: str = ""
    ward: str = ""

    # Subjetivo
    consciousness: str = ""
    collaboration: str = ""
    complaints: str = ""
    notes: str = ""
    pain_score: str = ""

    # Condição geral / sinais vitais
    decubitus: str = ""
    hemodynamic: str = ""
    dva: str = ""
    heart_rate: str = ""
    blood_pressure: str = ""
    perfusion: str = ""
    extremity_temp: str = ""

    # Ventilação
    breathing: str = ""
    oxygen_device: str = ""
    flow: str = ""
    spo2: str = ""
    respiratory_rate: str = ""
    adjustments: str = ""
    vm_mode: str = ""
    vm_peep: str = ""
    vm_fio2: str = ""
    vm_vt: str = ""
    vm_rr_set: str = ""
    vm_pressure_support: str = ""
    vm_drive_pressure: str = ""
    vm_plateau: str = ""

    # Respiratório
    ventilatory_pattern: str = ""
    expansibility: str = ""
    effort: str = ""
    ausc_right: str = ""
    ausc_left: str = ""
    secretion: str = ""
    secretion_criteria: str = ""

    # Gasometria
    gas_ph: str = ""
    gas_pao2: str = ""
    gas_paco2: str = ""
    gas_hco3: str = ""
    gas_be: str = ""
    gas_sao2: str = ""
    gas_lactate: str = ""
    gas_result: str = ""

    # Edema
    edema_msd: str = ""
    edema_mse: str = ""
    edema_mid: str = ""
    edema_mie: str = ""

    # Funcionalidade
    adm_passive: str = ""
    adm_active: str = ""
    muscle_force: str = ""
    force_reason: str = ""
    ims_score: str = ""
    mrc_score: str = ""

    # Texto livre
    complementary_exams: str = ""
    intercurrences: str = ""
    evolution: str = ""

    interventions: Interventions = field(default_factory=Interventions)
    ventilation: VentilationMode = field(init=False, default=VentilationMode.SPONTANEOUS)

    def __post_init__(self) -> None:
        # Direct construction gets the same shape checks as from_mapping.
        for name in self.text_fields():
            object.__setattr__(self, name, _text(name, getattr(self, name)))
        object.__setattr__(self, "interventions", Interventions.from_mapping(self.interventions))
        object.__setattr__(self, "ventilation", classify_ventilation(self.breathing))

    @classmethod
    def text_fields(cls) -> Tuple[str, ...]:
        return tuple(
            f.name for f in dataclasses.fields(cls) if f.name not in ("interventions", "ventilation")
        )

    @classmethod
    def from_mapping(cls, payload: Any) -> "ClinicalRecord":
        """
        Builds a record from a stored dict (legacy or extended shape).
        Missing keys are "not recorded"; unknown keys are ignored.
        Raises InvalidRecordShape for values of the wrong kind.
        """
        if not isinstance(payload, Mapping):
            raise InvalidRecordShape("record", f"expected mapping, got {type(payload).__name__}")
        kwargs: Dict[str, Any] = {name: _text(name, payload.get(name)) for name in cls.text_fields()}
        kwargs["interventions"] = Interventions.from_mapping(payload.get("interventions"))
        return cls(**kwargs)

    def get(self, name: str, default: str = "") -> str:
        return getattr(self, name, default)


def coerce_record(item: Any) -> ClinicalRecord:
    if isinstance(item, ClinicalRecord):
        return item
    return ClinicalRecord.from_mapping(item)


def record_id(item: Any) -> Optional[str]:
    if isinstance(item, ClinicalRecord):
        return item.id or None
    if isinstance(item, Mapping):
        rid = item.get("id")
        return str(rid) if rid not in (None, "") else None
    return None
