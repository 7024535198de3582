# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .record import Interventions
from .textdb_store import TextDB
from .util import join_enumeration, split_head_tail, text_or_none
from .vocab import resolve

INTERVENTION_LABELS: Tuple[Tuple[str, str], ...] = (
    ("monitor", "monitorização cardiorrespiratória"),
    ("oxygen_adjust", "ajuste/gerenciamento de O₂/VM"),
    ("incentive_ip", "manobras de reexpansão pulmonar"),
    ("ventilatory_training", "treino muscular respiratório"),
    ("bronchial_hygiene", "higiene brônquica"),
    ("passive_mobilization", "mobilização passiva"),
    ("active_mobilization", "mobilização ativa/assistida"),
    ("functional_training", "treino funcional"),
    ("positioning", "posicionamento no leito"),
    ("orientation", "orientações ao paciente/família"),
)

Flags = Union[Interventions, Mapping[str, Any]]


def intervention_items(flags: Flags, other_text: str = "") -> List[str]:
    """
    Labels of the active interventions in fixed order, then the free-text
    'other' (lower-cased). Always returns a new list.
    """
    if isinstance(flags, Interventions):
        active = set(flags.active_flags())
        other = other_text or flags.other
    else:
        active = {name for name, on in (flags or {}).items() if on is True}
        other = other_text or (flags or {}).get("other") or ""
    items = [label for name, label in INTERVENTION_LABELS if name in active]
    extra = text_or_none(other) if isinstance(other, str) else None
    if extra:
        items.append(extra.lower())
    return items


def render_items(items: Iterable[str], db: Optional[TextDB] = None) -> str:
    """Enumerated conduct clause; reads `items` without modifying it."""
    db = resolve(db)
    head, last = split_head_tail(items)
    if last is None:
        return db.render_block("conduct_none")
    if not head:
        return db.render_block("conduct_single", {"item": last})
    return db.render_block("conduct_multiple", {"items": join_enumeration((*head, last))})


def render_interventions(flags: Flags, other_text: str = "", db: Optional[TextDB] = None) -> str:
    return render_items(intervention_items(flags, other_text), db)
