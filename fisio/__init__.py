# -*- coding: utf-8 -*-
from .generator import NarrativeGenerator, Report, RenderedRecord, assemble_narrative, compile_report
from .interventions import render_interventions
from .record import ClinicalRecord, InvalidRecordShape, Interventions, VentilationMode
from .version import APP_VERSION as __version__
from .vocab import translate

__all__ = [
    "ClinicalRecord",
    "Interventions",
    "InvalidRecordShape",
    "NarrativeGenerator",
    "RenderedRecord",
    "Report",
    "VentilationMode",
    "assemble_narrative",
    "compile_report",
    "render_interventions",
    "translate",
]
