import sys
from pathlib import Path

# Ensure repo root is on path (for running without an install)
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fisio.record import ClinicalRecord, VentilationMode
from fisio.sections import (
    SECTION_BUILDERS,
    build_blood_gas,
    build_cardiovascular,
    build_functional,
    build_neuro,
    build_respiratory,
)


def test_empty_record_defaults():
    rec = ClinicalRecord()
    assert build_neuro(rec) == "Paciente encontra-se com nível de consciência não informado, em posicionamento não informado."
    assert build_respiratory(rec) == (
        "Apresenta ventilação espontânea em ar ambiente. "
        "Padrão ventilatório sem particularidades. "
        "Ausculta pulmonar: não avaliado à direita e não avaliado à esquerda. "
        "Vias aéreas livres de secreção."
    )
    assert build_blood_gas(rec) == ""
    assert build_cardiovascular(rec) == "Estado hemodinâmico não informado. Ausência de edemas significativos."
    assert build_functional(rec) == "Funcionalidade: ADM passiva não avaliada e ativa não avaliada."


def test_every_non_optional_section_ends_with_period():
    rec = ClinicalRecord(collaboration="--", decubitus="--", ims_score="--", ventilatory_pattern="--")
    for name, build in SECTION_BUILDERS:
        text = build(rec)
        if name == "blood_gas":
            continue
        assert text and text.endswith(".")
        assert ",." not in text and ". ." not in text


def test_neuro_full():
    rec = ClinicalRecord(
        consciousness="Alerta",
        collaboration="Boa",
        decubitus="DD",
        pain_score="5",
        dva="Sim (Noradrenalina)",
    )
    assert build_neuro(rec) == (
        "Paciente encontra-se alerta, com boa colaboração, em decúbito dorsal. "
        "Refere algia grau 5 na Escala Visual Analógica (EVA). "
        "Em uso de drogas vasoativas (Noradrenalina)."
    )


def test_neuro_pain_variants():
    assert "Nega dor (EVA 0)." in build_neuro(ClinicalRecord(pain_score="0 - Sem Dor"))
    assert "Dor não avaliada." in build_neuro(ClinicalRecord(pain_score="Não avaliado"))
    assert "grau 10 na" in build_neuro(ClinicalRecord(pain_score="10 - Pior dor possível"))
    assert "dor" not in build_neuro(ClinicalRecord(pain_score="--")).lower()
    assert "vasoativas" not in build_neuro(ClinicalRecord(dva="Não"))


def test_neuro_free_text_consciousness_is_echoed_lowercase():
    assert build_neuro(ClinicalRecord(consciousness="Agitado")).startswith("Paciente encontra-se agitado,")


def test_neuro_unknown_position_keeps_preposition():
    assert build_neuro(ClinicalRecord(decubitus="Sentado")).endswith(", em sentado.")
    assert build_neuro(ClinicalRecord(decubitus="Poltrona")).endswith(", sentado em poltrona.")


def test_unknown_support_is_parenthesized():
    rec = ClinicalRecord(breathing="Invasiva", vm_mode="VCV")
    assert rec.ventilation is VentilationMode.INVASIVE
    assert build_respiratory(rec).startswith("Em suporte ventilatório (invasiva), modo VCV.")


def test_mechanical_branch_with_parameters():
    rec = ClinicalRecord(breathing="Ventilação Mecânica (TOT)", vm_mode="PCV", vm_peep="8", vm_fio2="40")
    assert rec.ventilation is VentilationMode.INVASIVE
    text = build_respiratory(rec)
    assert text.startswith(
        "Em suporte ventilatório invasivo via tubo orotraqueal (TOT), modo PCV (PEEP 8 cmH₂O, FiO₂ 40%)."
    )


def test_mechanical_branch_ignores_spontaneous_fields():
    rec = ClinicalRecord(breathing="Ventilação Mecânica (TOT)", oxygen_device="Venturi", spo2="97")
    text = build_respiratory(rec)
    assert text.startswith("Em suporte ventilatório invasivo via tubo orotraqueal (TOT), modo não informado.")
    assert "ar ambiente" not in text
    assert "SpO₂" not in text
    assert "(PEEP" not in text


def test_noninvasive_takes_supported_branch():
    rec = ClinicalRecord(breathing="Espontânea (VNI)", vm_mode="CPAP", vm_peep="6")
    assert rec.ventilation is VentilationMode.NONINVASIVE
    assert build_respiratory(rec).startswith("Em suporte ventilatório não invasivo (VNI), modo CPAP (PEEP 6 cmH₂O).")


def test_spontaneous_branch_room_air():
    rec = ClinicalRecord(breathing="Espontânea (Ar Ambiente)", spo2="95", respiratory_rate="18")
    assert rec.ventilation is VentilationMode.SPONTANEOUS
    assert build_respiratory(rec).startswith(
        "Apresenta ventilação espontânea em ar ambiente, mantendo SpO₂ de 95% e frequência respiratória de 18 ipm."
    )


def test_spontaneous_branch_device_and_flow():
    rec = ClinicalRecord(breathing="Espontânea (Máscara)", oxygen_device="Venturi 50%", flow="6")
    assert build_respiratory(rec).startswith("Apresenta ventilação espontânea, via Venturi 50% a 6 L/min.")


def test_spontaneous_branch_implied_source_without_double_unit():
    rec = ClinicalRecord(breathing="Espontânea (Cateter Nasal)", flow="3 L/min", respiratory_rate="20")
    assert build_respiratory(rec).startswith(
        "Apresenta ventilação espontânea, via cateter nasal de O₂ a 3 L/min, mantendo frequência respiratória de 20 ipm."
    )


def test_respiratory_shared_trailing_clauses():
    rec = ClinicalRecord(
        breathing="Espontânea (Ar Ambiente)",
        adjustments="Reduzido fluxo de O₂",
        ventilatory_pattern="Eupneico",
        expansibility="Simétrica",
        effort="Ausente",
        ausc_right="MV presente",
        ausc_left="Roncos",
        secretion="Moderada (Espessa)",
        secretion_criteria="Sim",
    )
    assert build_respiratory(rec) == (
        "Apresenta ventilação espontânea em ar ambiente. "
        "Ajustes realizados: Reduzido fluxo de O₂. "
        "Padrão ventilatório eupneico, expansibilidade simétrica, esforço respiratório ausente. "
        "Ausculta pulmonar: murmúrio vesicular presente à direita e roncos à esquerda. "
        "Presença de secreção moderada e espessa (com indicação para higiene brônquica)."
    )


def test_secretion_without_hygiene_indication():
    text = build_respiratory(ClinicalRecord(secretion="Purulenta", secretion_criteria="Não"))
    assert text.endswith("Presença de secreção purulenta.")
    assert build_respiratory(ClinicalRecord(secretion="Ausente")).endswith("Vias aéreas livres de secreção.")


def test_blood_gas_triggers():
    assert build_blood_gas(ClinicalRecord(gas_paco2="55", gas_lactate="2")) == ""
    assert build_blood_gas(ClinicalRecord(gas_result="Acidose Respiratória")) == "Gasometria arterial evidencia acidose respiratória."
    assert build_blood_gas(ClinicalRecord(gas_ph="7.30", gas_paco2="55")) == (
        "Gasometria arterial evidencia resultado pendente (pH 7.30, PaCO₂ 55)."
    )
    assert build_blood_gas(ClinicalRecord(gas_pao2="80")) != ""
    assert build_blood_gas(ClinicalRecord(gas_ph=7.35)) == "Gasometria arterial evidencia resultado pendente (pH 7.35)."


def test_blood_gas_parameter_order():
    rec = ClinicalRecord(
        gas_lactate="1.8", gas_be="-2", gas_hco3="24", gas_paco2="40", gas_pao2="90", gas_ph="7.40",
        gas_result="Gasometria dentro da normalidade",
    )
    assert build_blood_gas(rec) == (
        "Gasometria arterial evidencia parâmetros dentro da normalidade "
        "(pH 7.40, PaO₂ 90, PaCO₂ 40, HCO₃ 24, BE -2, Lactato 1.8)."
    )


def test_cardiovascular_full():
    rec = ClinicalRecord(
        hemodynamic="Estável",
        heart_rate="88",
        blood_pressure="120x80",
        perfusion="Adequada",
        extremity_temp="Aquecidas",
        edema_msd="2+",
        edema_mse="0",
        edema_mid="0",
        edema_mie="0",
    )
    assert build_cardiovascular(rec) == (
        "Hemodinamicamente estável, apresentando FC de 88 bpm e PA de 120x80 mmHg, "
        "com perfusão periférica adequada e extremidades aquecidas. Edema observado em: MSD: 2+."
    )


def test_edema_all_zero_gives_fallback_only():
    rec = ClinicalRecord(edema_msd="0", edema_mse="0", edema_mid="0", edema_mie="0")
    text = build_cardiovascular(rec)
    assert text.endswith("Ausência de edemas significativos.")
    assert "Edema observado" not in text


def test_cardiovascular_single_vital():
    assert build_cardiovascular(ClinicalRecord(hemodynamic="Instável", heart_rate="120")).startswith(
        "Hemodinamicamente instável, apresentando FC de 120 bpm."
    )


def test_functional_full():
    rec = ClinicalRecord(
        adm_passive="Preservada",
        adm_active="Reduzida",
        muscle_force="4",
        force_reason="fadiga",
        ims_score="3 - Sentado na beira do leito",
        mrc_score="48",
    )
    assert build_functional(rec) == (
        "Funcionalidade: ADM passiva preservada e ativa reduzida. "
        "Força muscular global grau 4 (fadiga). "
        "Escalas funcionais: IMS: 3 - Sentado na beira do leito, MRC Score: 48."
    )


def test_functional_scales_skip_defaults():
    text = build_functional(ClinicalRecord(ims_score="--", mrc_score="52"))
    assert text.endswith("Escalas funcionais: MRC Score: 52.")
    assert "IMS" not in text
