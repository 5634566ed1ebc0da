# --- METADATA & COMPLIANCE ---
__version__ = "1.0.0"
__validation_status__ = "Arithmetic feasibility only"

MEDICAL_DISCLAIMER = """
⚠️ DECISION SUPPORT TOOL - NOT A PRESCRIPTION
• Final responsibility: Treating physician
• Verify every volume before drawing up the syringe
"""

import logging
import re
import math
from typing import Iterable, Optional

from constants import DEXTROSE_LIBRARY, MIX_CONSTANTS
from models import PatientInputs, MixRecipe, TPNResult, AuditLog
from dosing import DosingEngine
from mixture import MixtureSolver

logger = logging.getLogger(__name__)

# Same prefix rule as a browser parseFloat
LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Form fields, in display order
INPUT_FIELDS = (
    "weight", "tfi", "feeds", "meds", "amino_acids", "lipids",
    "sodium", "potassium", "calcium", "gir",
)

ELECTROLYTE_LABELS = (
    ("na_volume", "3% NaCl"),
    ("k_volume", "KCl (2 mEq/ml)"),
    ("ca_volume", "10% Calcium Gluconate"),
)


def parse_number(value) -> float:
    """
    Lenient form parsing: reads the leading number of a string
    ("1.5kg" -> 1.5, "3e" -> 3); blanks, junk and non-finite values count as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        match = LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        value = match.group(1)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def parse_inputs(raw: dict) -> PatientInputs:
    return PatientInputs(**{name: parse_number(raw.get(name)) for name in INPUT_FIELDS})


def format_mix_instructions(mix: Optional[MixRecipe]) -> str:
    """The preparation card shown to the nurse."""
    if mix is None:
        return "Enter values to calculate the dextrose mixture."
    if not mix.success:
        return f"Calculation Error: {mix.error}"
    if not mix.parts:
        return "Enter values to calculate the dextrose mixture."

    lines = [f"To prepare {mix.final_volume:.2f} ml of Dextrose/Electrolyte fluid, mix:"]
    for part in mix.parts:
        lines.append(f"- {part.volume:.2f} ml of {part.name}")
    for attr, label in ELECTROLYTE_LABELS:
        volume = getattr(mix, attr)
        if volume > MIX_CONSTANTS.VOLUME_TOLERANCE_ML:
            lines.append(f"- {volume:.2f} ml of {label}")
    lines.append(
        f"This provides {mix.target_grams:.2f}g of Dextrose at a final "
        f"concentration of {mix.final_concentration * 100:.1f}%."
    )
    return "\n".join(lines)


def generate_tpn_plan(raw: dict, enabled_solutions: Optional[Iterable[str]] = None) -> TPNResult:
    """
    Main entry point for the UI/API.
    Recomputes the whole plan from one snapshot of the form.
    """
    inputs = parse_inputs(raw)
    if enabled_solutions is None:
        enabled = DEXTROSE_LIBRARY.names()
    else:
        wanted = set(enabled_solutions)
        enabled = [name for name in DEXTROSE_LIBRARY.names() if name in wanted]
    audit = AuditLog(inputs_hash=hash((inputs, tuple(enabled))))

    if inputs.weight == 0:
        return TPNResult(inputs=inputs, plan=None, mix=None, enabled_solutions=enabled,
                         human_readable_summary=format_mix_instructions(None),
                         audit_log=audit)

    plan = DosingEngine.compute_dosing_plan(inputs)
    mix = MixtureSolver.solve_mix(
        plan.dextrose_electrolyte_volume,
        plan.total_dextrose_grams_per_day,
        inputs.weight,
        inputs.sodium,
        inputs.potassium,
        inputs.calcium,
        enabled,
    )
    if not mix.success:
        logger.info("Dextrose mixture not possible: %s", mix.error)

    return TPNResult(
        inputs=inputs,
        plan=plan,
        mix=mix,
        enabled_solutions=enabled,
        human_readable_summary=format_mix_instructions(mix),
        audit_log=audit,
    )
