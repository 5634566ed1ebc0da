"""
TPNeo: Dosing Engine
====================
Translates per-kg daily prescriptions into absolute daily volumes,
hourly rates and caloric totals.
"""

from models import PatientInputs, DosingPlan
from constants import STOCK_CONSTANTS, CALORIC_CONSTANTS, TIME_CONSTANTS


class DosingEngine:
    """
    The Arithmetic Core.
    Translates Clinical Inputs -> Daily Volumes -> Calories.
    """

    @staticmethod
    def _percentage(part: float, total: float) -> float:
        return (part / total) * 100.0 if total > 0 else 0.0

    @staticmethod
    def _calculate_fluids(inputs: PatientInputs) -> dict:
        """
        Fluid budget for the day.
        Parenteral volume is left signed so the UI can show a deficit.
        """
        total_fluid_intake = inputs.weight * inputs.tfi
        parenteral = total_fluid_intake - inputs.feeds - inputs.meds
        return {
            "total_fluid_intake": total_fluid_intake,
            "parenteral_fluid_volume": parenteral,
        }

    @staticmethod
    def _calculate_macronutrients(inputs: PatientInputs, parenteral_volume: float) -> dict:
        hours = TIME_CONSTANTS.HOURS_PER_DAY

        aa_grams = inputs.weight * inputs.amino_acids
        aa_volume = aa_grams / STOCK_CONSTANTS.AMINO_ACID_FRACTION

        lipid_grams = inputs.weight * inputs.lipids
        lipid_volume = lipid_grams / STOCK_CONSTANTS.LIPID_FRACTION

        # Whatever is left carries the dextrose and electrolytes
        dex_volume = max(0.0, parenteral_volume - aa_volume - lipid_volume)

        # GIR (mg/kg/min) -> g/day
        dextrose_grams = (inputs.gir * inputs.weight * TIME_CONSTANTS.MINUTES_PER_DAY
                          / TIME_CONSTANTS.MG_PER_GRAM)

        return {
            "aa_grams": aa_grams,
            "aa_volume": aa_volume,
            "aa_rate": aa_volume / hours,
            "lipid_grams": lipid_grams,
            "lipid_volume": lipid_volume,
            "lipid_rate": lipid_volume / hours,
            "dextrose_electrolyte_volume": dex_volume,
            "dextrose_electrolyte_rate": dex_volume / hours,
            "total_dextrose_grams_per_day": dextrose_grams,
        }

    @staticmethod
    def _calculate_calories(weight: float, macros: dict) -> dict:
        dextrose_kcal = macros["total_dextrose_grams_per_day"] * CALORIC_CONSTANTS.KCAL_PER_GRAM_DEXTROSE
        aa_kcal = macros["aa_grams"] * CALORIC_CONSTANTS.KCAL_PER_GRAM_AMINO_ACID
        # 20% lipid energy is quoted per ml of emulsion
        lipid_kcal = macros["lipid_volume"] * CALORIC_CONSTANTS.KCAL_PER_ML_LIPID_20
        total = dextrose_kcal + aa_kcal + lipid_kcal

        return {
            "dextrose_calories": dextrose_kcal,
            "aa_calories": aa_kcal,
            "lipid_calories": lipid_kcal,
            "total_calories": total,
            "total_calories_per_kg": total / weight if weight > 0 else 0.0,
            "dextrose_percentage": DosingEngine._percentage(dextrose_kcal, total),
            "aa_percentage": DosingEngine._percentage(aa_kcal, total),
            "lipid_percentage": DosingEngine._percentage(lipid_kcal, total),
        }

    @staticmethod
    def compute_dosing_plan(inputs: PatientInputs) -> DosingPlan:
        """
        MASTER BUILDER: the full daily plan for this snapshot.
        Never fails; a zero weight simply yields an all-zero plan.
        """
        fluids = DosingEngine._calculate_fluids(inputs)
        macros = DosingEngine._calculate_macronutrients(inputs, fluids["parenteral_fluid_volume"])
        calories = DosingEngine._calculate_calories(inputs.weight, macros)
        return DosingPlan(**fluids, **macros, **calories)
