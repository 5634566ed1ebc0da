# mixture.py
import logging
from typing import Iterable, List, Tuple

from constants import DEXTROSE_LIBRARY, MIX_CONSTANTS, STOCK_CONSTANTS, StockSolution
from models import MixPart, MixRecipe, MixtureError
from feasibility import FeasibilitySupervisor

logger = logging.getLogger(__name__)


class StockSelector:
    @staticmethod
    def select_bracket(candidates: List[StockSolution],
                       target_concentration: float) -> Tuple[StockSolution, StockSolution]:
        """
        Picks the tightest (high, low) pair around the target.
        Candidates arrive strongest first.
        """
        high = None
        # Strongest -> weakest: the last match is the weakest solution still >= target
        for solution in candidates:
            if solution.concentration >= target_concentration:
                high = solution

        low = None
        # Weakest -> strongest: the last match is the strongest solution still <= target
        for solution in reversed(candidates):
            if solution.concentration <= target_concentration:
                low = solution

        if high is None:
            high = candidates[0]
        if low is None:
            low = candidates[-1]
        return high, low


class MixtureSolver:
    @staticmethod
    def scale_electrolytes(dex_and_electrolyte_volume: float, weight: float,
                           na_dose: float, k_dose: float, ca_dose: float) -> dict:
        """
        Maps the daily electrolyte doses into the fixed syringe volume,
        keeping the same concentration as the full 24h infusion.
        """
        correction_factor = MIX_CONSTANTS.FIXED_VOLUME_ML / dex_and_electrolyte_volume

        na_volume = (weight * na_dose * correction_factor) / STOCK_CONSTANTS.NACL_3_MEQ_PER_ML
        k_volume = (weight * k_dose * correction_factor) / STOCK_CONSTANTS.KCL_MEQ_PER_ML
        # Calcium gluconate is prescribed in ml/kg/day already
        ca_volume = weight * ca_dose * correction_factor

        return {
            "correction_factor": correction_factor,
            "na_volume": na_volume,
            "k_volume": k_volume,
            "ca_volume": ca_volume,
            "total": na_volume + k_volume + ca_volume,
        }

    @staticmethod
    def blend_pair(high: StockSolution, low: StockSolution,
                   available_volume: float, target_grams: float) -> List[MixPart]:
        """
        Two-component mass balance:
            v_high + v_low = available_volume
            v_high * C_h + v_low * C_l = target_grams
        """
        c_h, c_l = high.grams_per_ml, low.grams_per_ml
        volume_high = (target_grams - available_volume * c_l) / (c_h - c_l)
        volume_low = available_volume - volume_high

        FeasibilitySupervisor.check_pair_volumes(high, low, volume_high, volume_low)

        parts = [
            MixPart(name=high.name, volume=max(0.0, volume_high)),
            MixPart(name=low.name, volume=max(0.0, volume_low)),
        ]
        return [p for p in parts if p.volume > MIX_CONSTANTS.VOLUME_TOLERANCE_ML]

    @staticmethod
    def _solve(dex_and_electrolyte_volume: float, total_dextrose_grams_per_day: float,
               weight: float, na_dose: float, k_dose: float, ca_dose: float,
               enabled_solutions: Iterable[str]) -> MixRecipe:
        fixed_volume = MIX_CONSTANTS.FIXED_VOLUME_ML

        # 1. Is there any room for dextrose/electrolytes at all?
        FeasibilitySupervisor.check_volume_available(dex_and_electrolyte_volume)

        # 2. Electrolytes (proportional to the syringe)
        lytes = MixtureSolver.scale_electrolytes(
            dex_and_electrolyte_volume, weight, na_dose, k_dose, ca_dose
        )
        FeasibilitySupervisor.check_electrolyte_volume(lytes["total"], fixed_volume)

        # 3. Target concentration in the dextrose share of the syringe
        available = fixed_volume - lytes["total"]
        daily_concentration = (total_dextrose_grams_per_day / dex_and_electrolyte_volume
                               if dex_and_electrolyte_volume > 0 else 0.0)
        target_grams = daily_concentration * fixed_volume
        target_concentration = target_grams / available if available > 0 else 0.0

        # 4. Candidate pool
        candidates = DEXTROSE_LIBRARY.enabled(enabled_solutions)
        FeasibilitySupervisor.check_solutions_selected(candidates)
        FeasibilitySupervisor.check_concentration_reachable(target_concentration, candidates)

        # 5. Bracket + 6. Blend
        high, low = StockSelector.select_bracket(candidates, target_concentration)
        logger.debug("Target %.4f bracketed by %s / %s", target_concentration, high.name, low.name)

        if high.concentration == low.concentration:
            FeasibilitySupervisor.check_single_solution(high, target_concentration)
            parts = [MixPart(name=high.name, volume=available)]
        else:
            parts = MixtureSolver.blend_pair(high, low, available, target_grams)

        return MixRecipe(
            parts=parts,
            na_volume=lytes["na_volume"],
            k_volume=lytes["k_volume"],
            ca_volume=lytes["ca_volume"],
            final_volume=fixed_volume,
            target_grams=target_grams,
            final_concentration=daily_concentration,
            target_concentration=target_concentration,
            available_volume_for_dextrose=available,
            total_electrolyte_volume=lytes["total"],
        )

    @staticmethod
    def solve_mix(dex_and_electrolyte_volume: float, total_dextrose_grams_per_day: float,
                  weight: float, na_dose: float, k_dose: float, ca_dose: float,
                  enabled_solutions: Iterable[str]) -> MixRecipe:
        """
        SAFE FACTORY: recipe for one fixed-volume syringe.
        Infeasible configurations come back as an error recipe, never raised.
        """
        try:
            return MixtureSolver._solve(
                dex_and_electrolyte_volume, total_dextrose_grams_per_day,
                weight, na_dose, k_dose, ca_dose, enabled_solutions
            )
        except MixtureError as e:
            logger.debug("Mixture infeasible (%s): %s", e.code, e)
            return MixRecipe.failure(e)
