# feasibility.py
from typing import List

from constants import MIX_CONSTANTS, StockSolution
from models import (
    NoVolumeAvailableError, ElectrolyteOverflowError, NoSolutionSelectedError,
    ConcentrationUnreachableError, SingleSolutionMismatchError, InfeasiblePairError
)


class FeasibilitySupervisor:
    """
    Arithmetic feasibility checks used by the Mixture Solver.
    Each check returns None when the step may proceed and raises a
    MixtureError subclass describing the problem otherwise.
    """

    @staticmethod
    def check_volume_available(dex_and_electrolyte_volume: float) -> None:
        if dex_and_electrolyte_volume <= 0:
            raise NoVolumeAvailableError()

    @staticmethod
    def check_electrolyte_volume(total_electrolyte_volume: float,
                                 limit: float = MIX_CONSTANTS.FIXED_VOLUME_ML) -> None:
        # Electrolytes alone filling the syringe leaves no room for dextrose
        if total_electrolyte_volume >= limit:
            raise ElectrolyteOverflowError(total_electrolyte_volume, limit)

    @staticmethod
    def check_solutions_selected(candidates: List[StockSolution]) -> None:
        if not candidates:
            raise NoSolutionSelectedError()

    @staticmethod
    def check_concentration_reachable(target_concentration: float,
                                      candidates: List[StockSolution]) -> None:
        """
        Candidates arrive strongest first.
        Only the upper end is checked here, strictly apart from float
        rounding noise. A target below the weakest solution falls through
        to check_single_solution on that solution.
        """
        strongest = candidates[0]
        if target_concentration > strongest.concentration + MIX_CONSTANTS.FLOAT_EPSILON:
            raise ConcentrationUnreachableError(
                target_concentration, strongest.name, strongest.concentration
            )

    @staticmethod
    def check_single_solution(solution: StockSolution, target_concentration: float) -> None:
        if abs(solution.concentration - target_concentration) > MIX_CONSTANTS.CONCENTRATION_TOLERANCE:
            raise SingleSolutionMismatchError(solution.name)

    @staticmethod
    def check_pair_volumes(high: StockSolution, low: StockSolution,
                           volume_high: float, volume_low: float) -> None:
        tol = MIX_CONSTANTS.VOLUME_TOLERANCE_ML
        if volume_high < -tol or volume_low < -tol:
            raise InfeasiblePairError(high.name, low.name, volume_high, volume_low)
