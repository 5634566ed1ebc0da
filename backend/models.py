"""
TPNeo: Data Dictionary
======================
Defines the inputs (Doctor), the derived daily plan (Dosing Engine),
the syringe recipe (Mixture Solver) and the error taxonomy for the
infeasible mixtures.

NO LOGIC is implemented here beyond input validation.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime
from constants import VERSION, MIX_CONSTANTS, DEXTROSE_LIBRARY


class DataTypeError(TypeError):
    """Raised when inputs are wrong python types (str instead of float)."""
    pass


# --- 1. MIXTURE ERRORS (Reported, never fatal) ---

class MixtureError(ValueError):
    """Base class for every reason a syringe recipe cannot be produced."""
    code = "mixture_error"


class NoVolumeAvailableError(MixtureError):
    code = "no_volume_available"

    def __init__(self):
        super().__init__("No volume available for Dextrose/Electrolyte infusion.")


class ElectrolyteOverflowError(MixtureError):
    code = "electrolyte_overflow"

    def __init__(self, total_volume: float, limit: float = MIX_CONSTANTS.FIXED_VOLUME_ML):
        self.total_volume = total_volume
        self.limit = limit
        super().__init__(
            f"Proportional electrolyte volume ({total_volume:.2f} ml) "
            f"exceeds the fixed {limit:g}ml limit."
        )


class NoSolutionSelectedError(MixtureError):
    code = "no_solution_selected"

    def __init__(self):
        super().__init__("Please select at least one dextrose solution.")


class ConcentrationUnreachableError(MixtureError):
    code = "concentration_unreachable"

    def __init__(self, target_concentration: float, strongest_name: str,
                 strongest_concentration: float):
        self.target_concentration = target_concentration
        self.strongest_name = strongest_name
        self.strongest_concentration = strongest_concentration
        super().__init__(
            f"Required concentration ({target_concentration * 100:.1f}%) is higher than "
            f"the max available solution "
            f"({strongest_concentration * 100:.1f}% - {strongest_name})."
        )


class SingleSolutionMismatchError(MixtureError):
    code = "single_solution_mismatch"

    def __init__(self, solution_name: str):
        self.solution_name = solution_name
        super().__init__(
            f"Cannot achieve target GIR with only {solution_name}. "
            "Please select another solution to mix with."
        )


class InfeasiblePairError(MixtureError):
    code = "infeasible_pair"

    def __init__(self, high_name: str, low_name: str, volume_high: float, volume_low: float):
        self.high_name = high_name
        self.low_name = low_name
        self.volume_high = volume_high
        self.volume_low = volume_low
        super().__init__(
            f"Could not compute a valid mixture with {high_name} and {low_name}. "
            "Try selecting a different pair of solutions."
        )


# --- 2. INPUT LAYER (What the Doctor Enters) ---

@dataclass(frozen=True)
class PatientInputs:
    """
    One snapshot of the bedside form.
    Doses are per kg per day; feeds and meds are absolute 24h volumes.
    """
    weight: float = 0.0               # kg
    tfi: float = 0.0                  # ml/kg/day
    feeds: float = 0.0                # ml/24h enteral
    meds: float = 0.0                 # ml/24h IV meds/flushes
    amino_acids: float = 0.0          # g/kg/day (as 10%)
    lipids: float = 0.0               # g/kg/day (as 20%)
    sodium: float = 0.0               # mEq/kg/day (as 3% NaCl)
    potassium: float = 0.0            # mEq/kg/day (as KCl)
    calcium: float = 0.0              # ml/kg/day (10% Calcium Gluconate)
    gir: float = 0.0                  # mg/kg/min

    def __post_init__(self):
        for name in self.__dataclass_fields__:
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise DataTypeError(f"Field '{name}' must be numeric, got {type(val)}")
            if val < 0:
                raise ValueError(f"Field '{name}' cannot be negative: {val}")


# --- 3. DERIVED DAILY PLAN (Dosing Engine) ---

@dataclass(frozen=True)
class DosingPlan:
    # Fluids (ml/day)
    total_fluid_intake: float
    parenteral_fluid_volume: float     # May be negative if feeds+meds exceed TFI

    # Macronutrients
    aa_grams: float
    aa_volume: float
    aa_rate: float                     # ml/hr
    lipid_grams: float
    lipid_volume: float
    lipid_rate: float                  # ml/hr
    dextrose_electrolyte_volume: float
    dextrose_electrolyte_rate: float   # ml/hr
    total_dextrose_grams_per_day: float

    # Calories (kcal/day)
    dextrose_calories: float
    aa_calories: float
    lipid_calories: float
    total_calories: float
    total_calories_per_kg: float
    dextrose_percentage: float
    aa_percentage: float
    lipid_percentage: float


# --- 4. SYRINGE RECIPE (Mixture Solver) ---

@dataclass(frozen=True)
class MixPart:
    name: str
    volume: float  # ml


@dataclass(frozen=True)
class MixRecipe:
    """
    Either an error (error + error_code) or the recipe for one
    fixed-volume syringe of dextrose/electrolyte fluid.
    """
    parts: List[MixPart] = field(default_factory=list)
    na_volume: float = 0.0
    k_volume: float = 0.0
    ca_volume: float = 0.0
    final_volume: float = MIX_CONSTANTS.FIXED_VOLUME_ML
    target_grams: float = 0.0
    final_concentration: float = 0.0    # Daily dextrose concentration (g/ml)
    target_concentration: float = 0.0   # Concentration needed in the dextrose share
    available_volume_for_dextrose: float = 0.0
    total_electrolyte_volume: float = 0.0

    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def failure(cls, exc: MixtureError) -> "MixRecipe":
        return cls(error=str(exc), error_code=exc.code)

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def dextrose_volume(self) -> float:
        return sum(p.volume for p in self.parts)

    @property
    def delivered_grams(self) -> float:
        return sum(DEXTROSE_LIBRARY.get(p.name).grams_per_ml * p.volume for p in self.parts)


# --- 5. OUTPUT LAYER ---

@dataclass
class AuditLog:
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    action: str = "tpn_calculation"
    inputs_hash: int = 0
    model_version: str = VERSION


@dataclass
class TPNResult:
    """Standardized response format for API/UI."""
    inputs: PatientInputs
    plan: Optional[DosingPlan]          # None when weight is 0
    mix: Optional[MixRecipe]
    enabled_solutions: List[str] = field(default_factory=list)
    human_readable_summary: str = ""
    audit_log: Optional[AuditLog] = None
