from dataclasses import dataclass
VERSION = "1.0.0"


@dataclass(frozen=True)
class StockSolution:
    name: str
    concentration: float   # Fraction w/v (0.0 - 1.0)
    grams_per_ml: float    # Equal to concentration for dextrose in water


class STOCK_CONSTANTS:
    AMINO_ACID_FRACTION = 0.10   # 10% amino acid solution
    LIPID_FRACTION = 0.20        # 20% lipid emulsion
    NACL_3_MEQ_PER_ML = 0.513    # 3g NaCl / 100ml -> 513 mEq/L
    KCL_MEQ_PER_ML = 2.0         # Standard KCl concentrate


class CALORIC_CONSTANTS:
    KCAL_PER_GRAM_DEXTROSE = 3.4
    KCAL_PER_GRAM_AMINO_ACID = 4.0
    KCAL_PER_ML_LIPID_20 = 2.0   # Per ml, not per gram


class TIME_CONSTANTS:
    MINUTES_PER_DAY = 1440.0
    HOURS_PER_DAY = 24.0
    MG_PER_GRAM = 1000.0


class MIX_CONSTANTS:
    FIXED_VOLUME_ML = 60.0  # One syringe batch
    VOLUME_TOLERANCE_ML = 0.001
    CONCENTRATION_TOLERANCE = 0.001
    FLOAT_EPSILON = 1e-9  # Float rounding noise


class DEXTROSE_LIBRARY:
    """
    The stock dextrose solutions on the ward shelf.
    Ordered strongest first.
    """
    SOLUTIONS = (
        StockSolution(name="D50W", concentration=0.50, grams_per_ml=0.50),
        StockSolution(name="D25W", concentration=0.25, grams_per_ml=0.25),
        StockSolution(name="D10W", concentration=0.10, grams_per_ml=0.10),
        StockSolution(name="D5W", concentration=0.05, grams_per_ml=0.05),
        StockSolution(name="Sterile Water", concentration=0.00, grams_per_ml=0.00),
    )

    @staticmethod
    def names() -> list:
        return [s.name for s in DEXTROSE_LIBRARY.SOLUTIONS]

    @staticmethod
    def get(name: str) -> StockSolution:
        for solution in DEXTROSE_LIBRARY.SOLUTIONS:
            if solution.name == name:
                return solution
        raise KeyError(f"Unknown dextrose solution: {name}")

    @staticmethod
    def enabled(names) -> list:
        """Catalog entries whose names are enabled, strongest first."""
        wanted = set(names or ())
        return sorted(
            (s for s in DEXTROSE_LIBRARY.SOLUTIONS if s.name in wanted),
            key=lambda s: s.concentration,
            reverse=True,
        )
