# main.py

import logging
from dataclasses import asdict
from typing import Optional, List
from datetime import datetime
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

# Import Data Models & Logic
from constants import VERSION, DEXTROSE_LIBRARY, MIX_CONSTANTS
from models import DataTypeError
from app import generate_tpn_plan, format_mix_instructions, MEDICAL_DISCLAIMER
from mixture import MixtureSolver

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("tpneo-api")

app = FastAPI(
    title="TPNeo API",
    version=VERSION,
    description="Parenteral nutrition calculator: daily plan and 60 ml syringe recipe. \n\n"
                "**WARNING**: Decision Support Tool Only. " + MEDICAL_DISCLAIMER.strip(),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {"status": "active", "message": "TPNeo API is running successfully!"}


@app.get("/health")
def health_check():
    """K8s/AWS Health Probe"""
    return {"status": "active", "version": VERSION, "module": "tpneo-mixture-engine"}


def _check_solution_names(names: Optional[List[str]]) -> Optional[List[str]]:
    if names is None:
        return names
    known = set(DEXTROSE_LIBRARY.names())
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown dextrose solution(s): {', '.join(unknown)}")
    return names


# --- 2. STRICT INPUT SCHEMA (The Guardrails) ---
class PlanRequest(BaseModel):
    # 0 is accepted and yields an empty plan, as in the form
    weight: float = Field(..., ge=0.0, description="Weight in kg")
    tfi: float = Field(150.0, ge=0.0, description="Total Fluid Intake (ml/kg/day)")
    feeds: float = Field(0.0, ge=0.0, description="Enteral feeds (ml/24h)")
    meds: float = Field(0.0, ge=0.0, description="IV meds/flushes (ml/24h)")
    amino_acids: float = Field(3.5, ge=0.0, description="Amino acids 10% (g/kg/day)")
    lipids: float = Field(3.0, ge=0.0, description="Lipids 20% (g/kg/day)")
    sodium: float = Field(3.0, ge=0.0, description="Sodium as 3% NaCl (mEq/kg/day)")
    potassium: float = Field(2.0, ge=0.0, description="Potassium as KCl (mEq/kg/day)")
    calcium: float = Field(2.0, ge=0.0, description="Calcium Gluconate 10% (ml/kg/day)")
    gir: float = Field(8.0, ge=0.0, description="Glucose Infusion Rate (mg/kg/min)")

    # None means every solution on the shelf
    enabled_solutions: Optional[List[str]] = Field(None, description="Dextrose stocks to mix from")

    # Audit trail
    request_timestamp: Optional[datetime] = Field(default_factory=datetime.now)

    validate_solutions = field_validator("enabled_solutions")(_check_solution_names)

    class Config:
        json_schema_extra = {
            "example": {
                "weight": 1.5, "tfi": 150, "feeds": 0, "meds": 0,
                "amino_acids": 3.5, "lipids": 3, "sodium": 3, "potassium": 2,
                "calcium": 2, "gir": 8,
                "enabled_solutions": ["D50W", "D25W", "D10W", "D5W", "Sterile Water"]
            }
        }


class MixRequest(BaseModel):
    dextrose_electrolyte_volume: float = Field(..., ge=0.0, description="ml/day")
    total_dextrose_grams_per_day: float = Field(..., ge=0.0)
    weight: float = Field(..., ge=0.0)
    sodium: float = Field(0.0, ge=0.0)
    potassium: float = Field(0.0, ge=0.0)
    calcium: float = Field(0.0, ge=0.0)
    enabled_solutions: List[str] = Field(default_factory=DEXTROSE_LIBRARY.names)

    validate_solutions = field_validator("enabled_solutions")(_check_solution_names)


# --- 3. EXPLICIT RESPONSE SCHEMA (The Contract) ---
class StockSolutionResponse(BaseModel):
    name: str
    concentration: float
    grams_per_ml: float


class MixPartResponse(BaseModel):
    name: str
    volume: float


class MixResponse(BaseModel):
    parts: List[MixPartResponse] = []
    na_volume: float = 0.0
    k_volume: float = 0.0
    ca_volume: float = 0.0
    final_volume: float = MIX_CONSTANTS.FIXED_VOLUME_ML
    target_grams: float = 0.0
    final_concentration: float = 0.0
    target_concentration: float = 0.0
    available_volume_for_dextrose: float = 0.0
    total_electrolyte_volume: float = 0.0
    error: Optional[str] = None
    error_code: Optional[str] = None
    summary: str = ""


class DosingPlanResponse(BaseModel):
    total_fluid_intake: float
    parenteral_fluid_volume: float
    aa_grams: float
    aa_volume: float
    aa_rate: float
    lipid_grams: float
    lipid_volume: float
    lipid_rate: float
    dextrose_electrolyte_volume: float
    dextrose_electrolyte_rate: float
    total_dextrose_grams_per_day: float
    dextrose_calories: float
    aa_calories: float
    lipid_calories: float
    total_calories: float
    total_calories_per_kg: float
    dextrose_percentage: float
    aa_percentage: float
    lipid_percentage: float


class PlanResponse(BaseModel):
    plan: Optional[DosingPlanResponse]
    mix: Optional[MixResponse]
    enabled_solutions: List[str]
    human_readable_summary: str
    generated_at: datetime = Field(default_factory=datetime.now)


def _mix_payload(mix) -> dict:
    return {
        "parts": [{"name": p.name, "volume": p.volume} for p in mix.parts],
        "na_volume": mix.na_volume,
        "k_volume": mix.k_volume,
        "ca_volume": mix.ca_volume,
        "final_volume": mix.final_volume,
        "target_grams": mix.target_grams,
        "final_concentration": mix.final_concentration,
        "target_concentration": mix.target_concentration,
        "available_volume_for_dextrose": mix.available_volume_for_dextrose,
        "total_electrolyte_volume": mix.total_electrolyte_volume,
        "error": mix.error,
        "error_code": mix.error_code,
        "summary": format_mix_instructions(mix),
    }


# --- 4. ENDPOINTS ---

@app.get("/solutions", response_model=List[StockSolutionResponse])
def list_solutions():
    """The stock dextrose catalog, strongest first."""
    return [
        {"name": s.name, "concentration": s.concentration, "grams_per_ml": s.grams_per_ml}
        for s in DEXTROSE_LIBRARY.SOLUTIONS
    ]


@app.post("/plan", response_model=PlanResponse)
def get_plan(request: PlanRequest):
    """
    Full calculation: daily fluids, calories and the syringe recipe.
    An impossible mixture is a normal response with `mix.error` set.
    """
    try:
        logger.info(f"Processing TPN plan for Wt: {request.weight}kg, GIR: {request.gir}")

        data = request.model_dump()
        enabled = data.pop("enabled_solutions")
        data.pop("request_timestamp", None)

        result = generate_tpn_plan(data, enabled)

        return {
            "plan": asdict(result.plan) if result.plan is not None else None,
            "mix": _mix_payload(result.mix) if result.mix is not None else None,
            "enabled_solutions": result.enabled_solutions,
            "human_readable_summary": result.human_readable_summary,
        }

    except (ValueError, DataTypeError) as e:
        logger.warning(f"Input Validation Error: {str(e)}")
        raise HTTPException(status_code=422, detail=f"Input Validation Error: {str(e)}")

    except Exception as e:
        logger.error(f"Internal Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal TPN Engine Error")


@app.post("/mix", response_model=MixResponse)
def get_mix(request: MixRequest):
    """Runs only the Mixture Solver against already-derived daily figures."""
    try:
        mix = MixtureSolver.solve_mix(
            request.dextrose_electrolyte_volume,
            request.total_dextrose_grams_per_day,
            request.weight,
            request.sodium,
            request.potassium,
            request.calcium,
            request.enabled_solutions,
        )
        if not mix.success:
            logger.info(f"Mixture rejected ({mix.error_code}): {mix.error}")
        return _mix_payload(mix)

    except Exception as e:
        logger.error(f"Internal Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal TPN Engine Error")
