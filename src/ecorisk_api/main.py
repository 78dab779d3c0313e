from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from ecorisk_core import (
    DEFAULT_SCENARIOS,
    AppState,
    EnvironmentalSample,
    GeoPoint,
    Settings,
    get_scorer,
    project_scenario,
    sample,
)
from ecorisk_core.data_io import LayerLoadError, load_layer
from ecorisk_core.layers import layer_kpis
from ecorisk_core.logging_utils import get_logger

logger = get_logger(__name__)

app = FastAPI(title="EcoRisk API")

_STATE: Optional[AppState] = None


def get_app_state() -> AppState:
    """Process-wide state, built on first use from the environment settings."""
    global _STATE
    if _STATE is None:
        settings = Settings.from_env()
        try:
            layer = load_layer(settings.layer_path)
        except LayerLoadError as exc:
            logger.warning("Starting without a layer: %s", exc)
            layer = None
        _STATE = AppState(layer=layer, scorer_backend=settings.scorer_backend)
    return _STATE


@lru_cache(maxsize=8)
def _load_scorer(backend: str, model_dir: str):
    # lru_cache keeps successful loads only
    return get_scorer(backend, Settings(scorer_backend=backend, model_dir=Path(model_dir)))


def _resolve_scorer(backend: Optional[str], state: AppState):
    name = (backend or state.scorer_backend).strip().lower()
    try:
        return _load_scorer(name, str(Settings.from_env().model_dir))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except FileNotFoundError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


class ScenarioOut(BaseModel):
    id: str
    name: str
    description: str
    vegetation_loss_per_year: float
    temperature_gain_per_year: float


class SampleIn(BaseModel):
    vegetation_index: float
    surface_temperature_c: float
    population_density: float = Field(ge=0.0)


class SampleOut(BaseModel):
    vegetation_index: float
    surface_temperature_c: float
    population_density: float
    source: str


class AssessmentOut(BaseModel):
    score: float
    category: str
    backend: str


class ScoreRequest(BaseModel):
    sample: SampleIn
    backend: Optional[str] = None


class ProjectionRequest(BaseModel):
    base_vegetation_index: float
    base_temperature_c: float
    scenario_id: str = "medium"
    base_year: int = 2023
    target_year: int = 2050


class ProjectionOut(BaseModel):
    target_year: int
    scenario_id: str
    projected_vegetation_index: float
    projected_temperature_c: float


class PointRequest(BaseModel):
    lat: float
    lon: float
    score: bool = True
    backend: Optional[str] = None
    seed: Optional[int] = None


class PointResponse(BaseModel):
    lat: float
    lon: float
    sample: SampleOut
    assessment: Optional[AssessmentOut] = None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/scenarios", response_model=List[ScenarioOut])
def list_scenarios() -> List[ScenarioOut]:
    return [
        ScenarioOut(
            id=sid,
            name=s.name,
            description=s.description,
            vegetation_loss_per_year=s.vegetation_loss_per_year,
            temperature_gain_per_year=s.temperature_gain_per_year,
        )
        for sid, s in DEFAULT_SCENARIOS.items()
    ]


@app.post("/score", response_model=AssessmentOut)
def score_sample(req: ScoreRequest, state: AppState = Depends(get_app_state)) -> AssessmentOut:
    scorer = _resolve_scorer(req.backend, state)
    res = scorer.assess(EnvironmentalSample(**req.sample.model_dump(), source="request"))
    return AssessmentOut(score=res.score, category=res.category, backend=res.backend)


@app.post("/project", response_model=ProjectionOut)
def project(req: ProjectionRequest) -> ProjectionOut:
    p = project_scenario(
        base_ndvi=req.base_vegetation_index,
        base_temp_c=req.base_temperature_c,
        base_year=req.base_year,
        target_year=req.target_year,
        scenario_id=req.scenario_id,
    )
    return ProjectionOut(
        target_year=p.target_year,
        scenario_id=p.scenario_id,
        projected_vegetation_index=p.projected_vegetation_index,
        projected_temperature_c=p.projected_temperature_c,
    )


@app.post("/sample", response_model=PointResponse)
def sample_point(req: PointRequest, state: AppState = Depends(get_app_state)) -> PointResponse:
    rng = np.random.default_rng(req.seed)
    s = sample(GeoPoint(lat=req.lat, lon=req.lon), layer=state.layer, rng=rng)

    assessment = None
    if req.score:
        res = _resolve_scorer(req.backend, state).assess(s)
        assessment = AssessmentOut(score=res.score, category=res.category, backend=res.backend)

    return PointResponse(
        lat=req.lat,
        lon=req.lon,
        sample=SampleOut(
            vegetation_index=s.vegetation_index,
            surface_temperature_c=s.surface_temperature_c,
            population_density=s.population_density,
            source=s.source,
        ),
        assessment=assessment,
    )


@app.get("/layer/kpis")
def kpis(state: AppState = Depends(get_app_state)) -> Dict[str, object]:
    if state.layer is None:
        raise HTTPException(status_code=404, detail="No layer loaded")
    return layer_kpis(state.layer)
