# src/ecorisk_core/__init__.py
from .models import (
    AppState,
    EnvironmentalSample,
    GeoPoint,
    RiskAssessment,
    Scenario,
    ScenarioProjection,
    ScoringConfig,
)

from .config import DEFAULT_SCENARIOS, DEFAULT_CONFIG, Settings

from .scoring import RiskScorer, RuleBasedScorer, categorize, get_scorer, score, score_risk
from .projection import project_scenario, project_temperature, project_vegetation, projection_series
from .sampler import sample

__all__ = [
    "AppState",
    "EnvironmentalSample",
    "GeoPoint",
    "RiskAssessment",
    "Scenario",
    "ScenarioProjection",
    "ScoringConfig",
    "DEFAULT_SCENARIOS",
    "DEFAULT_CONFIG",
    "Settings",
    "RiskScorer",
    "RuleBasedScorer",
    "categorize",
    "get_scorer",
    "score",
    "score_risk",
    "project_scenario",
    "project_temperature",
    "project_vegetation",
    "projection_series",
    "sample",
]
