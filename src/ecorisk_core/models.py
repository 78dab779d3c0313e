from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float

    @classmethod
    def coerce(cls, point: Union["GeoPoint", Dict[str, Any], Tuple[float, float]]) -> "GeoPoint":
        """Accept a GeoPoint, a {"lat", "lon"} mapping or a (lat, lon) pair."""
        if isinstance(point, GeoPoint):
            return point
        if isinstance(point, dict):
            return cls(lat=float(point["lat"]), lon=float(point["lon"]))
        lat, lon = point
        return cls(lat=float(lat), lon=float(lon))


@dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    description: str = ""
    vegetation_loss_per_year: float = 0.0
    temperature_gain_per_year: float = 0.0


@dataclass(frozen=True)
class ScoringConfig:
    # Factor weights
    w_temperature: float = 0.45
    w_vegetation: float = 0.40
    w_density: float = 0.15

    # Normalization bounds
    temp_min_c: float = 10.0
    temp_max_c: float = 45.0
    density_max: float = 10000.0

    # Category thresholds (score points)
    high_threshold: float = 65.0
    moderate_threshold: float = 40.0


@dataclass
class EnvironmentalSample:
    vegetation_index: float
    surface_temperature_c: float
    population_density: float
    # "layer", "partial" or "synthetic"
    source: str = "synthetic"


@dataclass(frozen=True)
class RiskAssessment:
    score: float
    category: str
    backend: str = "rule-based"


@dataclass(frozen=True)
class ScenarioProjection:
    target_year: int
    scenario_id: str
    projected_vegetation_index: float
    projected_temperature_c: float


@dataclass
class AppState:
    """UI-owned state handed explicitly into core calls."""

    layer: Optional[Dict[str, Any]] = None
    scorer_backend: str = "rule-based"
    scenario_id: str = "medium"
