from __future__ import annotations

from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .config import DEFAULT_SCENARIOS, FALLBACK_SCENARIO_ID
from .models import Scenario, ScenarioProjection, ScoringConfig
from .scoring import score_risk


def scenario_rates(scenario_id: str) -> Scenario:
    """Annual rates for a scenario id; unknown ids use the intermediate pathway."""
    return DEFAULT_SCENARIOS.get(scenario_id, DEFAULT_SCENARIOS[FALLBACK_SCENARIO_ID])


def _elapsed(years_ahead: float) -> float:
    # np.maximum keeps NaN, builtin max does not
    return float(np.maximum(0.0, float(years_ahead)))


def project_vegetation(base: float, years_ahead: float, scenario: str) -> float:
    rate = scenario_rates(scenario).vegetation_loss_per_year
    return float(np.maximum(0.0, float(base) - rate * _elapsed(years_ahead)))


def project_temperature(base: float, years_ahead: float, scenario: str) -> float:
    rate = scenario_rates(scenario).temperature_gain_per_year
    return float(base) + rate * _elapsed(years_ahead)


def project_scenario(
    base_ndvi: float,
    base_temp_c: float,
    base_year: int,
    target_year: int,
    scenario_id: str,
) -> ScenarioProjection:
    years_ahead = max(0, int(target_year) - int(base_year))
    return ScenarioProjection(
        target_year=int(target_year),
        scenario_id=scenario_id,
        projected_vegetation_index=project_vegetation(base_ndvi, years_ahead, scenario_id),
        projected_temperature_c=project_temperature(base_temp_c, years_ahead, scenario_id),
    )


def projection_series(
    base_ndvi: float,
    base_temp_c: float,
    base_year: int,
    target_year: int,
    scenarios: Optional[Iterable[str]] = None,
    density: float = 0.0,
    cfg: Optional[ScoringConfig] = None,
) -> pd.DataFrame:
    """
    Year-by-year projections for charting, one row per (scenario, year) from
    base_year to target_year inclusive. risk_score is the rule-based score of
    the projected values at a fixed population density.
    """
    scenario_ids = list(scenarios) if scenarios is not None else list(DEFAULT_SCENARIOS.keys())
    last_year = max(int(base_year), int(target_year))

    rows = []
    for sid in scenario_ids:
        for year in range(int(base_year), last_year + 1):
            p = project_scenario(base_ndvi, base_temp_c, base_year, year, sid)
            assessment = score_risk(p.projected_vegetation_index, p.projected_temperature_c, density, cfg=cfg)
            rows.append(
                dict(
                    year=year,
                    scenario_id=sid,
                    vegetation_index=p.projected_vegetation_index,
                    surface_temperature_c=p.projected_temperature_c,
                    risk_score=assessment.score,
                    risk_category=assessment.category,
                )
            )

    return pd.DataFrame(rows).sort_values(["scenario_id", "year"]).reset_index(drop=True)
