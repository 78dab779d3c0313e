from __future__ import annotations

from typing import Optional

import pandas as pd

from .config import DEFAULT_CONFIG
from .models import ScoringConfig
from .scoring import factor_risks

FACTOR_LABELS = {
    "temperature": "Surface temperature (LST)",
    "vegetation": "Lack of vegetation (1 - NDVI)",
    "density": "Population density",
}


def rule_breakdown(
    ndvi: float,
    surface_temp_c: float,
    density: float,
    cfg: Optional[ScoringConfig] = None,
) -> pd.DataFrame:
    """
    Decomposition consistent with the rule-based score:
      S = 100 * (wT*T + wV*V + wD*D)
    `contribution` is each term in score points, before rounding and clamping,
    so the column sums to the raw score.
    """
    cfg = cfg or DEFAULT_CONFIG
    risks = factor_risks(float(ndvi), float(surface_temp_c), float(density), cfg)
    weights = {
        "temperature": cfg.w_temperature,
        "vegetation": cfg.w_vegetation,
        "density": cfg.w_density,
    }

    rows = [
        dict(
            factor=k,
            label=FACTOR_LABELS[k],
            normalized_risk=float(risks[k]),
            weight=float(weights[k]),
            contribution=100.0 * float(weights[k]) * float(risks[k]),
        )
        for k in ("temperature", "vegetation", "density")
    ]
    return pd.DataFrame(rows).sort_values("contribution", ascending=False).reset_index(drop=True)
