from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG, SCORER_BACKENDS, Settings
from .logging_utils import get_logger
from .models import EnvironmentalSample, RiskAssessment, ScoringConfig

logger = get_logger(__name__)

HIGH = "High"
MODERATE = "Moderate"
LOW = "Low"
CATEGORIES = (LOW, MODERATE, HIGH)


def factor_risks(ndvi: Any, surface_temp_c: Any, density: Any, cfg: ScoringConfig = DEFAULT_CONFIG) -> Dict[str, Any]:
    """
    Normalized risk of each factor. Works on scalars and numpy/pandas arrays alike.
    ndvi and temperature are used as-is; only density is capped at the ceiling.
    """
    vegetation = 1.0 - ndvi
    temperature = (surface_temp_c - cfg.temp_min_c) / (cfg.temp_max_c - cfg.temp_min_c)
    dens = np.minimum(density, cfg.density_max) / cfg.density_max
    return {"temperature": temperature, "vegetation": vegetation, "density": dens}


def _weighted_sum(risks: Dict[str, Any], cfg: ScoringConfig) -> Any:
    return (
        cfg.w_temperature * risks["temperature"]
        + cfg.w_vegetation * risks["vegetation"]
        + cfg.w_density * risks["density"]
    )


def _to_points(weighted: Any) -> Any:
    # round half up, then clamp; np.clip keeps NaN as NaN
    return np.clip(np.floor(weighted * 100.0 + 0.5), 0.0, 100.0)


def categorize(score: float, cfg: ScoringConfig = DEFAULT_CONFIG) -> str:
    if score >= cfg.high_threshold:
        return HIGH
    if score >= cfg.moderate_threshold:
        return MODERATE
    return LOW


def score_risk(
    ndvi: float,
    surface_temp_c: float,
    density: float,
    cfg: Optional[ScoringConfig] = None,
) -> RiskAssessment:
    """
    Rule-based risk score:
      S = round(100 * (wT*T + wV*(1-NDVI) + wD*min(D, Dmax)/Dmax)), clamped to 0..100
    with T = (LST - 10) / (45 - 10).
    """
    cfg = cfg or DEFAULT_CONFIG
    risks = factor_risks(float(ndvi), float(surface_temp_c), float(density), cfg)
    score = float(_to_points(_weighted_sum(risks, cfg)))
    return RiskAssessment(score=score, category=categorize(score, cfg), backend="rule-based")


def score(sample: EnvironmentalSample, cfg: Optional[ScoringConfig] = None) -> RiskAssessment:
    return score_risk(
        sample.vegetation_index,
        sample.surface_temperature_c,
        sample.population_density,
        cfg=cfg,
    )


def score_frame(
    df: pd.DataFrame,
    cfg: Optional[ScoringConfig] = None,
    ndvi_col: str = "ndvi",
    temp_col: str = "lst",
    density_col: str = "density",
) -> pd.DataFrame:
    """Vectorized score_risk; adds `risk_score` and `risk_category` columns to a copy of df."""
    cfg = cfg or DEFAULT_CONFIG
    out = df.copy()
    risks = factor_risks(
        out[ndvi_col].astype(float).to_numpy(),
        out[temp_col].astype(float).to_numpy(),
        out[density_col].astype(float).to_numpy(),
        cfg,
    )
    scores = _to_points(_weighted_sum(risks, cfg))
    out["risk_score"] = scores
    out["risk_category"] = [categorize(float(s), cfg) for s in scores]
    return out


# ==========================================================
# Scorer backends
# ==========================================================
class RiskScorer:
    """Common contract of every scoring backend."""

    name = "base"

    def assess(self, sample: EnvironmentalSample) -> RiskAssessment:
        raise NotImplementedError


class RuleBasedScorer(RiskScorer):
    name = "rule-based"

    def __init__(self, cfg: Optional[ScoringConfig] = None):
        self.cfg = cfg or DEFAULT_CONFIG

    def assess(self, sample: EnvironmentalSample) -> RiskAssessment:
        return score(sample, cfg=self.cfg)


def get_scorer(name: Optional[str] = None, settings: Optional[Settings] = None) -> RiskScorer:
    """Pick the scoring backend by name, falling back to the configured one."""
    settings = settings or Settings.from_env()
    backend = (name or settings.scorer_backend).strip().lower()

    if backend not in SCORER_BACKENDS:
        raise ValueError(f"Unknown scorer backend: {backend!r}. Expected one of {SCORER_BACKENDS}")

    if backend == "learned":
        from .surrogate import LearnedScorer, load_bundle

        logger.info("Loading learned scorer from %s", settings.model_dir)
        return LearnedScorer(load_bundle(settings.model_dir))

    return RuleBasedScorer()
