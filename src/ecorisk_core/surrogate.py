from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import joblib
import numpy as np
import pandas as pd
import shap
from sklearn.ensemble import ExtraTreesRegressor
from sklearn.metrics import mean_absolute_error, r2_score
from sklearn.model_selection import train_test_split

from .logging_utils import get_logger
from .models import EnvironmentalSample, RiskAssessment, ScoringConfig
from .config import DEFAULT_CONFIG
from .scoring import RiskScorer, categorize, score_frame

logger = get_logger(__name__)

FEATURE_NAMES = ["ndvi", "lst", "density"]
TARGET = "risk_score"


@dataclass
class ScorerBundle:
    model: Any
    feature_names: list[str]
    background: np.ndarray
    metrics: Dict[str, Any] = field(default_factory=dict)


def generate_samples(n: int, seed: int = 42, cfg: Optional[ScoringConfig] = None) -> pd.DataFrame:
    """
    Random inputs over the documented operating ranges, labelled with the
    rule-based score. Slightly wider than the sampler ranges so the model sees
    the edges of the scale.
    """
    rng = np.random.default_rng(seed)
    df = pd.DataFrame(
        {
            "ndvi": rng.uniform(0.0, 1.0, n),
            "lst": rng.uniform(10.0, 45.0, n),
            "density": rng.uniform(0.0, 12000.0, n),
        }
    )
    return score_frame(df, cfg=cfg)


def train_scorer(samples: pd.DataFrame, seed: int = 42, n_estimators: int = 300) -> ScorerBundle:
    df = samples.dropna(subset=FEATURE_NAMES + [TARGET]).copy()
    X = df[FEATURE_NAMES].to_numpy(dtype=float)
    y = df[TARGET].to_numpy(dtype=float)

    X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=0.2, random_state=seed)

    model = ExtraTreesRegressor(
        n_estimators=n_estimators,
        random_state=seed,
        n_jobs=-1,
        min_samples_leaf=2,
    )
    model.fit(X_train, y_train)

    pred_tr = model.predict(X_train)
    pred_te = model.predict(X_test)

    metrics = {
        "target": TARGET,
        "rows": int(len(df)),
        "r2_train": float(r2_score(y_train, pred_tr)),
        "r2_test": float(r2_score(y_test, pred_te)),
        "mae_train": float(mean_absolute_error(y_train, pred_tr)),
        "mae_test": float(mean_absolute_error(y_test, pred_te)),
    }
    logger.info("Learned scorer metrics: %s", metrics)

    rng = np.random.default_rng(seed)
    bg = X_train[rng.choice(X_train.shape[0], size=min(200, X_train.shape[0]), replace=False)]

    return ScorerBundle(model=model, feature_names=list(FEATURE_NAMES), background=bg, metrics=metrics)


def save_bundle(bundle: ScorerBundle, artifact_dir: Path) -> None:
    artifact_dir = Path(artifact_dir)
    artifact_dir.mkdir(parents=True, exist_ok=True)

    joblib.dump(bundle.model, artifact_dir / "model.joblib")
    (artifact_dir / "feature_names.json").write_text(json.dumps(bundle.feature_names, indent=2), encoding="utf-8")
    (artifact_dir / "metrics.json").write_text(json.dumps(bundle.metrics, indent=2), encoding="utf-8")
    np.save(artifact_dir / "background.npy", bundle.background)


def load_bundle(artifact_dir: Path) -> ScorerBundle:
    artifact_dir = Path(artifact_dir)
    model_path = artifact_dir / "model.joblib"
    if not model_path.exists():
        raise FileNotFoundError(
            f"Missing learned scorer: {model_path}. "
            f"Run tools/train_scorer.py first."
        )

    model = joblib.load(model_path)
    feature_names = json.loads((artifact_dir / "feature_names.json").read_text(encoding="utf-8"))
    background = np.load(artifact_dir / "background.npy", allow_pickle=False)
    metrics_path = artifact_dir / "metrics.json"
    metrics = json.loads(metrics_path.read_text(encoding="utf-8")) if metrics_path.exists() else {}
    return ScorerBundle(model=model, feature_names=feature_names, background=background, metrics=metrics)


def _sample_row(sample: EnvironmentalSample) -> np.ndarray:
    return np.array(
        [[sample.vegetation_index, sample.surface_temperature_c, sample.population_density]],
        dtype=float,
    )


class LearnedScorer(RiskScorer):
    """Same contract as the rule-based scorer, backed by a trained regressor."""

    name = "learned"

    def __init__(self, bundle: ScorerBundle, cfg: Optional[ScoringConfig] = None):
        self.bundle = bundle
        self.cfg = cfg or DEFAULT_CONFIG

    def assess(self, sample: EnvironmentalSample) -> RiskAssessment:
        pred = float(self.bundle.model.predict(_sample_row(sample))[0])
        score = float(np.clip(np.floor(pred + 0.5), 0.0, 100.0))
        return RiskAssessment(score=score, category=categorize(score, self.cfg), backend=self.name)


def explain(bundle: ScorerBundle, sample: EnvironmentalSample) -> Tuple[float, pd.DataFrame]:
    """
    Returns:
      - raw prediction
      - dataframe with feature value and SHAP contribution (largest absolute first)
    """
    X = _sample_row(sample)
    pred = float(bundle.model.predict(X)[0])

    explainer = shap.TreeExplainer(bundle.model, data=bundle.background, feature_names=bundle.feature_names)
    shap_vals = np.asarray(explainer.shap_values(X)).reshape(-1)

    df = pd.DataFrame(
        {
            "feature": bundle.feature_names,
            "value": X.reshape(-1),
            "shap_value": shap_vals,
            "abs_shap": np.abs(shap_vals),
        }
    ).sort_values("abs_shap", ascending=False).reset_index(drop=True)

    return pred, df
