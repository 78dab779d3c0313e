from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from .models import Scenario, ScoringConfig

# Load environment variables (from .env file)
load_dotenv()

# Project root = .../ecorisk (this file is .../ecorisk/src/ecorisk_core/config.py)
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"

DEFAULT_LAYER_PATH = DATA_DIR / "cajamarca_risk_example.geojson"
DEFAULT_MODEL_DIR = ARTIFACTS_DIR / "scorer"

DEFAULT_CATALOG_URL = "https://datasets.wri.org"
DEFAULT_CATALOG_PACKAGE = "gfw-forest-carbon-gross-emissions"

# Cajamarca, Peru (approximate centre)
MAP_CENTER = (-7.15, -78.51)
MAP_ZOOM = 13

FALLBACK_SCENARIO_ID = "medium"

DEFAULT_SCENARIOS: Dict[str, Scenario] = {
    "low": Scenario(
        id="low",
        name="Low emissions",
        description="Strong mitigation; slow vegetation loss and mild warming.",
        vegetation_loss_per_year=0.0008,
        temperature_gain_per_year=0.01,
    ),
    "medium": Scenario(
        id="medium",
        name="Intermediate",
        description="Current trends continue; moderate vegetation loss and warming.",
        vegetation_loss_per_year=0.0015,
        temperature_gain_per_year=0.02,
    ),
    "high": Scenario(
        id="high",
        name="High emissions",
        description="Little mitigation; fast vegetation loss and strong warming.",
        vegetation_loss_per_year=0.0030,
        temperature_gain_per_year=0.04,
    ),
}

DEFAULT_CONFIG = ScoringConfig()

SCORER_BACKENDS = ("rule-based", "learned")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass
class Settings:
    layer_path: str = str(DEFAULT_LAYER_PATH)
    scorer_backend: str = "rule-based"
    model_dir: Path = DEFAULT_MODEL_DIR
    catalog_url: str = DEFAULT_CATALOG_URL
    catalog_package: str = DEFAULT_CATALOG_PACKAGE
    http_timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            layer_path=os.getenv("ECORISK_LAYER_PATH", str(DEFAULT_LAYER_PATH)),
            scorer_backend=os.getenv("ECORISK_SCORER", "rule-based").strip().lower(),
            model_dir=Path(os.getenv("ECORISK_MODEL_DIR", str(DEFAULT_MODEL_DIR))),
            catalog_url=os.getenv("ECORISK_CATALOG_URL", DEFAULT_CATALOG_URL).rstrip("/"),
            catalog_package=os.getenv("ECORISK_CATALOG_PACKAGE", DEFAULT_CATALOG_PACKAGE),
            http_timeout=_env_float("ECORISK_HTTP_TIMEOUT", 30.0),
            log_level=os.getenv("ECORISK_LOG_LEVEL", "INFO").upper(),
        )
