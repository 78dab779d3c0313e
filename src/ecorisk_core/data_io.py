from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd
import requests

from .config import DEFAULT_LAYER_PATH, Settings
from .logging_utils import get_logger

logger = get_logger(__name__)

TREND_YEARS = [2015, 2017, 2019, 2021, 2023]

# Regional averages shown before a zone is selected
DEFAULT_TREND = pd.DataFrame(
    {
        "year": TREND_YEARS,
        "lst": [25.5, 26.1, 26.8, 27.5, 28.2],
        "ndvi": [0.65, 0.60, 0.55, 0.50, 0.45],
    }
)


class LayerLoadError(ValueError):
    """Raised when a GeoJSON layer cannot be fetched or is not a FeatureCollection."""


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def _validate_collection(data: Any, source: str) -> Dict[str, Any]:
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise LayerLoadError(f"{source} is not a GeoJSON FeatureCollection")
    if not isinstance(data.get("features"), list):
        raise LayerLoadError(f"{source} has no 'features' list")
    return data


def load_layer(source: Union[str, Path], timeout: Optional[float] = None) -> Dict[str, Any]:
    """Read a GeoJSON FeatureCollection from a local file or an http(s) URL."""
    src = str(source)

    if _is_url(src):
        timeout = timeout if timeout is not None else Settings.from_env().http_timeout
        logger.info("Downloading layer from %s", src)
        try:
            r = requests.get(src, timeout=timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise LayerLoadError(f"Could not load layer from {src}: {exc}") from exc
        return _validate_collection(data, src)

    path = Path(src)
    if not path.exists():
        raise LayerLoadError(f"Missing layer file: {path}")

    logger.info("Reading layer %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise LayerLoadError(f"{path} is not valid JSON: {exc}") from exc
    return _validate_collection(data, str(path))


@lru_cache(maxsize=1)
def load_default_layer() -> Dict[str, Any]:
    return load_layer(DEFAULT_LAYER_PATH)


def feature_trend(properties: Optional[Dict[str, Any]]) -> pd.DataFrame:
    """
    Per-zone trend from `lst_YYYY` / `ndvi_YYYY` properties.
    Years a zone does not record keep the regional default value.
    """
    props = properties or {}
    out = DEFAULT_TREND.copy()

    for col in ("lst", "ndvi"):
        values = []
        for year, fallback in zip(out["year"], out[col]):
            raw = props.get(f"{col}_{int(year)}")
            try:
                values.append(float(raw) if raw is not None else float(fallback))
            except (TypeError, ValueError):
                logger.warning("Ignoring non-numeric %s_%s=%r", col, year, raw)
                values.append(float(fallback))
        out[col] = values

    return out


def trend_change_pct(trend: pd.DataFrame, column: str) -> float:
    """Relative change between the first and last year of a trend, in percent."""
    series = trend.sort_values("year")[column].astype(float)
    first = float(series.iloc[0])
    last = float(series.iloc[-1])
    if first == 0.0:
        return 0.0
    return 100.0 * (last - first) / first
