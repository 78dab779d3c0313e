from __future__ import annotations

import copy
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans

from .data_io import DEFAULT_TREND, trend_change_pct
from .logging_utils import get_logger
from .sampler import DENSITY_KEYS, LST_KEYS, NDVI_KEYS, read_attribute
from .scoring import score_frame

logger = get_logger(__name__)

HIGH_PRIORITY_CLUSTER = 3

CLUSTER_STYLES: Dict[int, Dict[str, Any]] = {
    1: {"label": "Low priority", "fill": "#4CAF50", "line": "#388E3C", "opacity": 0.6},
    2: {"label": "Moderate risk", "fill": "#FFC107", "line": "#FFA000", "opacity": 0.7},
    3: {"label": "High risk (priority)", "fill": "#D32F2F", "line": "#B71C1C", "opacity": 0.8},
}
UNCLASSIFIED_STYLE: Dict[str, Any] = {"label": "Unclassified", "fill": "#9E9E9E", "line": "#757575", "opacity": 0.5}


def _as_cluster(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def cluster_style(cluster: Any) -> Dict[str, Any]:
    return CLUSTER_STYLES.get(_as_cluster(cluster), UNCLASSIFIED_STYLE)


def cluster_label(cluster: Any) -> str:
    return cluster_style(cluster)["label"]


def hex_to_rgba(color: str, alpha: float = 1.0) -> list[int]:
    h = color.lstrip("#")
    r, g, b = (int(h[i : i + 2], 16) for i in (0, 2, 4))
    return [r, g, b, int(round(255 * alpha))]


def layer_frame(layer: Optional[Dict[str, Any]]) -> pd.DataFrame:
    """
    One row per feature: id, cluster, ndvi, lst, density and the rule-based score.
    Missing attributes stay NaN (and so does their score).
    """
    rows = []
    for i, feat in enumerate((layer or {}).get("features", []) or []):
        props = feat.get("properties", {}) or {}
        ndvi = read_attribute(props, NDVI_KEYS)
        lst = read_attribute(props, LST_KEYS)
        density = read_attribute(props, DENSITY_KEYS)
        rows.append(
            dict(
                feature_index=i,
                feature_id=props.get("id", feat.get("id", i)),
                cluster=_as_cluster(props.get("cluster")),
                ndvi=np.nan if ndvi is None else ndvi,
                lst=np.nan if lst is None else lst,
                density=np.nan if density is None else density,
            )
        )

    cols = ["feature_index", "feature_id", "cluster", "ndvi", "lst", "density"]
    df = pd.DataFrame(rows, columns=cols)
    if df.empty:
        df["risk_score"] = pd.Series(dtype=float)
        df["risk_category"] = pd.Series(dtype=object)
        return df
    return score_frame(df)


def assign_clusters(layer: Dict[str, Any], n_clusters: int = 3, seed: int = 42) -> Dict[str, Any]:
    """
    K-Means over (ndvi, lst, density), standardized. Clusters are renumbered
    1..n by ascending mean risk score so that n is the highest priority.
    Features lacking any attribute get no cluster. Returns a new collection.
    """
    out = copy.deepcopy(layer)
    df = layer_frame(out)
    usable = df.dropna(subset=["ndvi", "lst", "density"])
    if usable.empty:
        logger.warning("No feature has all attributes; nothing to cluster")
        return out

    k = max(1, min(int(n_clusters), len(usable)))
    X = usable[["ndvi", "lst", "density"]].to_numpy(dtype=float)
    std = X.std(axis=0)
    std[std == 0.0] = 1.0
    Xs = (X - X.mean(axis=0)) / std

    labels = KMeans(n_clusters=k, n_init=10, random_state=seed).fit_predict(Xs)

    mean_risk = pd.Series(usable["risk_score"].to_numpy()).groupby(labels).mean().sort_values()
    renumber = {int(raw): rank + 1 for rank, raw in enumerate(mean_risk.index)}

    features = out["features"]
    for feat in features:
        feat.setdefault("properties", {})
        feat["properties"].pop("cluster", None)
    for idx, raw in zip(usable["feature_index"], labels):
        features[int(idx)]["properties"]["cluster"] = renumber[int(raw)]

    logger.info("Assigned %d clusters to %d features", k, len(usable))
    return out


def layer_kpis(layer: Optional[Dict[str, Any]], trend: Optional[pd.DataFrame] = None) -> Dict[str, Any]:
    df = layer_frame(layer)
    total = int(len(df))
    high = int((df["cluster"] == HIGH_PRIORITY_CLUSTER).sum()) if total else 0
    share = (100.0 * high / total) if total else 0.0

    trend = DEFAULT_TREND if trend is None else trend
    return dict(
        feature_count=total,
        high_risk_count=high,
        high_risk_share=share,
        high_risk_share_label=f"{share:.1f}%",
        ndvi_change_pct=trend_change_pct(trend, "ndvi"),
        lst_change_pct=trend_change_pct(trend, "lst"),
        trend_start=int(trend["year"].min()),
        trend_end=int(trend["year"].max()),
    )


def _iter_lonlat(obj) -> Iterator[Tuple[float, float]]:
    if isinstance(obj, (list, tuple)):
        if len(obj) >= 2 and all(isinstance(x, (int, float)) for x in obj[:2]) and not isinstance(obj[0], bool):
            yield float(obj[0]), float(obj[1])
        else:
            for item in obj:
                yield from _iter_lonlat(item)


def layer_bounds(layer: Dict[str, Any]) -> Tuple[float, float, float, float]:
    min_lon, min_lat = 1e9, 1e9
    max_lon, max_lat = -1e9, -1e9

    for feat in layer.get("features", []):
        geom = feat.get("geometry") or {}
        coords = geom.get("coordinates")
        if coords is None:
            continue
        for lon, lat in _iter_lonlat(coords):
            min_lon = min(min_lon, lon)
            max_lon = max(max_lon, lon)
            min_lat = min(min_lat, lat)
            max_lat = max(max_lat, lat)

    if min_lon > max_lon or min_lat > max_lat:
        raise ValueError("Could not compute bounds from GeoJSON geometry.")
    return min_lon, min_lat, max_lon, max_lat


def zoom_from_bounds(min_lon: float, min_lat: float, max_lon: float, max_lat: float) -> float:
    span = max(max_lon - min_lon, max_lat - min_lat, 1e-6)
    z = np.log2(360.0 / span) - 1.0
    return float(max(1.0, min(16.0, z)))
