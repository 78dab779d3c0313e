from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np
from shapely.errors import ShapelyError
from shapely.geometry import Point, shape

from .logging_utils import get_logger
from .models import EnvironmentalSample, GeoPoint

logger = get_logger(__name__)

# Property names seen in the published layers (first match wins)
NDVI_KEYS = ("ndvi_avg", "NDVI")
LST_KEYS = ("lst_avg", "LST")
DENSITY_KEYS = ("pop_den", "DENSIDAD")

# Uniform ranges for synthetic values
NDVI_RANGE: Tuple[float, float] = (0.2, 0.8)
LST_RANGE: Tuple[float, float] = (20.0, 35.0)
DENSITY_RANGE: Tuple[float, float] = (800.0, 6000.0)


def read_attribute(props: Dict[str, Any], keys: Iterable[str]) -> Optional[float]:
    """First numeric value among `keys`; None if absent or not a finite number."""
    for key in keys:
        if key not in props or props[key] is None:
            continue
        try:
            value = float(props[key])
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s=%r", key, props[key])
            continue
        if math.isfinite(value):
            return value
    return None


def find_feature(point: Any, layer: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First polygon feature of `layer` that contains `point`, or None."""
    if not layer:
        return None

    p = GeoPoint.coerce(point)
    pt = Point(p.lon, p.lat)

    for feat in layer.get("features", []) or []:
        geom = feat.get("geometry")
        if not geom:
            continue
        try:
            polygon = shape(geom)
        except (ShapelyError, ValueError, TypeError, AttributeError, KeyError) as exc:
            logger.debug("Skipping feature with invalid geometry: %s", exc)
            continue
        if polygon.contains(pt):
            return feat
    return None


def _uniform(rng: np.random.Generator, bounds: Tuple[float, float]) -> float:
    return float(rng.uniform(bounds[0], bounds[1]))


def synthetic_sample(rng: Optional[np.random.Generator] = None) -> EnvironmentalSample:
    rng = rng or np.random.default_rng()
    return EnvironmentalSample(
        vegetation_index=_uniform(rng, NDVI_RANGE),
        surface_temperature_c=_uniform(rng, LST_RANGE),
        population_density=_uniform(rng, DENSITY_RANGE),
        source="synthetic",
    )


def sample(
    point: Any,
    layer: Optional[Dict[str, Any]] = None,
    rng: Optional[np.random.Generator] = None,
) -> EnvironmentalSample:
    """
    Environmental attributes at `point`.

    Uses the recorded attributes of the containing feature when there is one,
    filling each missing attribute with a random value; otherwise the whole
    sample is synthetic. Neither case is an error.
    """
    rng = rng or np.random.default_rng()
    feat = find_feature(point, layer)

    if feat is None:
        logger.debug("No feature contains %s; using a synthetic sample", point)
        return synthetic_sample(rng)

    props = feat.get("properties", {}) or {}
    ndvi = read_attribute(props, NDVI_KEYS)
    lst = read_attribute(props, LST_KEYS)
    density = read_attribute(props, DENSITY_KEYS)
    if density is not None and density < 0:
        logger.warning("Ignoring negative population density %s in zone %s", density, props.get("id"))
        density = None

    complete = ndvi is not None and lst is not None and density is not None
    return EnvironmentalSample(
        vegetation_index=ndvi if ndvi is not None else _uniform(rng, NDVI_RANGE),
        surface_temperature_c=lst if lst is not None else _uniform(rng, LST_RANGE),
        population_density=density if density is not None else _uniform(rng, DENSITY_RANGE),
        source="layer" if complete else "partial",
    )
