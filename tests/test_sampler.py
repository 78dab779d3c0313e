import numpy as np
import pytest

from ecorisk_core.models import GeoPoint
from ecorisk_core.sampler import (
    DENSITY_RANGE,
    LST_RANGE,
    NDVI_RANGE,
    find_feature,
    read_attribute,
    sample,
    synthetic_sample,
)

from conftest import CENTRO_HISTORICO, OUTSIDE, SUR_ESTE


def _square(lon0, lat0, size=0.01):
    return {
        "type": "Polygon",
        "coordinates": [[[lon0, lat0], [lon0 + size, lat0], [lon0 + size, lat0 + size], [lon0, lat0 + size], [lon0, lat0]]],
    }


def _assert_in_ranges(s):
    assert NDVI_RANGE[0] <= s.vegetation_index <= NDVI_RANGE[1]
    assert LST_RANGE[0] <= s.surface_temperature_c <= LST_RANGE[1]
    assert DENSITY_RANGE[0] <= s.population_density <= DENSITY_RANGE[1]


def test_point_inside_zone_uses_recorded_attributes(example_layer):
    s = sample(GeoPoint(*CENTRO_HISTORICO), layer=example_layer)
    assert s.source == "layer"
    assert s.vegetation_index == pytest.approx(0.22)
    assert s.surface_temperature_c == pytest.approx(33.2)
    assert s.population_density == pytest.approx(8800)


def test_missing_attribute_is_filled_randomly(example_layer):
    s = sample(GeoPoint(*SUR_ESTE), layer=example_layer)
    assert s.source == "partial"
    assert s.vegetation_index == pytest.approx(0.68)
    assert s.surface_temperature_c == pytest.approx(24.1)
    assert DENSITY_RANGE[0] <= s.population_density <= DENSITY_RANGE[1]


def test_point_outside_every_zone_is_synthetic(example_layer):
    s = sample(GeoPoint(*OUTSIDE), layer=example_layer)
    assert s.source == "synthetic"
    _assert_in_ranges(s)


@pytest.mark.parametrize("layer", [None, {}, {"type": "FeatureCollection", "features": []}])
def test_no_layer_is_synthetic(layer):
    for _ in range(50):
        s = sample({"lat": -7.15, "lon": -78.51}, layer=layer)
        assert s.source == "synthetic"
        _assert_in_ranges(s)


def test_seeded_rng_is_reproducible():
    a = sample((-7.15, -78.51), rng=np.random.default_rng(7))
    b = sample((-7.15, -78.51), rng=np.random.default_rng(7))
    assert a == b
    assert synthetic_sample(np.random.default_rng(7)) == a


def test_point_formats_are_equivalent(example_layer):
    lat, lon = CENTRO_HISTORICO
    expected = find_feature(GeoPoint(lat, lon), example_layer)
    assert expected["properties"]["id"] == "CJ-05"
    assert find_feature({"lat": lat, "lon": lon}, example_layer) is expected
    assert find_feature((lat, lon), example_layer) is expected


def test_alternate_attribute_names():
    layer = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"NDVI": 0.4, "LST": 29.5, "DENSIDAD": 5100},
                "geometry": _square(-78.52, -7.16),
            }
        ],
    }
    s = sample(GeoPoint(-7.155, -78.515), layer=layer)
    assert s.source == "layer"
    assert (s.vegetation_index, s.surface_temperature_c, s.population_density) == (0.4, 29.5, 5100.0)


def test_invalid_geometry_is_skipped():
    layer = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"ndvi_avg": 0.9}, "geometry": {"type": "Nonsense", "coordinates": []}},
            {"type": "Feature", "properties": {"ndvi_avg": 0.9}, "geometry": None},
            {
                "type": "Feature",
                "properties": {"ndvi_avg": 0.5, "lst_avg": 27.0, "pop_den": 2000},
                "geometry": _square(-78.52, -7.16),
            },
        ],
    }
    s = sample(GeoPoint(-7.155, -78.515), layer=layer)
    assert s.source == "layer"
    assert s.vegetation_index == 0.5


def test_read_attribute_skips_non_numeric_values():
    assert read_attribute({"ndvi_avg": "n/a", "NDVI": "0.35"}, ("ndvi_avg", "NDVI")) == 0.35
    assert read_attribute({"ndvi_avg": None}, ("ndvi_avg", "NDVI")) is None
    assert read_attribute({"ndvi_avg": float("nan")}, ("ndvi_avg",)) is None


def test_negative_density_is_treated_as_missing():
    layer = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": _square(0.0, 0.0), "properties": {"ndvi_avg": 0.4, "lst_avg": 30.0, "pop_den": -5}},
        ],
    }
    s = sample({"lat": 0.005, "lon": 0.005}, layer=layer, rng=np.random.default_rng(0))
    assert s.source == "partial"
    assert s.vegetation_index == 0.4
    assert DENSITY_RANGE[0] <= s.population_density <= DENSITY_RANGE[1]
