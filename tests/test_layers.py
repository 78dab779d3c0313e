import math

import pandas as pd
import pytest

from ecorisk_core.data_io import DEFAULT_TREND
from ecorisk_core.layers import (
    assign_clusters,
    cluster_label,
    cluster_style,
    hex_to_rgba,
    layer_bounds,
    layer_frame,
    layer_kpis,
)


def _by_id(layer):
    return {f["properties"]["id"]: f["properties"] for f in layer["features"]}


def test_cluster_styles():
    assert cluster_style(3)["fill"] == "#D32F2F"
    assert cluster_style("2")["label"] == "Moderate risk"
    assert cluster_label(1) == "Low priority"
    assert cluster_label(None) == "Unclassified"
    assert cluster_label(7) == "Unclassified"


def test_hex_to_rgba():
    assert hex_to_rgba("#D32F2F", 0.8) == [211, 47, 47, 204]
    assert hex_to_rgba("4CAF50") == [76, 175, 80, 255]


def test_layer_frame_scores_each_feature(example_layer):
    df = layer_frame(example_layer).set_index("feature_id")
    assert len(df) == 6
    assert df.loc["CJ-05", "risk_score"] == 74
    assert df.loc["CJ-05", "risk_category"] == "High"
    assert df.loc["CJ-01", "risk_score"] == 28
    assert df.loc["CJ-01", "risk_category"] == "Low"
    # no population density recorded
    assert math.isnan(df.loc["CJ-06", "density"])
    assert math.isnan(df.loc["CJ-06", "risk_score"])


def test_layer_frame_of_nothing_is_empty():
    df = layer_frame(None)
    assert df.empty
    assert {"risk_score", "risk_category", "cluster"} <= set(df.columns)


def test_kpis_for_example_layer(example_layer):
    kpis = layer_kpis(example_layer)
    assert kpis["feature_count"] == 6
    assert kpis["high_risk_count"] == 2
    assert kpis["high_risk_share_label"] == "33.3%"
    assert kpis["ndvi_change_pct"] == pytest.approx(100 * (0.45 - 0.65) / 0.65)
    assert (kpis["trend_start"], kpis["trend_end"]) == (2015, 2023)


def test_kpis_for_empty_layer():
    kpis = layer_kpis({"type": "FeatureCollection", "features": []})
    assert kpis["feature_count"] == 0
    assert kpis["high_risk_share"] == 0.0
    assert kpis["high_risk_share_label"] == "0.0%"


def test_kpis_with_custom_trend(example_layer):
    trend = pd.DataFrame({"year": [2019, 2023], "lst": [20.0, 22.0], "ndvi": [0.5, 0.5]})
    kpis = layer_kpis(example_layer, trend=trend)
    assert kpis["ndvi_change_pct"] == 0.0
    assert kpis["lst_change_pct"] == pytest.approx(10.0)


def test_assign_clusters_orders_by_risk(example_layer):
    before = _by_id(example_layer)
    out = assign_clusters(example_layer, n_clusters=3, seed=0)
    props = _by_id(out)

    assert props["CJ-05"]["cluster"] == 3
    assert props["CJ-01"]["cluster"] == 1
    assert {p.get("cluster") for k, p in props.items() if k != "CJ-06"} <= {1, 2, 3}
    # incomplete zones are left unclassified
    assert "cluster" not in props["CJ-06"]
    # input is not modified
    assert _by_id(example_layer) == before


def test_assign_clusters_with_more_clusters_than_features():
    layer = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"id": "a", "ndvi_avg": 0.7, "lst_avg": 22, "pop_den": 500}, "geometry": None},
            {"type": "Feature", "properties": {"id": "b", "ndvi_avg": 0.2, "lst_avg": 34, "pop_den": 9000}, "geometry": None},
        ],
    }
    props = _by_id(assign_clusters(layer, n_clusters=5))
    assert props["a"]["cluster"] == 1
    assert props["b"]["cluster"] == 2


def test_layer_bounds(example_layer):
    min_lon, min_lat, max_lon, max_lat = layer_bounds(example_layer)
    assert min_lon == pytest.approx(-78.53)
    assert max_lon == pytest.approx(-78.49)
    assert min_lat == pytest.approx(-7.17)
    assert max_lat == pytest.approx(-7.13)


def test_layer_bounds_without_geometry():
    with pytest.raises(ValueError):
        layer_bounds({"type": "FeatureCollection", "features": [{"geometry": None}]})


def test_default_trend_is_declining_vegetation():
    assert list(DEFAULT_TREND["year"]) == [2015, 2017, 2019, 2021, 2023]
    assert DEFAULT_TREND["ndvi"].is_monotonic_decreasing
