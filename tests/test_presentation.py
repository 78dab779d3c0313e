from datetime import date

from ecorisk_app.presentation import (
    assessment_html,
    catalog_html,
    category_color,
    kpi_labels,
    projection_summary,
    style_layer,
    zone_html,
)
from ecorisk_core.catalog import DatasetInfo
from ecorisk_core.models import EnvironmentalSample, RiskAssessment, ScenarioProjection


def test_assessment_html_shows_values_and_source():
    s = EnvironmentalSample(0.22, 33.2, 8800.0, source="synthetic")
    html = assessment_html(s, RiskAssessment(score=74.0, category="High"))
    assert "HIGH" in html
    assert category_color("High") in html
    assert "33.2°C" in html
    assert "0.22" in html
    assert "8,800" in html
    assert "simulated" in html


def test_zone_html_uses_cluster_label():
    html = zone_html({"name": "Centro <Historico>", "cluster": 3, "lst_avg": 33.2, "ndvi_avg": 0.22})
    assert "HIGH RISK (PRIORITY)" in html
    assert "&lt;Historico&gt;" in html
    assert "n/a" in html  # no density recorded


def test_zone_html_falls_back_to_alternate_names():
    html = zone_html({"cluster": 1, "lst_avg": None, "LST": 24.5, "NDVI": 0.7, "DENSIDAD": 1200})
    assert "24.5°C" in html
    assert "0.70" in html
    assert "1,200 inh/km²" in html
    assert "n/a" not in html


def test_projection_summary():
    p = ScenarioProjection(target_year=2050, scenario_id="high", projected_vegetation_index=0.369, projected_temperature_c=29.28)
    assert projection_summary(p, "High emissions") == "High emissions scenario, 2050: NDVI 0.369, LST 29.28°C"


def test_kpi_labels():
    labels = kpi_labels(
        {"high_risk_share_label": "33.3%", "ndvi_change_pct": -30.77, "trend_start": 2015, "trend_end": 2023}
    )
    assert labels["high_risk"] == "33.3%"
    assert labels["ndvi"] == "↓ 31% (2015–2023)"


def test_style_layer_adds_colours_without_touching_input(example_layer):
    styled = style_layer(example_layer)
    props = {f["properties"]["id"]: f["properties"] for f in styled["features"]}
    assert props["CJ-05"]["fill_color"] == [211, 47, 47, 204]
    assert props["CJ-01"]["risk_label"] == "Low priority"
    assert "fill_color" not in example_layer["features"][0]["properties"]


def test_catalog_html():
    info = DatasetInfo("pkg", "Forest <carbon>", "notes...", date(2024, 3, 15), "https://x")
    html = catalog_html(info)
    assert "15/03/2024" in html
    assert "Forest &lt;carbon&gt;" in html
