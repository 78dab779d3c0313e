from __future__ import annotations

import html
from typing import Any, Dict, Optional

from ecorisk_core.catalog import DatasetInfo
from ecorisk_core.layers import cluster_label, cluster_style, hex_to_rgba
from ecorisk_core.models import EnvironmentalSample, RiskAssessment, ScenarioProjection
from ecorisk_core.sampler import DENSITY_KEYS, LST_KEYS, NDVI_KEYS, read_attribute

# Popup/marker colours per score category (same palette as the cluster legend)
CATEGORY_COLORS: Dict[str, str] = {
    "High": "#D32F2F",
    "Moderate": "#FFA000",
    "Low": "#388E3C",
}

SOURCE_NOTES: Dict[str, str] = {
    "layer": "Values read from the selected zone.",
    "partial": "Some values were missing in the zone and were estimated.",
    "synthetic": "Outside the mapped zones: values are simulated.",
}


def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, "#757575")


def _fmt(value: Any, pattern: str) -> str:
    try:
        return pattern.format(float(value))
    except (TypeError, ValueError):
        return "n/a"


def assessment_html(sample: EnvironmentalSample, assessment: RiskAssessment) -> str:
    """Side-panel / popup body for one estimate."""
    color = category_color(assessment.category)
    note = SOURCE_NOTES.get(sample.source, "")
    return (
        f"<p><strong>Estimated risk:</strong> "
        f"<span style=\"color:{color};\">{html.escape(assessment.category.upper())}</span> "
        f"({_fmt(assessment.score, '{:.0f}')}/100, {html.escape(assessment.backend)})</p>"
        f"<p><strong>LST:</strong> {_fmt(sample.surface_temperature_c, '{:.1f}')}°C</p>"
        f"<p><strong>NDVI:</strong> {_fmt(sample.vegetation_index, '{:.2f}')}</p>"
        f"<p><strong>Population density:</strong> {_fmt(sample.population_density, '{:,.0f}')} inh/km²</p>"
        f"<small>{html.escape(note)}</small>"
    )


def zone_html(properties: Dict[str, Any]) -> str:
    """Panel for a mapped zone, coloured by its K-Means cluster."""
    cluster = properties.get("cluster")
    style = cluster_style(cluster)
    name = properties.get("name") or properties.get("id") or "Zone"
    return (
        f"<h4>{html.escape(str(name))}</h4>"
        f"<p><strong>Risk level (clusters):</strong> "
        f"<span style=\"color:{style['line']};\">{html.escape(cluster_label(cluster).upper())}</span></p>"
        f"<p><strong>Mean LST:</strong> {_fmt(read_attribute(properties, LST_KEYS), '{:.1f}')}°C</p>"
        f"<p><strong>Mean NDVI:</strong> {_fmt(read_attribute(properties, NDVI_KEYS), '{:.2f}')}</p>"
        f"<p><strong>Population density:</strong> "
        f"{_fmt(read_attribute(properties, DENSITY_KEYS), '{:,.0f}')} inh/km²</p>"
    )


def projection_summary(projection: ScenarioProjection, scenario_name: Optional[str] = None) -> str:
    name = scenario_name or projection.scenario_id
    return (
        f"{name} scenario, {projection.target_year}: "
        f"NDVI {projection.projected_vegetation_index:.3f}, "
        f"LST {projection.projected_temperature_c:.2f}°C"
    )


def kpi_labels(kpis: Dict[str, Any]) -> Dict[str, str]:
    change = float(kpis.get("ndvi_change_pct", 0.0))
    arrow = "↓" if change < 0 else "↑"
    return {
        "high_risk": kpis.get("high_risk_share_label", "0.0%"),
        "ndvi": f"{arrow} {abs(change):.0f}% ({kpis.get('trend_start')}–{kpis.get('trend_end')})",
    }


def catalog_html(info: DatasetInfo) -> str:
    updated = info.last_updated.strftime("%d/%m/%Y") if info.last_updated else "unknown"
    return (
        f"<h4>Forest carbon impact (WRI)</h4>"
        f"<p><strong>Dataset:</strong> {html.escape(info.title)}</p>"
        f"<p><strong>Last updated:</strong> {updated}</p>"
        f"<p><strong>Description:</strong> {html.escape(info.notes)}</p>"
        f"<small>Complementary data from the World Resources Institute (WRI).</small>"
    )


def style_layer(layer: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of the collection with per-feature colours and labels for a pydeck GeoJsonLayer."""
    features = []
    for feat in layer.get("features", []):
        props = dict(feat.get("properties", {}) or {})
        style = cluster_style(props.get("cluster"))
        props["fill_color"] = hex_to_rgba(style["fill"], style["opacity"])
        props["line_color"] = hex_to_rgba(style["line"])
        props["risk_label"] = style["label"]
        features.append({**feat, "properties": props})
    return {"type": "FeatureCollection", "features": features}
