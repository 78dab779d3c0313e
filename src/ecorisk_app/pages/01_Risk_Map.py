from __future__ import annotations

import sys
import pathlib

import numpy as np
import pandas as pd
import pydeck as pdk
import streamlit as st

# Ensure src/ is on sys.path
SRC_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(SRC_ROOT) not in sys.path:
    sys.path.append(str(SRC_ROOT))

from ecorisk_app.presentation import assessment_html, kpi_labels, style_layer, zone_html
from ecorisk_app.ui_panels import get_state, layer_panel, scorer_panel
from ecorisk_core.config import MAP_CENTER, MAP_ZOOM
from ecorisk_core.data_io import DEFAULT_TREND, feature_trend
from ecorisk_core.layers import CLUSTER_STYLES, layer_bounds, layer_frame, layer_kpis, zoom_from_bounds
from ecorisk_core.models import GeoPoint
from ecorisk_core.sampler import find_feature, sample
from ecorisk_core.xai import rule_breakdown

st.set_page_config(page_title="EcoRisk – Risk Map", layout="wide")
st.title("Risk Map")
st.caption("Zones coloured by priority cluster. Pick a point to estimate its risk.")

state = get_state()
layer = state.layer

# ---------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------
kpis = layer_kpis(layer)
labels = kpi_labels(kpis)
k1, k2, k3 = st.columns(3)
k1.metric("High-risk zones", labels["high_risk"])
k2.metric("Vegetation (NDVI)", labels["ndvi"])
k3.metric("Zones mapped", f"{kpis['feature_count']}")

left, right = st.columns([1, 2])

# ---------------------------------------------------------------------
# Controls: point estimator
# ---------------------------------------------------------------------
with left:
    st.subheader("Point estimator")
    layer_panel(state, prefix="p01")
    scorer = scorer_panel(state, prefix="p01")

    lat = st.number_input("Latitude", value=float(MAP_CENTER[0]), format="%.5f", key="p01_lat")
    lon = st.number_input("Longitude", value=float(MAP_CENTER[1]), format="%.5f", key="p01_lon")

    def _random_point() -> None:
        rng = np.random.default_rng()
        st.session_state["p01_lat"] = MAP_CENTER[0] + float(rng.uniform(-0.03, 0.03))
        st.session_state["p01_lon"] = MAP_CENTER[1] + float(rng.uniform(-0.03, 0.03))

    c1, c2 = st.columns(2)
    estimate = c1.button("Estimate risk", key="p01_estimate")
    c2.button("Random point", key="p01_random", on_click=_random_point)

    point = GeoPoint(lat=lat, lon=lon)
    if estimate and scorer is not None:
        s = sample(point, layer=layer)
        res = scorer.assess(s)
        st.session_state["p01_last"] = (point, s, res)

    last = st.session_state.get("p01_last")
    if last:
        p, s, res = last
        st.markdown(assessment_html(s, res), unsafe_allow_html=True)
        with st.expander("Why this score?", expanded=False):
            st.dataframe(
                rule_breakdown(s.vegetation_index, s.surface_temperature_c, s.population_density),
                use_container_width=True,
            )

# ---------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------
with right:
    if layer is None or not layer.get("features"):
        st.warning("No zones loaded; the estimator will use simulated values.")
        view_state = pdk.ViewState(latitude=MAP_CENTER[0], longitude=MAP_CENTER[1], zoom=MAP_ZOOM)
        layers = []
    else:
        min_lon, min_lat, max_lon, max_lat = layer_bounds(layer)
        view_state = pdk.ViewState(
            latitude=(min_lat + max_lat) / 2.0,
            longitude=(min_lon + max_lon) / 2.0,
            zoom=zoom_from_bounds(min_lon, min_lat, max_lon, max_lat),
            pitch=0,
            bearing=0,
        )
        layers = [
            pdk.Layer(
                "GeoJsonLayer",
                data=style_layer(layer),
                pickable=True,
                stroked=True,
                filled=True,
                auto_highlight=True,
                get_fill_color="properties.fill_color",
                get_line_color="properties.line_color",
                line_width_min_pixels=1,
            )
        ]

    last = st.session_state.get("p01_last")
    if last:
        p, s, res = last
        layers.append(
            pdk.Layer(
                "ScatterplotLayer",
                data=pd.DataFrame([{"lat": p.lat, "lon": p.lon, "score": res.score}]),
                get_position="[lon, lat]",
                get_radius=60,
                get_fill_color=[20, 20, 20, 220],
            )
        )

    deck = pdk.Deck(
        layers=layers,
        initial_view_state=view_state,
        tooltip={
            "html": "<b>{name}</b><br/>{risk_label}<br/>LST: {lst_avg} °C<br/>NDVI: {ndvi_avg}",
            "style": {"backgroundColor": "white", "color": "black"},
        },
        map_style="light",
    )
    st.pydeck_chart(deck, use_container_width=True, height=560)

    legend = "".join(
        f"<span style='display:inline-block;width:14px;height:14px;background:{s['fill']};margin:0 6px 0 12px;'></span>{s['label']}"
        for _, s in sorted(CLUSTER_STYLES.items(), reverse=True)
    )
    st.markdown(f"<div><b>Urban vulnerability</b>{legend}</div>", unsafe_allow_html=True)

# ---------------------------------------------------------------------
# Zone details + historical trend
# ---------------------------------------------------------------------
st.markdown("---")
st.subheader("Historical trend")

zone = find_feature(GeoPoint(lat=lat, lon=lon), layer)
if zone is not None:
    st.markdown(zone_html(zone.get("properties", {})), unsafe_allow_html=True)
    trend = feature_trend(zone.get("properties"))
    st.caption("Trend of the zone containing the selected point.")
else:
    trend = DEFAULT_TREND
    st.caption("Regional average (the selected point is outside the mapped zones).")

t1, t2 = st.columns(2)
with t1:
    st.markdown("#### Mean surface temperature (°C)")
    st.line_chart(trend.set_index("year")[["lst"]], use_container_width=True)
with t2:
    st.markdown("#### Mean vegetation (NDVI)")
    st.line_chart(trend.set_index("year")[["ndvi"]], use_container_width=True)

with st.expander("Zone table", expanded=False):
    st.dataframe(layer_frame(layer), use_container_width=True)
