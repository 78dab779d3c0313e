from __future__ import annotations

import sys
import pathlib

import streamlit as st

# Ensure src/ is on sys.path
SRC_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(SRC_ROOT) not in sys.path:
    sys.path.append(str(SRC_ROOT))

from ecorisk_app.presentation import projection_summary
from ecorisk_app.ui_panels import get_state, scenario_select
from ecorisk_core.config import DEFAULT_SCENARIOS
from ecorisk_core.data_io import DEFAULT_TREND
from ecorisk_core.projection import project_scenario, projection_series

st.set_page_config(page_title="EcoRisk – Scenario Projection", layout="wide")
st.title("Scenario Projection")
st.caption("Linear projection of vegetation loss and warming under three climate scenarios.")

state = get_state()

base_year = int(DEFAULT_TREND["year"].max())
latest = DEFAULT_TREND.sort_values("year").iloc[-1]

left, right = st.columns([1, 2])

with left:
    st.subheader("Controls")
    scenario_id = scenario_select(state, prefix="p02")
    target_year = st.slider("Target year", base_year, 2100, 2050, 1, key="p02_target")
    base_ndvi = st.number_input("Base NDVI", 0.0, 1.0, float(latest["ndvi"]), 0.01, key="p02_ndvi")
    base_lst = st.number_input("Base LST (°C)", -10.0, 60.0, float(latest["lst"]), 0.1, key="p02_lst")
    density = st.number_input("Population density (inh/km²)", 0.0, 50000.0, 3000.0, 100.0, key="p02_density")

    p = project_scenario(base_ndvi, base_lst, base_year, target_year, scenario_id)
    st.success(projection_summary(p, DEFAULT_SCENARIOS[scenario_id].name))

with right:
    df = projection_series(base_ndvi, base_lst, base_year, target_year, density=density)
    pivot = lambda col: df.pivot(index="year", columns="scenario_id", values=col)  # noqa: E731

    st.markdown("#### Vegetation (NDVI)")
    st.line_chart(pivot("vegetation_index"), use_container_width=True)

    st.markdown("#### Surface temperature (°C)")
    st.line_chart(pivot("surface_temperature_c"), use_container_width=True)

    st.markdown("#### Rule-based risk score (0–100)")
    st.line_chart(pivot("risk_score"), use_container_width=True)

    with st.expander("Data table", expanded=False):
        st.dataframe(df, use_container_width=True)
        st.download_button(
            "Download CSV",
            df.to_csv(index=False).encode("utf-8"),
            file_name=f"ecorisk_projection_{base_year}_{target_year}.csv",
            mime="text/csv",
            key="p02_csv",
        )
