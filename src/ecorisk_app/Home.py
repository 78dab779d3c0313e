import sys
import pathlib

import streamlit as st

SRC_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(SRC_ROOT) not in sys.path:
    sys.path.append(str(SRC_ROOT))

from ecorisk_core.config import DEFAULT_CONFIG, DEFAULT_SCENARIOS

st.set_page_config(
    page_title="EcoRisk: urban environmental vulnerability",
    page_icon="🌍",
    layout="wide",
)

st.title("EcoRisk: Urban Environmental Vulnerability Dashboard")
st.caption("Land-surface temperature, vegetation and population density for Cajamarca, Peru")

st.markdown(
    """
EcoRisk overlays environmental-risk zones on an interactive map, shows how surface
temperature and vegetation have evolved, and estimates the risk of any point you pick.

Use the sidebar to navigate between pages. The pages let you:

- Explore the **risk map**: zones coloured by priority cluster, KPIs, the history of a
  zone, and a point estimator.
- Project vegetation and temperature under **climate scenarios**.
- Browse complementary **datasets** from the World Resources Institute catalog.
- Compare the **rule-based** score with a **learned** model and see what drives it.
"""
)

st.write("---")

st.subheader("How the risk score works")

st.markdown(
    f"""
Each input is normalised to 0–1 and combined with fixed weights:

| factor | normalised risk | weight |
|---|---|---|
| Surface temperature | (LST − {DEFAULT_CONFIG.temp_min_c:.0f}) / ({DEFAULT_CONFIG.temp_max_c:.0f} − {DEFAULT_CONFIG.temp_min_c:.0f}) | {DEFAULT_CONFIG.w_temperature:.2f} |
| Vegetation | 1 − NDVI | {DEFAULT_CONFIG.w_vegetation:.2f} |
| Population density | min(density, {DEFAULT_CONFIG.density_max:,.0f}) / {DEFAULT_CONFIG.density_max:,.0f} | {DEFAULT_CONFIG.w_density:.2f} |

The weighted sum is scaled to 0–100 and rounded. Scores of **{DEFAULT_CONFIG.high_threshold:.0f}** or
more are *High*, **{DEFAULT_CONFIG.moderate_threshold:.0f}–{DEFAULT_CONFIG.high_threshold - 1:.0f}**
are *Moderate*, anything lower is *Low*.
"""
)

st.subheader("Scenarios")

for sid, s in DEFAULT_SCENARIOS.items():
    st.markdown(
        f"- `{sid}` – **{s.name}**: −{s.vegetation_loss_per_year:.4f} NDVI/yr, "
        f"+{s.temperature_gain_per_year:.2f} °C/yr  \n"
        f"&nbsp;&nbsp;&nbsp;&nbsp;{s.description}"
    )

st.write("---")

st.subheader("Current status & limitations")

st.markdown(
    """
- The formulas are **illustrative heuristics**, not validated climate science.
- Points outside the mapped zones receive **simulated** values; the estimator says so.
- The learned backend is trained on the rule-based score and only approximates it.
"""
)

st.info("Start with **Risk Map** to explore the zones, then try **Scenario Projection**.")
