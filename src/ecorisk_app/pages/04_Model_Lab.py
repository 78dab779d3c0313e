from __future__ import annotations

import sys
import pathlib

import streamlit as st

SRC_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(SRC_ROOT) not in sys.path:
    sys.path.append(str(SRC_ROOT))

from ecorisk_core.config import Settings
from ecorisk_core.models import EnvironmentalSample
from ecorisk_core.scoring import score
from ecorisk_core.surrogate import LearnedScorer, explain, load_bundle
from ecorisk_core.xai import rule_breakdown

st.set_page_config(page_title="EcoRisk – Model Lab", layout="wide")
st.title("Model Lab: rule-based vs learned")
st.caption(
    "The learned backend is an ExtraTrees model trained on the rule-based score. "
    "Use it for exploration; the rule-based score is the reference."
)

settings = Settings.from_env()

try:
    bundle = load_bundle(settings.model_dir)
except FileNotFoundError as exc:
    st.warning(f"{exc}")
    st.code("python tools/train_scorer.py", language="bash")
    st.stop()

with st.expander("Model metrics", expanded=False):
    st.json(bundle.metrics)

c1, c2, c3 = st.columns(3)
ndvi = c1.slider("NDVI", 0.0, 1.0, 0.45, 0.01, key="p04_ndvi")
lst = c2.slider("LST (°C)", 10.0, 45.0, 28.0, 0.1, key="p04_lst")
density = c3.slider("Density (inh/km²)", 0.0, 12000.0, 3000.0, 50.0, key="p04_density")

s = EnvironmentalSample(vegetation_index=ndvi, surface_temperature_c=lst, population_density=density, source="manual")
rule = score(s)
learned = LearnedScorer(bundle).assess(s)

m1, m2, m3 = st.columns(3)
m1.metric("Rule-based", f"{rule.score:.0f}", rule.category)
m2.metric("Learned", f"{learned.score:.0f}", learned.category)
m3.metric("Difference", f"{learned.score - rule.score:+.0f}")

left, right = st.columns(2)
with left:
    st.markdown("##### Rule-based contributions (points)")
    rb = rule_breakdown(ndvi, lst, density)
    st.dataframe(rb, use_container_width=True)
    st.bar_chart(rb.set_index("label")["contribution"])

with right:
    st.markdown("##### SHAP contributions (learned model)")
    pred, shap_df = explain(bundle, s)
    st.caption(f"Raw prediction: {pred:.2f}")
    st.dataframe(shap_df[["feature", "value", "shap_value"]], use_container_width=True)
    st.bar_chart(shap_df.set_index("feature")["shap_value"])
