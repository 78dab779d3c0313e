from __future__ import annotations

import sys
import pathlib
from typing import Optional

import streamlit as st

# Ensure src/ is on sys.path
SRC_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(SRC_ROOT) not in sys.path:
    sys.path.append(str(SRC_ROOT))

from ecorisk_core.config import DEFAULT_SCENARIOS, SCORER_BACKENDS, Settings
from ecorisk_core.data_io import LayerLoadError, load_default_layer, load_layer
from ecorisk_core.models import AppState
from ecorisk_core.scoring import RiskScorer, get_scorer

STATE_KEY = "ecorisk_state"


def get_state() -> AppState:
    """
    The dashboard's AppState lives in st.session_state and is passed
    explicitly to every core call.
    """
    state = st.session_state.get(STATE_KEY)
    if state is None:
        settings = Settings.from_env()
        state = AppState(scorer_backend=settings.scorer_backend)
        try:
            state.layer = load_layer(settings.layer_path) if settings.layer_path else load_default_layer()
        except LayerLoadError as exc:
            st.warning(f"Layer not loaded: {exc}")
        st.session_state[STATE_KEY] = state
    return state


def layer_panel(state: AppState, prefix: str = "global") -> None:
    """Replace the loaded layer with an uploaded file or a GeoJSON URL."""
    with st.expander("Data layer", expanded=False):
        url = st.text_input("GeoJSON URL (optional)", key=f"{prefix}_layer_url")
        if st.button("Load from URL", key=f"{prefix}_layer_load") and url:
            try:
                state.layer = load_layer(url)
                st.success(f"Loaded {len(state.layer['features'])} zones.")
            except LayerLoadError as exc:
                st.error(str(exc))
        if st.button("Reset to example layer", key=f"{prefix}_layer_reset"):
            state.layer = load_default_layer()


def scorer_panel(state: AppState, prefix: str = "global") -> Optional[RiskScorer]:
    """
    Backend selector. Returns the scorer, or None when the learned model is
    not available (the page should then stop).
    """
    backend = st.radio(
        "Scoring backend",
        list(SCORER_BACKENDS),
        index=list(SCORER_BACKENDS).index(state.scorer_backend) if state.scorer_backend in SCORER_BACKENDS else 0,
        horizontal=True,
        key=f"{prefix}_backend",
    )
    state.scorer_backend = backend
    try:
        return get_scorer(backend)
    except FileNotFoundError as exc:
        st.error(f"{exc}")
        return None


def scenario_select(state: AppState, prefix: str = "global") -> str:
    ids = list(DEFAULT_SCENARIOS.keys())
    scenario_id = st.selectbox(
        "Scenario",
        ids,
        index=ids.index(state.scenario_id) if state.scenario_id in ids else 0,
        format_func=lambda k: DEFAULT_SCENARIOS[k].name,
        key=f"{prefix}_scenario",
    )
    state.scenario_id = scenario_id
    return scenario_id
