from __future__ import annotations

import sys
import pathlib

import streamlit as st

# Ensure src/ is on sys.path
SRC_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(SRC_ROOT) not in sys.path:
    sys.path.append(str(SRC_ROOT))

from ecorisk_app.presentation import catalog_html
from ecorisk_core.catalog import CatalogError, DatasetInfo, fetch_dataset_info
from ecorisk_core.config import Settings

st.set_page_config(page_title="EcoRisk – Dataset Catalog", layout="wide")
st.title("Complementary datasets")
st.caption("Dataset metadata from the World Resources Institute open data catalog (CKAN).")

settings = Settings.from_env()


@st.cache_data(show_spinner=True, ttl=3600)
def _info(package_id: str, base_url: str) -> DatasetInfo:
    return fetch_dataset_info(package_id, base_url=base_url, timeout=settings.http_timeout)


package_id = st.text_input("Dataset id", value=settings.catalog_package, key="p03_package")

try:
    info = _info(package_id, settings.catalog_url)
except CatalogError as exc:
    st.error(f"Could not load the WRI catalog: {exc}")
    st.stop()

st.markdown(catalog_html(info), unsafe_allow_html=True)
st.caption(f"Source: {info.url}")
