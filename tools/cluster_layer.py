"""
Recompute the priority clusters of a GeoJSON layer with K-Means.

Usage (from repo root):

    python tools/cluster_layer.py data/cajamarca_risk_example.geojson --out data/clustered.geojson

Cluster 1 is the lowest mean risk, the highest number the top priority.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from ecorisk_core.data_io import load_layer
from ecorisk_core.layers import assign_clusters, layer_frame


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("layer", help="path or URL of a GeoJSON FeatureCollection")
    ap.add_argument("--out", type=Path, required=True)
    ap.add_argument("--clusters", type=int, default=3)
    ap.add_argument("--seed", type=int, default=42)
    args = ap.parse_args()

    layer = assign_clusters(load_layer(args.layer), n_clusters=args.clusters, seed=args.seed)

    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_text(json.dumps(layer, ensure_ascii=False), encoding="utf-8")

    summary = layer_frame(layer).groupby("cluster")["risk_score"].agg(["count", "mean"])
    print(summary.to_string())
    print(f"Written {len(layer['features'])} features to {args.out}")


if __name__ == "__main__":
    main()
