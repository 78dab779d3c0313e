from __future__ import annotations

import argparse
import json
import pathlib

from ecorisk_core.data_io import load_layer

ROOT = pathlib.Path(__file__).resolve().parents[1]
DATA_DIR = ROOT / "data"


def main():
    ap = argparse.ArgumentParser(description="Download a GeoJSON risk layer into ./data")
    ap.add_argument("url")
    ap.add_argument("--out", default="risk_layer.geojson", help="file name under ./data")
    ap.add_argument("--timeout", type=float, default=30.0)
    args = ap.parse_args()

    print(f"Downloading layer from {args.url}")
    layer = load_layer(args.url, timeout=args.timeout)

    DATA_DIR.mkdir(exist_ok=True)
    out_path = DATA_DIR / args.out
    out_path.write_text(json.dumps(layer), encoding="utf-8")
    print(f"Saved {len(layer['features'])} features to {out_path}")


if __name__ == "__main__":
    main()
