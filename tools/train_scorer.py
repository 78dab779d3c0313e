from __future__ import annotations

import argparse
from pathlib import Path

from ecorisk_core.config import DEFAULT_MODEL_DIR
from ecorisk_core.surrogate import generate_samples, save_bundle, train_scorer

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SAMPLES_PATH = PROJECT_ROOT / "data" / "training" / "risk_samples.parquet"


def main():
    ap = argparse.ArgumentParser(description="Train the learned risk scorer on rule-based labels")
    ap.add_argument("--n", type=int, default=5000)
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--out", type=Path, default=DEFAULT_MODEL_DIR)
    args = ap.parse_args()

    print(f"Generating samples: n={args.n}")
    df = generate_samples(args.n, seed=args.seed)
    SAMPLES_PATH.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(SAMPLES_PATH, index=False)
    print(f"Wrote: {SAMPLES_PATH} rows={len(df)}")

    bundle = train_scorer(df, seed=args.seed)
    save_bundle(bundle, args.out)
    print("Learned scorer metrics:", bundle.metrics)
    print(f"Saved model to {args.out}")


if __name__ == "__main__":
    main()
