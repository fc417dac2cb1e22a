#!/usr/bin/env python3
"""Write the built-in mock catalog as a JSON seed file.

The result can be edited and served with ``QMS_SEED_PATH=<file>``.
"""

import argparse
import sys
from pathlib import Path

# Add the repository root to sys.path so imports like `seed.*` work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from seed.loader import write_snapshot_json
from seed.mock_data import build_mock_snapshot


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("output", type=Path, nargs="?", default=Path("data/seed.json"))
    parser.add_argument("--rng-seed", type=int, default=2024, help="Seed for generated readings")
    args = parser.parse_args()

    snapshot = build_mock_snapshot(args.rng_seed)
    write_snapshot_json(snapshot, args.output)
    print("Wrote", len(snapshot.samples), "samples ->", args.output)


if __name__ == "__main__":
    main()
