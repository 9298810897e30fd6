"""CLI to initialise the store or merge the sample catalogue."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable

from agents.factura import PersistenceError, open_service
from backend.core.config import settings
from backend.core.logging import init_logging


def seed(data_dir: Path, *, sample: bool = False) -> str:
    service = open_service(data_dir, seed=False)
    if sample:
        added = service.load_sample_data()
        return f"Sample data loaded: {added} products added"
    if service.init_seed_data():
        return "Seed data initialized"
    return "Store already initialized"


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the invoice store")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=settings.data_dir,
        help="Directory of the JSON store (default: FACTURA_DATA_DIR)",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Merge the sample catalogue and customer even if already initialized",
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    init_logging()
    try:
        print(seed(args.data_dir, sample=args.sample))
    except PersistenceError as err:
        raise SystemExit(f"Storage error: {err}") from err


if __name__ == "__main__":  # pragma: no cover
    main()
