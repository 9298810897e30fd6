"""CLI to export, restore or wipe the invoice store."""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from agents.factura import (
    ImportResult,
    JsonFileStore,
    PersistenceError,
    Repository,
    ValidationError,
    read_backup,
    write_backup,
)
from backend.core.config import settings
from backend.core.logging import init_logging


def export_backup(
    *, data_dir: Path, output_dir: Path, now: Optional[datetime] = None
) -> Path:
    repository = Repository(JsonFileStore(data_dir))
    return write_backup(
        output_dir, repository.bulk_export(), now=now or datetime.now(timezone.utc)
    )


def import_backup(*, data_dir: Path, path: Path) -> ImportResult:
    repository = Repository(JsonFileStore(data_dir))
    try:
        payload = read_backup(path)
    except ValidationError as err:
        return ImportResult(ok=False, error=err.message, field=err.field)
    return repository.bulk_import(payload)


def reset_store(*, data_dir: Path) -> None:
    Repository(JsonFileStore(data_dir)).reset()


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export, import or reset invoice data")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir)
    commands = parser.add_subparsers(dest="command", required=True)

    export = commands.add_parser("export", help="Write factura-backup-YYYY-MM-DD.json")
    export.add_argument("--output-dir", type=Path, default=settings.output_dir)

    restore = commands.add_parser("import", help="Replace the store with a backup")
    restore.add_argument("file", type=Path, help="Backup JSON file")

    wipe = commands.add_parser("reset", help="Delete all stored invoicing data")
    wipe.add_argument("--yes", action="store_true", help="Confirm the deletion")
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    init_logging()
    try:
        if args.command == "export":
            path = export_backup(data_dir=args.data_dir, output_dir=args.output_dir)
            print(f"Backup written to {path}")
            return
        if args.command == "reset":
            if not args.yes:
                raise SystemExit("Refusing to reset without --yes")
            reset_store(data_dir=args.data_dir)
            print(f"All data deleted from {args.data_dir}")
            return
        result = import_backup(data_dir=args.data_dir, path=args.file)
    except PersistenceError as err:
        raise SystemExit(f"Storage error: {err}") from err

    print(json.dumps(result.to_dict(), indent=2))
    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
