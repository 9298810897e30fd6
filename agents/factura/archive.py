"""Writes rendered invoices and backup exports to disk."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from backend.core.logging import get_logger

from .dto import Invoice
from .errors import PersistenceError, ValidationError

logger = get_logger(__name__)


def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def backup_filename(now: datetime) -> str:
    return f"factura-backup-{_ensure_utc(now):%Y-%m-%d}.json"


def write_document(base_dir: Path, invoice: Invoice, pdf_bytes: bytes) -> Path:
    """Store the PDF as ``Factura-<number>.pdf``; re-rendering overwrites it."""

    base_dir.mkdir(parents=True, exist_ok=True)
    target = base_dir / invoice.document_filename
    try:
        target.write_bytes(pdf_bytes)
    except OSError as err:
        raise PersistenceError(f"cannot write {target}: {err}") from err
    logger.info("Wrote %s (%d bytes)", target.name, len(pdf_bytes))
    return target


def write_backup(base_dir: Path, data: Dict[str, Any], *, now: datetime) -> Path:
    base_dir.mkdir(parents=True, exist_ok=True)
    target = base_dir / backup_filename(now)
    payload = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
    try:
        target.write_bytes(payload)
    except OSError as err:
        raise PersistenceError(f"cannot write {target}: {err}") from err
    logger.info("Backup exported to %s", target.name)
    return target


def read_backup(path: Path) -> Any:
    """Load a backup file; malformed JSON is a validation problem, not I/O."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as err:
        raise PersistenceError(f"cannot read {path}: {err}") from err
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise ValidationError(f"invalid JSON payload: {err.msg}") from err
