"""Sequential invoice numbers backed by the persisted counter."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from backend.core.logging import get_logger

from .repository import Repository

logger = get_logger(__name__)

NUMBER_WIDTH = 6


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class SequenceState:
    value: int = 0


def format_invoice_number(value: int) -> str:
    """Zero-pad to six digits; longer values grow instead of being truncated."""

    return f"{value:0{NUMBER_WIDTH}d}"


def next_number(state: SequenceState) -> Tuple[SequenceState, str]:
    new_state = SequenceState(state.value + 1)
    return new_state, format_invoice_number(new_state.value)


class NumberingService:
    """Hands out invoice numbers; the counter is persisted before a number is returned."""

    def __init__(
        self,
        repository: Repository,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or _default_clock
        self._lock = threading.Lock()
        self.audit_log: List[Dict[str, object]] = []

    def current(self) -> SequenceState:
        return SequenceState(self._repository.load_counter())

    def next_number(self) -> str:
        with self._lock:
            state, invoice_number = next_number(self.current())
            # A failed write propagates before the number is handed out
            self._repository.save_counter(state.value)
            self._log(state, invoice_number)
        logger.info("Issued invoice number %s", invoice_number)
        return invoice_number

    def _log(self, state: SequenceState, invoice_number: str) -> None:
        self.audit_log.append(
            {
                "action": "issue",
                "sequence": state.value,
                "invoice_number": invoice_number,
                "timestamp": self._clock(),
            }
        )
