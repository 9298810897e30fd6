"""Error taxonomy for the invoicing core."""

from __future__ import annotations

from typing import Optional


class FacturaError(RuntimeError):
    pass


class ValidationError(FacturaError):
    """Malformed or missing input; always recoverable by the caller."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class PersistenceError(FacturaError):
    """The key-value store failed to read or write."""

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key
