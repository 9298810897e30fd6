"""Centralized logging configuration with PII redaction."""

import json
import logging
import re
import sys
from datetime import datetime, timezone

from backend.core.config import settings


_RESERVED_ATTRS = frozenset(
    (
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
        'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'message', 'taskName',
    )
)


class PIIRedactionFilter(logging.Filter):
    """Filter to redact customer e-mails and phone numbers from log records."""

    def __init__(self):
        super().__init__()
        # Email pattern: word characters, @, word characters, ., word characters
        self.email_pattern = re.compile(r'(\b\S+@\S+\.\S+\b)')
        # Phone pattern: optional +, digits, spaces, dashes; at least 8 chars
        self.phone_pattern = re.compile(r'(\+?\d[\d \-]{6,}\d)')

    def redact(self, text: str) -> str:
        text = self.email_pattern.sub(self._mask_email, text)
        return self.phone_pattern.sub(self._mask_phone, text)

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact PII from log record message and string args."""
        if record.msg:
            record.msg = self.redact(str(record.msg))

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self.redact(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True

    def _mask_email(self, match) -> str:
        """Mask email: show first char of user, keep domain."""
        email = match.group(1)
        user, domain = email.split("@", 1)
        if len(user) <= 1:
            masked_user = "*"
        else:
            masked_user = user[0] + "*" * (len(user) - 1)
        return f"{masked_user}@{domain}"

    def _mask_phone(self, match) -> str:
        """Mask phone: show first 2 chars, mask the rest."""
        phone = match.group(1)
        return phone[:2] + "*" * (len(phone) - 2)


class JSONFormatter(logging.Formatter):
    """One JSON object per record; extras are copied and redacted."""

    def __init__(self):
        super().__init__()
        self._redactor = PIIRedactionFilter()

    def format(self, record):
        log_entry = {
            'level': record.levelname.lower(),
            'logger': record.name,
            'msg': self._redactor.redact(record.getMessage()),
            'ts_utc': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }

        if record.exc_info:
            log_entry['exc_info'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_entry:
                continue
            if isinstance(value, str):
                value = self._redactor.redact(value)
            log_entry[key] = value

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def init_logging() -> None:
    """Configure the root logger from ``settings``."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    handler.addFilter(PIIRedactionFilter())
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with PII redaction applied."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, PIIRedactionFilter) for f in logger.filters):
        logger.addFilter(PIIRedactionFilter())
    return logger
