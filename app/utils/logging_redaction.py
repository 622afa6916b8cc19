"""
Logging redaction helpers.
Masks notification credentials and recipient addresses in log output.
"""

from __future__ import annotations

import logging
import re
from typing import Tuple


_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    # Telegram bot token in URL: /bot<token>/
    (re.compile(r"bot\d+:[A-Za-z0-9_-]{20,}"), "bot[REDACTED]"),
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # SMTP credentials echoed in config dumps or auth errors
    (re.compile(r"(?i)(smtp[_-]?password|password)\s*[:=]\s*(\S+)"), r"\1=[REDACTED]"),
    # Generic token / api key pairs
    (re.compile(r"(?i)(access_token|token|api[_-]?key)\s*[:=]\s*([A-Za-z0-9\-\._]+)"), r"\1=[REDACTED]"),
)

# SMTP errors echo recipient lists; keep the domain for debugging
_EMAIL = re.compile(r"\b([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")


def mask_email(address: str) -> str:
    return _EMAIL.sub(r"\1***@\2", address)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return mask_email(redacted)


class RedactingFilter(logging.Filter):
    """Rewrites the formatted message of any record that carries a secret."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_message(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def install_redaction_filter() -> None:
    """Attach the filter to the root logger and each of its handlers once."""
    root = logging.getLogger()
    if not any(isinstance(f, RedactingFilter) for f in root.filters):
        root.addFilter(RedactingFilter())
    for handler in root.handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(RedactingFilter())
