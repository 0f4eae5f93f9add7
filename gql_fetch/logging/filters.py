"""
Custom logging filters for gql_fetch.

This module provides the filter that masks credentials and tokens
before log records reach a handler.
"""

import logging
import re
from typing import List, Pattern, Tuple


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials and tokens in log messages."""

    def __init__(self) -> None:
        """Initialize sensitive data filter."""
        super().__init__()

        # (pattern, replacement) pairs, applied in order
        self.rules: List[Tuple[Pattern[str], str]] = [
            # Bearer/Basic credentials anywhere in the message
            (re.compile(r"\b(bearer|basic)(\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE), r"\1\2***MASKED***"),
            # Credential-bearing headers: "Authorization: xyz", "'X-Api-Key': 'xyz'"
            (
                re.compile(
                    r"""((?:proxy-)?authorization|x-api-key|api[_-]?key|cookie|set-cookie)"""
                    r"""(['"]?\s*[:=]\s*['"]?)"""
                    r"""(?!(?:(?:bearer|basic)\s+)?\*\*\*MASKED)"""
                    r"""((?:(?:bearer|basic)\s+)?)([^'",\s}\]]+)""",
                    re.IGNORECASE,
                ),
                r"\1\2\3***MASKED***",
            ),
            # Tokens, secrets, passwords in key=value or JSON form
            (
                re.compile(
                    r"""(token|secret|password|passwd|pwd)(['"]?\s*[:=]\s*['"]?)([^'",\s}\]]+)""",
                    re.IGNORECASE,
                ),
                r"\1\2***MASKED***",
            ),
            # URLs with credentials
            (re.compile(r"(https?://[^:/\s]+):([^@/\s]+)@", re.IGNORECASE), r"\1:***MASKED***@"),
        ]

    def mask(self, message: str) -> str:
        """Return ``message`` with sensitive values replaced."""
        for pattern, replacement in self.rules:
            message = pattern.sub(replacement, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log record to mask sensitive data."""
        record.msg = self.mask(record.getMessage())
        record.args = ()
        return True
