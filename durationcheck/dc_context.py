"""
Run options shared by every stage of a check.

The CLI builds one CheckContext from its flags; library callers get
CheckContext.default().
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Ordered log levels; a context logs everything at or below its level."""
    SILENT = 0
    ERROR = 3
    WARNING = 6     # library default
    INFO = 10       # -v: stages and per-file summaries
    DEBUG = 30      # -vvv: imports, symbol and type counts


@dataclass
class CheckContext:
    """
    Attributes:
        log_rich_format:    Prefix log lines with a timestamp and the level.
        log_level:          Most verbose level that is logged.
        jobs:               Compiled units the driver scans concurrently.
    """
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING
    jobs: int = 1

    @staticmethod
    def default() -> 'CheckContext':
        return CheckContext()
