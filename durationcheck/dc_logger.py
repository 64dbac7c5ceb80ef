"""
Logging for the duration checker.

Every message goes to stderr and is filtered by the CheckContext log level;
stdout is reserved for the output of the debug commands.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from dc_context import CheckContext, LogLevel

_LEVEL_TAGS = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def _rich_prefix(log_level: LogLevel) -> str:
    tag = _LEVEL_TAGS.get(log_level)
    if tag is None:
        return ""
    return f"{time.strftime('%Y-%m-%d %H:%M:%S', time.localtime())} [{tag}] "


def log(context: Optional[CheckContext], log_level: LogLevel, message: str) -> None:
    """
    Write `message` to stderr when the context admits `log_level`.

    Without a context the message is always written, after a note saying so.
    """
    if context is None:
        print("No context provided for logging.", file=sys.stderr)
        print(message, file=sys.stderr)
        return
    if context.log_level < log_level:
        return
    prefix = _rich_prefix(log_level) if context.log_rich_format else ""
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: Optional[CheckContext], message: str) -> None:
    log(context, LogLevel.ERROR, message)


def log_warning(context: Optional[CheckContext], message: str) -> None:
    log(context, LogLevel.WARNING, message)


def log_info(context: Optional[CheckContext], message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: Optional[CheckContext], message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: Optional[CheckContext], stage: str, module: Optional[str] = None) -> None:
    """Announce a pipeline stage at INFO, e.g. "Typing expressions in module 'app.jobs'"."""
    log_info(context, f"{stage} module '{module}'" if module else f"{stage}...")
