#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dc_ast import Span

GENERIC_ICE_CODE = "[ICE-9999]"


@dataclass(frozen=True)
class ICELocation:
    filename: Optional[str]
    span: Optional[Span] = None

    def __str__(self) -> str:
        if self.span is None:
            return str(self.filename)
        return f"{self.filename}:{self.span.start_line}:{self.span.start_column}"


class InternalCheckerError(RuntimeError):
    """
    A bug in the checker or a broken pipeline invariant.

    Problems in the analysed code are Diagnostics, never this exception.
    Messages start with an ICE code; uncoded messages get the generic one.
    """

    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    def format(self) -> str:
        text = self.message if "[ICE-" in self.message else f"{GENERIC_ICE_CODE} {self.message}"
        where = f"{self.loc}: " if self.loc is not None and self.loc.filename else ""
        return f"{where}internal checker error: {text}"
