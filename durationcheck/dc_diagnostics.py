#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
import os
from dataclasses import dataclass
from typing import Optional

from dc_ast import Span, span_of


# Codes carried in user-facing messages, as "[DRV-0010] ...".
# Findings of the duration pass carry no code. ICE codes belong to
# InternalCheckerError and are not listed here.
DIAGNOSTIC_CODE_FAMILIES = {
    "DRV": [
        "DRV-0010",  # source file cannot be read
        "DRV-0020",  # syntax error
        "DRV-0030",  # path given on the command line does not exist
        "DRV-0040",  # source nested too deeply to analyze
    ],
    "RES": [
        "RES-0010",  # import rebinds a name defined in the module
    ],
}


@dataclass
class Diagnostic:
    """
    One reported problem or finding.

    Lines and columns are 1-based; the end position, when known, is exclusive.
    """
    kind: str  # "error" or "warning"
    message: str
    module_name: Optional[str] = None
    filename: Optional[str] = None

    line: Optional[int] = None
    column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    def location(self) -> str:
        """'/abs/path.py:LINE:COL(module)', or as much of it as is known."""
        parts = []
        if self.filename is not None:
            parts.append(os.path.abspath(str(self.filename)))
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        loc = ":".join(parts)
        if self.line is not None and self.module_name is not None:
            loc = f"{loc}({self.module_name})"
        return loc

    def format(self) -> str:
        """Header line; source snippets are printed by the CLI."""
        loc = self.location()
        head = f"{loc}: " if loc else ""
        return f"{head}{self.kind}: {self.message}"


def _with_span(diag: Diagnostic, span: Optional[Span]) -> Diagnostic:
    if span is not None:
        diag.line, diag.column = span.start_line, span.start_column
        diag.end_line, diag.end_column = span.end_line, span.end_column
    return diag


def diag_from_node(
        kind: str,
        message: str,
        *,
        module_name: Optional[str],
        filename: Optional[str],
        node: Optional[ast.AST],
) -> Diagnostic:
    """Diagnostic positioned on `node`; nodes without a location give none."""
    diag = Diagnostic(kind=kind, message=message, module_name=module_name, filename=filename)
    return _with_span(diag, span_of(node))


def diag_from_syntax_error(
        message: str,
        *,
        module_name: Optional[str],
        filename: Optional[str],
        error: SyntaxError,
) -> Diagnostic:
    # SyntaxError offsets are already 1-based
    return Diagnostic(
        kind="error",
        message=message,
        module_name=module_name,
        filename=filename or error.filename,
        line=error.lineno,
        column=error.offset,
        end_line=getattr(error, "end_lineno", None),
        end_column=getattr(error, "end_offset", None),
    )
