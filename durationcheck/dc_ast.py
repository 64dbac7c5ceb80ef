#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from dataclasses import dataclass
from typing import Iterator, Optional


# ==========================
# Source spans over Python ASTs
# ==========================


@dataclass
class Span:
    """1-based lines and columns; end is exclusive."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int


def span_of(node: Optional[ast.AST]) -> Optional[Span]:
    """
    Build a Span from the location attributes `ast.parse` attaches to
    expressions and statements. Nodes without a location (operators,
    contexts, the module itself) have no span.
    """
    if node is None:
        return None
    line = getattr(node, "lineno", None)
    col = getattr(node, "col_offset", None)
    if line is None or col is None:
        return None
    end_line = getattr(node, "end_lineno", None)
    end_col = getattr(node, "end_col_offset", None)
    if end_line is None or end_col is None:
        end_line, end_col = line, col
    return Span(
        start_line=line,
        start_column=col + 1,
        end_line=end_line,
        end_column=end_col + 1,
    )


def iter_preorder(node: ast.AST) -> Iterator[ast.AST]:
    """
    Yield `node` and all of its descendants in pre-order, children
    left to right in field order.

    `ast.walk` is breadth-first, so it does not give source order.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        children = list(ast.iter_child_nodes(current))
        stack.extend(reversed(children))
