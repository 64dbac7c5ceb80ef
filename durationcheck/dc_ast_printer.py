#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from typing import Any, List, Optional, Tuple

from dc_ast import span_of
from dc_context import CheckContext
from dc_logger import log_warning

# Nodes that carry no information beyond their class name
_BARE_NODES = (ast.expr_context, ast.operator, ast.unaryop, ast.cmpop, ast.boolop)


def render_expr(node: ast.AST, context: Optional[CheckContext] = None) -> str:
    """
    Render an expression back to source text.

    Returns "" (and logs a warning) when the node cannot be rendered.
    """
    try:
        return ast.unparse(node)
    except (AttributeError, TypeError, ValueError, RecursionError) as e:
        log_warning(context, f"Error formatting expression: {e}")
        return ""


def _header(node: ast.AST) -> Tuple[str, List[Tuple[str, Any]]]:
    """`Name(field=value, ...) @l:c-l:c` plus the fields holding child nodes."""
    inline = []
    children = []
    for name in node._fields:
        value = getattr(node, name, None)
        if isinstance(value, _BARE_NODES):
            inline.append(f"{name}={type(value).__name__}")
        elif isinstance(value, (ast.AST, list)):
            children.append((name, value))
        elif value is not None:
            inline.append(f"{name}={value!r}")

    text = type(node).__name__
    if inline:
        text += "(" + ", ".join(inline) + ")"
    span = span_of(node)
    if span is not None:
        text += f" @{span.start_line}:{span.start_column}-{span.end_line}:{span.end_column}"
    return text, children


def format_node(node: Any, indent: int = 0) -> List[str]:
    """
    Dump an AST node, one node per line, children indented under the
    name of the field that holds them. Empty lists are left out.
    """
    pad = "  " * indent
    if isinstance(node, list):
        return [line for elem in node for line in format_node(elem, indent)]
    if not isinstance(node, ast.AST):
        return [pad + repr(node)]

    text, children = _header(node)
    out = [pad + text]
    for name, value in children:
        if isinstance(value, list) and not value:
            continue
        out.append(f"{pad}  {name}:")
        out.extend(format_node(value, indent + 2))
    return out


def format_module(mod: ast.Module) -> str:
    return "\n".join(format_node(mod))
