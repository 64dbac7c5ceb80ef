#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
Check for two durations multiplied together.

`timedelta * timedelta` has no meaning: the product of two elapsed times is
not an elapsed time. A product is only reported when both operands read as
durations of their own. Literal operands and explicit conversions of plain
numbers, such as `datetime.timedelta(10 * 60)`, are the accepted ways of
writing a scale factor and never count.
"""

import ast
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from dc_analysis import AnalysisResult
from dc_ast import iter_preorder
from dc_ast_printer import render_expr
from dc_compilation import CompilationUnit
from dc_context import CheckContext
from dc_diagnostics import Diagnostic, diag_from_node
from dc_logger import log_debug, log_stage
from dc_types import TIME_MODULE, DURATION_CTOR, Type, is_duration


class TypeLookup(Protocol):
    """Read-only access to the resolved types of a unit's expressions."""

    def type_of(self, node: ast.AST) -> Optional[Type]:
        ...


Renderer = Callable[[ast.AST, Optional[CheckContext]], str]


def has_import(cu: CompilationUnit, module_name: str) -> bool:
    """True iff the unit imports `module_name`."""
    return module_name in cu


def is_unacceptable_expr(types: TypeLookup, expr: ast.expr) -> bool:
    """True if `expr` is not an acceptable operand of a duration product."""
    if isinstance(expr, ast.Constant):
        return False
    if isinstance(expr, ast.Call):
        # explicit conversion of constants, e.g. `datetime.timedelta(10)`
        return not is_acceptable_cast(types, expr)
    return True


def is_acceptable_cast(types: TypeLookup, call: ast.Call) -> bool:
    """True if `call` converts a constant expression to a duration."""
    # exactly one positional argument
    if len(call.args) != 1 or call.keywords:
        return False
    arg = call.args[0]
    if isinstance(arg, ast.Starred):
        return False

    if not is_acceptable_cast_arg(types, arg):
        return False

    # `datetime.timedelta`, spelled with the module name itself
    func = call.func
    if not isinstance(func, ast.Attribute):
        return False
    if not isinstance(func.value, ast.Name):
        return False
    if func.value.id != TIME_MODULE:
        return False
    return func.attr == DURATION_CTOR


def is_acceptable_cast_arg(types: TypeLookup, expr: ast.expr) -> bool:
    """True if `expr` is built from constants and non-duration values only."""
    pending = [expr]
    while pending:
        node = pending.pop()
        if isinstance(node, ast.Constant):
            continue
        if isinstance(node, ast.BinOp):
            pending.append(node.right)
            pending.append(node.left)
            continue
        if is_duration(types.type_of(node)):
            return False
    return True


@dataclass
class DurationCheck:
    """
    Scan one compiled unit for products of two durations.

    Every `*` whose operands both resolve to the duration type is examined;
    it is reported when neither operand is a literal or an acceptable
    conversion. Operands without type information are skipped.
    """
    cu: CompilationUnit
    types: TypeLookup
    context: CheckContext = field(default_factory=CheckContext.default)
    render: Renderer = render_expr
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def check(self) -> List[Diagnostic]:
        self.diagnostics = []
        for node in iter_preorder(self.cu.tree):
            if isinstance(node, ast.BinOp):
                self._check_binop(node)
        return self.diagnostics

    def _check_binop(self, expr: ast.BinOp) -> None:
        # we are only interested in multiplication
        if not isinstance(expr.op, ast.Mult):
            return

        left = self.types.type_of(expr.left)
        right = self.types.type_of(expr.right)
        if left is None or right is None:
            return

        if is_duration(left) and is_duration(right):
            if is_unacceptable_expr(self.types, expr.left) and is_unacceptable_expr(self.types, expr.right):
                self._report(expr)

    def _report(self, expr: ast.BinOp) -> None:
        text = self.render(expr, self.context)
        self.diagnostics.append(
            diag_from_node(
                "warning",
                f"Multiplication of durations: `{text}`",
                module_name=self.cu.module_name,
                filename=self.cu.filename,
                node=expr,
            )
        )


def run_duration_check(analysis: AnalysisResult) -> List[Diagnostic]:
    """
    Run the pass over an analysed unit and store its findings on the result.

    Units that never import the time module are skipped.
    """
    cu = analysis.cu
    analysis.findings = []
    analysis.scanned = False
    if cu is None:
        return analysis.findings

    if not has_import(cu, TIME_MODULE):
        log_debug(analysis.context, f"Module '{cu.module_name}' does not import '{TIME_MODULE}', skipping")
        return analysis.findings

    log_stage(analysis.context, "Checking duration products in", cu.module_name)
    check = DurationCheck(cu=cu, types=analysis, context=analysis.context)
    analysis.findings = check.check()
    analysis.scanned = True
    log_debug(analysis.context, f"Duration check produced {len(analysis.findings)} finding(s)")
    return analysis.findings
