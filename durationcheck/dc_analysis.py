#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dc_compilation import CompilationUnit
from dc_context import CheckContext
from dc_diagnostics import Diagnostic
from dc_symbols import ModuleEnv
from dc_types import Type, FuncType


@dataclass
class ClassInfo:
    """Attribute and method types of a class defined in the unit."""
    name: str
    attrs: Dict[str, Type] = field(default_factory=dict)
    methods: Dict[str, FuncType] = field(default_factory=dict)


@dataclass
class AnalysisResult:
    """
    Full analysis result for one compiled unit.

    Contains:
      - compilation unit (None when the file could not be loaded)
      - check context (cross-cutting options)
      - module-level symbol env
      - function signatures and class attribute types
      - expression types
      - diagnostics from the front end
      - findings of the duration pass
    """
    cu: Optional[CompilationUnit] = None
    context: CheckContext = field(default_factory=CheckContext.default)

    module_env: Optional[ModuleEnv] = None

    # Keyed by function / class name (module level only)
    func_types: Dict[str, FuncType] = field(default_factory=dict)
    class_infos: Dict[str, ClassInfo] = field(default_factory=dict)

    # Expression types keyed by id(expr_node)
    expr_types: Dict[int, Type] = field(default_factory=dict)

    diagnostics: List[Diagnostic] = field(default_factory=list)
    findings: List[Diagnostic] = field(default_factory=list)

    # set when the unit gate let the duration pass run
    scanned: bool = False

    def type_of(self, node: ast.AST) -> Optional[Type]:
        """Resolved type of an expression node, or None if the front end has none."""
        return self.expr_types.get(id(node))

    def all_diagnostics(self) -> List[Diagnostic]:
        return self.diagnostics + self.findings

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.all_diagnostics())
