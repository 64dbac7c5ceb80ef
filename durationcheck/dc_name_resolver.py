#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from typing import Iterable, List

from dc_compilation import CompilationUnit
from dc_diagnostics import Diagnostic, diag_from_node
from dc_symbols import TYPE_ALIAS_ANNOTATIONS, SymbolKind, Symbol, ModuleEnv

# `type X = ...` statements exist from Python 3.12 on
_TYPE_ALIAS_STMT = getattr(ast, "TypeAlias", None)

# `try: ... except* E:` from Python 3.11 on
_TRY_STMTS = tuple(t for t in (ast.Try, getattr(ast, "TryStar", None)) if t is not None)


class NameResolver:
    """
    Module-level name resolver.

    - Builds the ModuleEnv for a compiled unit.
    - Collects top-level bindings: imports, functions, classes, type aliases.
      Statements nested in module-level `if`/`try`/`with` blocks count as
      top-level (conditional imports, `if TYPE_CHECKING:`).
    - Later bindings replace earlier ones, as they do at runtime.
    - Detects imports that rebind a name the module itself defined.
    """

    def __init__(self, cu: CompilationUnit):
        self.cu = cu
        self.env = ModuleEnv(module_name=cu.module_name)
        self.diagnostics: List[Diagnostic] = []

    def resolve(self) -> ModuleEnv:
        """
        Main entry point: build the environment for the unit and return it.
        """
        self._collect(self.cu.tree.body)
        self.diagnostics.extend(self.env.diagnostics)
        return self.env

    # --- internal helpers ---

    def _collect(self, stmts: Iterable[ast.stmt]) -> None:
        for stmt in stmts:
            if isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if alias.asname:
                        # `import a.b as c` binds c -> a.b
                        self._define_import(Symbol(alias.asname, SymbolKind.MODULE, stmt, target=alias.name))
                    else:
                        # `import a.b` binds a -> a
                        top = alias.name.split(".")[0]
                        self._define_import(Symbol(top, SymbolKind.MODULE, stmt, target=top))
            elif isinstance(stmt, ast.ImportFrom):
                if stmt.level != 0 or not stmt.module:
                    continue
                for alias in stmt.names:
                    if alias.name == "*":
                        continue
                    name = alias.asname or alias.name
                    self._define_import(
                        Symbol(name, SymbolKind.IMPORTED, stmt, target=f"{stmt.module}.{alias.name}")
                    )
            elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._define(Symbol(stmt.name, SymbolKind.FUNC, stmt))
            elif isinstance(stmt, ast.ClassDef):
                self._define(Symbol(stmt.name, SymbolKind.CLASS, stmt))
            elif _TYPE_ALIAS_STMT is not None and isinstance(stmt, _TYPE_ALIAS_STMT):
                self._define(Symbol(stmt.name.id, SymbolKind.TYPE_ALIAS, stmt))
            elif isinstance(stmt, ast.AnnAssign):
                if isinstance(stmt.target, ast.Name) and stmt.value is not None \
                        and ast.unparse(stmt.annotation) in TYPE_ALIAS_ANNOTATIONS:
                    self._define(Symbol(stmt.target.id, SymbolKind.TYPE_ALIAS, stmt))
            elif isinstance(stmt, ast.If):
                self._collect(stmt.body)
                self._collect(stmt.orelse)
            elif isinstance(stmt, (ast.With, ast.AsyncWith)):
                self._collect(stmt.body)
            elif isinstance(stmt, _TRY_STMTS):
                self._collect(stmt.body)
                for handler in stmt.handlers:
                    self._collect(handler.body)
                self._collect(stmt.orelse)
                self._collect(stmt.finalbody)
            else:
                # plain assignments are typed later, by the expression checker
                continue

    def _define(self, sym: Symbol) -> None:
        self.env.locals[sym.name] = sym

    def _define_import(self, sym: Symbol) -> None:
        """
        Define an import binding, warning when it rebinds a module-level
        function, class or alias.
        """
        prev = self.env.locals.get(sym.name)
        if prev is not None and prev.kind in (SymbolKind.FUNC, SymbolKind.CLASS, SymbolKind.TYPE_ALIAS):
            kind_label = prev.kind.name.lower().replace("_", " ")
            self.env.diagnostics.append(
                diag_from_node(
                    "warning",
                    f"[RES-0010] import of '{sym.target}' rebinds {kind_label} '{sym.name}' "
                    f"defined at line {prev.node.lineno}",
                    module_name=self.cu.module_name,
                    filename=self.cu.filename,
                    node=sym.node,
                )
            )
        self.env.locals[sym.name] = sym
