#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from dc_diagnostics import Diagnostic
from dc_types import Type

TYPE_ALIAS_ANNOTATIONS = ("TypeAlias", "typing.TypeAlias", "typing_extensions.TypeAlias")


class SymbolKind(Enum):
    MODULE = auto()      # `import x` / `import x.y as z`
    IMPORTED = auto()    # `from x import y`
    FUNC = auto()
    CLASS = auto()
    TYPE_ALIAS = auto()


@dataclass
class Symbol:
    """
    A name bound at module level.

    For MODULE and IMPORTED symbols `target` holds the dotted path the name
    stands for ('datetime', 'datetime.timedelta', ...).
    """
    name: str
    kind: SymbolKind
    node: ast.AST  # statement that bound this symbol
    target: Optional[str] = None
    type: Optional[Type] = None  # filled in by the expression type checker


@dataclass
class ModuleEnv:
    """
    Module-level symbol environment of one compiled unit.
    """
    module_name: str
    locals: Dict[str, Symbol] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def lookup(self, name: str) -> Optional[Symbol]:
        return self.locals.get(name)
