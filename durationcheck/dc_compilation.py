#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from dataclasses import dataclass, field
from typing import List, Optional

from dc_ast import iter_preorder


@dataclass
class CompilationUnit:
    """
    One parsed Python source file, the unit the duration pass runs over.

    - module_name: dotted module name derived from the file's location (e.g. 'app.jobs')
    - filename: path of the source file, or None for in-memory sources
    - source: the decoded source text
    - tree: the parsed `ast.Module`
    - imports: top-level names of the modules the unit imports, in first-seen order
    """
    module_name: str
    filename: Optional[str]
    source: str
    tree: ast.Module
    imports: List[str] = field(default_factory=list)

    def __contains__(self, module_name: str) -> bool:
        return module_name in self.imports


def collect_imports(tree: ast.Module) -> List[str]:
    """
    Collect the top-level module names imported anywhere in `tree`.

    `import a.b as c` and `from a.b import c` both contribute 'a'.
    Relative imports contribute nothing.
    """
    seen: List[str] = []
    for node in iter_preorder(tree):
        names: List[str] = []
        if isinstance(node, ast.Import):
            names = [alias.name for alias in node.names]
        elif isinstance(node, ast.ImportFrom):
            if node.level == 0 and node.module:
                names = [node.module]
        for name in names:
            top = name.split(".")[0]
            if top not in seen:
                seen.append(top)
    return seen
