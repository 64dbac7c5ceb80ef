#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Tuple

DEFAULT_EXCLUDED_DIRS = (
    "__pycache__", ".git", ".hg", ".svn", ".tox", ".nox", ".venv", "venv",
    "node_modules", "build", "dist",
)


@dataclass
class SourceRoots:
    """
    The files and directories to check.

    - roots: paths given by the user; a directory is searched recursively for `.py` files
    - excludes: glob patterns matched against file and directory names and relative paths

    Resolution rule: every root must exist; files found under a directory root
    get module names relative to that root.
    """
    roots: List[Path] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)

    def add_root(self, root: str | Path) -> None:
        self.roots.append(Path(root))

    def add_exclude(self, pattern: str) -> None:
        self.excludes.append(pattern)

    def module_name(self, root: Path, path: Path) -> str:
        """
        Convert 'pkg/sub/mod.py' below `root` to 'pkg.sub.mod'
        ('pkg/__init__.py' to 'pkg').
        """
        parts = list(path.relative_to(root).with_suffix("").parts)
        if parts[-1] == "__init__":
            parts.pop()
        if not parts:
            # the root's own __init__.py
            return root.resolve().name
        return ".".join(parts)

    def collect(self) -> List[Tuple[Path, str]]:
        """
        Find every source file with its module name, sorted by path.

        Raises FileNotFoundError for a root that does not exist.
        """
        found = {}
        for root in self.roots:
            if not root.exists():
                raise FileNotFoundError(f"Path '{root}' does not exist")
            if root.is_file():
                # explicit files are never excluded
                if root.name == "__init__.py" and root.resolve().parent.name:
                    found.setdefault(root, root.resolve().parent.name)
                else:
                    found.setdefault(root, root.stem)
                continue
            for path in sorted(root.rglob("*.py")):
                rel = path.relative_to(root)
                if self._is_excluded(rel):
                    continue
                found.setdefault(path, self.module_name(root, path))
        return sorted(found.items(), key=lambda item: str(item[0]))

    def _is_excluded(self, rel: Path) -> bool:
        for part in rel.parts[:-1]:
            if part in DEFAULT_EXCLUDED_DIRS or part.endswith(".egg-info"):
                return True
        for pattern in self.excludes:
            if fnmatch(str(rel), pattern) or any(fnmatch(part, pattern) for part in rel.parts):
                return True
        return False
