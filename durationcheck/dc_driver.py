#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import ast
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from dc_analysis import AnalysisResult
from dc_compilation import CompilationUnit, collect_imports
from dc_context import CheckContext
from dc_diagnostics import Diagnostic, diag_from_syntax_error
from dc_durationcheck import run_duration_check
from dc_expr_types import ExpressionTypeChecker
from dc_logger import log_info, log_debug, log_stage, log_warning
from dc_name_resolver import NameResolver
from dc_paths import SourceRoots


class DurationCheckDriver:
    """
    Driver:
      - discover source files (SourceRoots)
      - read and parse each file into a CompilationUnit
      - run the front end (names, expression types)
      - run the duration pass on units that import the time module

    Entry points:
      - analyze_paths(): every file under the configured roots.
      - analyze_file(path): a single file.
      - analyze_source(text): an in-memory source, for tests and editors.

    Problems with the input are reported as diagnostics, never raised.
    """

    def __init__(
        self,
        roots: SourceRoots | None = None,
        context: CheckContext | None = None,
    ):
        self.roots = roots or SourceRoots()
        self.context = context or CheckContext.default()

    # --- Public API ---

    def analyze_paths(self, jobs: Optional[int] = None) -> List[AnalysisResult]:
        """
        Analyze every file under the configured roots.

        Units are independent; with jobs > 1 they are scanned on a thread
        pool. Results always follow the sorted file order.
        """
        try:
            files = self.roots.collect()
        except FileNotFoundError as e:
            result = AnalysisResult(cu=None, context=self.context)
            result.diagnostics.append(Diagnostic(kind="error", message=f"file: [DRV-0030] {e}"))
            return [result]

        jobs = jobs if jobs is not None else self.context.jobs
        log_info(self.context, f"Checking {len(files)} file(s) with {max(1, jobs)} job(s)")

        if jobs > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=jobs) as executor:
                return list(executor.map(lambda item: self.analyze_file(item[0], item[1]), files))
        return [self.analyze_file(path, module_name) for path, module_name in files]

    def analyze_file(self, path: str | Path, module_name: Optional[str] = None) -> AnalysisResult:
        """Load and analyze one file. Unreadable or invalid files yield an error diagnostic."""
        path = Path(path)
        module_name = module_name or path.stem
        result = AnalysisResult(cu=None, context=self.context)

        log_stage(self.context, "Loading", module_name)
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            result.diagnostics.append(
                Diagnostic(
                    kind="error",
                    message=f"file: [DRV-0010] cannot read {path}: {e}",
                    module_name=module_name,
                    filename=str(path),
                )
            )
            return result

        return self.analyze_source(text, filename=str(path), module_name=module_name)

    def analyze_source(
        self,
        text: str,
        filename: Optional[str] = None,
        module_name: str = "__main__",
    ) -> AnalysisResult:
        result = AnalysisResult(cu=None, context=self.context)
        try:
            cu = self.parse_source(text, filename=filename, module_name=module_name)
        except SyntaxError as e:
            result.diagnostics.append(
                diag_from_syntax_error(
                    f"syntax: [DRV-0020] {e.msg}",
                    module_name=module_name,
                    filename=filename,
                    error=e,
                )
            )
            return result
        except ValueError as e:
            # source text with NUL bytes on older interpreters
            result.diagnostics.append(
                Diagnostic(
                    kind="error",
                    message=f"syntax: [DRV-0020] {e}",
                    module_name=module_name,
                    filename=filename,
                )
            )
            return result
        except RecursionError:
            result.diagnostics.append(self._too_deep(module_name, filename))
            return result

        return self.analyze_unit(cu, result)

    def parse_source(self, text: str, filename: Optional[str], module_name: str) -> CompilationUnit:
        log_debug(self.context, f"Parsing {filename or '<string>'}")
        tree = ast.parse(text, filename=filename or "<string>")
        imports = collect_imports(tree)
        log_debug(self.context, f"Module '{module_name}' imports: {', '.join(imports) or '<none>'}")
        return CompilationUnit(
            module_name=module_name,
            filename=filename,
            source=text,
            tree=tree,
            imports=imports,
        )

    def analyze_unit(self, cu: CompilationUnit, result: AnalysisResult | None = None) -> AnalysisResult:
        """
        Pipeline for one unit:

          1. NameResolver (module-level symbols).
          2. ExpressionTypeChecker (resolved expression types).
          3. Duration pass, gated on the unit importing the time module.
        """
        result = result or AnalysisResult(cu=None, context=self.context)
        result.cu = cu

        try:
            # 1. Module-level name resolution
            log_stage(self.context, "Resolving names in", cu.module_name)
            nr = NameResolver(cu)
            result.module_env = nr.resolve()
            result.diagnostics.extend(nr.diagnostics)
            log_debug(self.context, f"Name resolution found {len(result.module_env.locals)} symbol(s)")

            # 2. Expression types
            log_stage(self.context, "Typing expressions in", cu.module_name)
            ExpressionTypeChecker(result).check()

            # 3. The duration pass
            run_duration_check(result)
        except RecursionError:
            result.findings = []
            result.scanned = False
            result.diagnostics.append(self._too_deep(cu.module_name, cu.filename))
            return result

        log_info(
            self.context,
            f"Analysis of '{cu.module_name}' complete: {len(result.findings)} finding(s), "
            f"{len([d for d in result.diagnostics if d.kind == 'error'])} error(s)",
        )
        return result

    def _too_deep(self, module_name: Optional[str], filename: Optional[str]) -> Diagnostic:
        log_warning(self.context, f"Giving up on '{module_name}': nesting exceeds the recursion limit")
        return Diagnostic(
            kind="error",
            message="nesting: [DRV-0040] source is nested too deeply to analyze",
            module_name=module_name,
            filename=filename,
        )
