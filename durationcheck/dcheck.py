#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import ast
from pathlib import Path
from typing import Dict, List, Optional

from dc_analysis import AnalysisResult
from dc_ast import iter_preorder
from dc_ast_printer import format_module, render_expr
from dc_context import CheckContext, LogLevel
from dc_diagnostics import Diagnostic
from dc_driver import DurationCheckDriver
from dc_expr_types import describe_types
from dc_internal_error import InternalCheckerError
from dc_logger import log_info, log_error
from dc_paths import SourceRoots
from dc_types import format_type

EXIT_CLEAN = 0
EXIT_ERRORS = 1
EXIT_FINDINGS = 3

# minimum width of the line-number gutter in snippets
GUTTER_WIDTH = 5


class SourceCache:
    """Source lines of the files diagnostics point into, read once per file."""

    def __init__(self):
        self._lines: Dict[str, Optional[List[str]]] = {}

    def line(self, filename: str, lineno: int) -> Optional[str]:
        if filename not in self._lines:
            try:
                self._lines[filename] = Path(filename).read_text(encoding="utf-8-sig").splitlines()
            except (OSError, UnicodeDecodeError):
                self._lines[filename] = None
        lines = self._lines[filename]
        if lines is None or not 1 <= lineno <= len(lines):
            return None
        return lines[lineno - 1]


def format_snippet(diag: Diagnostic, src_line: str) -> List[str]:
    """
    The source line of a diagnostic and a caret line under its span:

            6 | c = a * b
              |     ^^^^^

    A span running past the line is underlined to the end of the line.
    """
    width = max(GUTTER_WIDTH, len(str(diag.line)))
    out = [f"{diag.line:>{width}} | {src_line}"]
    if diag.column is None:
        return out

    start = max(1, diag.column)
    if diag.end_line is None or diag.end_column is None:
        stop = start + 1
    elif diag.end_line == diag.line:
        stop = max(start + 1, diag.end_column)
    else:
        stop = max(start + 1, len(src_line) + 1)
    out.append(f"{' ' * width} | {' ' * (start - 1)}{'^' * (stop - start)}")
    return out


def print_diagnostics(results: List[AnalysisResult], context: CheckContext) -> None:
    sources = SourceCache()
    for result in results:
        for diag in result.all_diagnostics():
            print_diagnostic_with_snippet(diag, sources, context)


def print_diagnostic_with_snippet(diag: Diagnostic, sources: SourceCache,
                                  context: Optional[CheckContext] = None) -> None:
    log_error(context, diag.format())
    if not diag.filename or diag.line is None:
        return
    src_line = sources.line(diag.filename, diag.line)
    if src_line is None:
        return
    for line in format_snippet(diag, src_line):
        log_error(context, line)


def build_check_context(args: argparse.Namespace) -> CheckContext:
    """Build a CheckContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    # -v is INFO, -vvv and more is DEBUG; the CLI is quiet below errors
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.ERROR

    return CheckContext(
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
        jobs=max(1, getattr(args, 'jobs', 1) or 1),
    )


def build_source_roots(context: CheckContext, args: argparse.Namespace) -> SourceRoots:
    roots = SourceRoots()
    for path in args.paths:
        roots.add_root(path)
    for pattern in getattr(args, 'exclude', None) or []:
        roots.add_exclude(pattern)
    root_list = ",".join(f"'{p}'" for p in roots.roots)
    log_info(context, f"Source root(s): {root_list or '<none>'}")
    return roots


def _analyze_one(args: argparse.Namespace):
    """Analyze the single file named by args.path, returning (result, context)."""
    context = build_check_context(args)
    driver = DurationCheckDriver(context=context)
    path = Path(args.path)
    result = driver.analyze_file(path, module_name=path.stem)
    return result, context


def cmd_check(args: argparse.Namespace) -> int:
    """Run the duration pass over every file under the given paths."""
    context = build_check_context(args)
    roots = build_source_roots(context, args)
    driver = DurationCheckDriver(roots=roots, context=context)

    try:
        results = driver.analyze_paths()
    except InternalCheckerError as e:
        log_error(context, e.format())
        return EXIT_ERRORS

    print_diagnostics(results, context=context)

    findings = sum(len(r.findings) for r in results)
    scanned = sum(1 for r in results if r.scanned)
    log_info(context, f"{len(results)} file(s), {scanned} scanned, {findings} finding(s)")

    if any(r.cu is None or r.has_errors() for r in results):
        return EXIT_ERRORS
    if findings and not args.exit_zero:
        return EXIT_FINDINGS
    return EXIT_CLEAN


def cmd_ast(args: argparse.Namespace) -> int:
    """Pretty-print the parsed tree of one file."""
    result, context = _analyze_one(args)
    if result.cu is None:
        print_diagnostics([result], context=context)
        return EXIT_ERRORS
    try:
        text = format_module(result.cu.tree)
    except RecursionError:
        log_error(context, "ast: tree is nested too deeply to print")
        return EXIT_ERRORS
    print(text)
    return EXIT_CLEAN


def cmd_types(args: argparse.Namespace) -> int:
    """
    List every multiplication in one file with its operand types.

    Products reported by the duration pass are marked with '!'.
    """
    result, context = _analyze_one(args)
    if result.cu is None:
        print_diagnostics([result], context=context)
        return EXIT_ERRORS

    flagged = {(d.line, d.column) for d in result.findings}
    for node in iter_preorder(result.cu.tree):
        if not (isinstance(node, ast.BinOp) and isinstance(node.op, ast.Mult)):
            continue
        mark = "!" if (node.lineno, node.col_offset + 1) in flagged else " "
        print(
            f"{mark} {node.lineno}:{node.col_offset + 1}: `{render_expr(node, context)}`"
            f"  left: {describe_types(result, node.left)}"
            f"  right: {describe_types(result, node.right)}"
        )
    return EXIT_CLEAN


def cmd_sym(args: argparse.Namespace) -> int:
    """Dump the module-level symbols and imports of one file."""
    result, context = _analyze_one(args)
    if result.cu is None or result.module_env is None:
        print_diagnostics([result], context=context)
        return EXIT_ERRORS

    env = result.module_env
    symbols = []
    for name, sym in sorted(env.locals.items()):
        line = f"{sym.kind.name:<12} {name}"
        if sym.target is not None:
            line += f" -> {sym.target}"
        if sym.type is not None:
            line += f": {format_type(sym.type)}"
        symbols.append(line)

    print(f"=== module {env.module_name} ===")
    for title, entries in (("imports", result.cu.imports), ("symbols", symbols)):
        print(f"  {title}:")
        for entry in entries or ["<none>"]:
            print(f"    {entry}")
    return EXIT_CLEAN


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dcheck", description="Find products of two datetime.timedelta values")
    parser.add_argument("-v", "--verbose", action="count", default=0, dest="verbosity",
                        help="More output: -v for progress, -vvv for debugging")
    parser.add_argument("-l", "--log", action="store_true", default=False,
                        help="Prefix log lines with a timestamp and level")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    p_check = subparsers.add_parser("check", aliases=["vet"], help="Check files and directories")
    p_check.add_argument("paths", nargs="+", help="Files or directories to check")
    p_check.add_argument("-j", "--jobs", type=int, default=1,
                         help="Number of files checked concurrently (default: 1)")
    p_check.add_argument("-x", "--exclude", action="append", default=[],
                         help="Glob pattern of paths to skip (repeatable)")
    p_check.add_argument("--exit-zero", action="store_true",
                         help="Exit with status 0 even when findings are reported")
    p_check.set_defaults(func=cmd_check)

    # debug aids over a single file
    for name, aliases, func, help_text in (
        ("ast", [], cmd_ast, "Pretty-print the parsed tree"),
        ("types", [], cmd_types, "Show operand types of every multiplication"),
        ("sym", ["symbols"], cmd_sym, "Dump module-level symbols"),
    ):
        p = subparsers.add_parser(name, aliases=aliases, help=help_text)
        p.add_argument("path", help="Python source file")
        p.set_defaults(func=func)

    return parser


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
