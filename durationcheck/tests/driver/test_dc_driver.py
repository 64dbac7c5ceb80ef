#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import has_code
from dc_context import CheckContext
from dc_driver import DurationCheckDriver
from dc_expr_types import ExpressionTypeChecker
from dc_paths import SourceRoots

FLAGGED = """
import datetime

a = datetime.timedelta(seconds=1)
b = datetime.timedelta(seconds=2)
c = a * b
"""

CLEAN = """
import datetime

d = datetime.timedelta(seconds=1)
e = d * 3
"""


def test_analyze_source_builds_unit():
    driver = DurationCheckDriver()
    result = driver.analyze_source(FLAGGED, filename="jobs.py", module_name="app.jobs")

    assert result.cu is not None
    assert result.cu.module_name == "app.jobs"
    assert result.cu.filename == "jobs.py"
    assert result.cu.imports == ["datetime"]
    assert result.module_env is not None
    assert result.scanned
    assert [d.filename for d in result.findings] == ["jobs.py"]


def test_syntax_error_is_a_diagnostic():
    driver = DurationCheckDriver()
    result = driver.analyze_source("import datetime\ndef f(:\n    pass\n", filename="bad.py", module_name="bad")

    assert result.cu is None
    assert result.has_errors()
    assert has_code(result.diagnostics, "DRV-0020")
    diag = result.diagnostics[0]
    assert diag.kind == "error"
    assert diag.filename == "bad.py"
    assert diag.line == 2
    assert result.findings == []


def test_missing_file_is_a_diagnostic(temp_project):
    driver = DurationCheckDriver()
    result = driver.analyze_file(temp_project / "nope.py")

    assert result.cu is None
    assert has_code(result.diagnostics, "DRV-0010")
    assert result.diagnostics[0].module_name == "nope"


def test_undecodable_file_is_a_diagnostic(temp_project):
    path = temp_project / "latin.py"
    path.write_bytes(b"x = '\xff\xfe'\n")

    result = DurationCheckDriver().analyze_file(path)

    assert result.cu is None
    assert has_code(result.diagnostics, "DRV-0010")


def test_utf8_bom_is_accepted(temp_project):
    path = temp_project / "bom.py"
    path.write_bytes(("\ufeff" + FLAGGED.lstrip("\n")).encode("utf-8"))

    result = DurationCheckDriver().analyze_file(path)

    assert not result.has_errors()
    assert [(d.line, d.column) for d in result.findings] == [(5, 5)]


def test_analyze_file_defaults_module_name_to_stem(write_py_file):
    path = write_py_file("scheduler", CLEAN)
    result = DurationCheckDriver().analyze_file(path)
    assert result.cu.module_name == "scheduler"
    assert result.findings == []


def test_unit_without_datetime_is_not_scanned():
    result = DurationCheckDriver().analyze_source("import time\nx = 2 * 3\n")
    assert not result.scanned
    assert result.findings == []


def test_analyze_paths_missing_root(temp_project):
    roots = SourceRoots()
    roots.add_root(temp_project / "missing")

    results = DurationCheckDriver(roots=roots).analyze_paths()

    assert len(results) == 1
    assert results[0].cu is None
    assert has_code(results[0].diagnostics, "DRV-0030")


def test_analyze_paths_collects_modules_in_order(write_py_file, roots):
    write_py_file("b_jobs", FLAGGED)
    write_py_file("a_clean", CLEAN)
    write_py_file("pkg.__init__", "")
    write_py_file("pkg.timer", FLAGGED)
    write_py_file("__pycache__.stale", FLAGGED)
    write_py_file("build.lib.copy", FLAGGED)

    results = DurationCheckDriver(roots=roots).analyze_paths()

    assert [r.cu.module_name for r in results] == ["a_clean", "b_jobs", "pkg", "pkg.timer"]
    assert [len(r.findings) for r in results] == [0, 1, 0, 1]
    assert [r.scanned for r in results] == [True, True, False, True]


def test_parallel_results_match_sequential(write_py_file, roots):
    for i in range(8):
        write_py_file(f"mod{i}", FLAGGED if i % 2 else CLEAN)

    sequential = DurationCheckDriver(roots=roots).analyze_paths(jobs=1)
    parallel = DurationCheckDriver(roots=roots, context=CheckContext(jobs=4)).analyze_paths()

    assert [r.cu.module_name for r in parallel] == [r.cu.module_name for r in sequential]
    assert [r.findings for r in parallel] == [r.findings for r in sequential]


def test_one_bad_file_does_not_stop_the_run(write_py_file, roots):
    write_py_file("good", FLAGGED)
    write_py_file("broken", "def (:\n")

    results = DurationCheckDriver(roots=roots).analyze_paths()

    by_name = {r.diagnostics[0].module_name if r.cu is None else r.cu.module_name: r for r in results}
    assert has_code(by_name["broken"].diagnostics, "DRV-0020")
    assert len(by_name["good"].findings) == 1


def _exceed_recursion_limit(self):
    raise RecursionError("maximum recursion depth exceeded")


def test_recursion_error_while_analyzing_is_a_diagnostic(monkeypatch):
    monkeypatch.setattr(ExpressionTypeChecker, "check", _exceed_recursion_limit)
    result = DurationCheckDriver().analyze_source(FLAGGED, filename="deep.py", module_name="deep")

    assert result.cu is not None
    assert has_code(result.diagnostics, "DRV-0040")
    assert result.has_errors()
    assert result.findings == []
    assert not result.scanned
    assert result.diagnostics[-1].filename == "deep.py"


def _exceed_recursion_limit_on_parse(self, text, filename, module_name):
    raise RecursionError("maximum recursion depth exceeded during ast construction")


def test_recursion_error_while_parsing_is_a_diagnostic(monkeypatch):
    monkeypatch.setattr(DurationCheckDriver, "parse_source", _exceed_recursion_limit_on_parse)
    result = DurationCheckDriver().analyze_source(FLAGGED, filename="deep.py", module_name="deep")

    assert result.cu is None
    assert has_code(result.diagnostics, "DRV-0040")
    assert result.diagnostics[0].module_name == "deep"


def test_deeply_nested_file_does_not_stop_the_run(write_py_file, roots, monkeypatch):
    original_check = ExpressionTypeChecker.check

    def check(self):
        if self.cu.module_name == "deep":
            raise RecursionError("maximum recursion depth exceeded")
        return original_check(self)

    monkeypatch.setattr(ExpressionTypeChecker, "check", check)
    write_py_file("deep", FLAGGED)
    write_py_file("good", FLAGGED)

    for jobs in (1, 2):
        results = DurationCheckDriver(roots=roots).analyze_paths(jobs=jobs)
        by_name = {r.cu.module_name: r for r in results}
        assert has_code(by_name["deep"].diagnostics, "DRV-0040")
        assert by_name["deep"].findings == []
        assert len(by_name["good"].findings) == 1
        assert not by_name["good"].has_errors()


def test_long_sum_in_a_file_is_checked(write_py_file, roots):
    write_py_file("generated", "import datetime\nx = " + " + ".join(["1"] * 800) + "\n")
    write_py_file("good", FLAGGED)

    results = DurationCheckDriver(roots=roots).analyze_paths()

    assert not any(r.has_errors() for r in results)
    assert [len(r.findings) for r in results] == [0, 1]
