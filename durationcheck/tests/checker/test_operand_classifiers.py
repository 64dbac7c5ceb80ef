#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import ast

import pytest

from dc_compilation import CompilationUnit
from dc_durationcheck import (
    DurationCheck,
    has_import,
    is_acceptable_cast,
    is_acceptable_cast_arg,
    is_unacceptable_expr,
)
from dc_types import get_builtin_type, time_type

DURATION = time_type("timedelta")
INT = get_builtin_type("int")


class FakeTypes:
    """Type table keyed by rendered source text, independent of the front end."""

    def __init__(self, **types):
        self.by_text = types

    def type_of(self, node):
        return self.by_text.get(ast.unparse(node))


def _expr(text: str) -> ast.expr:
    return ast.parse(text, mode="eval").body


# ---------------------------------------------------------------------------
# Unacceptable-operand classifier
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("text", ["5", "2.5", "'x'", "None"])
def test_literals_are_acceptable(text):
    assert not is_unacceptable_expr(FakeTypes(), _expr(text))


@pytest.mark.parametrize("text", ["a", "a.b", "a[0]", "-5", "2 * 3", "(a := b)"])
def test_non_call_non_literal_is_unacceptable(text):
    assert is_unacceptable_expr(FakeTypes(), _expr(text))


def test_call_follows_conversion_classifier():
    types = FakeTypes(d=DURATION)
    assert not is_unacceptable_expr(types, _expr("datetime.timedelta(10)"))
    assert is_unacceptable_expr(types, _expr("datetime.timedelta(d)"))
    assert is_unacceptable_expr(types, _expr("make()"))


# ---------------------------------------------------------------------------
# Conversion-call classifier
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "datetime.timedelta(10)",
        "datetime.timedelta(10 * 60)",
        "datetime.timedelta((1 + 2) * 3)",
        "datetime.timedelta(n)",
        "datetime.timedelta(untyped)",
        "datetime.timedelta(n * 60)",
    ],
)
def test_accepted_conversions(text):
    types = FakeTypes(n=INT, d=DURATION)
    assert is_acceptable_cast(types, _expr(text))


@pytest.mark.parametrize(
    "text",
    [
        "datetime.timedelta()",
        "datetime.timedelta(10, 20)",
        "datetime.timedelta(seconds=10)",
        "datetime.timedelta(10, seconds=1)",
        "datetime.timedelta(*xs)",
        "datetime.timedelta(d)",
        "datetime.timedelta(d * 2)",
        "datetime.timedelta(2 + d)",
        "dt.timedelta(10)",
        "timedelta(10)",
        "datetime.datetime(10)",
        "pkg.datetime.timedelta(10)",
        "datetime().timedelta(10)",
    ],
)
def test_rejected_conversions(text):
    types = FakeTypes(n=INT, d=DURATION)
    assert not is_acceptable_cast(types, _expr(text))


# ---------------------------------------------------------------------------
# Cast-argument classifier
# ---------------------------------------------------------------------------


def test_cast_argument_recurses_through_any_operator():
    types = FakeTypes(d=DURATION, n=INT)
    assert is_acceptable_cast_arg(types, _expr("1 + 2 * 3 - 4 // 5"))
    assert is_acceptable_cast_arg(types, _expr("n ** 2 % 7"))
    assert not is_acceptable_cast_arg(types, _expr("1 + 2 * (3 - d)"))


def test_cast_argument_without_type_is_safe():
    assert is_acceptable_cast_arg(FakeTypes(), _expr("whatever.attr"))


def test_cast_argument_of_duration_type_is_not_safe():
    assert not is_acceptable_cast_arg(FakeTypes(d=DURATION), _expr("d"))
    assert not is_acceptable_cast_arg(FakeTypes(**{"f()": DURATION}), _expr("f()"))


def test_cast_argument_handles_long_operator_chains():
    types = FakeTypes(d=DURATION)
    literal_sum = " + ".join(["1"] * 1200)
    assert is_acceptable_cast_arg(types, _expr(literal_sum))
    assert not is_acceptable_cast_arg(types, _expr(literal_sum + " + d"))
    assert not is_acceptable_cast_arg(types, _expr("d + " + literal_sum))


# ---------------------------------------------------------------------------
# Unit gate and scanner over hand-built type tables
# ---------------------------------------------------------------------------


def _unit(source: str, imports) -> CompilationUnit:
    return CompilationUnit(
        module_name="m",
        filename="m.py",
        source=source,
        tree=ast.parse(source),
        imports=list(imports),
    )


def test_has_import():
    cu = _unit("x = 1\n", ["os", "datetime"])
    assert has_import(cu, "datetime")
    assert not has_import(cu, "time")
    assert not has_import(_unit("x = 1\n", []), "datetime")
    assert "datetime" in cu and "time" not in cu


def test_scanner_uses_only_the_type_table():
    cu = _unit("x = a * b\ny = a * c\nz = c * c\n", ["datetime"])
    types = FakeTypes(a=DURATION, b=DURATION, c=INT)

    findings = DurationCheck(cu=cu, types=types).check()

    assert [d.line for d in findings] == [1]
    assert findings[0].filename == "m.py"
    assert findings[0].module_name == "m"


def test_scanner_skips_products_with_missing_types():
    cu = _unit("x = a * b\n", ["datetime"])
    assert DurationCheck(cu=cu, types=FakeTypes(a=DURATION)).check() == []


def test_scanner_ignores_non_multiplication_operators():
    cu = _unit("x = a + b\ny = a @ b\nz = a - b\n", ["datetime"])
    types = FakeTypes(a=DURATION, b=DURATION)
    assert DurationCheck(cu=cu, types=types).check() == []
