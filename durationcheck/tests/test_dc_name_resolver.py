#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from textwrap import dedent

from conftest import has_code
from dc_driver import DurationCheckDriver
from dc_name_resolver import NameResolver
from dc_symbols import SymbolKind


def _resolve(src: str):
    cu = DurationCheckDriver().parse_source(dedent(src), filename="main.py", module_name="main")
    resolver = NameResolver(cu)
    env = resolver.resolve()
    return env, resolver.diagnostics


def test_import_bindings():
    env, diags = _resolve(
        """
        import datetime
        import os.path
        import xml.etree as etree
        from datetime import timedelta as td
        from collections import *
        from . import sibling
        from .pkg import thing
        """
    )

    assert diags == []
    assert env.locals["datetime"].kind is SymbolKind.MODULE
    assert env.locals["datetime"].target == "datetime"
    assert env.locals["os"].target == "os"
    assert env.locals["etree"].target == "xml.etree"
    assert env.locals["td"].kind is SymbolKind.IMPORTED
    assert env.locals["td"].target == "datetime.timedelta"
    assert "sibling" not in env.locals
    assert "thing" not in env.locals
    assert "*" not in env.locals


def test_definitions():
    env, _ = _resolve(
        """
        from typing import TypeAlias

        def f():
            import json

        async def g():
            pass

        class C:
            def method(self):
                pass

        Span: TypeAlias = int
        plain = 3
        """
    )

    assert env.lookup("f").kind is SymbolKind.FUNC
    assert env.lookup("g").kind is SymbolKind.FUNC
    assert env.lookup("C").kind is SymbolKind.CLASS
    assert env.lookup("Span").kind is SymbolKind.TYPE_ALIAS
    # only module-level bindings
    assert env.lookup("json") is None
    assert env.lookup("method") is None
    assert env.lookup("plain") is None


def test_conditional_and_guarded_imports_count_as_module_level():
    env, _ = _resolve(
        """
        from typing import TYPE_CHECKING

        if TYPE_CHECKING:
            from datetime import timedelta
        else:
            timedelta = None

        try:
            import ujson as json
        except ImportError:
            import json

        with suppress(ImportError):
            import yaml
        """
    )

    assert env.lookup("timedelta").target == "datetime.timedelta"
    # the fallback import is the later binding
    assert env.lookup("json").target == "json"
    assert env.lookup("yaml").kind is SymbolKind.MODULE


def test_duplicate_definitions_keep_the_last():
    env, diags = _resolve(
        """
        def f():
            pass

        def f(x):
            pass
        """
    )
    assert diags == []
    assert len(env.lookup("f").node.args.args) == 1


def test_import_rebinding_a_definition_warns():
    env, diags = _resolve(
        """
        def timedelta(n):
            return n

        from datetime import timedelta
        """
    )

    assert len(diags) == 1
    diag = diags[0]
    assert diag.kind == "warning"
    assert has_code(diags, "RES-0010")
    assert "'datetime.timedelta' rebinds func 'timedelta' defined at line 2" in diag.message
    assert diag.line == 5
    assert env.lookup("timedelta").kind is SymbolKind.IMPORTED


def test_definition_after_import_does_not_warn():
    _, diags = _resolve(
        """
        import datetime

        class datetime:
            pass
        """
    )
    assert diags == []


def test_resolver_warnings_reach_the_analysis_result(analyze_source):
    result = analyze_source(
        """
        class Span:
            pass

        import Span
        """
    )
    assert has_code(result.diagnostics, "RES-0010")
    assert result.has_warnings()
    assert not result.has_errors()
