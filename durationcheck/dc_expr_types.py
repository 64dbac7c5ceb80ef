#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from dc_analysis import AnalysisResult, ClassInfo
from dc_compilation import CompilationUnit
from dc_internal_error import ICELocation, InternalCheckerError
from dc_logger import log_debug
from dc_symbols import TYPE_ALIAS_ANNOTATIONS, ModuleEnv, Symbol, SymbolKind
from dc_types import (
    TIME_MODULE,
    Type,
    BuiltinType,
    NamedType,
    ClassRefType,
    ModuleType,
    FuncType,
    get_builtin_type,
    time_type,
    format_type,
)


# Expression typing for Python sources, limited to what the duration pass needs

_TIME_CLASSES = ("timedelta", "datetime", "date", "time", "timezone", "tzinfo")

_BUILTIN_CLASSES = ("bool", "int", "float", "complex", "str", "bytes", "list", "tuple", "dict", "set")

_DATETIME_FACTORIES = {
    "datetime": ("now", "today", "utcnow", "fromtimestamp", "utcfromtimestamp",
                 "fromisoformat", "fromordinal", "combine", "strptime"),
    "date": ("today", "fromtimestamp", "fromisoformat", "fromordinal"),
    "time": ("fromisoformat",),
}

_INT_FIELDS = {
    "timedelta": ("days", "seconds", "microseconds"),
    "datetime": ("year", "month", "day", "hour", "minute", "second", "microsecond", "fold"),
    "date": ("year", "month", "day"),
    "time": ("hour", "minute", "second", "microsecond", "fold"),
}

# instance method -> result type name ("" for the receiver's own type)
_METHOD_RESULTS = {
    "timedelta": {"total_seconds": "float"},
    "datetime": {
        "date": "date", "time": "time", "timetz": "time", "replace": "", "astimezone": "",
        "timestamp": "float", "utcoffset": "timedelta", "dst": "timedelta",
        "isoformat": "str", "strftime": "str", "ctime": "str",
        "weekday": "int", "isoweekday": "int", "toordinal": "int",
    },
    "date": {
        "replace": "", "isoformat": "str", "strftime": "str", "ctime": "str",
        "weekday": "int", "isoweekday": "int", "toordinal": "int",
    },
    "time": {
        "replace": "", "utcoffset": "timedelta", "dst": "timedelta",
        "isoformat": "str", "strftime": "str",
    },
    "timezone": {"utcoffset": "timedelta", "dst": "timedelta", "tzname": "str"},
}

_NUMERIC = ("bool", "int", "float", "complex")


@dataclass
class _DeferredBody:
    func: ast.AST  # FunctionDef or AsyncFunctionDef
    chain: List[Dict[str, Optional[Type]]]
    class_name: Optional[str]


@dataclass
class ExpressionTypeChecker:
    """Best-effort static typing of the expressions of one compiled unit.

    Implements:
      - Literals, names, attributes, calls, operators, conditionals, walrus
      - Import bindings (through any alias) and `datetime` class members
      - Annotations: builtin names, `datetime` classes, local classes,
        explicit and implicit type aliases, string annotations
      - Sequential (flow-insensitive) typing of unannotated assignments
      - Module-level functions and methods with their annotated results
      - Instance attributes declared in class bodies, by `self.x: T` or by
        typed `self.x = ...` assignments, and `@property` results
      - `datetime` arithmetic (timedelta / datetime / date)

    Function bodies are typed after all module-level statements, so module
    globals are visible in them. Every expression is visited, typed or not.

    Populates `analysis.expr_types[id(expr)]`. Missing entries mean "unknown";
    this checker reports no diagnostics.
    """
    analysis: AnalysisResult

    def __post_init__(self) -> None:
        if self.analysis.cu is None or self.analysis.module_env is None:
            cu = self.analysis.cu
            raise InternalCheckerError(
                "[ICE-0010] ExpressionTypeChecker requires a loaded compilation unit and module env",
                ICELocation(cu.filename if cu is not None else None),
            )

        self.cu: CompilationUnit = self.analysis.cu
        self.env: ModuleEnv = self.analysis.module_env
        self.expr_types = self.analysis.expr_types
        self.func_types = self.analysis.func_types
        self.class_infos = self.analysis.class_infos

        # Cached types
        self.int_type: BuiltinType = get_builtin_type("int")
        self.float_type: BuiltinType = get_builtin_type("float")
        self.bool_type: BuiltinType = get_builtin_type("bool")
        self.str_type: BuiltinType = get_builtin_type("str")
        self.none_type: BuiltinType = get_builtin_type("None")
        self.duration_type: NamedType = time_type("timedelta")
        self.datetime_type: NamedType = time_type("datetime")
        self.date_type: NamedType = time_type("date")

        self._module_scope: Dict[str, Optional[Type]] = {}
        self._local_scopes: List[Dict[str, Optional[Type]]] = []
        self._scope_is_class: List[bool] = []
        self._class_stack: List[str] = []
        self._deferred: List[_DeferredBody] = []
        self._signatures: Dict[int, FuncType] = {}
        self._resolving: Set[int] = set()

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def check(self) -> None:
        """Type the module body, then every function body it defines."""
        for stmt in self.cu.tree.body:
            self._check_stmt(stmt)

        while self._deferred:
            self._check_function_body(self._deferred.pop(0))

        log_debug(
            self.analysis.context,
            f"Typed {len(self.expr_types)} expression(s) in module '{self.cu.module_name}'",
        )

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _push_scope(self, is_class: bool = False) -> None:
        self._local_scopes.append({})
        self._scope_is_class.append(is_class)

    def _pop_scope(self) -> None:
        assert self._local_scopes, "scope stack underflow"
        self._local_scopes.pop()
        self._scope_is_class.pop()

    def _bind_name(self, name: str, typ: Optional[Type]) -> None:
        if self._local_scopes:
            self._local_scopes[-1][name] = typ
        else:
            self._module_scope[name] = typ

    def _find_binding(self, name: str) -> Tuple[bool, Optional[Type]]:
        """Return (bound, type). A bound name may still have an unknown type."""
        for scope in reversed(self._local_scopes):
            if name in scope:
                return True, scope[name]
        if name in self._module_scope:
            return True, self._module_scope[name]
        sym = self.env.lookup(name)
        if sym is not None:
            return True, self._symbol_type(sym)
        return False, None

    def _lookup_name(self, name: str) -> Optional[Type]:
        bound, typ = self._find_binding(name)
        if bound:
            return typ
        if name in _BUILTIN_CLASSES:
            return ClassRefType(get_builtin_type(name))
        return None

    def _in_class_body(self) -> bool:
        return bool(self._scope_is_class) and self._scope_is_class[-1]

    # ------------------------------------------------------------------
    # Symbols, annotations, signatures
    # ------------------------------------------------------------------

    def _symbol_type(self, sym: Symbol) -> Optional[Type]:
        if sym.type is not None:
            return sym.type
        typ: Optional[Type] = None
        if sym.kind is SymbolKind.MODULE:
            typ = ModuleType(sym.target)
        elif sym.kind is SymbolKind.IMPORTED:
            typ = self._import_target_type(sym.target)
        elif sym.kind is SymbolKind.FUNC:
            typ = self._signature(sym.node)
        elif sym.kind is SymbolKind.CLASS:
            typ = ClassRefType(NamedType(self.cu.module_name, sym.name))
        elif sym.kind is SymbolKind.TYPE_ALIAS:
            target = self._resolve_alias(sym.node)
            typ = ClassRefType(target) if target is not None else None
        sym.type = typ
        return typ

    def _import_target_type(self, target: str) -> Optional[Type]:
        module, _, member = target.rpartition(".")
        if module == TIME_MODULE and member in _TIME_CLASSES:
            return ClassRefType(time_type(member))
        # `from a import b` may name a submodule; anything else is unknown
        return None

    def _resolve_alias(self, node: ast.AST) -> Optional[Type]:
        if id(node) in self._resolving:
            return None
        self._resolving.add(id(node))
        try:
            return self._resolve_annotation(node.value)
        finally:
            self._resolving.discard(id(node))

    def _resolve_annotation(self, expr: Optional[ast.expr]) -> Optional[Type]:
        """Instance type denoted by an annotation expression, if known."""
        if expr is None:
            return None
        if isinstance(expr, ast.Constant):
            if expr.value is None:
                return self.none_type
            if isinstance(expr.value, str):
                try:
                    parsed = ast.parse(expr.value.strip(), mode="eval")
                except SyntaxError:
                    return None
                return self._resolve_annotation(parsed.body)
            return None
        ref = self._static_type(expr)
        if isinstance(ref, ClassRefType):
            return ref.target
        return None

    def _static_type(self, expr: ast.expr) -> Optional[Type]:
        """Type of a dotted name, computed without recording anything."""
        if isinstance(expr, ast.Name):
            return self._lookup_name(expr.id)
        if isinstance(expr, ast.Attribute):
            return self._attribute_type(self._static_type(expr.value), expr.attr)
        return None

    def _signature(self, func: ast.AST) -> FuncType:
        key = id(func)
        cached = self._signatures.get(key)
        if cached is not None:
            return cached
        args = func.args
        params = tuple(
            self._resolve_annotation(a.annotation)
            for a in args.posonlyargs + args.args + args.kwonlyargs
        )
        sig = FuncType(params=params, result=self._resolve_annotation(func.returns))
        self._signatures[key] = sig
        return sig

    @staticmethod
    def _decorator_names(func: ast.AST) -> List[str]:
        names = []
        for dec in func.decorator_list:
            if isinstance(dec, ast.Call):
                dec = dec.func
            if isinstance(dec, ast.Name):
                names.append(dec.id)
            elif isinstance(dec, ast.Attribute):
                names.append(dec.attr)
        return names

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _check_stmts(self, stmts: List[ast.stmt]) -> None:
        for stmt in stmts:
            self._check_stmt(stmt)

    def _check_stmt(self, stmt: ast.stmt) -> None:
        if isinstance(stmt, ast.Import):
            for alias in stmt.names:
                if alias.asname:
                    self._bind_name(alias.asname, ModuleType(alias.name))
                else:
                    top = alias.name.split(".")[0]
                    self._bind_name(top, ModuleType(top))
            return None

        if isinstance(stmt, ast.ImportFrom):
            for alias in stmt.names:
                if alias.name == "*":
                    continue
                typ = None
                if stmt.level == 0 and stmt.module:
                    typ = self._import_target_type(f"{stmt.module}.{alias.name}")
                self._bind_name(alias.asname or alias.name, typ)
            return None

        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
            self._check_function_def(stmt)
            return None

        if isinstance(stmt, ast.ClassDef):
            self._check_class_def(stmt)
            return None

        if isinstance(stmt, ast.Assign):
            value_ty = self._infer_expr(stmt.value)
            for target in stmt.targets:
                self._bind_target(target, value_ty, stmt.value)
            return None

        if isinstance(stmt, ast.AnnAssign):
            self._check_ann_assign(stmt)
            return None

        if isinstance(stmt, ast.AugAssign):
            target_ty = self._infer_expr(stmt.target, load=True)
            value_ty = self._infer_expr(stmt.value)
            result_ty = self._binop_type(stmt.op, target_ty, value_ty)
            if isinstance(stmt.target, ast.Name):
                self._bind_name(stmt.target.id, result_ty)
            return None

        if _is_type_alias_stmt(stmt):
            self._infer_expr(stmt.value)
            target = self._resolve_annotation(stmt.value)
            self._bind_name(stmt.name.id, ClassRefType(target) if target is not None else None)
            return None

        if isinstance(stmt, (ast.For, ast.AsyncFor)):
            self._infer_expr(stmt.iter)
            self._bind_target(stmt.target, None)
            self._check_stmts(stmt.body)
            self._check_stmts(stmt.orelse)
            return None

        if isinstance(stmt, (ast.With, ast.AsyncWith)):
            for item in stmt.items:
                self._infer_expr(item.context_expr)
                if item.optional_vars is not None:
                    self._bind_target(item.optional_vars, None)
            self._check_stmts(stmt.body)
            return None

        # if / while / try / match / return / raise / assert / expression statements ...
        self._visit_children(stmt)
        return None

    def _visit_children(self, node: ast.AST) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.expr):
                self._infer_expr(child)
            elif isinstance(child, ast.stmt):
                self._check_stmt(child)
            elif isinstance(child, ast.ExceptHandler):
                if child.type is not None:
                    self._infer_expr(child.type)
                if child.name:
                    self._bind_name(child.name, None)
                self._check_stmts(child.body)
            else:
                # match cases, patterns, keywords ...
                self._visit_children(child)

    def _check_ann_assign(self, stmt: ast.AnnAssign) -> None:
        self._infer_expr(stmt.annotation)
        value_ty = self._infer_expr(stmt.value) if stmt.value is not None else None

        target = stmt.target
        if isinstance(target, ast.Name):
            if ast.unparse(stmt.annotation) in TYPE_ALIAS_ANNOTATIONS:
                aliased = self._resolve_annotation(stmt.value)
                self._bind_name(target.id, ClassRefType(aliased) if aliased is not None else None)
                return None
            declared = self._resolve_annotation(stmt.annotation)
            typ = declared if declared is not None else value_ty
            if self._in_class_body() and self._class_stack:
                info = self.class_infos.get(self._class_stack[-1])
                if info is not None and typ is not None:
                    info.attrs[target.id] = typ
            self._bind_name(target.id, typ)
            return None

        declared = self._resolve_annotation(stmt.annotation)
        self._bind_target(target, declared if declared is not None else value_ty, stmt.value)
        return None

    def _bind_target(self, target: ast.expr, typ: Optional[Type], value: Optional[ast.expr] = None) -> None:
        if isinstance(target, ast.Name):
            self._bind_name(target.id, typ)
            if self._in_class_body() and self._class_stack and typ is not None:
                info = self.class_infos.get(self._class_stack[-1])
                if info is not None:
                    info.attrs.setdefault(target.id, typ)
        elif isinstance(target, (ast.Tuple, ast.List)):
            # `a, b = x, y` pairs up; any other unpacking is unknown
            pairs = isinstance(value, (ast.Tuple, ast.List)) and len(value.elts) == len(target.elts) \
                and not any(isinstance(e, ast.Starred) for e in target.elts)
            for i, elt in enumerate(target.elts):
                elt_ty = self.expr_types.get(id(value.elts[i])) if pairs else None
                self._bind_target(elt, elt_ty, value.elts[i] if pairs else None)
        elif isinstance(target, ast.Starred):
            self._bind_target(target.value, None)
        elif isinstance(target, ast.Attribute):
            owner = self._infer_expr(target.value)
            self._record_instance_attr(owner, target.attr, typ)
        else:
            # subscripts: type the container and the index
            self._visit_children(target)

    def _record_instance_attr(self, owner: Optional[Type], attr: str, typ: Optional[Type]) -> None:
        if typ is None or not isinstance(owner, NamedType) or owner.module != self.cu.module_name:
            return
        info = self.class_infos.get(owner.name)
        if info is not None:
            info.attrs.setdefault(attr, typ)

    def _check_function_def(self, func: ast.AST) -> None:
        # decorators, defaults and annotations run in the enclosing scope
        for dec in func.decorator_list:
            self._infer_expr(dec)
        args = func.args
        for default in args.defaults + [d for d in args.kw_defaults if d is not None]:
            self._infer_expr(default)
        for a in args.posonlyargs + args.args + args.kwonlyargs + [args.vararg, args.kwarg]:
            if a is not None and a.annotation is not None:
                self._infer_expr(a.annotation)
        if func.returns is not None:
            self._infer_expr(func.returns)

        sig = self._signature(func)
        self._bind_name(func.name, sig)

        if self._in_class_body() and self._class_stack:
            info = self.class_infos.get(self._class_stack[-1])
            if info is not None:
                decorators = self._decorator_names(func)
                if "property" in decorators or "cached_property" in decorators:
                    if sig.result is not None:
                        info.attrs[func.name] = sig.result
                else:
                    info.methods[func.name] = sig
        elif not self._local_scopes:
            self.func_types[func.name] = sig

        chain = [s for s, is_cls in zip(self._local_scopes, self._scope_is_class) if not is_cls]
        class_name = self._class_stack[-1] if self._in_class_body() and self._class_stack else None
        self._deferred.append(_DeferredBody(func, chain, class_name))

    def _check_class_def(self, cls: ast.ClassDef) -> None:
        for dec in cls.decorator_list:
            self._infer_expr(dec)
        for base in cls.bases:
            self._infer_expr(base)
        for kw in cls.keywords:
            self._infer_expr(kw.value)

        self.class_infos.setdefault(cls.name, ClassInfo(name=cls.name))
        self._bind_name(cls.name, ClassRefType(NamedType(self.cu.module_name, cls.name)))

        self._push_scope(is_class=True)
        self._class_stack.append(cls.name)
        try:
            self._check_stmts(cls.body)
        finally:
            self._class_stack.pop()
            self._pop_scope()

    def _check_function_body(self, item: _DeferredBody) -> None:
        func = item.func
        saved = (self._local_scopes, self._scope_is_class)
        self._local_scopes = list(item.chain)
        self._scope_is_class = [False] * len(self._local_scopes)
        try:
            self._local_scopes.append(self._make_param_scope(func, item.class_name))
            self._scope_is_class.append(False)
            self._check_stmts(func.body)
        finally:
            self._local_scopes, self._scope_is_class = saved

    def _make_param_scope(self, func: ast.AST, class_name: Optional[str]) -> Dict[str, Optional[Type]]:
        scope: Dict[str, Optional[Type]] = {}
        args = func.args
        positional = args.posonlyargs + args.args
        for a in positional + args.kwonlyargs:
            scope[a.arg] = self._resolve_annotation(a.annotation)
        for a in (args.vararg, args.kwarg):
            if a is not None:
                scope[a.arg] = None

        decorators = self._decorator_names(func)
        if class_name is not None and positional and positional[0].annotation is None \
                and "staticmethod" not in decorators:
            instance = NamedType(self.cu.module_name, class_name)
            if "classmethod" in decorators:
                scope[positional[0].arg] = ClassRefType(instance)
            else:
                scope[positional[0].arg] = instance
        return scope

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _infer_expr(self, expr: Optional[ast.expr], load: bool = False) -> Optional[Type]:
        if expr is None:
            return None
        typ = self._infer_uncached(expr, load)
        if typ is not None:
            self.expr_types[id(expr)] = typ
        return typ

    def _infer_uncached(self, expr: ast.expr, load: bool) -> Optional[Type]:
        if isinstance(expr, ast.Constant):
            return self._constant_type(expr.value)

        if isinstance(expr, ast.Name):
            if isinstance(expr.ctx, ast.Load) or load:
                return self._lookup_name(expr.id)
            return None

        if isinstance(expr, ast.Attribute):
            return self._infer_attribute_chain(expr)

        if isinstance(expr, ast.BinOp):
            return self._infer_binop_chain(expr)

        if isinstance(expr, ast.UnaryOp):
            operand = self._infer_expr(expr.operand)
            return self._unaryop_type(expr.op, operand)

        if isinstance(expr, ast.BoolOp):
            types = [self._infer_expr(v) for v in expr.values]
            return _common_type(types)

        if isinstance(expr, ast.Compare):
            self._infer_expr(expr.left)
            for comparator in expr.comparators:
                self._infer_expr(comparator)
            return self.bool_type

        if isinstance(expr, ast.IfExp):
            self._infer_expr(expr.test)
            return _common_type([self._infer_expr(expr.body), self._infer_expr(expr.orelse)])

        if isinstance(expr, ast.Call):
            return self._infer_call(expr)

        if isinstance(expr, ast.NamedExpr):
            typ = self._infer_expr(expr.value)
            self._bind_name(expr.target.id, typ)
            return typ

        if isinstance(expr, ast.JoinedStr):
            self._visit_children(expr)
            return self.str_type

        if isinstance(expr, ast.Lambda):
            args = expr.args
            for default in args.defaults + [d for d in args.kw_defaults if d is not None]:
                self._infer_expr(default)
            self._push_scope()
            try:
                for a in args.posonlyargs + args.args + args.kwonlyargs + [args.vararg, args.kwarg]:
                    if a is not None:
                        self._bind_name(a.arg, None)
                self._infer_expr(expr.body)
            finally:
                self._pop_scope()
            return None

        if isinstance(expr, (ast.ListComp, ast.SetComp, ast.GeneratorExp, ast.DictComp)):
            self._push_scope()
            try:
                for gen in expr.generators:
                    self._infer_expr(gen.iter)
                    self._bind_target(gen.target, None)
                    for cond in gen.ifs:
                        self._infer_expr(cond)
                if isinstance(expr, ast.DictComp):
                    self._infer_expr(expr.key)
                    self._infer_expr(expr.value)
                else:
                    self._infer_expr(expr.elt)
            finally:
                self._pop_scope()
            return {
                ast.ListComp: get_builtin_type("list"),
                ast.SetComp: get_builtin_type("set"),
                ast.DictComp: get_builtin_type("dict"),
            }.get(type(expr))

        if isinstance(expr, (ast.List, ast.Tuple, ast.Set, ast.Dict)):
            self._visit_children(expr)
            return get_builtin_type(type(expr).__name__.lower())

        # subscripts, slices, starred, await, yield, formatted values ...
        self._visit_children(expr)
        return None

    def _infer_binop_chain(self, expr: ast.BinOp) -> Optional[Type]:
        """
        Type `a + b + c + ...` by folding over its left spine.

        Long operator chains parse into left-nested BinOps of any depth, so
        the spine is walked in a loop. Operands are still typed left to right.
        """
        spine: List[ast.BinOp] = []
        node: ast.expr = expr
        while isinstance(node, ast.BinOp):
            spine.append(node)
            node = node.left

        typ = self._infer_expr(node)
        for binop in reversed(spine):
            right = self._infer_expr(binop.right)
            typ = self._binop_type(binop.op, typ, right)
            if binop is not expr and typ is not None:
                self.expr_types[id(binop)] = typ
        return typ

    def _infer_attribute_chain(self, expr: ast.Attribute) -> Optional[Type]:
        spine: List[ast.Attribute] = []
        node: ast.expr = expr
        while isinstance(node, ast.Attribute):
            spine.append(node)
            node = node.value

        typ = self._infer_expr(node)
        for attribute in reversed(spine):
            typ = self._attribute_type(typ, attribute.attr)
            if attribute is not expr and typ is not None:
                self.expr_types[id(attribute)] = typ
        return typ

    def _constant_type(self, value: object) -> Optional[Type]:
        if value is None:
            return self.none_type
        if value is Ellipsis:
            return None
        # bool before int: bool is a subclass of int
        for py_type in (bool, int, float, complex, str, bytes):
            if isinstance(value, py_type):
                return get_builtin_type(py_type.__name__)
        return None

    def _attribute_type(self, owner: Optional[Type], attr: str) -> Optional[Type]:
        if owner is None:
            return None

        if isinstance(owner, ModuleType):
            if owner.name == TIME_MODULE:
                if attr in _TIME_CLASSES:
                    return ClassRefType(time_type(attr))
                if attr in ("MINYEAR", "MAXYEAR"):
                    return self.int_type
                if attr == "UTC":
                    return time_type("timezone")
            return None

        if isinstance(owner, ClassRefType):
            target = owner.target
            if not isinstance(target, NamedType):
                return None
            if target.module == TIME_MODULE:
                if attr in ("min", "max"):
                    return target
                if attr == "resolution":
                    return self.duration_type
                if target.name == "timezone" and attr == "utc":
                    return target
                if attr in _DATETIME_FACTORIES.get(target.name, ()):
                    return FuncType(params=(), result=target)
                return None
            return self._local_member_type(target, attr)

        if isinstance(owner, NamedType):
            if owner.module == TIME_MODULE:
                if attr in _INT_FIELDS.get(owner.name, ()):
                    return self.int_type
                result = _METHOD_RESULTS.get(owner.name, {}).get(attr)
                if result is None:
                    return None
                if result == "":
                    result_ty: Type = owner
                elif result in _TIME_CLASSES:
                    result_ty = time_type(result)
                else:
                    result_ty = get_builtin_type(result)
                return FuncType(params=(), result=result_ty)
            return self._local_member_type(owner, attr)

        return None

    def _local_member_type(self, owner: NamedType, attr: str) -> Optional[Type]:
        if owner.module != self.cu.module_name:
            return None
        info = self.class_infos.get(owner.name)
        if info is None:
            return None
        if attr in info.attrs:
            return info.attrs[attr]
        return info.methods.get(attr)

    def _infer_call(self, call: ast.Call) -> Optional[Type]:
        func_ty = self._infer_expr(call.func)
        arg_types = [self._infer_expr(arg) for arg in call.args]
        for kw in call.keywords:
            self._infer_expr(kw.value)

        if isinstance(func_ty, ClassRefType):
            return func_ty.target
        if isinstance(func_ty, FuncType):
            return func_ty.result

        if isinstance(call.func, ast.Name) and not self._find_binding(call.func.id)[0]:
            return self._builtin_call_type(call.func.id, arg_types)
        return None

    def _builtin_call_type(self, name: str, arg_types: List[Optional[Type]]) -> Optional[Type]:
        if name in ("len", "hash", "ord"):
            return self.int_type
        if name in ("isinstance", "issubclass", "callable", "hasattr"):
            return self.bool_type
        if name in ("repr", "ascii", "chr", "format"):
            return self.str_type
        if name == "abs" and len(arg_types) == 1:
            arg = arg_types[0]
            if arg == self.duration_type or _is_numeric(arg):
                return self.int_type if arg == self.bool_type else arg
            return None
        if name == "round":
            if len(arg_types) == 1 and _is_numeric(arg_types[0]):
                return self.int_type
            if len(arg_types) == 2:
                return arg_types[0]
            return None
        if name in ("min", "max") and len(arg_types) > 1:
            return _common_type(arg_types)
        return None

    def _unaryop_type(self, op: ast.unaryop, operand: Optional[Type]) -> Optional[Type]:
        if isinstance(op, ast.Not):
            return self.bool_type
        if operand is None:
            return None
        if isinstance(op, (ast.USub, ast.UAdd)):
            if operand == self.duration_type:
                return operand
            if _is_numeric(operand):
                return self.int_type if operand == self.bool_type else operand
            return None
        if isinstance(op, ast.Invert) and operand in (self.int_type, self.bool_type):
            return self.int_type
        return None

    def _binop_type(self, op: ast.operator, left: Optional[Type], right: Optional[Type]) -> Optional[Type]:
        if left is None or right is None:
            return None

        dur = self.duration_type
        moments = (self.datetime_type, self.date_type)

        if left == dur or right == dur or left in moments or right in moments:
            return self._time_binop_type(op, left, right)

        if _is_numeric(left) and _is_numeric(right):
            return self._numeric_binop_type(op, left, right)

        # str/bytes concatenation, repetition and %-formatting
        for seq in (self.str_type, get_builtin_type("bytes")):
            if isinstance(op, ast.Add) and left == seq and right == seq:
                return seq
            if isinstance(op, ast.Mult) and {left, right} == {seq, self.int_type}:
                return seq
            if isinstance(op, ast.Mod) and left == seq:
                return seq
        return None

    def _time_binop_type(self, op: ast.operator, left: Type, right: Type) -> Optional[Type]:
        dur = self.duration_type
        moments = (self.datetime_type, self.date_type)
        scalar = (self.int_type, self.float_type, self.bool_type)

        if isinstance(op, ast.Add):
            if left == dur and right == dur:
                return dur
            if left in moments and right == dur:
                return left
            if left == dur and right in moments:
                return right
        elif isinstance(op, ast.Sub):
            if left == dur and right == dur:
                return dur
            if left in moments and right == dur:
                return left
            if left in moments and left == right:
                return dur
        elif isinstance(op, ast.Mult):
            # duration * duration keeps its operands' type so that enclosing
            # products are still examined
            if left == dur and right == dur:
                return dur
            if (left == dur and right in scalar) or (left in scalar and right == dur):
                return dur
        elif isinstance(op, ast.Div):
            if left == dur and right == dur:
                return self.float_type
            if left == dur and right in scalar:
                return dur
        elif isinstance(op, ast.FloorDiv):
            if left == dur and right == dur:
                return self.int_type
            if left == dur and right in (self.int_type, self.bool_type):
                return dur
        elif isinstance(op, ast.Mod):
            if left == dur and right == dur:
                return dur
        return None

    def _numeric_binop_type(self, op: ast.operator, left: Type, right: Type) -> Optional[Type]:
        names = {left.name, right.name}
        if isinstance(op, (ast.BitAnd, ast.BitOr, ast.BitXor)):
            if names == {"bool"}:
                return self.bool_type
            if names <= {"bool", "int"}:
                return self.int_type
            return None
        if isinstance(op, (ast.LShift, ast.RShift)):
            return self.int_type if names <= {"bool", "int"} else None
        if isinstance(op, ast.MatMult):
            return None
        if "complex" in names:
            return get_builtin_type("complex")
        if isinstance(op, ast.Div) or "float" in names:
            return self.float_type
        return self.int_type


def _is_type_alias_stmt(stmt: ast.stmt) -> bool:
    alias_cls = getattr(ast, "TypeAlias", None)
    return alias_cls is not None and isinstance(stmt, alias_cls)


def _is_numeric(t: Optional[Type]) -> bool:
    return isinstance(t, BuiltinType) and t.name in _NUMERIC


def _common_type(types: List[Optional[Type]]) -> Optional[Type]:
    if not types or any(t is None for t in types):
        return None
    first = types[0]
    return first if all(t == first for t in types) else None


def describe_types(analysis: AnalysisResult, node: ast.expr) -> str:
    """`format_type` of a node's resolved type, for dumps."""
    return format_type(analysis.type_of(node))
