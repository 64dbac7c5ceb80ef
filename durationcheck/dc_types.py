#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Static types inferred by the front end. Only the few types the duration
# pass and its helpers need are modelled; everything else is "unknown" (None).

# The time-handling module and its duration type. Type identity is decided by
# the canonical qualified name only, so every alias of the class resolves here.
TIME_MODULE = "datetime"
DURATION_CTOR = "timedelta"
DURATION_TYPE_NAME = f"{TIME_MODULE}.{DURATION_CTOR}"


class Type:
    """Marker base of the frozen type dataclasses below."""


@dataclass(frozen=True)
class BuiltinType(Type):
    name: str  # "int", "str", ...


@dataclass(frozen=True)
class NamedType(Type):
    """An instance of a class defined in `module`."""
    module: str
    name: str


@dataclass(frozen=True)
class ClassRefType(Type):
    """The class object itself, e.g. the expression `datetime.timedelta`."""
    target: Type


@dataclass(frozen=True)
class ModuleType(Type):
    name: str


@dataclass(frozen=True)
class FuncType(Type):
    params: Tuple[Optional[Type], ...]
    result: Optional[Type]


_builtins: Dict[str, BuiltinType] = {}


def get_builtin_type(name: str) -> BuiltinType:
    """The shared BuiltinType instance for `name`."""
    return _builtins.setdefault(name, BuiltinType(name))


def time_type(name: str) -> NamedType:
    return NamedType(TIME_MODULE, name)


def qualified_name(t: Optional[Type]) -> Optional[str]:
    """Canonical fully-qualified name of a type, or None if it has none."""
    if isinstance(t, BuiltinType):
        return f"builtins.{t.name}"
    if isinstance(t, NamedType):
        return f"{t.module}.{t.name}"
    return None


def is_duration(t: Optional[Type]) -> bool:
    """True iff `t` is the duration type."""
    return qualified_name(t) == DURATION_TYPE_NAME


def format_type(t: Optional[Type]) -> str:
    """Readable form of a type for dumps and debug logs."""
    if t is None:
        return "<none>"
    if isinstance(t, BuiltinType):
        return t.name
    if isinstance(t, NamedType):
        return qualified_name(t)
    if isinstance(t, ClassRefType):
        return f"type[{format_type(t.target)}]"
    if isinstance(t, ModuleType):
        return f"module '{t.name}'"
    if isinstance(t, FuncType):
        params = ", ".join(format_type(p) for p in t.params)
        return f"({params}) -> {format_type(t.result)}"
    return repr(t)
