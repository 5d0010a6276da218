"""JSON serialization/deserialization for the BBC BASIC AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node becomes a dict with a
"type" key naming its class plus one key per field; tuples become lists.
Only the node classes listed in `NODE_TYPES` are accepted.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict

from .ast import (
    Node, Literal, Variable, Call, FnCall, BinaryOp, UnaryOp,
    Assign, ArrayAssign, PrintItem, Print, Input, If, For, Next, Repeat,
    Until, While, EndWhile, Goto, Gosub, Return, OnGoto, DefProc, DefFn,
    ProcCall, EndProc, Local, DimSpec, Dim, DataItem, Data, Read, Restore,
    OnError, OnErrorOff, End, Cls, Report, Raise, ProgramLine, Program,
)


NODE_TYPES: Dict[str, type] = {cls.__name__: cls for cls in (
    Literal, Variable, Call, FnCall, BinaryOp, UnaryOp,
    Assign, ArrayAssign, PrintItem, Print, Input, If, For, Next, Repeat,
    Until, While, EndWhile, Goto, Gosub, Return, OnGoto, DefProc, DefFn,
    ProcCall, EndProc, Local, DimSpec, Dim, DataItem, Data, Read, Restore,
    OnError, OnErrorOff, End, Cls, Report, Raise, ProgramLine, Program,
)}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, int, float, str)):
        return node
    if isinstance(node, (tuple, list)):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Node):
        name = type(node).__name__
        if NODE_TYPES.get(name) is not type(node):
            raise ValueError(f"ast_to_obj: unsupported node type {name}")
        obj = {"type": name}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise ValueError(f"ast_to_obj: cannot serialize {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, list):
        return tuple(ast_from_obj(o) for o in obj)
    if isinstance(obj, dict):
        cls = NODE_TYPES.get(obj.get("type"))
        if cls is None:
            raise ValueError(f"ast_from_obj: unknown node type {obj.get('type')!r}")
        kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj}
        return cls(**kwargs)
    raise ValueError(f"ast_from_obj: unexpected value {obj!r}")
