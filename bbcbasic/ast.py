"""Abstract Syntax Tree (AST) definitions for BBC BASIC.

The classes below form two closed families: expressions and statements.
Every consumer (the interpreter, the listing printer and the JSON codec)
dispatches on them with `isinstance`. Nodes are frozen; sequences are
stored as tuples so a parsed line can be shared safely between the
program store and the interpreter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


###############################################################################
# Expressions
###############################################################################

@dataclass(frozen=True)
class Literal(Node):
    value: Any
    literal_type: str  # 'Integer', 'Real' or 'String'


@dataclass(frozen=True)
class Variable(Node):
    name: str


@dataclass(frozen=True)
class Call(Node):
    """`name(args)`: an array element read or a built-in function call.

    Which one is decided when the expression is evaluated.
    """
    name: str
    args: Tuple[Node, ...]


@dataclass(frozen=True)
class FnCall(Node):
    name: str
    args: Tuple[Node, ...]


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node


###############################################################################
# Statements
###############################################################################

@dataclass(frozen=True)
class Assign(Node):
    name: str
    expr: Node


@dataclass(frozen=True)
class ArrayAssign(Node):
    name: str
    indices: Tuple[Node, ...]
    expr: Node


@dataclass(frozen=True)
class PrintItem(Node):
    # kind: 'value', 'tab', 'spc', 'zone' (a comma) or 'join' (a semicolon)
    kind: str
    expr: Optional[Node] = None


@dataclass(frozen=True)
class Print(Node):
    items: Tuple[PrintItem, ...]


@dataclass(frozen=True)
class Input(Node):
    prompt: Optional[str]
    show_mark: bool  # print '?' after the prompt
    targets: Tuple[Node, ...]  # Variable or Call (array element)


@dataclass(frozen=True)
class If(Node):
    condition: Node
    then_branch: Tuple[Node, ...]
    else_branch: Tuple[Node, ...]


@dataclass(frozen=True)
class For(Node):
    var: str
    start: Node
    limit: Node
    step: Optional[Node]


@dataclass(frozen=True)
class Next(Node):
    vars: Tuple[str, ...]


@dataclass(frozen=True)
class Repeat(Node):
    pass


@dataclass(frozen=True)
class Until(Node):
    condition: Node


@dataclass(frozen=True)
class While(Node):
    condition: Node


@dataclass(frozen=True)
class EndWhile(Node):
    pass


@dataclass(frozen=True)
class Goto(Node):
    line: int


@dataclass(frozen=True)
class Gosub(Node):
    line: int


@dataclass(frozen=True)
class Return(Node):
    pass


@dataclass(frozen=True)
class OnGoto(Node):
    selector: Node
    targets: Tuple[int, ...]
    gosub: bool = False


@dataclass(frozen=True)
class DefProc(Node):
    name: str
    params: Tuple[str, ...]


@dataclass(frozen=True)
class DefFn(Node):
    name: str
    params: Tuple[str, ...]
    expr: Node


@dataclass(frozen=True)
class ProcCall(Node):
    name: str
    args: Tuple[Node, ...]


@dataclass(frozen=True)
class EndProc(Node):
    pass


@dataclass(frozen=True)
class Local(Node):
    names: Tuple[str, ...]


@dataclass(frozen=True)
class DimSpec(Node):
    name: str
    bounds: Tuple[Node, ...]


@dataclass(frozen=True)
class Dim(Node):
    arrays: Tuple[DimSpec, ...]


@dataclass(frozen=True)
class DataItem(Node):
    """One DATA value together with the text it was written as."""
    value: Any
    literal_type: str
    text: str


@dataclass(frozen=True)
class Data(Node):
    items: Tuple[DataItem, ...]


@dataclass(frozen=True)
class Read(Node):
    targets: Tuple[Node, ...]


@dataclass(frozen=True)
class Restore(Node):
    line: Optional[int] = None


@dataclass(frozen=True)
class OnError(Node):
    line: int


@dataclass(frozen=True)
class OnErrorOff(Node):
    pass


@dataclass(frozen=True)
class End(Node):
    stop: bool = False


@dataclass(frozen=True)
class Cls(Node):
    pass


@dataclass(frozen=True)
class Report(Node):
    pass


@dataclass(frozen=True)
class Raise(Node):
    """ERROR code, message: raise a fault from the program itself."""
    code: Node
    message: Node


###############################################################################
# Whole programs (used by the JSON codec and the listing printer)
###############################################################################

@dataclass(frozen=True)
class ProgramLine(Node):
    number: int
    statements: Tuple[Node, ...]


@dataclass(frozen=True)
class Program(Node):
    lines: Tuple[ProgramLine, ...]
