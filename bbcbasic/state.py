"""Runtime state owned by one interpreter run.

Everything a running program can change lives in `RuntimeState`: the
variable store, the PROC/FN tables, the DATA cursor, the four control
stacks and the error-handler slot. The interpreter holds exactly one of
these and passes nothing else around, so recursion in FN or PROC calls
is plain nesting over the same object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .ast import DataItem, Node
from .environment import Environment
from .errors import (
    RangeFault, StackFault,
    ERR_NO_ROOM, ERR_NO_SUCH_LINE, ERR_OUT_OF_DATA, ERR_TOO_MANY_FORS,
    ERR_TOO_MANY_GOSUBS, ERR_TOO_MANY_REPEATS,
)
from .types import ErrorInfo


@dataclass(frozen=True, order=True)
class Position:
    """A statement address: program line plus index into its statement list."""
    line: int
    index: int


@dataclass
class ReturnFrame:
    kind: str  # 'GOSUB' or 'PROC'
    resume: Position
    scope_depth: int = 0  # LOCAL scopes open when a PROC was entered


@dataclass
class ForFrame:
    var: str
    limit: Any
    step: Any
    resume: Position
    integer: bool = False  # counter kept as an Integer under a sigil-less name


@dataclass
class RepeatFrame:
    resume: Position


@dataclass
class WhileFrame:
    position: Position  # the WHILE statement itself
    resume: Position


@dataclass
class ProcDef:
    name: str
    params: Tuple[str, ...]
    body: Position


@dataclass
class FnDef:
    name: str
    params: Tuple[str, ...]
    expr: Node
    line: int


class DataCursor:
    """Read position over every DATA item in the program, in line order."""

    def __init__(self):
        self.items: List[DataItem] = []
        self.line_offsets: List[Tuple[int, int]] = []
        self.position = 0

    def clear(self):
        self.items.clear()
        self.line_offsets.clear()
        self.position = 0

    def add_line(self, line: int, items: Tuple[DataItem, ...]):
        self.line_offsets.append((line, len(self.items)))
        self.items.extend(items)

    def read(self) -> DataItem:
        if self.position >= len(self.items):
            raise RangeFault('Out of DATA', code=ERR_OUT_OF_DATA)
        item = self.items[self.position]
        self.position += 1
        return item

    def restore(self, line: Optional[int] = None):
        """Rewind to the first item, or to the first DATA at or after `line`."""
        if line is None:
            self.position = 0
            return
        for data_line, offset in self.line_offsets:
            if data_line >= line:
                self.position = offset
                return
        raise RangeFault(f'No DATA at or after line {line}', code=ERR_NO_SUCH_LINE)


class ControlStacks:
    """The return, FOR, REPEAT and WHILE stacks, each bounded by `max_depth`."""

    def __init__(self, max_depth: int = 256):
        self.max_depth = max_depth
        self.returns: List[ReturnFrame] = []
        self.fors: List[ForFrame] = []
        self.repeats: List[RepeatFrame] = []
        self.whiles: List[WhileFrame] = []

    def clear(self):
        self.returns.clear()
        self.fors.clear()
        self.repeats.clear()
        self.whiles.clear()

    def _push(self, stack: list, frame: Any, message: str, code: int):
        if len(stack) >= self.max_depth:
            raise StackFault(message, code=code)
        stack.append(frame)

    def push_return(self, frame: ReturnFrame):
        self._push(self.returns, frame, 'Too many GOSUBs', ERR_TOO_MANY_GOSUBS)

    def push_for(self, frame: ForFrame):
        self._push(self.fors, frame, 'Too many FORs', ERR_TOO_MANY_FORS)

    def push_repeat(self, frame: RepeatFrame):
        self._push(self.repeats, frame, 'Too many REPEATs', ERR_TOO_MANY_REPEATS)

    def push_while(self, frame: WhileFrame):
        self._push(self.whiles, frame, 'No room for WHILE', ERR_NO_ROOM)

    def find_for(self, var: str) -> Optional[int]:
        """Index of the innermost FOR frame for `var`, or None."""
        for index in range(len(self.fors) - 1, -1, -1):
            if self.fors[index].var == var:
                return index
        return None

    def describe(self) -> str:
        return (f"returns={[f.kind for f in self.returns]} "
                f"fors={[f.var for f in self.fors]} "
                f"repeats={len(self.repeats)} whiles={len(self.whiles)}")


@dataclass
class RuntimeState:
    """All mutable state of a running program."""
    env: Environment = field(default_factory=Environment)
    procedures: Dict[str, ProcDef] = field(default_factory=dict)
    functions: Dict[str, FnDef] = field(default_factory=dict)
    data: DataCursor = field(default_factory=DataCursor)
    stacks: ControlStacks = field(default_factory=ControlStacks)
    error_handler: Optional[int] = None
    last_error: Optional[ErrorInfo] = None

    def clear(self):
        """Reset everything for a fresh RUN."""
        self.env.clear()
        self.procedures.clear()
        self.functions.clear()
        self.data.clear()
        self.stacks.clear()
        self.error_handler = None
        self.last_error = None
