"""Program storage, navigation and loading.

A program is an ordered set of numbered source lines. `ProgramStore`
keeps the text of each line, parses lines on first use and hands the
interpreter a `CompiledLine`: the line's statements flattened into one
list, with the branches of every IF laid out inline after it. Positions
inside a line are indexes into that flat list.

Listings are read with a small Lark grammar that splits the text into
(line number, source) pairs; the BASIC on each line is then handled by
the hand-written lexer and parser. `prescan` walks the whole program
once before RUN to collect DATA items and PROC/FN definitions.
"""

from __future__ import annotations

from bisect import bisect_right, insort
from typing import Dict, Iterator, List, Optional, Tuple

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput

from .ast import Data, DefFn, DefProc, If, Node, Program, ProgramLine
from .errors import BasicError, SyntaxFault
from .listing import format_statements
from .parser import parse_source_line
from .state import FnDef, Position, ProcDef, RuntimeState


MAX_LINE_NUMBER = 65279


LISTING_GRAMMAR = r"""
    start: (line | _NL)*
    line: LINENO SOURCE?

    LINENO: /[0-9]+/
    SOURCE: /[^\r\n]+/
    _NL: /\r?\n/

    %ignore /[ \t]+/
"""


LISTING_PARSER = Lark(
    LISTING_GRAMMAR,
    parser='lalr',
    lexer='contextual',
    propagate_positions=True,
    maybe_placeholders=False,
)


class ListingTransformer(Transformer):
    """Turns the listing parse tree into (number, source text) pairs."""

    def start(self, items):
        return list(items)

    def line(self, items):
        number = int(items[0])
        text = str(items[1]).strip() if len(items) > 1 else ''
        return number, text


def parse_listing(text: str) -> List[Tuple[int, str]]:
    """Split a numbered listing into (line number, source) pairs.

    Raises SyntaxFault when a non-blank line does not start with a number.
    """
    try:
        tree = LISTING_PARSER.parse(text)
    except UnexpectedInput as e:
        raise SyntaxFault(f'Line number expected on source line {e.line}', column=e.column)
    return ListingTransformer().transform(tree)


class CompiledLine:
    """One program line with its statements flattened for execution.

    An IF is followed directly by its THEN statements and then its ELSE
    statements; `else_starts` maps the IF's index to where its ELSE part
    begins. Finishing a THEN branch ends the line, which is what
    `after` encodes through `then_ends`.
    """

    def __init__(self, number: int, statements: List[Node]):
        self.number = number
        self.source = list(statements)
        self.statements: List[Node] = []
        self.else_starts: Dict[int, int] = {}
        self.then_ends = set()
        self._flatten(statements)

    def _flatten(self, statements):
        for stmt in statements:
            index = len(self.statements)
            self.statements.append(stmt)
            if isinstance(stmt, If):
                self._flatten(stmt.then_branch)
                else_start = len(self.statements)
                if stmt.then_branch:
                    self.then_ends.add(else_start - 1)
                self._flatten(stmt.else_branch)
                self.else_starts[index] = else_start

    @property
    def end(self) -> int:
        return len(self.statements)

    def after(self, index: int) -> int:
        """Index of the statement that normally follows `index`."""
        if index in self.then_ends:
            return self.end
        return index + 1

    def __repr__(self) -> str:
        return f"CompiledLine({self.number}, {len(self.statements)} statements)"


class ProgramStore:
    """Ordered line-number to source mapping with a current-line cursor."""

    def __init__(self):
        self.lines: Dict[int, str] = {}
        self.numbers: List[int] = []
        self.compiled_lines: Dict[int, CompiledLine] = {}
        self.current: Optional[int] = None

    # Editing

    def store_line(self, number: int, text: str):
        if number < 0 or number > MAX_LINE_NUMBER:
            raise SyntaxFault(f'Line number {number} out of range')
        if number not in self.lines:
            insort(self.numbers, number)
        self.lines[number] = text
        self.compiled_lines.pop(number, None)

    def delete_line(self, number: int):
        if number in self.lines:
            del self.lines[number]
            self.numbers.remove(number)
            self.compiled_lines.pop(number, None)

    def get_line(self, number: int) -> Optional[str]:
        return self.lines.get(number)

    def line_numbers(self) -> List[int]:
        return list(self.numbers)

    def __len__(self) -> int:
        return len(self.numbers)

    # Navigation

    def start(self) -> Optional[int]:
        self.current = self.numbers[0] if self.numbers else None
        return self.current

    def current_line(self) -> Optional[int]:
        return self.current

    def jump(self, number: int) -> bool:
        if number not in self.lines:
            return False
        self.current = number
        return True

    def next_line(self) -> Optional[int]:
        """Move to the line after the current one; None past the end."""
        if self.current is None:
            return None
        index = bisect_right(self.numbers, self.current)
        self.current = self.numbers[index] if index < len(self.numbers) else None
        return self.current

    def line_after(self, number: int) -> Optional[int]:
        index = bisect_right(self.numbers, number)
        return self.numbers[index] if index < len(self.numbers) else None

    # Parsing

    def compiled(self, number: int) -> CompiledLine:
        """Parse line `number` (once) and return its flattened form."""
        line = self.compiled_lines.get(number)
        if line is None:
            try:
                statements = parse_source_line(self.lines[number])
            except BasicError as e:
                e.line = number
                raise
            line = CompiledLine(number, statements)
            self.compiled_lines[number] = line
        return line

    def statements_from(self, position: Position) -> Iterator[Tuple[Position, Node]]:
        """Every statement from `position` to the end of the program, in order."""
        number: Optional[int] = position.line
        index = position.index
        while number is not None:
            line = self.compiled(number)
            for i in range(index, line.end):
                yield Position(number, i), line.statements[i]
            number = self.line_after(number)
            index = 0

    def to_program(self) -> Program:
        return Program(tuple(
            ProgramLine(n, tuple(self.compiled(n).source)) for n in self.numbers
        ))

    @classmethod
    def from_program(cls, program: Program) -> 'ProgramStore':
        """Build a store from already parsed lines (for example from JSON)."""
        store = cls()
        for line in program.lines:
            store.store_line(line.number, format_statements(line.statements))
            store.compiled_lines[line.number] = CompiledLine(line.number, list(line.statements))
        return store


def load_program(text: str) -> ProgramStore:
    """Load a numbered listing. A bare line number deletes that line."""
    store = ProgramStore()
    for number, source in parse_listing(text):
        if source:
            store.store_line(number, source)
        else:
            store.delete_line(number)
    return store


def prescan(store: ProgramStore, state: RuntimeState):
    """Parse every line and collect DATA items and PROC/FN definitions.

    Any syntax error in the program surfaces here, before execution.
    Later definitions of the same name replace earlier ones.
    """
    for number in store.line_numbers():
        line = store.compiled(number)
        for index, stmt in enumerate(line.statements):
            if isinstance(stmt, Data):
                state.data.add_line(number, stmt.items)
            elif isinstance(stmt, DefProc):
                state.procedures[stmt.name] = ProcDef(stmt.name, stmt.params, Position(number, index + 1))
            elif isinstance(stmt, DefFn):
                state.functions[stmt.name] = FnDef(stmt.name, stmt.params, stmt.expr, number)
