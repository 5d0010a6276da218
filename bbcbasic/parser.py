"""Statement parser for BBC BASIC.

`parse_line` turns the tokens of one program line into the list of
statements it holds. Statements are separated by ':' and dispatch on
their leading token; a leading identifier is an assignment (LET is
optional). IF takes the rest of the line: its THEN branch runs up to a
matching ELSE, and its ELSE branch to the end of the line, so an inner
IF claims the first ELSE it meets.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Assign, ArrayAssign, Call, Cls, Data, DataItem, DefFn, DefProc, Dim,
    DimSpec, End, EndProc, EndWhile, For, Gosub, Goto, If, Input, Local,
    Next, Node, OnError, OnErrorOff, OnGoto, Print, PrintItem, ProcCall,
    Raise, Read, Repeat, Report, Restore, Return, Until, Variable, While,
)
from .expressions import ExpressionParser
from .lexer import (
    IDENT, INT, KEYWORD, LINENO, OPERATOR, REAL, SEPARATOR, STRING, Token, tokenize,
)


# Names the program may read but never assign
PSEUDO_VARIABLES = frozenset({'ERR', 'ERL', 'REPORT$'})

LITERAL_TYPES = {INT: 'Integer', REAL: 'Real', STRING: 'String'}


class StatementParser(ExpressionParser):

    def parse_line(self) -> List[Node]:
        statements = self.parse_statements(in_branch=False)
        if not self.at_end():
            raise self.error("Syntax error")
        return statements

    def at_statement_end(self) -> bool:
        return self.at_end() or self.match(':') or self.match('ELSE')

    def parse_statements(self, in_branch: bool) -> List[Node]:
        statements: List[Node] = []
        while not self.at_end():
            if self.match(':'):
                self.consume(':')
                continue
            if self.match('ELSE'):
                if in_branch:
                    break
                raise self.error("ELSE without IF")
            statements.append(self.parse_statement())
            if not self.at_statement_end():
                raise self.error("Syntax error")
        return statements

    def parse_statement(self) -> Node:
        token = self.peek()
        if token.type == IDENT:
            return self.parse_assignment()
        handler = getattr(self, 'parse_' + str(token.value).lower(), None) if token.type == KEYWORD else None
        if handler is None or token.value not in STATEMENT_KEYWORDS:
            raise self.error(f"Unexpected {token.value}", token)
        self.pos += 1
        return handler()

    # Assignment

    def parse_let(self) -> Node:
        return self.parse_assignment()

    def parse_assignment(self) -> Node:
        name_token = self.consume(IDENT)
        name = name_token.value
        if name.upper() in PSEUDO_VARIABLES:
            raise self.error(f"Cannot assign to {name}", name_token)
        if self.match('('):
            close = self.find_closing_paren(self.pos)
            following = self.tokens[close + 1] if close + 1 < len(self.tokens) else None
            if following is None or following.value != '=' or following.type != OPERATOR:
                raise self.error("Mistake", name_token)
            indices = self.parse_arguments()
            self.consume('=')
            return ArrayAssign(name, indices, self.parse_expression())
        self.consume('=')
        return Assign(name, self.parse_expression())

    def find_closing_paren(self, start: int) -> int:
        depth = 0
        for index in range(start, len(self.tokens)):
            token = self.tokens[index]
            if token.type != SEPARATOR:
                continue
            if token.value == '(':
                depth += 1
            elif token.value == ')':
                depth -= 1
                if depth == 0:
                    return index
        raise self.error("Missing )")

    def parse_target(self) -> Node:
        """A READ/INPUT destination: a variable or an array element."""
        name = self.consume(IDENT).value
        if self.match('('):
            return Call(name, self.parse_arguments())
        return Variable(name)

    def parse_target_list(self) -> Tuple[Node, ...]:
        targets = [self.parse_target()]
        while self.match(','):
            self.consume(',')
            targets.append(self.parse_target())
        return tuple(targets)

    def parse_name_list(self) -> Tuple[str, ...]:
        names = [self.consume(IDENT).value]
        while self.match(','):
            self.consume(',')
            names.append(self.consume(IDENT).value)
        return tuple(names)

    def parse_parameters(self) -> Tuple[str, ...]:
        if not self.match('('):
            return ()
        self.consume('(')
        params = self.parse_name_list()
        self.consume(')')
        return params

    def parse_line_number(self) -> int:
        return self.consume(LINENO).value

    # Console

    def parse_print(self) -> Node:
        items: List[PrintItem] = []
        while not self.at_statement_end():
            if self.match(';'):
                self.consume(';')
                items.append(PrintItem('join'))
            elif self.match(','):
                self.consume(',')
                items.append(PrintItem('zone'))
            elif self.match(['TAB', 'SPC']):
                kind = self.consume(['TAB', 'SPC']).value.lower()
                self.consume('(')
                expr = self.parse_expression()
                self.consume(')')
                items.append(PrintItem(kind, expr))
            else:
                items.append(PrintItem('value', self.parse_expression()))
        return Print(tuple(items))

    def parse_input(self) -> Node:
        prompt: Optional[str] = None
        show_mark = True
        if self.match(STRING):
            prompt = self.consume(STRING).value
            if self.match(';'):
                self.consume(';')
                show_mark = False
            elif self.match(','):
                self.consume(',')
        return Input(prompt, show_mark, self.parse_target_list())

    def parse_cls(self) -> Node:
        return Cls()

    def parse_report(self) -> Node:
        return Report()

    # Control flow

    def parse_branch(self) -> Tuple[Node, ...]:
        if self.match(LINENO):
            return (Goto(self.parse_line_number()),)
        return tuple(self.parse_statements(in_branch=True))

    def parse_if(self) -> Node:
        condition = self.parse_expression()
        if self.match('THEN'):
            self.consume('THEN')
        then_branch = self.parse_branch()
        else_branch: Tuple[Node, ...] = ()
        if self.match('ELSE'):
            self.consume('ELSE')
            else_branch = self.parse_branch()
        return If(condition, then_branch, else_branch)

    def parse_for(self) -> Node:
        var = self.consume(IDENT).value
        self.consume('=')
        start = self.parse_expression()
        self.consume('TO')
        limit = self.parse_expression()
        step = None
        if self.match('STEP'):
            self.consume('STEP')
            step = self.parse_expression()
        return For(var, start, limit, step)

    def parse_next(self) -> Node:
        if self.at_statement_end():
            return Next(())
        return Next(self.parse_name_list())

    def parse_repeat(self) -> Node:
        return Repeat()

    def parse_until(self) -> Node:
        return Until(self.parse_expression())

    def parse_while(self) -> Node:
        return While(self.parse_expression())

    def parse_endwhile(self) -> Node:
        return EndWhile()

    def parse_goto(self) -> Node:
        return Goto(self.parse_line_number())

    def parse_gosub(self) -> Node:
        return Gosub(self.parse_line_number())

    def parse_return(self) -> Node:
        return Return()

    def parse_on(self) -> Node:
        if self.match('ERROR'):
            self.consume('ERROR')
            if self.match('OFF'):
                self.consume('OFF')
                return OnErrorOff()
            self.consume('GOTO')
            return OnError(self.parse_line_number())
        selector = self.parse_expression()
        keyword = self.consume(['GOTO', 'GOSUB']).value
        targets = [self.parse_line_number()]
        while self.match(','):
            self.consume(',')
            targets.append(self.parse_line_number())
        return OnGoto(selector, tuple(targets), gosub=keyword == 'GOSUB')

    def parse_end(self) -> Node:
        return End()

    def parse_stop(self) -> Node:
        return End(stop=True)

    def parse_quit(self) -> Node:
        return End()

    def parse_error(self) -> Node:
        code = self.parse_expression()
        self.consume(',')
        return Raise(code, self.parse_expression())

    # Procedures and functions

    def parse_def(self) -> Node:
        kind = self.consume(['PROC', 'FN']).value
        name = self.consume(IDENT).value
        params = self.parse_parameters()
        if kind == 'PROC':
            return DefProc(name, params)
        self.consume('=')
        return DefFn(name, params, self.parse_expression())

    def parse_proc(self) -> Node:
        name = self.consume(IDENT).value
        args: Tuple[Node, ...] = ()
        if self.match('('):
            args = self.parse_arguments()
        return ProcCall(name, args)

    def parse_endproc(self) -> Node:
        return EndProc()

    def parse_local(self) -> Node:
        return Local(self.parse_name_list())

    # Arrays and DATA

    def parse_dim(self) -> Node:
        arrays = []
        while True:
            name = self.consume(IDENT).value
            arrays.append(DimSpec(name, self.parse_arguments()))
            if not self.match(','):
                break
            self.consume(',')
        return Dim(tuple(arrays))

    def parse_data(self) -> Node:
        items: List[DataItem] = []
        while not self.at_end():
            token = self.consume([STRING, INT, REAL])
            text = token.value if token.type == STRING else token.text
            items.append(DataItem(token.value, LITERAL_TYPES[token.type], text))
            if not self.at_end():
                self.consume(',')
        return Data(tuple(items))

    def parse_read(self) -> Node:
        return Read(self.parse_target_list())

    def parse_restore(self) -> Node:
        if self.match(LINENO):
            return Restore(self.parse_line_number())
        return Restore()


STATEMENT_KEYWORDS = frozenset({
    'LET', 'PRINT', 'INPUT', 'CLS', 'REPORT', 'IF', 'FOR', 'NEXT', 'REPEAT',
    'UNTIL', 'WHILE', 'ENDWHILE', 'GOTO', 'GOSUB', 'RETURN', 'ON', 'END',
    'STOP', 'QUIT', 'ERROR', 'DEF', 'PROC', 'ENDPROC', 'LOCAL', 'DIM',
    'DATA', 'READ', 'RESTORE',
})


def parse_line(tokens: List[Token]) -> List[Node]:
    """Parse the tokens of one program line into its statements."""
    return StatementParser(tokens).parse_line()


def parse_source_line(text: str) -> List[Node]:
    """Tokenize and parse one line of source (without its line number)."""
    return parse_line(tokenize(text))
