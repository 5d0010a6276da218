"""Pretty-printer: turn parsed statements back into BASIC source text.

The output re-parses to the same statements. Parentheses are only
written where the operator precedence requires them.
"""

from __future__ import annotations

from typing import Iterable, List

from .ast import (
    Assign, ArrayAssign, BinaryOp, Call, Cls, Data, DefFn, DefProc, Dim,
    End, EndProc, EndWhile, FnCall, For, Gosub, Goto, If, Input, Literal,
    Local, Next, Node, OnError, OnErrorOff, OnGoto, Print, ProcCall,
    Program, Raise, Read, Repeat, Report, Restore, Return, UnaryOp, Until,
    Variable, While,
)
from .expressions import BINARY_PRECEDENCE, RIGHT_ASSOCIATIVE, UNARY_PRECEDENCE


KEYWORD_OPERATORS = {'AND', 'OR', 'EOR', 'DIV', 'MOD', 'NOT'}


def quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def format_literal(node: Literal) -> str:
    if node.literal_type == 'String':
        return quote(node.value)
    if node.literal_type == 'Real':
        return repr(float(node.value))
    if node.value == -1:
        # the only negative literal the parser makes
        return 'TRUE'
    return str(node.value)


def format_args(args: Iterable[Node]) -> str:
    return '(' + ', '.join(format_expression(a) for a in args) + ')'


def precedence_of(node: Node) -> int:
    if isinstance(node, BinaryOp):
        return BINARY_PRECEDENCE[node.op]
    if isinstance(node, UnaryOp):
        return UNARY_PRECEDENCE
    return UNARY_PRECEDENCE + 1


def format_operand(node: Node, parent_precedence: int, needs_parens: bool) -> str:
    text = format_expression(node)
    if needs_parens or precedence_of(node) < parent_precedence:
        return '(' + text + ')'
    return text


def format_expression(node: Node) -> str:
    if isinstance(node, Literal):
        return format_literal(node)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Call):
        return node.name + format_args(node.args)
    if isinstance(node, FnCall):
        return 'FN' + node.name + (format_args(node.args) if node.args else '')
    if isinstance(node, UnaryOp):
        operand = format_expression(node.operand)
        if isinstance(node.operand, BinaryOp) and node.operand.op != '^':
            operand = '(' + operand + ')'
        separator = ' ' if node.op in KEYWORD_OPERATORS else ''
        return node.op + separator + operand
    if isinstance(node, BinaryOp):
        precedence = BINARY_PRECEDENCE[node.op]
        right_assoc = node.op in RIGHT_ASSOCIATIVE
        # (-2) ^ 2 and (2 ^ 3) ^ 2 keep their parentheses
        left_parens = (right_assoc and precedence_of(node.left) <= precedence)
        right_parens = (not right_assoc and precedence_of(node.right) == precedence
                        and isinstance(node.right, BinaryOp))
        left = format_operand(node.left, precedence, left_parens)
        right = format_operand(node.right, precedence, right_parens)
        return f'{left} {node.op} {right}'
    raise NotImplementedError(f"format_expression: unexpected node type {type(node)}")


def format_branch(statements: Iterable[Node]) -> str:
    statements = list(statements)
    if len(statements) == 1 and isinstance(statements[0], Goto):
        return str(statements[0].line)
    return format_statements(statements)


def format_statement(node: Node) -> str:
    if isinstance(node, Assign):
        return f'{node.name} = {format_expression(node.expr)}'
    if isinstance(node, ArrayAssign):
        return f'{node.name}{format_args(node.indices)} = {format_expression(node.expr)}'
    if isinstance(node, Print):
        parts: List[str] = []
        for item in node.items:
            if item.kind == 'join':
                parts.append(';')
            elif item.kind == 'zone':
                parts.append(',')
            elif item.kind in ('tab', 'spc'):
                parts.append(f'{item.kind.upper()}({format_expression(item.expr)})')
            else:
                parts.append(format_expression(item.expr))
        return ' '.join(['PRINT'] + parts)
    if isinstance(node, Input):
        text = 'INPUT '
        if node.prompt is not None:
            text += quote(node.prompt) + (', ' if node.show_mark else '; ')
        return text + ', '.join(format_expression(t) for t in node.targets)
    if isinstance(node, If):
        text = f'IF {format_expression(node.condition)} THEN'
        if node.then_branch:
            text += ' ' + format_branch(node.then_branch)
        if node.else_branch:
            text += ' ELSE ' + format_branch(node.else_branch)
        return text
    if isinstance(node, For):
        text = f'FOR {node.var} = {format_expression(node.start)} TO {format_expression(node.limit)}'
        if node.step is not None:
            text += f' STEP {format_expression(node.step)}'
        return text
    if isinstance(node, Next):
        return ' '.join(['NEXT', ', '.join(node.vars)]).rstrip()
    if isinstance(node, Repeat):
        return 'REPEAT'
    if isinstance(node, Until):
        return f'UNTIL {format_expression(node.condition)}'
    if isinstance(node, While):
        return f'WHILE {format_expression(node.condition)}'
    if isinstance(node, EndWhile):
        return 'ENDWHILE'
    if isinstance(node, Goto):
        return f'GOTO {node.line}'
    if isinstance(node, Gosub):
        return f'GOSUB {node.line}'
    if isinstance(node, Return):
        return 'RETURN'
    if isinstance(node, OnGoto):
        keyword = 'GOSUB' if node.gosub else 'GOTO'
        targets = ', '.join(str(t) for t in node.targets)
        return f'ON {format_expression(node.selector)} {keyword} {targets}'
    if isinstance(node, DefProc):
        params = '(' + ', '.join(node.params) + ')' if node.params else ''
        return f'DEF PROC{node.name}{params}'
    if isinstance(node, DefFn):
        params = '(' + ', '.join(node.params) + ')' if node.params else ''
        return f'DEF FN{node.name}{params} = {format_expression(node.expr)}'
    if isinstance(node, ProcCall):
        return 'PROC' + node.name + (format_args(node.args) if node.args else '')
    if isinstance(node, EndProc):
        return 'ENDPROC'
    if isinstance(node, Local):
        return 'LOCAL ' + ', '.join(node.names)
    if isinstance(node, Dim):
        return 'DIM ' + ', '.join(spec.name + format_args(spec.bounds) for spec in node.arrays)
    if isinstance(node, Data):
        items = []
        for item in node.items:
            items.append(quote(item.value) if item.literal_type == 'String' else item.text)
        return 'DATA ' + ', '.join(items)
    if isinstance(node, Read):
        return 'READ ' + ', '.join(format_expression(t) for t in node.targets)
    if isinstance(node, Restore):
        return 'RESTORE' if node.line is None else f'RESTORE {node.line}'
    if isinstance(node, OnError):
        return f'ON ERROR GOTO {node.line}'
    if isinstance(node, OnErrorOff):
        return 'ON ERROR OFF'
    if isinstance(node, End):
        return 'STOP' if node.stop else 'END'
    if isinstance(node, Cls):
        return 'CLS'
    if isinstance(node, Report):
        return 'REPORT'
    if isinstance(node, Raise):
        return f'ERROR {format_expression(node.code)}, {format_expression(node.message)}'
    raise NotImplementedError(f"format_statement: unexpected node type {type(node)}")


def format_statements(statements: Iterable[Node]) -> str:
    return ' : '.join(format_statement(s) for s in statements)


def format_program(program: Program) -> str:
    """Render a whole program as a numbered listing, one line per entry.

    A line with no statements (a REM line) is written as a bare REM so
    that reading the listing back does not delete it.
    """
    return ''.join(f'{line.number} {format_statements(line.statements) or "REM"}\n'
                   for line in program.lines)
