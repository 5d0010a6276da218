"""Execution engine for BBC BASIC programs.

The interpreter runs a `ProgramStore` one statement at a time. Control
flow never uses Python's own loops or call stack: FOR, REPEAT, WHILE,
GOSUB and PROC push explicit frames onto the stacks in `RuntimeState`,
and every statement handler sets `next_position` to say where execution
continues. That keeps GOTO out of a loop body legal (the frame simply
stays behind) and lets a later NEXT, UNTIL or ENDWHILE find its frame.

FN calls are the one exception: an FN is a single expression evaluated
in the middle of another expression, so it recurses through
`evaluate` with a temporary LOCAL scope that is always undone.

Faults raised while a statement runs are offered to the ON ERROR
handler; without one they leave `run` carrying their line number.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import math
import random
import sys

from .ast import (
    Assign, ArrayAssign, BinaryOp, Call, Cls, Data, DefFn, DefProc, Dim,
    End, EndProc, EndWhile, FnCall, For, Gosub, Goto, If, Input, Literal,
    Local, Next, Node, OnError, OnErrorOff, OnGoto, Print, ProcCall, Raise,
    Read, Repeat, Report, Restore, Return, UnaryOp, Until, Variable, While,
)
from .builtin_function import BuiltinFunction
from .environment import coerce
from .errors import (
    ArithmeticFault, BasicError, ProgramEnd, RangeFault, StackFault,
    TypeFault, UndefinedNameFault,
    ERR_ARGUMENTS, ERR_ARRAY, ERR_BAD_STEP, ERR_CANT_MATCH_FOR,
    ERR_LOG_RANGE, ERR_MISSING_ENDWHILE, ERR_NO_FOR, ERR_NO_GOSUB,
    ERR_NO_PROC, ERR_NO_REPEAT, ERR_NO_ROOM, ERR_NO_SUCH_FN_PROC,
    ERR_NO_SUCH_LINE, ERR_NOT_IN_WHILE, ERR_STRING_TOO_LONG, ERR_TOO_BIG,
)
from .expressions import parse_expression_text
from .program import CompiledLine, ProgramStore, load_program, prescan
from .state import (
    ControlStacks, ForFrame, Position, RepeatFrame, ReturnFrame,
    RuntimeState, WhileFrame,
)
from .std import populate_builtins
from .std.io import BasicIO
from .std.strings import parse_number_prefix
from .types import (
    MAX_STRING, TypeSpec, fits_int32, is_numeric, to_string,
    truncate_to_int, type_name,
)


COMPARISONS = {
    '=': lambda a, b: a == b,
    '<>': lambda a, b: a != b,
    '<': lambda a, b: a < b,
    '>': lambda a, b: a > b,
    '<=': lambda a, b: a <= b,
    '>=': lambda a, b: a >= b,
}

# Python frames used per nested FN call, generously
FRAMES_PER_CALL = 20


class Interpreter:
    """Core interpreter that executes a stored BASIC program.

    Configuration is passed as keyword arguments: `debug_level` and
    `debug_file` control the trace written by `debug`, `max_depth` bounds
    every control stack and FN nesting, `seed` makes RND repeatable and
    `io` replaces the console.
    """
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 max_depth: int = 256, seed: Optional[int] = None,
                 io: Optional[BasicIO] = None):
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None
        self.max_depth = max_depth
        self.io = io if io is not None else BasicIO()
        self.rng = random.Random(seed)
        self.state = RuntimeState(stacks=ControlStacks(max_depth))
        self.builtins: Dict[str, BuiltinFunction] = populate_builtins(self.rng, self.io)
        self.load_engine_builtins()
        self.program: Optional[ProgramStore] = None
        self.current: Optional[Position] = None
        self.next_position: Optional[Position] = None
        self.fn_depth = 0
        self.stop_requested = False

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def load_engine_builtins(self):
        """Functions that read interpreter state: ERR, ERL, REPORT$ and EVAL."""

        def std_err(args: List[Any]) -> Any:
            error = self.state.last_error
            return error.code if error else 0

        def std_erl(args: List[Any]) -> Any:
            error = self.state.last_error
            return error.line if error else 0

        def std_report(args: List[Any]) -> Any:
            error = self.state.last_error
            return error.message if error else ''

        def std_eval(args: List[Any]) -> Any:
            text = args[0]
            if not isinstance(text, str):
                raise TypeFault(f'Type mismatch: EVAL expects a string, got {type_name(text)}')
            return self.evaluate(parse_expression_text(text))

        self.builtins['ERR'] = BuiltinFunction('ERR', 0, TypeSpec.integer(), std_err)
        self.builtins['ERL'] = BuiltinFunction('ERL', 0, TypeSpec.integer(), std_erl)
        self.builtins['REPORT$'] = BuiltinFunction('REPORT$', 0, TypeSpec.string(), std_report)
        self.builtins['EVAL'] = BuiltinFunction('EVAL', 1, None, std_eval)

    # Public API
    def request_stop(self):
        """Ask a running program to stop before its next statement."""
        self.stop_requested = True

    def run(self, program: ProgramStore):
        """Run `program` from its first line with a fresh state.

        Returns normally on END, STOP, QUIT, running off the last line or
        a stop request. A fault that no ON ERROR handler takes is raised
        as a BasicError with its line set.
        """
        self.program = program
        self.state.clear()
        self.fn_depth = 0
        self.stop_requested = False
        self.debug(f"run: {len(program)} lines")
        # nested FN calls recurse through evaluate
        saved_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(saved_limit, self.max_depth * FRAMES_PER_CALL + 1000))
        try:
            prescan(program, self.state)
            self.debug(f"prescan: {len(self.state.data.items)} DATA items, "
                       f"procedures {sorted(self.state.procedures)}, functions {sorted(self.state.functions)}")
            self.execute_program()
        except BasicError as e:
            self.debug(f"fault: {e} (code {e.code})")
            raise
        finally:
            sys.setrecursionlimit(saved_limit)
        self.debug("run: finished")

    def execute_program(self):
        first = self.program.start()
        position = Position(first, 0) if first is not None else None
        while position is not None:
            if self.stop_requested:
                self.debug(f"stop requested at line {position.line}")
                return
            line = self.program.compiled(position.line)
            if position.index >= line.end:
                self.program.jump(position.line)
                following = self.program.next_line()
                position = Position(following, 0) if following is not None else None
                continue
            stmt = line.statements[position.index]
            self.current = position
            self.next_position = Position(position.line, line.after(position.index))
            if self.debug_level >= 2:
                self.debug(f"{position.line}:{position.index} {type(stmt).__name__}")
            try:
                self.execute(stmt, line, position.index)
            except ProgramEnd as end:
                self.debug(f"{end.keyword} at line {position.line}")
                return
            except BasicError as e:
                if e.line is None:
                    e.line = position.line
                if self.state.error_handler is None:
                    raise
                self.state.last_error = e.info
                self.debug(f"error {e.code} at line {e.line} handled by line {self.state.error_handler}")
                if not self.program.jump(self.state.error_handler):
                    raise RangeFault(f'No such line {self.state.error_handler} for ON ERROR',
                                     code=ERR_NO_SUCH_LINE, line=position.line) from e
                self.next_position = Position(self.state.error_handler, 0)
            position = self.next_position

    # Navigation helpers

    def line_start(self, number: int) -> Position:
        if not self.program.jump(number):
            raise RangeFault(f'No such line {number}', code=ERR_NO_SUCH_LINE)
        return Position(number, 0)

    def position_after(self, position: Position) -> Position:
        return Position(position.line, self.program.compiled(position.line).after(position.index))

    def find_matching_next(self, start: Position, var: str) -> Optional[Position]:
        """Find the NEXT that closes the FOR for `var`, scanning forward."""
        opened: List[str] = []
        for position, stmt in self.program.statements_from(start):
            if isinstance(stmt, For):
                opened.append(stmt.var)
            elif isinstance(stmt, Next):
                if not stmt.vars:
                    if not opened:
                        return position
                    opened.pop()
                    continue
                for name in stmt.vars:
                    if opened and opened[-1] == name:
                        opened.pop()
                    elif name == var:
                        return position
        return None

    def find_matching_endwhile(self, start: Position) -> Optional[Position]:
        depth = 0
        for position, stmt in self.program.statements_from(start):
            if isinstance(stmt, While):
                depth += 1
            elif isinstance(stmt, EndWhile):
                if depth == 0:
                    return position
                depth -= 1
        return None

    # Statements

    def execute(self, node: Node, line: CompiledLine, index: int):
        env = self.state.env
        stacks = self.state.stacks
        if isinstance(node, Assign):
            env.set_scalar(node.name, self.evaluate(node.expr))
            return
        if isinstance(node, ArrayAssign):
            indices = [self.evaluate(i) for i in node.indices]
            env.set_element(node.name, indices, self.evaluate(node.expr))
            return
        if isinstance(node, Print):
            self.execute_print(node)
            return
        if isinstance(node, Input):
            self.execute_input(node)
            return
        if isinstance(node, If):
            truthy = self.is_truthy(self.evaluate(node.condition))
            if self.debug_level >= 3:
                self.debug(f"if condition -> {truthy}")
            if truthy:
                target = index + 1 if node.then_branch else line.end
            else:
                target = line.else_starts[index] if node.else_branch else line.end
            self.next_position = Position(line.number, target)
            return
        if isinstance(node, For):
            self.execute_for(node)
            return
        if isinstance(node, Next):
            self.execute_next(node)
            return
        if isinstance(node, Repeat):
            resume = self.next_position
            stacks.repeats[:] = [f for f in stacks.repeats if f.resume != resume]
            stacks.push_repeat(RepeatFrame(resume))
            return
        if isinstance(node, Until):
            if not stacks.repeats:
                raise StackFault('No REPEAT', code=ERR_NO_REPEAT)
            if self.is_truthy(self.evaluate(node.condition)):
                stacks.repeats.pop()
            else:
                self.next_position = stacks.repeats[-1].resume
            return
        if isinstance(node, While):
            if self.is_truthy(self.evaluate(node.condition)):
                stacks.whiles[:] = [f for f in stacks.whiles if f.position != self.current]
                stacks.push_while(WhileFrame(self.current, self.next_position))
                return
            target = self.find_matching_endwhile(self.next_position)
            if target is None:
                raise StackFault('Missing ENDWHILE', code=ERR_MISSING_ENDWHILE)
            self.next_position = self.position_after(target)
            return
        if isinstance(node, EndWhile):
            if not stacks.whiles:
                raise StackFault('Not in a WHILE loop', code=ERR_NOT_IN_WHILE)
            frame = stacks.whiles[-1]
            loop = self.program.compiled(frame.position.line).statements[frame.position.index]
            if self.is_truthy(self.evaluate(loop.condition)):
                self.next_position = frame.resume
            else:
                stacks.whiles.pop()
            return
        if isinstance(node, Goto):
            self.next_position = self.line_start(node.line)
            return
        if isinstance(node, Gosub):
            self.gosub(node.line)
            return
        if isinstance(node, Return):
            if not stacks.returns or stacks.returns[-1].kind != 'GOSUB':
                raise StackFault('No GOSUB', code=ERR_NO_GOSUB)
            self.next_position = stacks.returns.pop().resume
            return
        if isinstance(node, OnGoto):
            choice = self.to_integer(self.evaluate(node.selector))
            if 1 <= choice <= len(node.targets):
                target = node.targets[choice - 1]
                if node.gosub:
                    self.gosub(target)
                else:
                    self.next_position = self.line_start(target)
            return
        if isinstance(node, (DefProc, DefFn)):
            # definitions only run through a call
            self.next_position = Position(line.number, line.end)
            return
        if isinstance(node, ProcCall):
            self.call_proc(node)
            return
        if isinstance(node, EndProc):
            self.end_proc()
            return
        if isinstance(node, Local):
            for name in node.names:
                env.declare_local(name)
            if self.debug_level >= 3:
                self.debug(f"local {', '.join(node.names)}: scopes={env.scopes}")
            return
        if isinstance(node, Dim):
            for spec in node.arrays:
                env.dim_array(spec.name, [self.evaluate(b) for b in spec.bounds])
            return
        if isinstance(node, Data):
            return
        if isinstance(node, Read):
            for target in node.targets:
                item = self.state.data.read()
                if TypeSpec.for_name(target.name).kind == 'String':
                    value = item.value if item.literal_type == 'String' else item.text
                elif item.literal_type == 'String':
                    raise TypeFault(f'Type mismatch: DATA item {item.text!r} is not a number')
                else:
                    value = item.value
                self.assign_target(target, value)
            return
        if isinstance(node, Restore):
            self.state.data.restore(node.line)
            return
        if isinstance(node, OnError):
            self.state.error_handler = node.line
            return
        if isinstance(node, OnErrorOff):
            self.state.error_handler = None
            return
        if isinstance(node, End):
            raise ProgramEnd('STOP' if node.stop else 'END')
        if isinstance(node, Cls):
            self.io.cls()
            return
        if isinstance(node, Report):
            error = self.state.last_error
            self.io.write(error.message if error else '')
            return
        if isinstance(node, Raise):
            code = self.to_integer(self.evaluate(node.code))
            message = self.evaluate(node.message)
            if not isinstance(message, str):
                raise TypeFault('Type mismatch: ERROR message must be a string')
            raise BasicError(message, code=code)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_print(self, node: Print):
        newline = True
        for item in node.items:
            newline = item.kind != 'join'
            if item.kind == 'zone':
                self.io.next_zone()
            elif item.kind == 'tab':
                self.io.tab_to(self.to_integer(self.evaluate(item.expr)))
            elif item.kind == 'spc':
                self.io.spaces(self.to_integer(self.evaluate(item.expr)))
            elif item.kind == 'value':
                self.io.write(to_string(self.evaluate(item.expr)))
        if newline:
            self.io.newline()

    def execute_input(self, node: Input):
        for i, target in enumerate(node.targets):
            if i == 0 and node.prompt is not None:
                prompt = node.prompt + ('? ' if node.show_mark else '')
            else:
                prompt = '? '
            text = self.io.read_line(prompt).strip()
            if TypeSpec.for_name(target.name).kind == 'String':
                value = text
            else:
                value = parse_number_prefix(text)
            self.assign_target(target, value)

    def assign_target(self, target: Node, value: Any):
        if isinstance(target, Variable):
            self.state.env.set_scalar(target.name, value)
        elif isinstance(target, Call):
            indices = [self.evaluate(i) for i in target.args]
            self.state.env.set_element(target.name, indices, value)
        else:
            raise TypeFault('Invalid assignment target')

    def execute_for(self, node: For):
        env = self.state.env
        stacks = self.state.stacks
        spec = TypeSpec.for_name(node.var)
        if spec.kind == 'String':
            raise TypeFault(f'Type mismatch: FOR variable {node.var} must be numeric')
        start = self.number(self.evaluate(node.start))
        limit = self.number(self.evaluate(node.limit))
        step = self.number(self.evaluate(node.step)) if node.step is not None else 1
        if spec.kind == 'Integer':
            # an Integer counter only ever moves in whole steps
            step = self.to_integer(step)
        if step == 0:
            raise RangeFault('Bad STEP: STEP 0 would never end', code=ERR_BAD_STEP)
        integer = (spec.kind == 'Real' and isinstance(start, int) and isinstance(limit, int)
                   and isinstance(step, int))
        if integer:
            env.set_loop_integer(node.var, start)
        else:
            env.set_scalar(node.var, start)
        existing = stacks.find_for(node.var)
        if existing is not None:
            del stacks.fors[existing:]
        stacks.push_for(ForFrame(node.var, limit, step, self.next_position, integer))
        if self.debug_level >= 3:
            self.debug(f"for {node.var}: {stacks.describe()}")
        if not self.loop_continues(env.get_scalar(node.var), limit, step):
            target = self.find_matching_next(self.next_position, node.var)
            if target is not None:
                self.next_position = target

    def loop_continues(self, value: Any, limit: Any, step: Any) -> bool:
        return value <= limit if step > 0 else value >= limit

    def execute_next(self, node: Next):
        env = self.state.env
        stacks = self.state.stacks
        for name in node.vars or (None,):
            if not stacks.fors:
                raise StackFault('No FOR', code=ERR_NO_FOR)
            if name is None:
                index = len(stacks.fors) - 1
            else:
                index = stacks.find_for(name)
                if index is None:
                    raise StackFault(f"Can't match FOR {name}", code=ERR_CANT_MATCH_FOR)
            del stacks.fors[index + 1:]
            frame = stacks.fors[index]
            value = self.arithmetic('+', env.get_scalar(frame.var), frame.step)
            if frame.integer and isinstance(value, int):
                env.set_loop_integer(frame.var, value)
            else:
                env.set_scalar(frame.var, value)
            if self.loop_continues(env.get_scalar(frame.var), frame.limit, frame.step):
                self.next_position = frame.resume
                return
            stacks.fors.pop()

    def gosub(self, number: int):
        target = self.line_start(number)
        self.state.stacks.push_return(ReturnFrame('GOSUB', self.next_position))
        self.next_position = target
        if self.debug_level >= 3:
            self.debug(f"gosub {number}: {self.state.stacks.describe()}")

    def bind_arguments(self, kind: str, name: str, params, arg_nodes) -> List[Any]:
        """Evaluate and convert call arguments before any scope is touched."""
        args = [self.evaluate(a) for a in arg_nodes]
        if len(args) != len(params):
            raise RangeFault(f'Arguments: {kind}{name} takes {len(params)}, got {len(args)}',
                             code=ERR_ARGUMENTS)
        return [coerce(p, v, TypeSpec.for_name(p)) for p, v in zip(params, args)]

    def enter_scope(self, params, values: List[Any]):
        env = self.state.env
        env.push_scope()
        for param, value in zip(params, values):
            env.declare_local(param)
            env.set_scalar(param, value)

    def call_proc(self, node: ProcCall):
        proc = self.state.procedures.get(node.name)
        if proc is None:
            raise UndefinedNameFault(f'No such FN/PROC PROC{node.name}', code=ERR_NO_SUCH_FN_PROC)
        values = self.bind_arguments('PROC', node.name, proc.params, node.args)
        env = self.state.env
        self.state.stacks.push_return(ReturnFrame('PROC', self.next_position, env.scope_depth))
        self.enter_scope(proc.params, values)
        self.next_position = proc.body
        if self.debug_level >= 3:
            self.debug(f"proc {node.name}: {self.state.stacks.describe()} scopes={env.scopes}")

    def end_proc(self):
        returns = self.state.stacks.returns
        index = next((i for i in range(len(returns) - 1, -1, -1) if returns[i].kind == 'PROC'), None)
        if index is None:
            raise StackFault('No PROC', code=ERR_NO_PROC)
        frame = returns[index]
        del returns[index:]
        env = self.state.env
        while env.scope_depth > frame.scope_depth:
            env.pop_scope()
        self.next_position = frame.resume
        if self.debug_level >= 3:
            self.debug(f"endproc: {self.state.stacks.describe()}")

    # Expressions

    def evaluate(self, node: Node) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return self.read_variable(node.name)
        if isinstance(node, Call):
            return self.call_or_index(node)
        if isinstance(node, FnCall):
            return self.call_fn(node)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand)
            if node.op == 'NOT':
                return ~self.to_integer(operand)
            value = self.number(operand)
            if node.op == '-':
                value = -value
                return float(value) if isinstance(value, int) and not fits_int32(value) else value
            return value
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.op, left, right)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def read_variable(self, name: str) -> Any:
        env = self.state.env
        if env.has_scalar(name):
            return env.get_scalar(name)
        # PI, RND, ERR and friends may be written without parentheses
        fn = self.builtins.get(name.upper())
        if fn is not None and fn.arity in (0, None):
            return self.call_builtin(fn, [])
        return env.get_scalar(name)

    def call_or_index(self, node: Call) -> Any:
        env = self.state.env
        if env.has_array(node.name):
            return env.get_element(node.name, [self.evaluate(i) for i in node.args])
        fn = self.builtins.get(node.name.upper())
        if fn is not None:
            return self.call_builtin(fn, [self.evaluate(a) for a in node.args])
        raise UndefinedNameFault(f'Array {node.name} not dimensioned', code=ERR_ARRAY)

    def call_builtin(self, fn: BuiltinFunction, args: List[Any]) -> Any:
        if fn.arity is not None and len(args) != fn.arity:
            raise RangeFault(f'Arguments: {fn.name} takes {fn.arity}, got {len(args)}', code=ERR_ARGUMENTS)
        return fn.fn(args)

    def call_fn(self, node: FnCall) -> Any:
        fn = self.state.functions.get(node.name)
        if fn is None:
            raise UndefinedNameFault(f'No such FN/PROC FN{node.name}', code=ERR_NO_SUCH_FN_PROC)
        values = self.bind_arguments('FN', node.name, fn.params, node.args)
        if self.fn_depth >= self.max_depth:
            raise StackFault('No room: too many nested FN calls', code=ERR_NO_ROOM)
        env = self.state.env
        self.enter_scope(fn.params, values)
        self.fn_depth += 1
        try:
            return self.evaluate(fn.expr)
        except RecursionError:
            raise StackFault('No room: too many nested FN calls', code=ERR_NO_ROOM)
        finally:
            self.fn_depth -= 1
            env.pop_scope()

    def is_truthy(self, value: Any) -> bool:
        return self.number(value) != 0

    def number(self, value: Any) -> Any:
        if not is_numeric(value):
            raise TypeFault(f'Type mismatch: number expected, got {type_name(value)}')
        return value

    def to_integer(self, value: Any) -> int:
        try:
            return truncate_to_int(self.number(value))
        except OverflowError:
            raise ArithmeticFault('Too big', code=ERR_TOO_BIG)

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op in COMPARISONS:
            if isinstance(a, str) != isinstance(b, str):
                raise TypeFault(f'Type mismatch: cannot compare {type_name(a)} with {type_name(b)}')
            if not isinstance(a, str):
                self.number(a)
                self.number(b)
            return -1 if COMPARISONS[op](a, b) else 0
        if op == '+' and isinstance(a, str) and isinstance(b, str):
            result = a + b
            if len(result) > MAX_STRING:
                raise RangeFault('String too long', code=ERR_STRING_TOO_LONG)
            return result
        if not (is_numeric(a) and is_numeric(b)):
            raise TypeFault(f'Type mismatch: {type_name(a)} {op} {type_name(b)}')
        if op in ('AND', 'OR', 'EOR'):
            x, y = self.to_integer(a), self.to_integer(b)
            if op == 'AND':
                return x & y
            if op == 'OR':
                return x | y
            return x ^ y
        if op in ('DIV', 'MOD'):
            x, y = self.to_integer(a), self.to_integer(b)
            if y == 0:
                raise ArithmeticFault('Division by zero')
            quotient = abs(x) // abs(y)
            if (x < 0) != (y < 0):
                quotient = -quotient
            if op == 'DIV':
                return quotient if fits_int32(quotient) else float(quotient)
            return x - y * quotient
        return self.arithmetic(op, a, b)

    def arithmetic(self, op: str, a: Any, b: Any) -> Any:
        """+ - * / ^ on two numbers; Integer results that overflow become Real."""
        if op == '^':
            return self.power(a, b)
        if op == '/':
            if b == 0:
                raise ArithmeticFault('Division by zero')
            result = a / b
        elif op == '+':
            result = a + b
        elif op == '-':
            result = a - b
        elif op == '*':
            result = a * b
        else:
            raise TypeFault(f'Unknown operator {op}')
        if isinstance(result, int) and not fits_int32(result):
            return float(result)
        if isinstance(result, float) and math.isinf(result):
            raise ArithmeticFault('Too big', code=ERR_TOO_BIG)
        return result

    def power(self, a: Any, b: Any) -> Any:
        if isinstance(a, int) and isinstance(b, int) and b >= 0 and (abs(a) <= 1 or b <= 64):
            result = a ** b
            if fits_int32(result):
                return result
            try:
                return float(result)
            except OverflowError:
                raise ArithmeticFault('Too big', code=ERR_TOO_BIG)
        try:
            result = float(a) ** float(b)
        except ZeroDivisionError:
            raise ArithmeticFault('Division by zero')
        except OverflowError:
            raise ArithmeticFault('Too big', code=ERR_TOO_BIG)
        if isinstance(result, complex):
            raise ArithmeticFault('Log range', code=ERR_LOG_RANGE)
        return result


def run_program(source: str, debug_level: int = 0, **options) -> Interpreter:
    """Load a numbered listing from a string, run it and return the interpreter."""
    program = load_program(source)
    interpreter = Interpreter(debug_level=debug_level, **options)
    try:
        interpreter.run(program)
    finally:
        interpreter.close()
    return interpreter


def run_file(file_path: str, debug_level: int = 0, **options) -> Interpreter:
    """Load and run a .bas file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level, **options)
