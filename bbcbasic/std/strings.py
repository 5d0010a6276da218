"""String built-in functions. Positions are 1-based, as in BASIC."""

from typing import Any, Dict, List
import re

from bbcbasic.builtin_function import BuiltinFunction
from bbcbasic.errors import RangeFault, ERR_ARGUMENTS, ERR_STRING_TOO_LONG
from bbcbasic.std.numeric import integer_arg, number_arg, string_arg
from bbcbasic.types import MAX_STRING, TypeSpec, fits_int32, format_number


VAL_RE = re.compile(r'\s*([+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)')


def parse_number_prefix(text: str) -> Any:
    """Read the number at the start of `text` the way VAL does; 0 if none."""
    m = VAL_RE.match(text)
    if m is None:
        return 0
    literal = m.group(1)
    if m.group(3) is None and '.' not in literal:
        value = int(literal)
        return value if fits_int32(value) else float(value)
    return float(literal)


def arg_count(name: str, args: List[Any], low: int, high: int):
    if len(args) < low or len(args) > high:
        raise RangeFault(f'Arguments: {name} expects {low} to {high}', code=ERR_ARGUMENTS)


def populate_strings() -> Dict[str, BuiltinFunction]:
    functions: Dict[str, BuiltinFunction] = {}

    def std_asc(args: List[Any]) -> Any:
        s = string_arg('ASC', args[0])
        return ord(s[0]) if s else -1

    def std_chr(args: List[Any]) -> Any:
        return chr(integer_arg('CHR$', args[0]) % 256)

    def std_left(args: List[Any]) -> Any:
        arg_count('LEFT$', args, 1, 2)
        s = string_arg('LEFT$', args[0])
        n = integer_arg('LEFT$', args[1]) if len(args) > 1 else len(s) - 1
        return s[:max(n, 0)]

    def std_right(args: List[Any]) -> Any:
        arg_count('RIGHT$', args, 1, 2)
        s = string_arg('RIGHT$', args[0])
        n = integer_arg('RIGHT$', args[1]) if len(args) > 1 else 1
        return s[-n:] if n > 0 else ''

    def std_mid(args: List[Any]) -> Any:
        arg_count('MID$', args, 2, 3)
        s = string_arg('MID$', args[0])
        start = max(integer_arg('MID$', args[1]), 1) - 1
        if len(args) > 2:
            n = integer_arg('MID$', args[2])
            return s[start:start + max(n, 0)]
        return s[start:]

    def std_len(args: List[Any]) -> Any:
        return len(string_arg('LEN', args[0]))

    def std_str(args: List[Any]) -> Any:
        return format_number(number_arg('STR$', args[0]))

    def std_val(args: List[Any]) -> Any:
        return parse_number_prefix(string_arg('VAL', args[0]))

    def std_string(args: List[Any]) -> Any:
        n = integer_arg('STRING$', args[0])
        s = string_arg('STRING$', args[1])
        n = max(n, 0)
        if n * len(s) > MAX_STRING:
            raise RangeFault('String too long in STRING$', code=ERR_STRING_TOO_LONG)
        return s * n

    def std_instr(args: List[Any]) -> Any:
        arg_count('INSTR', args, 2, 3)
        haystack = string_arg('INSTR', args[0])
        needle = string_arg('INSTR', args[1])
        start = max(integer_arg('INSTR', args[2]), 1) - 1 if len(args) > 2 else 0
        return haystack.find(needle, start) + 1

    def std_lcase(args: List[Any]) -> Any:
        return string_arg('LCASE$', args[0]).lower()

    def std_ucase(args: List[Any]) -> Any:
        return string_arg('UCASE$', args[0]).upper()

    functions['ASC'] = BuiltinFunction('ASC', 1, TypeSpec.integer(), std_asc)
    functions['CHR$'] = BuiltinFunction('CHR$', 1, TypeSpec.string(), std_chr)
    functions['LEFT$'] = BuiltinFunction('LEFT$', None, TypeSpec.string(), std_left)
    functions['RIGHT$'] = BuiltinFunction('RIGHT$', None, TypeSpec.string(), std_right)
    functions['MID$'] = BuiltinFunction('MID$', None, TypeSpec.string(), std_mid)
    functions['LEN'] = BuiltinFunction('LEN', 1, TypeSpec.integer(), std_len)
    functions['STR$'] = BuiltinFunction('STR$', 1, TypeSpec.string(), std_str)
    functions['VAL'] = BuiltinFunction('VAL', 1, None, std_val)
    functions['STRING$'] = BuiltinFunction('STRING$', 2, TypeSpec.string(), std_string)
    functions['INSTR'] = BuiltinFunction('INSTR', None, TypeSpec.integer(), std_instr)
    functions['LCASE$'] = BuiltinFunction('LCASE$', 1, TypeSpec.string(), std_lcase)
    functions['UCASE$'] = BuiltinFunction('UCASE$', 1, TypeSpec.string(), std_ucase)
    return functions
