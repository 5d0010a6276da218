"""Numeric built-in functions: ABS, SQR, SIN, RND and friends.

Trigonometric functions work in radians; DEG and RAD convert.
"""

from typing import Any, Dict, List
import math
import random

from bbcbasic.builtin_function import BuiltinFunction
from bbcbasic.errors import (
    ArithmeticFault, RangeFault, TypeFault,
    ERR_ARGUMENTS, ERR_LOG_RANGE, ERR_NEGATIVE_ROOT, ERR_TOO_BIG,
)
from bbcbasic.types import (
    INT_MAX, INT_MIN, TypeSpec, fits_int32, is_numeric, truncate_to_int, type_name,
)


def number_arg(name: str, value: Any) -> Any:
    if not is_numeric(value):
        raise TypeFault(f'Type mismatch: {name} expects a number, got {type_name(value)}')
    return value


def integer_arg(name: str, value: Any) -> int:
    try:
        return truncate_to_int(number_arg(name, value))
    except OverflowError:
        raise ArithmeticFault('Too big', code=ERR_TOO_BIG)


def string_arg(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeFault(f'Type mismatch: {name} expects a string, got {type_name(value)}')
    return value


def int_or_real(value: Any) -> Any:
    """Keep a whole result as Integer when it fits in 32 bits."""
    if isinstance(value, int) and not fits_int32(value):
        return float(value)
    return value


def populate_numeric(rng: random.Random) -> Dict[str, BuiltinFunction]:
    functions: Dict[str, BuiltinFunction] = {}

    def real_function(name: str, fn):
        def call(args: List[Any]) -> Any:
            x = float(number_arg(name, args[0]))
            try:
                return fn(x)
            except OverflowError:
                raise ArithmeticFault('Too big', code=ERR_TOO_BIG)
        functions[name] = BuiltinFunction(name, 1, TypeSpec.real(), call)

    def std_abs(args: List[Any]) -> Any:
        return int_or_real(abs(number_arg('ABS', args[0])))

    def std_acs(args: List[Any]) -> Any:
        x = float(number_arg('ACS', args[0]))
        if x < -1 or x > 1:
            raise ArithmeticFault('Number out of range for ACS', code=ERR_TOO_BIG)
        return math.acos(x)

    def std_asn(args: List[Any]) -> Any:
        x = float(number_arg('ASN', args[0]))
        if x < -1 or x > 1:
            raise ArithmeticFault('Number out of range for ASN', code=ERR_TOO_BIG)
        return math.asin(x)

    def std_ln(args: List[Any]) -> Any:
        x = float(number_arg('LN', args[0]))
        if x <= 0:
            raise ArithmeticFault('Log range', code=ERR_LOG_RANGE)
        return math.log(x)

    def std_log(args: List[Any]) -> Any:
        x = float(number_arg('LOG', args[0]))
        if x <= 0:
            raise ArithmeticFault('Log range', code=ERR_LOG_RANGE)
        return math.log10(x)

    def std_sqr(args: List[Any]) -> Any:
        x = float(number_arg('SQR', args[0]))
        if x < 0:
            raise ArithmeticFault('-ve root', code=ERR_NEGATIVE_ROOT)
        return math.sqrt(x)

    def std_int(args: List[Any]) -> Any:
        x = number_arg('INT', args[0])
        if isinstance(x, int):
            return x
        if math.isinf(x) or math.isnan(x):
            raise ArithmeticFault('Too big', code=ERR_TOO_BIG)
        return int_or_real(math.floor(x))

    def std_sgn(args: List[Any]) -> Any:
        x = number_arg('SGN', args[0])
        return (x > 0) - (x < 0)

    def std_pi(args: List[Any]) -> Any:
        return math.pi

    # RND(0) repeats the last RND(1) value
    last_fraction = [rng.random()]

    def std_rnd(args: List[Any]) -> Any:
        if len(args) > 1:
            raise RangeFault('Arguments: RND expects at most 1', code=ERR_ARGUMENTS)
        if not args:
            return rng.randint(INT_MIN, INT_MAX)
        n = integer_arg('RND', args[0])
        if n < 0:
            rng.seed(n)
            return n
        if n == 0:
            return last_fraction[0]
        if n == 1:
            last_fraction[0] = rng.random()
            return last_fraction[0]
        return rng.randint(1, n)

    real_function('ATN', math.atan)
    real_function('COS', math.cos)
    real_function('SIN', math.sin)
    real_function('TAN', math.tan)
    real_function('DEG', math.degrees)
    real_function('RAD', math.radians)
    real_function('EXP', math.exp)
    functions['ABS'] = BuiltinFunction('ABS', 1, None, std_abs)
    functions['ACS'] = BuiltinFunction('ACS', 1, TypeSpec.real(), std_acs)
    functions['ASN'] = BuiltinFunction('ASN', 1, TypeSpec.real(), std_asn)
    functions['LN'] = BuiltinFunction('LN', 1, TypeSpec.real(), std_ln)
    functions['LOG'] = BuiltinFunction('LOG', 1, TypeSpec.real(), std_log)
    functions['SQR'] = BuiltinFunction('SQR', 1, TypeSpec.real(), std_sqr)
    functions['INT'] = BuiltinFunction('INT', 1, TypeSpec.integer(), std_int)
    functions['SGN'] = BuiltinFunction('SGN', 1, TypeSpec.integer(), std_sgn)
    functions['PI'] = BuiltinFunction('PI', 0, TypeSpec.real(), std_pi)
    functions['RND'] = BuiltinFunction('RND', None, None, std_rnd)
    return functions
