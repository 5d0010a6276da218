"""Type definitions and helpers for BBC BASIC values.

This module defines the runtime type system used by the interpreter.
Values are plain Python objects: ``int`` for Integer, ``float`` for Real
and ``str`` for String. A variable's type is fixed by the sigil at the
end of its name (``%`` Integer, ``$`` String, none Real). The helpers
here check and convert values against those types and format numbers
the way BASIC prints them.

Like the rest of the low-level helpers, these functions raise ordinary
Python exceptions (``TypeError``, ``OverflowError``, ``ValueError``);
the environment translates them into interpreter faults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple
import math


INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1
MAX_STRING = 255


@dataclass(frozen=True)
class TypeSpec:
    """The declared type of a variable, array or function result.

    `kind` is one of 'Integer', 'Real' or 'String'.
    """
    kind: str

    def __repr__(self) -> str:
        return self.kind

    # Convenience constructors
    @staticmethod
    def integer() -> 'TypeSpec':
        return TypeSpec('Integer')

    @staticmethod
    def real() -> 'TypeSpec':
        return TypeSpec('Real')

    @staticmethod
    def string() -> 'TypeSpec':
        return TypeSpec('String')

    @staticmethod
    def for_name(name: str) -> 'TypeSpec':
        """Return the type fixed by the sigil at the end of `name`."""
        if name.endswith('%'):
            return TypeSpec.integer()
        if name.endswith('$'):
            return TypeSpec.string()
        return TypeSpec.real()

    @property
    def is_numeric(self) -> bool:
        return self.kind != 'String'

    def default(self) -> Any:
        if self.kind == 'Integer':
            return 0
        if self.kind == 'Real':
            return 0.0
        return ''


@dataclass(frozen=True)
class ErrorInfo:
    """The (code, line, message) triple reported for the last fault.

    The program sees it through the ERR, ERL and REPORT$ pseudo-variables.
    """
    code: int
    line: int
    message: str


@dataclass
class ArrayVal:
    """A dimensioned array.

    `dims` holds the number of slots per dimension (declared bound + 1)
    and `items` the row-major flat backing store. The shape never changes
    after DIM.
    """
    elem_type: TypeSpec
    dims: Tuple[int, ...]
    items: List[Any]

    @staticmethod
    def create(elem_type: TypeSpec, bounds: List[int]) -> 'ArrayVal':
        dims = tuple(b + 1 for b in bounds)
        size = 1
        for d in dims:
            size *= d
        return ArrayVal(elem_type, dims, [elem_type.default()] * size)

    def flat_index(self, indices: List[int]) -> int:
        """Map subscripts to a position in `items`.

        Raises IndexError for a wrong subscript count or an index outside
        its dimension.
        """
        if len(indices) != len(self.dims):
            raise IndexError(f'expected {len(self.dims)} subscripts, got {len(indices)}')
        position = 0
        for index, size in zip(indices, self.dims):
            if index < 0 or index >= size:
                raise IndexError(f'subscript {index} out of range 0..{size - 1}')
            position = position * size + index
        return position

    def __repr__(self) -> str:
        bounds = ','.join(str(d - 1) for d in self.dims)
        return f"Array({self.elem_type!r}({bounds}))"


def type_name(value: Any) -> str:
    if isinstance(value, bool):
        return 'Integer'
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, float):
        return 'Real'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, ArrayVal):
        return 'Array'
    return type(value).__name__


def is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def truncate_to_int(x: float) -> int:
    """Truncate toward zero, the way BASIC stores a Real in an Integer.

    Raises OverflowError when the result does not fit in 32 bits.
    """
    if isinstance(x, float) and (math.isnan(x) or math.isinf(x)):
        raise OverflowError('number too big for an integer')
    result = int(x)
    if result < INT_MIN or result > INT_MAX:
        raise OverflowError('number too big for an integer')
    return result


def fits_int32(n: int) -> bool:
    return INT_MIN <= n <= INT_MAX


def check_value(value: Any, spec: TypeSpec) -> bool:
    """Check whether a runtime value can be stored under a type.

    Numbers of either kind are accepted for numeric types (conversion is
    done by `convert_value`); strings only for String. Raises TypeError
    with a descriptive message on a mismatch.
    """
    if spec.kind == 'String':
        if isinstance(value, str):
            return True
        raise TypeError(f'expected String, got {type_name(value)}')
    if is_numeric(value):
        return True
    raise TypeError(f'expected {spec.kind}, got {type_name(value)}')


def convert_value(value: Any, spec: TypeSpec) -> Any:
    """Coerce `value` to `spec`, as an assignment to a variable of that type does.

    Real to Integer truncates toward zero, Integer to Real widens. Raises
    TypeError on a string/number mismatch, OverflowError when an Integer
    would not fit in 32 bits and ValueError for an over-long string.
    """
    check_value(value, spec)
    if spec.kind == 'Integer':
        if isinstance(value, float):
            return truncate_to_int(value)
        if not fits_int32(value):
            raise OverflowError('number too big for an integer')
        return int(value)
    if spec.kind == 'Real':
        return float(value)
    if len(value) > MAX_STRING:
        raise ValueError('string too long')
    return value


def format_number(value: Any) -> str:
    """Format a number the way PRINT and STR$ show it.

    Integers print as-is. Reals print with up to nine significant digits,
    without a trailing '.0' when they hold a whole number, and with a
    BBC-style exponent ('1E10', '1.5E-7') when very large or small.
    """
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value) or math.isinf(value):
        return str(value)
    if value == int(value) and abs(value) < 1e10:
        return str(int(value))
    text = '%.9G' % value
    if 'E' in text:
        mantissa, exponent = text.split('E')
        if '.' in mantissa:
            mantissa = mantissa.rstrip('0').rstrip('.')
        return f'{mantissa}E{int(exponent)}'
    return text


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    return format_number(value)
