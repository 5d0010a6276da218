from typing import Any, Dict, List, Tuple

from bbcbasic.errors import (
    ArithmeticFault, RangeFault, StackFault, TypeFault, UndefinedNameFault,
    ERR_ARRAY, ERR_BAD_DIM, ERR_NOT_LOCAL, ERR_STRING_TOO_LONG, ERR_TOO_BIG,
)
from bbcbasic.types import ArrayVal, TypeSpec, convert_value, truncate_to_int


class _Absent:
    """Marks a name that had no value before a LOCAL shadowed it."""
    def __repr__(self) -> str:
        return 'ABSENT'


ABSENT = _Absent()


def coerce(name: str, value: Any, spec: TypeSpec) -> Any:
    """Convert `value` for storage under `spec`, raising the matching fault."""
    try:
        return convert_value(value, spec)
    except TypeError:
        raise TypeFault(f'Type mismatch: {name} is {spec.kind}')
    except OverflowError:
        raise ArithmeticFault('Too big', code=ERR_TOO_BIG)
    except ValueError:
        raise RangeFault('String too long', code=ERR_STRING_TOO_LONG)


class ScopeFrame:
    """Names shadowed by one PROC/FN activation and the values they hid."""
    def __init__(self):
        self.entries: List[Tuple[str, Tuple[Any, Any]]] = []

    def __repr__(self) -> str:
        return f"ScopeFrame({[name for name, _ in self.entries]})"


class Environment:
    """Typed scalar and array storage plus the stack of LOCAL scopes.

    Scalars live in `values`, keyed by their full name, so `A`, `A%` and
    `A$` are three variables. A sigil-less name may also hold an Integer
    in `loop_integers` when a FOR loop with integer bounds used it as its
    counter; `lookup_numeric` checks the Real first, then that Integer.
    """
    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.loop_integers: Dict[str, int] = {}
        self.arrays: Dict[str, ArrayVal] = {}
        self.scopes: List[ScopeFrame] = []

    def clear(self):
        self.values.clear()
        self.loop_integers.clear()
        self.arrays.clear()
        self.scopes.clear()

    # Scalars

    def has_scalar(self, name: str) -> bool:
        return name in self.values or name in self.loop_integers

    def get_scalar(self, name: str) -> Any:
        if TypeSpec.for_name(name).kind == 'Real':
            return self.lookup_numeric(name)
        if name in self.values:
            return self.values[name]
        raise UndefinedNameFault(f'No such variable {name}')

    def lookup_numeric(self, name: str) -> Any:
        """Two-step lookup for a sigil-less name: Real first, then loop Integer."""
        if name in self.values:
            return self.values[name]
        if name in self.loop_integers:
            return self.loop_integers[name]
        raise UndefinedNameFault(f'No such variable {name}')

    def set_scalar(self, name: str, value: Any):
        spec = TypeSpec.for_name(name)
        self.values[name] = coerce(name, value, spec)
        self.loop_integers.pop(name, None)

    def set_loop_integer(self, name: str, value: int):
        """Store an Integer counter under a sigil-less name."""
        self.loop_integers[name] = value
        self.values.pop(name, None)

    # Arrays

    def has_array(self, name: str) -> bool:
        return name in self.arrays

    def dim_array(self, name: str, bounds: List[Any]):
        if name in self.arrays:
            raise RangeFault(f'Bad DIM: {name} already dimensioned', code=ERR_BAD_DIM)
        int_bounds = [self._index(b) for b in bounds]
        if not int_bounds or any(b < 0 for b in int_bounds):
            raise RangeFault(f'Bad DIM: {name}', code=ERR_BAD_DIM)
        self.arrays[name] = ArrayVal.create(TypeSpec.for_name(name), int_bounds)

    def _array(self, name: str) -> ArrayVal:
        if name not in self.arrays:
            raise UndefinedNameFault(f'Array {name} not dimensioned', code=ERR_ARRAY)
        return self.arrays[name]

    def _index(self, value: Any) -> int:
        if isinstance(value, str):
            raise TypeFault('Type mismatch: subscript must be a number')
        try:
            return truncate_to_int(value)
        except OverflowError:
            raise RangeFault('Subscript out of range')

    def _position(self, array: ArrayVal, name: str, indices: List[Any]) -> int:
        try:
            return array.flat_index([self._index(i) for i in indices])
        except IndexError as e:
            raise RangeFault(f'Subscript out of range: {name} {e}')

    def get_element(self, name: str, indices: List[Any]) -> Any:
        array = self._array(name)
        return array.items[self._position(array, name, indices)]

    def set_element(self, name: str, indices: List[Any], value: Any):
        array = self._array(name)
        position = self._position(array, name, indices)
        array.items[position] = coerce(name, value, array.elem_type)

    # Local scopes

    @property
    def scope_depth(self) -> int:
        return len(self.scopes)

    def push_scope(self):
        self.scopes.append(ScopeFrame())

    def declare_local(self, name: str):
        """Shadow `name` in the innermost scope and reset it to its default."""
        if not self.scopes:
            raise StackFault(f'Not LOCAL: {name}', code=ERR_NOT_LOCAL)
        saved = (self.values.get(name, ABSENT), self.loop_integers.get(name, ABSENT))
        self.scopes[-1].entries.append((name, saved))
        self.loop_integers.pop(name, None)
        self.values[name] = TypeSpec.for_name(name).default()

    def pop_scope(self):
        """Undo every shadow recorded in the innermost scope, latest first."""
        frame = self.scopes.pop()
        for name, (value, loop_value) in reversed(frame.entries):
            self.values.pop(name, None)
            self.loop_integers.pop(name, None)
            if value is not ABSENT:
                self.values[name] = value
            if loop_value is not ABSENT:
                self.loop_integers[name] = loop_value
