"""The built-in function library, keyed by upper-case name."""

from typing import Dict
import random

from bbcbasic.builtin_function import BuiltinFunction
from .io import BasicIO, populate_io_builtins
from .numeric import populate_numeric
from .strings import populate_strings


def populate_builtins(rng: random.Random, basic_io: BasicIO) -> Dict[str, BuiltinFunction]:
    builtins: Dict[str, BuiltinFunction] = {}
    builtins.update(populate_numeric(rng))
    builtins.update(populate_strings())
    builtins.update(populate_io_builtins(basic_io))
    return builtins
