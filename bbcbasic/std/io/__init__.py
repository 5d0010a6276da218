from .basic_io import BasicIO
from bbcbasic.builtin_function import BuiltinFunction
from bbcbasic.types import TypeSpec
from typing import Dict, List, Any


def populate_io_builtins(basic_io: BasicIO) -> Dict[str, BuiltinFunction]:
    """Functions that report the state of the console: POS and VPOS."""

    def std_pos(args: List[Any]) -> Any:
        return basic_io.column

    def std_vpos(args: List[Any]) -> Any:
        return basic_io.row

    return {
        'POS': BuiltinFunction('POS', 0, TypeSpec.integer(), std_pos),
        'VPOS': BuiltinFunction('VPOS', 0, TypeSpec.integer(), std_vpos),
    }
