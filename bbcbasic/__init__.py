# BBC BASIC package
# This package provides a tokenizer, parser and interpreter for line-numbered BBC BASIC.
from .errors import (
    BasicError, SyntaxFault, TypeFault, RangeFault, UndefinedNameFault,
    StackFault, ArithmeticFault,
)
from .interpreter import Interpreter, run_program, run_file
from .program import ProgramStore, load_program

__all__ = [
    'Interpreter',
    'run_program',
    'run_file',
    'ProgramStore',
    'load_program',
    'BasicError',
    'SyntaxFault',
    'TypeFault',
    'RangeFault',
    'UndefinedNameFault',
    'StackFault',
    'ArithmeticFault',
]
