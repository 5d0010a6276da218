from typing import Optional
from bbcbasic.types import ErrorInfo


# BBC BASIC error numbers reported through ERR
ERR_BAD_DIM = 10
ERR_NO_ROOM = 11
ERR_NOT_LOCAL = 12
ERR_NO_PROC = 13
ERR_ARRAY = 14
ERR_SUBSCRIPT = 15
ERR_TYPE_MISMATCH = 6
ERR_DIVISION_BY_ZERO = 18
ERR_STRING_TOO_LONG = 19
ERR_TOO_BIG = 20
ERR_NEGATIVE_ROOT = 21
ERR_LOG_RANGE = 22
ERR_NO_SUCH_VARIABLE = 26
ERR_NO_SUCH_FN_PROC = 29
ERR_ARGUMENTS = 31
ERR_NO_FOR = 32
ERR_CANT_MATCH_FOR = 33
ERR_TOO_MANY_FORS = 35
ERR_BAD_STEP = 36
ERR_TOO_MANY_GOSUBS = 37
ERR_NO_GOSUB = 38
ERR_NO_SUCH_LINE = 41
ERR_OUT_OF_DATA = 42
ERR_NO_REPEAT = 43
ERR_TOO_MANY_REPEATS = 44
ERR_NOT_IN_WHILE = 46
ERR_MISSING_ENDWHILE = 47
ERR_SYNTAX = 220
ERR_UNKNOWN = 255


class BasicError(Exception):
    """Base class for every fault raised by the interpreter.

    A fault carries the numeric code exposed through ERR, the program
    line it happened on (filled in by the engine when the fault leaves a
    statement) and, for lexer/parser faults, the offending column.
    """
    default_code = ERR_UNKNOWN
    default_message = 'Error'

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.message = message if message is not None else self.default_message
        self.code = code if code is not None else self.default_code
        self.line = line
        self.column = column
        super().__init__(self.message)

    @property
    def info(self) -> ErrorInfo:
        return ErrorInfo(self.code, self.line if self.line is not None else 0, self.message)

    def __str__(self) -> str:
        text = self.message
        if self.line is not None:
            text += f' at line {self.line}'
        if self.column is not None:
            text += f', column {self.column}'
        return text


class SyntaxFault(BasicError):
    """Raised by the lexer and parsers."""
    default_code = ERR_SYNTAX
    default_message = 'Syntax error'


class TypeFault(BasicError):
    default_code = ERR_TYPE_MISMATCH
    default_message = 'Type mismatch'


class RangeFault(BasicError):
    default_code = ERR_SUBSCRIPT
    default_message = 'Subscript out of range'


class UndefinedNameFault(BasicError):
    default_code = ERR_NO_SUCH_VARIABLE
    default_message = 'No such variable'


class StackFault(BasicError):
    """Unmatched loop/call terminator, LOCAL outside a scope, or too deep."""
    default_code = ERR_NO_GOSUB
    default_message = 'No GOSUB'


class ArithmeticFault(BasicError):
    default_code = ERR_DIVISION_BY_ZERO
    default_message = 'Division by zero'


class ProgramEnd(Exception):
    """Internal signal used to stop the run on END, STOP and QUIT."""
    def __init__(self, keyword: str = 'END'):
        super().__init__(keyword)
        self.keyword = keyword
