from dataclasses import dataclass
from typing import Any, Optional
from bbcbasic.types import TypeSpec

@dataclass
class BuiltinFunction:
    """A host function callable from BASIC expressions.

    `arity` of None means the function checks its own argument count
    (optional arguments, as in MID$ or RND).
    """
    name: str
    arity: Optional[int]
    return_type: Optional[TypeSpec]
    fn: Any
    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
