"""Ruby source to whitequark-parser style ASTs, built on Ripper."""

from .config import FrontendConfig
from .errors import FrontendError, InternalError, RubySyntaxError
from .parser import Parser, parse
from .tree import Node, Symbol, s

SyntaxError = RubySyntaxError

__all__ = [
    "FrontendConfig",
    "FrontendError",
    "InternalError",
    "Node",
    "Parser",
    "RubySyntaxError",
    "SyntaxError",
    "Symbol",
    "parse",
    "s",
]
