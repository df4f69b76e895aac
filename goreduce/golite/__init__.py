"""Go subset front end: public API."""

from __future__ import annotations

from .ast import File
from .emit import to_source
from .parse import ParseError as ParseError, Parser
from .resolve import resolve as resolve, verify as verify
from .symbols import StaleIndexError as StaleIndexError, SymbolIndex as SymbolIndex
from .tokens import TokenizeError as TokenizeError, tokenize


def parse(source: str) -> File:
    """Parse Go source code into a File AST."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_file()


def emit(file: File) -> str:
    """Emit a `File` AST as Go source text."""
    return to_source(file)
