"""
Defines the data structures produced by the resolution context parser.

Every parsed construct carries a `Span` locating it in the source, both as
line/column/byte coordinates and as a slice of the normalized token stream,
so callers can recover the exact source text of any construct.
"""

from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from cosmos.resolution.core.context import ResolutionContext
from cosmos.symbol import Symbol, SymbolType
from cosmos.use_statement import UseStatement

# (kind, text, line) as produced by a lexer, or a bare single character
RawToken = Union[Tuple[str, str, int], str]

# (kind, text, line, column, byte offset, byte size)
NormalizedToken = Tuple[str, str, int, int, int, int]


class Span(BaseModel):
    """Locates a construct in the source and in the normalized token stream."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    offset: int
    size: int
    token_offset: int
    token_size: int

    def extract(self, source: str) -> str:
        """Returns the source text covered by this span. Offsets are UTF-8 byte offsets."""
        return source.encode("utf-8")[self.offset : self.offset + self.size].decode("utf-8")


class ParsedSymbol(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    kind: SymbolType
    span: Span

    def __str__(self) -> str:
        return str(self.symbol)


class ParsedUseStatement(UseStatement):
    span: Span


class ParsedResolutionContext(ResolutionContext):
    use_statements: Tuple[ParsedUseStatement, ...] = ()
    symbols: Tuple[ParsedSymbol, ...] = ()
    span: Span
    # From the `namespace` keyword through its `;` or `{`. None for implicit global code.
    namespace_span: Optional[Span] = None
