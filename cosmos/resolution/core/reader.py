"""
The reader is the boundary between the pure parsing logic and the file system.

It reads PHP source from files or streams, runs it through the lexer, the token
normalizer and the parser, and picks out the resolution context a caller asks for.
"""

import logging
import os
from functools import lru_cache
from typing import IO, List, Optional, Union

from cosmos.exceptions import CosmosError, ErrorCode
from cosmos.parser.core.classes import ParsedResolutionContext
from cosmos.parser.core.lexer import PhpLexer
from cosmos.parser.core.parser import ResolutionContextParser
from cosmos.parser.core.token_normalizer import TokenNormalizer
from cosmos.symbol import Symbol, SymbolType, as_symbol

from .context import ResolutionContext

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class ResolutionContextReader:
    def __init__(
        self,
        lexer: Optional[PhpLexer] = None,
        token_normalizer: Optional[TokenNormalizer] = None,
        parser: Optional[ResolutionContextParser] = None,
    ):
        self.lexer = lexer or PhpLexer()
        self.token_normalizer = token_normalizer or TokenNormalizer()
        self.parser = parser or ResolutionContextParser()

    def read_source(self, source: str, path: Optional[str] = None) -> List[ParsedResolutionContext]:
        tokens = self.token_normalizer.normalize_tokens(self.lexer.tokenize(source, path))
        return self.parser.parse_contexts(tokens)

    # --- Files ---

    def read_all_from_file(self, path: PathLike) -> List[ParsedResolutionContext]:
        path = os.fspath(path)
        source = self._read_file(path)
        return self.read_source(source, path)

    def read_from_file(self, path: PathLike, index: int = 0) -> ParsedResolutionContext:
        path = os.fspath(path)
        return self._select_by_index(self.read_all_from_file(path), index, path)

    def read_from_file_by_position(self, path: PathLike, line: int, column: int = 1) -> ResolutionContext:
        return self._select_by_position(self.read_all_from_file(path), line, column)

    def read_from_file_by_symbol(
        self,
        path: PathLike,
        symbol: Union[Symbol, str],
        symbol_type: SymbolType = SymbolType.CLASS,
    ) -> ParsedResolutionContext:
        """Finds the context in which `symbol` is declared, e.g. to resolve names inside a known class."""
        path = os.fspath(path)
        symbol = as_symbol(symbol).to_absolute().normalize()

        for context in self.read_all_from_file(path):
            for parsed_symbol in context.symbols:
                if parsed_symbol.symbol == symbol and _kinds_match(parsed_symbol.kind, symbol_type):
                    logger.debug("Found %s %s in %s", symbol_type.value, symbol, path)
                    return context

        raise CosmosError(ErrorCode.UNDEFINED_SYMBOL, path=path, symbol_type=symbol_type.value, symbol=str(symbol))

    # --- Streams ---

    def read_all_from_stream(self, stream: IO, path: Optional[str] = None) -> List[ParsedResolutionContext]:
        try:
            source = stream.read()
        except OSError as e:
            target = f"'{path}'" if path else "stream"
            raise CosmosError(ErrorCode.READ_FAILURE, path=path, target=target, reason=e.strerror or str(e)) from e

        if isinstance(source, bytes):
            source = source.decode("utf-8")
        return self.read_source(source, path)

    def read_from_stream(self, stream: IO, index: int = 0, path: Optional[str] = None) -> ParsedResolutionContext:
        return self._select_by_index(self.read_all_from_stream(stream, path), index, path)

    def read_from_stream_by_position(self, stream: IO, line: int, column: int = 1, path: Optional[str] = None) -> ResolutionContext:
        return self._select_by_position(self.read_all_from_stream(stream, path), line, column)

    # --- Helpers ---

    def _read_file(self, path: str) -> str:
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                source = f.read()
        except OSError as e:
            raise CosmosError(ErrorCode.READ_FAILURE, path=path, target=f"'{path}'", reason=e.strerror or str(e)) from e

        logger.debug("Read %d characters from %s", len(source), path)
        return source

    def _select_by_index(self, contexts: List[ParsedResolutionContext], index: int, path: Optional[str]) -> ParsedResolutionContext:
        if index < 0 or index >= len(contexts):
            raise CosmosError(ErrorCode.UNDEFINED_RESOLUTION_CONTEXT, path=path, index=index)
        return contexts[index]

    def _select_by_position(self, contexts: List[ParsedResolutionContext], line: int, column: int) -> ResolutionContext:
        """The last context starting at or before the position, or an empty global context."""
        selected: ResolutionContext = ResolutionContext()
        for context in contexts:
            if (context.span.line, context.span.column) > (line, column):
                break
            selected = context
        return selected


def _kinds_match(declared: SymbolType, requested: SymbolType) -> bool:
    if requested.is_type:
        return declared.is_type
    return declared is requested


@lru_cache(maxsize=None)
def default_reader() -> ResolutionContextReader:
    """A shared reader for callers that do not need to configure one."""
    return ResolutionContextReader()
