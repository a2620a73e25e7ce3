"""
Symbol name manipulation and use statement generation for PHP source code.
"""

from .exceptions import CosmosError, ErrorCode
from .symbol import Symbol, SymbolType
from .use_statement import UseStatement, UseStatementClause, UseStatementNormalizer, UseStatementType
from .resolution.core.context import ResolutionContext
from .parser.core.classes import ParsedResolutionContext, ParsedSymbol, ParsedUseStatement, Span
from .parser.core.parser import ResolutionContextParser, parse_source
from .resolution.core.generator import ResolutionContextGenerator
from .resolution.core.renderer import ResolutionContextRenderer
from .resolution.core.reader import ResolutionContextReader, default_reader
from .resolution.core.stream_editor import StreamEditor
from .resolution.core.writer import ResolutionContextWriter
