"""
The resolution context parser.

Scans a normalized PHP token stream once and records, for every namespace block,
the namespace name, its use statements and the symbols declared directly inside
it. Only structural markers are recognized; any token that does not fit the
current state is skipped, so partial or invalid source still yields contexts.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from cosmos.config import (
    BRACE_OPEN_TOKENS,
    CONSTANT_CLOSE_TOKENS,
    CONSTANT_OPEN_TOKENS,
    DECLARATION_TOKENS,
    END_TOKEN,
    NAME_TOKENS,
    NAMESPACE_SEPARATOR,
    OPEN_TAG_TOKENS,
    TRIVIA_TOKENS,
)
from cosmos.exceptions import CosmosError, ErrorCode
from cosmos.symbol import Symbol, SymbolType
from cosmos.use_statement import UseStatementClause, UseStatementType

from .classes import NormalizedToken, ParsedResolutionContext, ParsedSymbol, ParsedUseStatement, Span
from .lexer import PhpLexer
from .token_normalizer import TokenNormalizer

logger = logging.getLogger(__name__)


class ParserState(Enum):
    START = "start"
    NAMESPACE_NAME = "namespace-name"
    NAMESPACE_HEADER = "namespace-header"
    USE_STATEMENT_SYMBOL = "use-statement-symbol"
    USE_STATEMENT_ALIAS = "use-statement-alias"
    DECLARATION_NAME = "declaration-name"
    DECLARATION_HEADER = "declaration-header"
    DECLARATION_BODY = "declaration-body"
    DECLARATION_END = "declaration-end"


@dataclass
class _ContextFrame:
    """Token bounds of the context being built. `end` stays None until something is consumed."""

    start: int
    end: Optional[int] = None
    explicit: bool = False


class ResolutionContextParser:
    def parse_contexts(self, tokens: Sequence[NormalizedToken]) -> List[ParsedResolutionContext]:
        """Returns every resolution context found in `tokens`, in source order."""
        self._check_normalized(tokens)
        contexts = _ParseRun(tokens).run()
        logger.debug("Parsed %d resolution context(s) from %d tokens", len(contexts), len(tokens))
        return contexts

    def _check_normalized(self, tokens: Sequence[NormalizedToken]):
        for index, token in enumerate(tokens):
            if not isinstance(token, tuple) or len(token) != 6:
                raise CosmosError(ErrorCode.TOKENS_NOT_NORMALIZED, index=index)
        if not tokens or tokens[-1][0] != END_TOKEN:
            raise CosmosError(ErrorCode.TOKENS_NOT_NORMALIZED, index=len(tokens))


class _ParseRun:
    """The mutable scanner state for a single `parse_contexts` call."""

    def __init__(self, tokens: Sequence[NormalizedToken]):
        self.tokens = tokens
        self.contexts: List[ParsedResolutionContext] = []
        self.state = ParserState.START
        self.stack: List[ParserState] = []

        # --- Current context ---
        self.frame = _ContextFrame(start=0)
        self.namespace = Symbol.global_namespace()
        self.namespace_span: Optional[Span] = None
        self.use_statements: List[ParsedUseStatement] = []
        self.symbols: List[ParsedSymbol] = []

        # --- Name buffer shared by namespace names and use clauses ---
        self.atoms: List[str] = []
        self.namespace_start: Optional[int] = None

        # --- Use statement being scanned ---
        self.use_start = 0
        self.use_type = UseStatementType.TYPE
        self.use_prefix: List[str] = []
        self.use_alias: Optional[str] = None
        self.use_in_group = False
        # Mixed group use (`use A\{B, function c}`) types each clause on its own
        self.use_clause_type: Optional[UseStatementType] = None
        self.use_clauses: List[Tuple[UseStatementType, UseStatementClause]] = []

        # --- Declaration being scanned ---
        self.declaration_kind: Optional[SymbolType] = None
        self.declaration_start: Optional[int] = None
        self.declaration_name: Optional[str] = None
        self.declaration_symbol: Optional[Symbol] = None
        self.depth = 0

        self.handlers = {
            ParserState.START: self._scan_top_level,
            ParserState.NAMESPACE_HEADER: self._scan_top_level,
            ParserState.DECLARATION_END: self._scan_top_level,
            ParserState.NAMESPACE_NAME: self._scan_namespace_name,
            ParserState.USE_STATEMENT_SYMBOL: self._scan_use_statement_symbol,
            ParserState.USE_STATEMENT_ALIAS: self._scan_use_statement_alias,
            ParserState.DECLARATION_NAME: self._scan_declaration_name,
            ParserState.DECLARATION_HEADER: self._scan_declaration_header,
            ParserState.DECLARATION_BODY: self._scan_declaration_body,
        }

    def run(self) -> List[ParsedResolutionContext]:
        for index, token in enumerate(self.tokens):
            kind = token[0]
            if kind == END_TOKEN:
                self._finish()
                break
            if kind in TRIVIA_TOKENS:
                continue
            self.handlers[self.state](index, token)
        return self.contexts

    # --- State handlers ---

    def _scan_top_level(self, index: int, token: NormalizedToken):
        kind = token[0]
        if kind in OPEN_TAG_TOKENS:
            if not self.frame.explicit and not self.symbols:
                self.frame = _ContextFrame(start=index + 1)
        elif kind == "T_NAMESPACE":
            self.stack.append(self.state)
            self.state = ParserState.NAMESPACE_NAME
            self.namespace_start = index
            self.atoms = []
        elif kind == "T_USE":
            self._begin_use_statement(index)
        elif kind in DECLARATION_TOKENS:
            self._begin_declaration(index, SymbolType(DECLARATION_TOKENS[kind]))

    def _scan_namespace_name(self, index: int, token: NormalizedToken):
        kind = token[0]
        if kind in NAME_TOKENS:
            self.atoms.extend(_name_atoms(token[1]))
        elif kind == "T_NS_SEPARATOR":
            if not self.atoms:
                # `namespace\foo()` is the namespace operator, not a declaration
                self.state = self.stack.pop()
                self.namespace_start = None
        elif kind in (";", "{"):
            self._begin_namespace(index)

    def _scan_use_statement_symbol(self, index: int, token: NormalizedToken):
        kind = token[0]
        if kind in NAME_TOKENS:
            self.atoms.extend(_name_atoms(token[1]))
        elif kind in ("T_FUNCTION", "T_CONST") and not self.atoms:
            use_type = UseStatementType.FUNCTION if kind == "T_FUNCTION" else UseStatementType.CONSTANT
            if self.use_in_group:
                self.use_clause_type = use_type
            elif self._use_statement_is_empty():
                self.use_type = use_type
        elif kind == "T_AS":
            self.state = ParserState.USE_STATEMENT_ALIAS
        elif kind == "{":
            self.use_prefix = self.atoms
            self.use_in_group = True
            self.atoms = []
        elif kind in (",", "}"):
            self._end_use_clause()
        elif kind == ";":
            self._end_use_clause()
            self._end_use_statement(index)

    def _scan_use_statement_alias(self, index: int, token: NormalizedToken):
        if token[0] in NAME_TOKENS:
            self.use_alias = token[1]
            self.state = ParserState.USE_STATEMENT_SYMBOL

    def _scan_declaration_name(self, index: int, token: NormalizedToken):
        kind = token[0]
        if self.declaration_start is None:
            self.declaration_start = index

        if kind == "T_STRING":
            # Typed constants (`const int FOO`) put the name last
            self.declaration_name = token[1]
        elif self.declaration_kind is SymbolType.CONSTANT:
            if kind == "=":
                self._resolve_declaration()
                self.depth = 0
                self.state = ParserState.DECLARATION_HEADER
            elif kind == ";":
                self.state = ParserState.NAMESPACE_HEADER
        elif kind in ("T_EXTENDS", "T_IMPLEMENTS", "(", ":"):
            self._resolve_declaration()
            self.state = ParserState.DECLARATION_HEADER
        elif kind in BRACE_OPEN_TOKENS:
            self._resolve_declaration()
            self._enter_body()
        elif kind == ";":
            self.state = ParserState.NAMESPACE_HEADER

    def _scan_declaration_header(self, index: int, token: NormalizedToken):
        kind = token[0]
        if self.declaration_kind is SymbolType.CONSTANT:
            self._scan_constant_value(index, kind)
        elif kind in BRACE_OPEN_TOKENS:
            self._enter_body()
        elif kind == ";":
            self.state = ParserState.NAMESPACE_HEADER

    def _scan_constant_value(self, index: int, kind: str):
        if kind in CONSTANT_OPEN_TOKENS:
            self.depth += 1
        elif kind in CONSTANT_CLOSE_TOKENS:
            self.depth -= 1
        elif self.depth == 0 and kind == ",":
            self._end_declaration(index)
            self._begin_declaration(None, SymbolType.CONSTANT)
        elif self.depth == 0 and kind == ";":
            self._end_declaration(index)
            self.state = ParserState.DECLARATION_END

    def _scan_declaration_body(self, index: int, token: NormalizedToken):
        kind = token[0]
        if kind in BRACE_OPEN_TOKENS:
            self.depth += 1
        elif kind == "}":
            self.depth -= 1
            if self.depth == 0:
                self._end_declaration(index)
                self.state = ParserState.DECLARATION_END

    # --- Namespaces ---

    def _begin_namespace(self, index: int):
        if self.frame.explicit or self.symbols:
            self._end_context()

        self.namespace = Symbol.from_atoms(self.atoms).normalize()
        self.namespace_span = self._span(self.namespace_start, index)
        self.frame = _ContextFrame(start=self.namespace_start, end=index, explicit=True)
        self.atoms = []
        # The namespace block replaces whatever scope the keyword was found in
        self.stack.pop()
        self.state = ParserState.NAMESPACE_HEADER

    def _end_context(self):
        self.contexts.append(
            ParsedResolutionContext(
                primary_namespace=self.namespace,
                use_statements=tuple(self.use_statements),
                symbols=tuple(self.symbols),
                span=self._context_span(),
                namespace_span=self.namespace_span,
            )
        )
        self.namespace = Symbol.global_namespace()
        self.namespace_span = None
        self.use_statements = []
        self.symbols = []

    def _finish(self):
        if self.frame.explicit or self.symbols or not self.contexts:
            self._end_context()

    # --- Use statements ---

    def _begin_use_statement(self, index: int):
        if not self.frame.explicit:
            self.frame = _ContextFrame(start=index, explicit=True)

        self.use_start = index
        self.use_type = UseStatementType.TYPE
        self.use_prefix = []
        self.use_alias = None
        self.use_in_group = False
        self.use_clause_type = None
        self.use_clauses = []
        self.atoms = []
        self.state = ParserState.USE_STATEMENT_SYMBOL

    def _use_statement_is_empty(self) -> bool:
        return not (self.atoms or self.use_prefix or self.use_clauses)

    def _end_use_clause(self):
        if self.atoms:
            symbol = Symbol.from_atoms(self.use_prefix + self.atoms)
            clause = UseStatementClause(symbol=symbol, alias=self.use_alias)
            self.use_clauses.append((self.use_clause_type or self.use_type, clause))
        self.atoms = []
        self.use_alias = None
        self.use_clause_type = None

    def _end_use_statement(self, index: int):
        if self.use_clauses:
            span = self._span(self.use_start, index)
            by_type: Dict[UseStatementType, List[UseStatementClause]] = {}
            for use_type, clause in self.use_clauses:
                by_type.setdefault(use_type, []).append(clause)
            for use_type, clauses in by_type.items():
                self.use_statements.append(ParsedUseStatement(clauses=tuple(clauses), type=use_type, span=span))
            self.frame.end = index

        self.use_clauses = []
        self.use_prefix = []
        self.use_in_group = False
        self.state = ParserState.NAMESPACE_HEADER

    # --- Declarations ---

    def _begin_declaration(self, index: Optional[int], kind: SymbolType):
        self.declaration_kind = kind
        self.declaration_start = index
        self.declaration_name = None
        self.declaration_symbol = None
        self.depth = 0
        self.state = ParserState.DECLARATION_NAME

    def _resolve_declaration(self):
        # Anonymous classes and closures have no name and are never recorded
        if self.declaration_name is not None:
            reference = Symbol.from_atoms([self.declaration_name], is_qualified=False)
            self.declaration_symbol = self.namespace.join(reference).normalize()

    def _enter_body(self):
        self.depth = 1
        self.state = ParserState.DECLARATION_BODY

    def _end_declaration(self, index: int):
        if self.declaration_symbol is None:
            return
        self.symbols.append(
            ParsedSymbol(
                symbol=self.declaration_symbol,
                kind=self.declaration_kind,
                span=self._span(self.declaration_start, index),
            )
        )

    # --- Spans ---

    def _span(self, start: int, end: int) -> Span:
        first = self.tokens[start]
        last = self.tokens[end]
        return Span(
            line=first[2],
            column=first[3],
            offset=first[4],
            size=last[4] + last[5] - first[4],
            token_offset=start,
            token_size=end - start + 1,
        )

    def _context_span(self) -> Span:
        if self.frame.end is None:
            first = self.tokens[self.frame.start]
            return Span(line=first[2], column=first[3], offset=first[4], size=0, token_offset=self.frame.start, token_size=0)
        return self._span(self.frame.start, self.frame.end)


def _name_atoms(text: str) -> List[str]:
    return [atom for atom in text.split(NAMESPACE_SEPARATOR) if atom]


def parse_source(source: str, file_path: Optional[str] = None) -> List[ParsedResolutionContext]:
    """Tokenizes, normalizes and parses PHP source into its resolution contexts."""
    tokens = TokenNormalizer().normalize_tokens(PhpLexer().tokenize(source, file_path))
    return ResolutionContextParser().parse_contexts(tokens)
