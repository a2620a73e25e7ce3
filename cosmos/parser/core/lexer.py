"""
A PHP tokenizer producing the raw token stream consumed by the token normalizer.

Tokens mirror PHP's own tokenizer: a `(kind, text, line)` triple named after the
PHP token constant, or a bare string for single-character punctuation.
"""

from typing import List, Optional, Sequence

from lark import Lark, Token
from lark.exceptions import LarkError

from cosmos.config import (
    KEYWORD_TOKENS,
    MEMBER_ACCESS_TOKENS,
    NEWLINE_PATTERN,
    OPERATOR_TOKENS,
    TERMINAL_TOKENS,
    TRIVIA_TOKENS,
)
from cosmos.parser.utils.helpers import _translate_lark_error, build_lark_lexer

from .classes import RawToken

LARK_LEXER = build_lark_lexer()


class PhpLexer:
    def __init__(self, lark: Optional[Lark] = None):
        self.lark = lark or LARK_LEXER

    def tokenize(self, source: str, file_path: Optional[str] = None) -> List[RawToken]:
        try:
            tree = self.lark.parse(source)
        except LarkError as e:
            raise _translate_lark_error(e, file_path) from e

        lark_tokens = list(tree.scan_values(lambda value: isinstance(value, Token)))
        return self._to_raw_tokens(lark_tokens)

    def _to_raw_tokens(self, lark_tokens: Sequence[Token]) -> List[RawToken]:
        raw_tokens: List[RawToken] = []
        previous_kind = None  # kind of the previous non-trivia token
        # lark only counts `\n`, so lines are tracked here for `\r` endings too
        line = 1

        for position, token in enumerate(lark_tokens):
            token_line = line
            line += len(NEWLINE_PATTERN.findall(token.value))

            if token.type == "CHAR":
                raw_tokens.append(token.value)
                previous_kind = token.value
                continue

            if token.type == "NAME":
                kind = self._name_kind(lark_tokens, position, previous_kind)
            elif token.type == "OPERATOR":
                kind = OPERATOR_TOKENS.get(token.value, "T_OPERATOR")
            elif token.type == "NUMBER":
                kind = self._number_kind(token.value)
            else:
                kind = TERMINAL_TOKENS[token.type]

            raw_tokens.append((kind, token.value, token_line))
            if kind not in TRIVIA_TOKENS:
                previous_kind = kind

        return raw_tokens

    def _name_kind(self, lark_tokens: Sequence[Token], position: int, previous_kind: Optional[str]) -> str:
        text = lark_tokens[position].value.lower()
        keyword = KEYWORD_TOKENS.get(text)

        if previous_kind in MEMBER_ACCESS_TOKENS:
            return "T_STRING"

        if keyword is None:
            if text == "enum" and self._next_significant_type(lark_tokens, position) == "NAME":
                return "T_ENUM"
            return "T_STRING"

        # PHP 8 reads keywords inside qualified names as plain names, e.g. `Foo\List`.
        # `namespace\foo` is the namespace operator and keeps its keyword.
        preceded_by_separator = position > 0 and lark_tokens[position - 1].type == "NS_SEPARATOR"
        followed_by_separator = position + 1 < len(lark_tokens) and lark_tokens[position + 1].type == "NS_SEPARATOR"
        if preceded_by_separator or (followed_by_separator and keyword != "T_NAMESPACE"):
            return "T_STRING"

        return keyword

    def _next_significant_type(self, lark_tokens: Sequence[Token], position: int) -> Optional[str]:
        for token in lark_tokens[position + 1 :]:
            if token.type not in ("WHITESPACE", "COMMENT", "DOC_COMMENT"):
                return token.type
        return None

    def _number_kind(self, text: str) -> str:
        if text[:2].lower() in ("0x", "0b"):
            return "T_LNUMBER"
        if "." in text or "e" in text.lower():
            return "T_DNUMBER"
        return "T_LNUMBER"
