import os
from typing import Optional

from lark import Lark
from lark.exceptions import LarkError, UnexpectedCharacters, UnexpectedInput

from cosmos.exceptions import CosmosError, ErrorCode


def load_php_grammar() -> str:
    try:
        # Use importlib.resources for robust package data access
        from importlib.resources import files as pkg_files

        return (pkg_files("cosmos.parser") / "php.lark").read_text(encoding="utf-8")
    except Exception:
        # Fallback for development checkouts where the package data is not installed
        grammar_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "php.lark")
        with open(grammar_path, "r", encoding="utf-8") as f:
            return f.read()


def build_lark_lexer() -> Lark:
    # The contextual lexer only offers PHP tokens after an open tag, which keeps inline HTML intact
    return Lark(load_php_grammar(), start="start", parser="lalr", lexer="contextual", keep_all_tokens=True)


def _translate_lark_error(e: LarkError, file_path: Optional[str] = None) -> CosmosError:
    """Wraps a lark failure so callers only ever see CosmosError."""
    if isinstance(e, UnexpectedCharacters):
        details = f"Unexpected character '{e.char}' at line {e.line}, column {e.column}."
    elif isinstance(e, UnexpectedInput):
        details = f"Unexpected input at line {e.line}, column {e.column}."
    else:
        details = str(e)
    return CosmosError(ErrorCode.LEXER_FAILURE, path=file_path, details=details)
