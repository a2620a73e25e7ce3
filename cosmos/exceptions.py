"""
Custom exception types for the cosmos symbol resolution library.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):

    # --- Symbol Errors ---
    INVALID_SYMBOL_ATOM = "Invalid symbol atom '{atom}'. Atoms must be valid PHP identifiers."
    INVALID_ALIAS = "Invalid use statement alias '{alias}'. Aliases must be a single atom and cannot be '.' or '..'."

    # --- Use Statement Errors ---
    EMPTY_USE_STATEMENT = "Use statements must contain at least one clause."

    # --- Parsing Errors ---
    # Raised when the parser is handed raw lexer output instead of normalized tokens.
    TOKENS_NOT_NORMALIZED = "Token {index} is not a normalized token. Pass the token stream through the token normalizer first."

    # This is a fallback for any lark failure while tokenizing.
    LEXER_FAILURE = "Unable to tokenize the source. Details: {details}"

    # --- Lookup Errors ---
    UNDEFINED_RESOLUTION_CONTEXT = "No resolution context defined at index {index}."
    UNDEFINED_SYMBOL = "Undefined {symbol_type} '{symbol}'."

    # --- I/O Errors ---
    READ_FAILURE = "Unable to read from {target}: {reason}."
    WRITE_FAILURE = "Unable to write to {target}: {reason}."
    STREAM_OFFSET_OUT_OF_BOUNDS = "Stream offset {offset} is out of bounds."


class CosmosError(Exception):
    def __init__(
        self,
        code: ErrorCode,
        path: Optional[str] = None,
        **kwargs,
    ):
        self.code = code
        self.path = path
        self.details = kwargs

        core_message = code.value.format(**kwargs)

        # Errors raised while reading or writing a file carry its path, everything else is location free.
        location_prefix = f"Error in '{path}': " if path else ""

        self.message = location_prefix + core_message

        super().__init__(self.message)
