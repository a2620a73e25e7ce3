"""
Static tables shared by the symbol model, the lexer and the resolution context parser.
"""

import re

# --- Symbol Paths ---
NAMESPACE_SEPARATOR = "\\"
SELF_ATOM = "."
PARENT_ATOM = ".."
NAMESPACE_ATOM = "namespace"

# Identifier grammar for a single atom (bytes 0x7f-0xff in PHP map to any non-ASCII code point here)
ATOM_PATTERN = re.compile(r"^[a-zA-Z_\x7f-\U0010ffff][a-zA-Z0-9_\x7f-\U0010ffff]*$")

# --- Resolution Context Generation ---
DEFAULT_MAX_REFERENCE_ATOMS = 1

# --- Token Kinds ---
END_TOKEN = "end"

# PHP counts each of these as a single line break
NEWLINE_PATTERN = re.compile(r"\r\n|\r|\n")

OPEN_TAG_TOKENS = {"T_OPEN_TAG", "T_OPEN_TAG_WITH_ECHO"}
TRIVIA_TOKENS = {"T_WHITESPACE", "T_COMMENT", "T_DOC_COMMENT"}

# Kinds that carry (possibly qualified) name text. PHP 8 tokenizers emit the qualified forms.
NAME_TOKENS = {"T_STRING", "T_NAME_QUALIFIED", "T_NAME_FULLY_QUALIFIED"}

# Anything that is later closed by a plain '}'
BRACE_OPEN_TOKENS = {"{", "T_CURLY_OPEN", "T_DOLLAR_OPEN_CURLY_BRACES"}
CONSTANT_OPEN_TOKENS = BRACE_OPEN_TOKENS | {"(", "["}
CONSTANT_CLOSE_TOKENS = {")", "]", "}"}

# Declaration keyword kind -> SymbolType value
DECLARATION_TOKENS = {
    "T_CLASS": "class",
    "T_INTERFACE": "interface",
    "T_TRAIT": "trait",
    "T_ENUM": "enum",
    "T_FUNCTION": "function",
    "T_CONST": "constant",
}

# Names after these are member names, never keywords
MEMBER_ACCESS_TOKENS = {"T_OBJECT_OPERATOR", "T_NULLSAFE_OBJECT_OPERATOR", "T_DOUBLE_COLON"}

_KEYWORDS = [
    "abstract", "array", "as", "break", "callable", "case", "catch", "class", "clone", "const",
    "continue", "declare", "default", "do", "echo", "else", "elseif", "empty", "enddeclare",
    "endfor", "endforeach", "endif", "endswitch", "endwhile", "extends", "final", "finally", "fn",
    "for", "foreach", "function", "global", "goto", "if", "implements", "include", "include_once",
    "instanceof", "insteadof", "interface", "isset", "list", "match", "namespace", "new", "print",
    "private", "protected", "public", "readonly", "require", "require_once", "return", "static",
    "switch", "throw", "trait", "try", "unset", "use", "var", "while", "yield",
]

KEYWORD_TOKENS = {keyword: f"T_{keyword.upper()}" for keyword in _KEYWORDS}
KEYWORD_TOKENS.update({"and": "T_LOGICAL_AND", "or": "T_LOGICAL_OR", "xor": "T_LOGICAL_XOR"})

OPERATOR_TOKENS = {
    "::": "T_DOUBLE_COLON",
    "->": "T_OBJECT_OPERATOR",
    "?->": "T_NULLSAFE_OBJECT_OPERATOR",
    "=>": "T_DOUBLE_ARROW",
    "...": "T_ELLIPSIS",
    "++": "T_INC",
    "--": "T_DEC",
    "===": "T_IS_IDENTICAL",
    "!==": "T_IS_NOT_IDENTICAL",
    "==": "T_IS_EQUAL",
    "!=": "T_IS_NOT_EQUAL",
    "<>": "T_IS_NOT_EQUAL",
    "<=>": "T_SPACESHIP",
    "<=": "T_IS_SMALLER_OR_EQUAL",
    ">=": "T_IS_GREATER_OR_EQUAL",
    "&&": "T_BOOLEAN_AND",
    "||": "T_BOOLEAN_OR",
    "??": "T_COALESCE",
    "??=": "T_COALESCE_EQUAL",
    "+=": "T_PLUS_EQUAL",
    "-=": "T_MINUS_EQUAL",
    "*=": "T_MUL_EQUAL",
    "/=": "T_DIV_EQUAL",
    ".=": "T_CONCAT_EQUAL",
    "%=": "T_MOD_EQUAL",
    "&=": "T_AND_EQUAL",
    "|=": "T_OR_EQUAL",
    "^=": "T_XOR_EQUAL",
    "<<": "T_SL",
    ">>": "T_SR",
    "<<=": "T_SL_EQUAL",
    ">>=": "T_SR_EQUAL",
    "**": "T_POW",
    "**=": "T_POW_EQUAL",
}

# Lark terminal name -> PHP token kind, for terminals whose kind does not depend on their text
TERMINAL_TOKENS = {
    "OPEN_TAG": "T_OPEN_TAG",
    "OPEN_TAG_WITH_ECHO": "T_OPEN_TAG_WITH_ECHO",
    "CLOSE_TAG": "T_CLOSE_TAG",
    "INLINE_HTML": "T_INLINE_HTML",
    "WHITESPACE": "T_WHITESPACE",
    "COMMENT": "T_COMMENT",
    "DOC_COMMENT": "T_DOC_COMMENT",
    "ATTRIBUTE": "T_ATTRIBUTE",
    "HEREDOC": "T_HEREDOC",
    "STRING": "T_CONSTANT_ENCAPSED_STRING",
    "VARIABLE": "T_VARIABLE",
    "NS_SEPARATOR": "T_NS_SEPARATOR",
}
