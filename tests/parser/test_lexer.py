import pytest
from lark.exceptions import LarkError, UnexpectedCharacters

from cosmos.exceptions import CosmosError, ErrorCode
from cosmos.parser.core.lexer import PhpLexer


def kinds_and_texts(source: str):
    """Flattens tokens to (kind, text) pairs, bare punctuation included."""
    pairs = []
    for token in PhpLexer().tokenize(source):
        if isinstance(token, str):
            pairs.append((token, token))
        else:
            pairs.append((token[0], token[1]))
    return pairs


def significant(source: str):
    return [pair for pair in kinds_and_texts(source) if pair[0] not in ("T_WHITESPACE", "T_COMMENT", "T_DOC_COMMENT")]


def test_tokenizes_simple_statement():
    assert PhpLexer().tokenize("<?php echo 'foo';") == [
        ("T_OPEN_TAG", "<?php ", 1),
        ("T_ECHO", "echo", 1),
        ("T_WHITESPACE", " ", 1),
        ("T_CONSTANT_ENCAPSED_STRING", "'foo'", 1),
        ";",
    ]


def test_inline_html_and_tags():
    assert PhpLexer().tokenize("<p>Hi</p>\n<?php\n$a = 1;\n?>\n<br>") == [
        ("T_INLINE_HTML", "<p>Hi</p>\n", 1),
        ("T_OPEN_TAG", "<?php\n", 2),
        ("T_VARIABLE", "$a", 3),
        ("T_WHITESPACE", " ", 3),
        "=",
        ("T_WHITESPACE", " ", 3),
        ("T_LNUMBER", "1", 3),
        ";",
        ("T_WHITESPACE", "\n", 3),
        ("T_CLOSE_TAG", "?>\n", 4),
        ("T_INLINE_HTML", "<br>", 5),
    ]


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("", id="empty"),
        pytest.param("plain text only", id="html_only"),
        pytest.param("<?php\r\nnamespace Foo;\r\n\r\nclass Bar {}\r\n", id="crlf"),
        pytest.param("<?php /** @var int */ $a = 0x1F + 1.5e3; # done\n// bye", id="comments_and_numbers"),
        pytest.param("<?php $s = <<<'EOT'\n  raw { text\n  EOT;\n$t = `ls`;", id="nowdoc_and_backticks"),
        pytest.param("<?php #[Attribute] class A { public ?int $x = null; }", id="attribute"),
        pytest.param("<?php $a?->b ?? $c <=> $d; @$e; $f .= 'é';", id="operators_and_unicode"),
        pytest.param("<?php 'unterminated", id="unterminated_string"),
        pytest.param("<?= $value ?>tail<?php\n", id="echo_tag"),
    ],
)
def test_tokens_reproduce_the_source(source):
    tokens = PhpLexer().tokenize(source)
    assert "".join(token if isinstance(token, str) else token[1] for token in tokens) == source


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("<?php $a->class;", ("T_STRING", "class"), id="after_object_operator"),
        pytest.param("<?php $a?->list;", ("T_STRING", "list"), id="after_nullsafe_operator"),
        pytest.param("<?php Foo::new();", ("T_STRING", "new"), id="after_double_colon"),
        pytest.param("<?php use Foo\\List;", ("T_STRING", "List"), id="after_separator"),
        pytest.param("<?php use Print\\Foo;", ("T_STRING", "Print"), id="before_separator"),
        pytest.param("<?php NAMESPACE Foo;", ("T_NAMESPACE", "NAMESPACE"), id="case_insensitive_keyword"),
        pytest.param("<?php namespace\\foo();", ("T_NAMESPACE", "namespace"), id="namespace_operator"),
        pytest.param("<?php enum Suit {}", ("T_ENUM", "enum"), id="enum_declaration"),
        pytest.param("<?php enum(1);", ("T_STRING", "enum"), id="enum_function_call"),
    ],
)
def test_name_classification(source, expected):
    assert expected in significant(source)


def test_namespace_separators_are_tokens():
    assert significant("<?php \\Foo\\Bar") == [
        ("T_OPEN_TAG", "<?php "),
        ("T_NS_SEPARATOR", "\\"),
        ("T_STRING", "Foo"),
        ("T_NS_SEPARATOR", "\\"),
        ("T_STRING", "Bar"),
    ]


def test_comments_do_not_swallow_close_tags():
    assert kinds_and_texts("<?php // note ?>html") == [
        ("T_OPEN_TAG", "<?php "),
        ("T_COMMENT", "// note "),
        ("T_CLOSE_TAG", "?>"),
        ("T_INLINE_HTML", "html"),
    ]


def test_doc_comments_and_attributes():
    assert significant("<?php /** doc */ #[Pure] /* block */")[1:] == [
        ("T_ATTRIBUTE", "#["),
        ("T_STRING", "Pure"),
        ("]", "]"),
    ]
    assert ("T_DOC_COMMENT", "/** doc */") in kinds_and_texts("<?php /** doc */")


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("<?php\nnamespace A;\nuse B\\C;\nclass D {}\n", id="lf"),
        pytest.param("<?php\r\nnamespace A;\r\nuse B\\C;\r\nclass D {}\r\n", id="crlf"),
        pytest.param("<?php\rnamespace A;\ruse B\\C;\rclass D {}\r", id="cr"),
    ],
)
def test_line_numbers_follow_every_line_ending(source):
    tokens = PhpLexer().tokenize(source)

    assert ("T_NAMESPACE", "namespace", 2) in tokens
    assert ("T_USE", "use", 3) in tokens
    assert ("T_CLASS", "class", 4) in tokens


class FailingLark:
    def __init__(self, error):
        self.error = error

    def parse(self, source):
        raise self.error


def test_unexpected_characters_become_lexer_failures():
    source = "<?php \x00"
    lexer = PhpLexer(lark=FailingLark(UnexpectedCharacters(source, 6, 1, 7)))

    with pytest.raises(CosmosError) as exc_info:
        lexer.tokenize(source, "x.php")

    assert exc_info.value.code == ErrorCode.LEXER_FAILURE
    assert exc_info.value.path == "x.php"
    assert "line 1, column 7" in str(exc_info.value)
    assert str(exc_info.value).startswith("Error in 'x.php': ")


def test_other_lark_errors_become_lexer_failures():
    lexer = PhpLexer(lark=FailingLark(LarkError("boom")))

    with pytest.raises(CosmosError) as exc_info:
        lexer.tokenize("<?php")

    assert exc_info.value.code == ErrorCode.LEXER_FAILURE
    assert exc_info.value.path is None
    assert exc_info.value.details == {"details": "boom"}
