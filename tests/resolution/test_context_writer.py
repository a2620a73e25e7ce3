import io

import pytest

from cosmos.exceptions import CosmosError, ErrorCode
from cosmos.parser.core.parser import parse_source
from cosmos.resolution.core.context import ResolutionContext
from cosmos.resolution.core.writer import ResolutionContextWriter
from cosmos.use_statement import UseStatement, UseStatementClause, UseStatementType


def context_for(namespace, *symbols):
    """Builds a context with one single-clause use statement per symbol. A namespace of None means global."""
    use_statements = tuple(UseStatement(clauses=(UseStatementClause(symbol=symbol),)) for symbol in symbols)
    if namespace is None:
        return ResolutionContext(use_statements=use_statements)
    return ResolutionContext(primary_namespace=namespace, use_statements=use_statements)


def rewrite(source: str, context: ResolutionContext, index: int = 0) -> str:
    parsed = parse_source(source)[index]
    stream = io.BytesIO(source.encode("utf-8"))
    delta = ResolutionContextWriter().replace_context_in_stream(stream, parsed, context)

    result = stream.getvalue()
    assert len(result) == len(source.encode("utf-8")) + delta
    return result.decode("utf-8")


@pytest.mark.parametrize(
    "source, context, expected",
    [
        pytest.param(
            "<?php\nnamespace Foo\n{\n    use Bar;\n\n    class A {}\n}\n",
            context_for("Baz", "\\One", "\\Two"),
            "<?php\nnamespace Baz\n{\n    use One;\n    use Two;\n\n    class A {}\n}\n",
            id="bracketed",
        ),
        pytest.param(
            "<?php\nnamespace Foo {\n    class A {}\n}\n",
            context_for("Foo\\Bar", "\\One"),
            "<?php\nnamespace Foo\\Bar {\n    use One;\n    class A {}\n}\n",
            id="bracketed_without_use_statements",
        ),
        pytest.param(
            "<?php\nnamespace Foo\n{\n    class A {}\n}\n",
            context_for(None),
            "<?php\nnamespace\n{\n    class A {}\n}\n",
            id="bracketed_to_global",
        ),
        pytest.param(
            "<?php\nnamespace Foo;\n\nclass A {}\n",
            context_for("Foo", "\\Bar"),
            "<?php\nnamespace Foo;\n\nuse Bar;\n\nclass A {}\n",
            id="unbracketed_without_use_statements",
        ),
        pytest.param(
            "<?php\nnamespace Foo;\n\nuse Bar;\nuse Baz;\n\nclass A {}\n",
            context_for("Foo"),
            "<?php\nnamespace Foo;\n\n\n\nclass A {}\n",
            id="use_statements_removed",
        ),
        pytest.param(
            "<?php\nclass A {}\n",
            context_for("Foo", "\\Bar"),
            "<?php\nnamespace Foo;\n\nuse Bar;\n\nclass A {}\n",
            id="implicit_global_code",
        ),
        pytest.param(
            "<?php\nuse Bar;\n\nclass A {}\n",
            context_for(None, "\\Baz", "\\Qux"),
            "<?php\nuse Baz;\nuse Qux;\n\nclass A {}\n",
            id="global_use_statements",
        ),
        pytest.param(
            "<?php\nclass A {}\n",
            context_for(None),
            "<?php\nclass A {}\n",
            id="nothing_to_write",
        ),
        pytest.param(
            "<?php\nnamespace Café;\nuse Bar;\n",
            context_for("Crème", "\\Bar"),
            "<?php\nnamespace Crème;\nuse Bar;\n",
            id="multibyte_names",
        ),
    ],
)
def test_replace_context_in_stream(source, context, expected):
    assert rewrite(source, context) == expected


def test_unbracketed_context_with_use_statements():
    source = "<?php\nnamespace Foo;\n\nuse Bar\\Baz;\nuse Qux;\n\nclass A {}\n"
    context = ResolutionContext(
        primary_namespace="Acme\\App",
        use_statements=(
            UseStatement(clauses=(UseStatementClause(symbol="\\Vendor\\Thing"),)),
            UseStatement(clauses=(UseStatementClause(symbol="\\Vendor\\run"),), type=UseStatementType.FUNCTION),
        ),
    )

    assert rewrite(source, context) == (
        "<?php\nnamespace Acme\\App;\n\nuse Vendor\\Thing;\nuse function Vendor\\run;\n\nclass A {}\n"
    )


def test_only_the_chosen_context_changes():
    source = "<?php\nnamespace Foo;\nuse Bar;\nclass A {}\nnamespace Other;\nuse Bar;\nclass B {}\n"

    assert rewrite(source, context_for("Other", "\\Baz"), index=1) == (
        "<?php\nnamespace Foo;\nuse Bar;\nclass A {}\nnamespace Other;\nuse Baz;\nclass B {}\n"
    )


def test_rewritten_source_parses_back():
    source = "<?php\nnamespace Foo;\n\nuse Bar\\Baz;\n\nclass A extends Baz {}\n"
    context = context_for("Acme", "\\Vendor\\Thing", "\\Vendor\\Other")

    (parsed,) = parse_source(rewrite(source, context))

    assert parsed.primary_namespace == context.primary_namespace
    assert [str(statement) for statement in parsed.use_statements] == ["use Vendor\\Thing", "use Vendor\\Other"]


def test_replace_context_in_file(tmp_path):
    path = tmp_path / "a.php"
    source = "<?php\nnamespace Foo;\n\nuse Bar;\n\nclass A {}\n"
    path.write_bytes(source.encode("utf-8"))
    (parsed,) = parse_source(source)

    delta = ResolutionContextWriter().replace_context_in_file(path, parsed, context_for("Foo", "\\Vendor\\Bar"))

    assert path.read_bytes() == b"<?php\nnamespace Foo;\n\nuse Vendor\\Bar;\n\nclass A {}\n"
    assert delta == len("Vendor\\")


def test_replace_context_in_missing_file(tmp_path):
    path = tmp_path / "missing.php"
    (parsed,) = parse_source("<?php\nnamespace Foo;\n")

    with pytest.raises(CosmosError) as exc_info:
        ResolutionContextWriter().replace_context_in_file(path, parsed, context_for("Bar"))

    assert exc_info.value.code == ErrorCode.WRITE_FAILURE
    assert exc_info.value.path == str(path)
    assert not path.exists()
