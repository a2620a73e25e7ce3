"""
Rewrites the namespace declaration and use statements of a parsed context in place.

The parsed context's spans say exactly which bytes hold the namespace declaration
and the use statement block. Only those bytes are replaced; the code around them
is left untouched.
"""

import logging
import os
from typing import IO, List, Optional, Union

from cosmos.exceptions import CosmosError, ErrorCode
from cosmos.parser.core.classes import ParsedResolutionContext

from .context import ResolutionContext
from .renderer import ResolutionContextRenderer
from .stream_editor import Replacement, StreamEditor, _read_failure

logger = logging.getLogger(__name__)

BLOCK_INDENT = "    "


class ResolutionContextWriter:
    def __init__(
        self,
        renderer: Optional[ResolutionContextRenderer] = None,
        editor: Optional[StreamEditor] = None,
    ):
        self.renderer = renderer or ResolutionContextRenderer()
        self.editor = editor or StreamEditor()

    def replace_context_in_file(
        self,
        path: Union[str, "os.PathLike[str]"],
        parsed_context: ParsedResolutionContext,
        context: ResolutionContext,
    ) -> int:
        """Rewrites `parsed_context` inside the file it was read from. Returns the change in file size."""
        path = os.fspath(path)
        try:
            with open(path, "r+b") as stream:
                return self.replace_context_in_stream(stream, parsed_context, context, path)
        except OSError as e:
            raise CosmosError(ErrorCode.WRITE_FAILURE, path=path, target=f"'{path}'", reason=e.strerror or str(e)) from e

    def replace_context_in_stream(
        self,
        stream: IO[bytes],
        parsed_context: ParsedResolutionContext,
        context: ResolutionContext,
        path: Optional[str] = None,
    ) -> int:
        """Rewrites `parsed_context` inside a seekable binary stream. Returns the change in stream size."""
        if parsed_context.namespace_span is None:
            replacements = [self._implicit_context_replacement(parsed_context, context)]
        else:
            span = parsed_context.namespace_span
            header = self._read_span(stream, span.offset, span.size, path)
            replacements = [
                self._namespace_replacement(parsed_context, context, header),
                self._use_statements_replacement(parsed_context, context, header.endswith(b"{")),
            ]

        delta = self.editor.replace_multiple(stream, replacements, path)
        logger.debug("Rewrote resolution context %s as %s", parsed_context.primary_namespace, context.primary_namespace)
        return delta

    # --- Replacements ---

    def _namespace_replacement(self, parsed_context: ParsedResolutionContext, context: ResolutionContext, header: bytes) -> Replacement:
        span = parsed_context.namespace_span
        namespace = context.primary_namespace

        if header.endswith(b"{"):
            # Keep whatever separates the name from the brace
            head = header[:-1].rstrip()
            declaration = "namespace" if namespace.is_global else f"namespace {namespace.runtime_string()}"
            return span.offset, span.size, declaration.encode("utf-8") + header[len(head) :]

        if namespace.is_global:
            return span.offset, span.size, b""
        return span.offset, span.size, f"namespace {namespace.runtime_string()};".encode("utf-8")

    def _use_statements_replacement(
        self,
        parsed_context: ParsedResolutionContext,
        context: ResolutionContext,
        bracketed: bool,
    ) -> Replacement:
        statements = self._rendered_use_statements(context)

        if parsed_context.use_statements:
            first = parsed_context.use_statements[0].span
            last = parsed_context.use_statements[-1].span
            indent = " " * (first.column - 1)
            block = ("\n" + indent).join(statements)
            return first.offset, last.offset + last.size - first.offset, block.encode("utf-8")

        end = parsed_context.namespace_span.offset + parsed_context.namespace_span.size
        if not statements:
            return end, 0, b""
        if bracketed:
            block = "".join("\n" + BLOCK_INDENT + statement for statement in statements)
        else:
            block = "\n\n" + "\n".join(statements)
        return end, 0, block.encode("utf-8")

    def _implicit_context_replacement(self, parsed_context: ParsedResolutionContext, context: ResolutionContext) -> Replacement:
        parts = []
        if not context.primary_namespace.is_global:
            parts.append(f"namespace {context.primary_namespace.runtime_string()};")
        statements = self._rendered_use_statements(context)
        if statements:
            parts.append("\n".join(statements))

        block = "\n\n".join(parts)
        if block and parsed_context.span.size == 0:
            # Inserted ahead of the code that follows the open tag
            block += "\n\n"
        return parsed_context.span.offset, parsed_context.span.size, block.encode("utf-8")

    # --- Helpers ---

    def _rendered_use_statements(self, context: ResolutionContext) -> List[str]:
        return [self.renderer.render_use_statement(statement) + ";" for statement in context.use_statements]

    def _read_span(self, stream, offset: int, size: int, path: Optional[str]) -> bytes:
        try:
            stream.seek(offset)
            return stream.read(size)
        except OSError as e:
            raise _read_failure(e, path) from e
