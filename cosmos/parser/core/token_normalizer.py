from typing import Iterable, List

from cosmos.config import END_TOKEN, NEWLINE_PATTERN

from .classes import NormalizedToken, RawToken


class TokenNormalizer:
    """
    Converts a raw token stream into uniform `(kind, text, line, column, offset, size)` tuples.

    Bare punctuation tokens take their text as kind. Columns, offsets and sizes are
    measured in UTF-8 bytes so that spans can slice the encoded source directly.
    A synthetic `end` token positioned after the last character closes the stream.
    """

    def normalize_tokens(self, tokens: Iterable[RawToken]) -> List[NormalizedToken]:
        normalized: List[NormalizedToken] = []
        line = 1
        column = 1
        offset = 0

        for token in tokens:
            if isinstance(token, str):
                kind = text = token
            else:
                kind, text, line = token[0], token[1], token[2]

            size = len(text.encode("utf-8"))
            normalized.append((kind, text, line, column, offset, size))
            offset += size

            newlines = NEWLINE_PATTERN.findall(text)
            if newlines:
                line += len(newlines)
                last_line = NEWLINE_PATTERN.split(text)[-1]
                column = len(last_line.encode("utf-8")) + 1
            else:
                column += size

        normalized.append((END_TOKEN, "", line, column, offset, 0))
        return normalized
