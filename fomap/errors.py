"""
Errors raised at the public boundary, and formatting of raw parse failures.

Inside the engine a failure is a ``ParseFailure`` (offset + expectation +
context frames). ``parse``/``read_map_from_path`` turn it into a
``GrammarFailure`` whose message is the text produced by ``format_failure``.
"""
from fomap.data_model import LEFTOVER_EXCERPT_LIMIT
from fomap.lexer import Span


class MapError(Exception):
    """Base class for everything the public entry points raise."""


class IoFailure(MapError):
    def __init__(self, path, cause):
        super().__init__(f"can't read {path}: {cause}")
        self.path = path
        self.cause = cause


class EncodingFailure(MapError):
    def __init__(self, cause):
        super().__init__(f"map text is not valid UTF-8: {cause}")
        self.cause = cause


class GrammarFailure(MapError):
    def __init__(self, message, failure=None):
        super().__init__(message)
        self.message = message
        self.failure = failure

    @property
    def position(self):
        return None if self.failure is None else self.failure.position


class LeftoverInput(MapError):
    """All three blocks parsed but text remains.

    Only the first LEFTOVER_EXCERPT_LIMIT characters of the remainder are kept.
    """

    def __init__(self, remainder):
        if isinstance(remainder, Span):
            self.excerpt = remainder.head(LEFTOVER_EXCERPT_LIMIT)
        else:
            self.excerpt = remainder[:LEFTOVER_EXCERPT_LIMIT]
        super().__init__(f"unparsed input after objects block: {self.excerpt!r}")


# ── Diagnostics ───────────────────────────────────────────────────────

_WINDOW = LEFTOVER_EXCERPT_LIMIT


def locate(text, pos):
    """1-based (line, column) of character offset ``pos``."""
    line_start = text.rfind('\n', 0, pos) + 1
    return text.count('\n', 0, line_start) + 1, pos - line_start + 1


def _source_line(text, pos):
    """The line holding ``pos`` (windowed if very long) and the caret column in it."""
    line_start = text.rfind('\n', 0, pos) + 1
    line_stop = text.find('\n', pos)
    if line_stop == -1:
        line_stop = len(text)
    col = pos - line_start
    first = line_start
    if col > _WINDOW // 2:
        first = pos - _WINDOW // 2
    last = min(line_stop, first + _WINDOW)
    return text[first:last].rstrip('\r'), pos - first


def format_failure(text, failure):
    """
    Render a ParseFailure as a multi-line diagnostic.

    One numbered frame per location, innermost first:

        0: at line 4, column 9 (offset 57):
        tile 10 x art\\tiles\\a.frm
                ^
        expected integer, found 'x art\\tiles\\a.frm'

        1: at line 4, column 1 (offset 49), in tile #1:
        ...
    """
    frames = [(failure.position, None)] + list(failure.context)
    parts = []
    for i, (pos, label) in enumerate(frames):
        line_no, col = locate(text, pos)
        where = f"{i}: at line {line_no}, column {col} (offset {pos})"
        if label:
            where += f", in {label}"
        source, caret = _source_line(text, pos)
        lines = [where + ':', source, ' ' * caret + '^']
        if i == 0:
            expected = f"expected {failure.expected}"
            if failure.found is not None:
                expected += f", found {failure.found!r}"
            lines.append(expected)
        parts.append('\n'.join(lines))
    return '\n\n'.join(parts) + '\n'
