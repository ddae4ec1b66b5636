"""
Primitive lexer for the .fomap text format.

Every combinator has the shape ``fn(text, pos) -> (pos, value)``: it reads one
lexical unit starting at character offset ``pos`` of the decoded map text and
returns the offset just past it together with the value. On mismatch it raises
``ParseFailure`` describing what was expected at that offset; callers catch it
to try an alternative or let it propagate.

Text values are returned as ``Span`` views into the input, never as copies.
"""
import re
from typing import Optional, Tuple


# ── Zero-copy text view ───────────────────────────────────────────────

class Span:
    """Read-only view of ``source[start:end]``.

    Compares and hashes like the text it covers, but only materializes a new
    ``str`` when converted with ``str()``. Holding a Span keeps the source
    buffer alive.
    """
    __slots__ = ('source', 'start', 'end')

    def __init__(self, source: str, start: int, end: int):
        self.source = source
        self.start = start
        self.end = end

    def __str__(self):
        return self.source[self.start:self.end]

    def __len__(self):
        return self.end - self.start

    def __bool__(self):
        return self.end > self.start

    def __eq__(self, other):
        if isinstance(other, Span):
            return (len(self) == len(other)
                    and self.source.startswith(str(other), self.start))
        if isinstance(other, str):
            return len(other) == len(self) and self.source.startswith(other, self.start)
        return NotImplemented

    def __hash__(self):
        return hash(str(self))

    def __repr__(self):
        return f"Span({str(self)!r} @{self.start})"

    def startswith(self, prefix: str) -> bool:
        return len(prefix) <= len(self) and self.source.startswith(prefix, self.start)

    def head(self, n: int) -> str:
        """First ``n`` characters of the view, as a (short) new string."""
        return self.source[self.start:min(self.end, self.start + n)]


def rest(text: str, pos: int) -> Span:
    """Span covering everything from ``pos`` to the end of ``text``."""
    return Span(text, pos, len(text))


# ── Failure ───────────────────────────────────────────────────────────

class ParseFailure(Exception):
    """Structured lexer/grammar failure: what was expected at which offset.

    ``context`` collects ``(position, label)`` frames as the failure unwinds
    through enclosing constructs, innermost first.
    """

    def __init__(self, position: int, expected: str, found: Optional[str] = None):
        super().__init__(position, expected, found)
        self.position = position
        self.expected = expected
        self.found = found
        self.context = []

    def within(self, position: int, label: str) -> 'ParseFailure':
        self.context.append((position, label))
        return self

    def __str__(self):
        msg = f"expected {self.expected} at offset {self.position}"
        if self.found is not None:
            msg += f", found {self.found!r}"
        return msg


def _found(text, pos, limit=20):
    """Short excerpt of what sits at ``pos``, for failure messages."""
    if pos >= len(text):
        return 'end of input'
    end = text.find('\n', pos, pos + limit)
    if end == -1:
        end = min(len(text), pos + limit)
    return text[pos:end].rstrip('\r') or text[pos]


# ── Patterns ──────────────────────────────────────────────────────────

_INLINE_SPACE = re.compile(r'[ \t]*')
_INTEGER = re.compile(r'[+-]?(?:0[xX][0-9A-Fa-f]+|[0-9]+)(?![0-9A-Za-z_])')
_WORD = re.compile(r'[^\s]+')
_IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
_LINE_VALUE = re.compile(r'[^\r\n]*')


# ── Whitespace ────────────────────────────────────────────────────────

def skip_space(text: str, pos: int) -> int:
    """Skip any run of whitespace (newlines included) and ``#`` comments.

    A comment runs from ``#`` to the end of its line.

    Never fails; zero characters skipped is fine.
    """
    n = len(text)
    while pos < n:
        c = text[pos]
        if c.isspace():
            pos += 1
        elif c == '#':
            end = text.find('\n', pos)
            pos = n if end == -1 else end + 1
        else:
            break
    return pos


def skip_inline(text: str, pos: int) -> int:
    """Skip spaces and tabs on the current line."""
    return _INLINE_SPACE.match(text, pos).end()


def space1(text: str, pos: int) -> int:
    """At least one space or tab."""
    end = skip_inline(text, pos)
    if end == pos:
        raise ParseFailure(pos, 'whitespace', _found(text, pos))
    return end


def line_end(text: str, pos: int) -> int:
    """Trailing spaces, then a newline (``\\n`` or ``\\r\\n``) or end of input."""
    pos = skip_inline(text, pos)
    if pos == len(text):
        return pos
    if text.startswith('\n', pos):
        return pos + 1
    if text.startswith('\r\n', pos):
        return pos + 2
    raise ParseFailure(pos, 'end of line', _found(text, pos))


# ── Scalars ───────────────────────────────────────────────────────────

def integer(text: str, pos: int) -> Tuple[int, int]:
    """Signed decimal or ``0x`` hexadecimal integer literal."""
    m = _INTEGER.match(text, pos)
    if not m:
        raise ParseFailure(pos, 'integer', _found(text, pos))
    literal = m.group()
    base = 16 if 'x' in literal or 'X' in literal else 10
    return m.end(), int(literal, base)


def unsigned(text: str, pos: int) -> Tuple[int, int]:
    """Integer literal without a sign."""
    end, value = integer(text, pos)
    if value < 0 or text[pos] in '+-':
        raise ParseFailure(pos, 'unsigned integer', _found(text, pos))
    return end, value


def flag(text: str, pos: int) -> Tuple[int, bool]:
    """Integer used as a boolean: nonzero is true."""
    end, value = integer(text, pos)
    return end, value != 0


def word(text: str, pos: int) -> Tuple[int, Span]:
    """Bare token: a run of non-whitespace characters."""
    m = _WORD.match(text, pos)
    if not m:
        raise ParseFailure(pos, 'token', _found(text, pos))
    return m.end(), Span(text, pos, m.end())


def quoted(text: str, pos: int) -> Tuple[int, Span]:
    """Double-quoted token on one line; the span excludes the quotes."""
    if not text.startswith('"', pos):
        raise ParseFailure(pos, 'quoted string', _found(text, pos))
    end = pos + 1
    n = len(text)
    while end < n and text[end] not in '"\n':
        end += 1
    if end >= n or text[end] != '"':
        raise ParseFailure(end, 'closing quote', _found(text, end))
    return end + 1, Span(text, pos + 1, end)


def token(text: str, pos: int) -> Tuple[int, Span]:
    """Quoted or bare token."""
    if text.startswith('"', pos):
        return quoted(text, pos)
    return word(text, pos)


def identifier(text: str, pos: int) -> Tuple[int, Span]:
    m = _IDENTIFIER.match(text, pos)
    if not m:
        raise ParseFailure(pos, 'identifier', _found(text, pos))
    return m.end(), Span(text, pos, m.end())


def tag(text: str, pos: int, literal: str) -> int:
    """Exact literal."""
    if not text.startswith(literal, pos):
        raise ParseFailure(pos, repr(literal), _found(text, pos))
    return pos + len(literal)


def section(text: str, pos: int, name: str) -> int:
    """Block heading line such as ``[Tiles]``."""
    return line_end(text, tag(text, pos, f'[{name}]'))


def line_value(text: str, pos: int) -> Tuple[int, Span]:
    """Rest of the current line, trailing whitespace trimmed. Must be non-empty."""
    end = _LINE_VALUE.match(text, pos).end()
    stop = end
    while stop > pos and text[stop - 1] in ' \t':
        stop -= 1
    if stop == pos:
        raise ParseFailure(pos, 'value', _found(text, pos))
    return stop, Span(text, pos, stop)


# ── Compound units ────────────────────────────────────────────────────

def key_value(text: str, pos: int, sep: Optional[str] = None) -> Tuple[int, Tuple[Span, Span]]:
    """``key<sep>value`` pair, the value running to the end of the line.

    Args:
        sep: separator literal (e.g. ``'='``), optionally surrounded by spaces.
            ``None`` means the key and value are separated by whitespace only.

    Returns:
        (offset after the value, (key span, value span))
    """
    pos, key = identifier(text, pos)
    if sep is None:
        pos = space1(text, pos)
    else:
        pos = skip_inline(text, tag(text, skip_inline(text, pos), sep))
    pos, value = line_value(text, pos)
    return pos, (key, value)


def int_array(text: str, pos: int, size: int) -> Tuple[int, Tuple[int, ...]]:
    """Fixed-size integer array.

    Accepts either whitespace-separated integers on one line (``1 2 3``) or the
    bracketed form ``[1, 2, 3]`` (commas optional).
    """
    bracketed = text.startswith('[', pos)
    if bracketed:
        pos = skip_inline(text, pos + 1)
    values = []
    for i in range(size):
        if i:
            if bracketed:
                pos = skip_inline(text, pos)
                if text.startswith(',', pos):
                    pos = skip_inline(text, pos + 1)
            else:
                pos = space1(text, pos)
        try:
            pos, value = integer(text, pos)
        except ParseFailure as e:
            e.expected = f'integer #{i + 1} of {size}'
            raise
        values.append(value)
    if bracketed:
        pos = tag(text, skip_inline(text, pos), ']')
    return pos, tuple(values)
