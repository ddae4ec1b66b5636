"""
Root assembler: header → tiles → objects, then the leftover check.

Public entry points:

    parse(text, settings)                  -> Map, raises MapError
    parse_with_remainder(text, settings)   -> ParseResult (remainder + Map or raw failure)
    read_map_from_path(path, settings)     -> Map, raises MapError
    read_map_with_remainder(path, settings) -> (text, ParseResult)
"""
from typing import NamedTuple, Optional, Tuple, Union

from fomap.data_model import Map, MapParserSettings
from fomap.errors import (
    IoFailure, EncodingFailure, GrammarFailure, LeftoverInput, format_failure,
)
from fomap.header import header
from fomap.lexer import ParseFailure, Span, rest, skip_space
from fomap.objects import objects
from fomap.tiles import tiles

_DEFAULT_SETTINGS = MapParserSettings()


class ParseResult(NamedTuple):
    """Outcome of the lower-level entry point.

    Exactly one of ``map``/``failure`` is set. ``remainder`` is the unconsumed
    suffix: text after the objects block on success, text from the failure
    offset on failure.
    """
    remainder: Span
    map: Optional[Map]
    failure: Optional[ParseFailure]

    @property
    def ok(self) -> bool:
        return self.failure is None


def root(text, settings=None, pos=0) -> Tuple[int, Map]:
    """
    Parse the three blocks starting at ``pos``.

    Returns:
        (offset of the first unconsumed character, Map)

    Raises:
        ParseFailure
    """
    if settings is None:
        settings = _DEFAULT_SETTINGS
    if text.startswith('\ufeff', pos):
        pos += 1
    pos = skip_space(text, pos)
    pos, map_header = header(text, pos)
    pos = skip_space(text, pos)
    pos, map_tiles = tiles(text, pos)
    pos = skip_space(text, pos)
    pos, map_objects = objects(text, pos, settings.allow_any)
    pos = skip_space(text, pos)
    return pos, Map(header=map_header, tiles=map_tiles, objects=map_objects)


def decode_text(data: bytes) -> str:
    """Decode raw map bytes; anything but valid UTF-8 is an EncodingFailure."""
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise EncodingFailure(e) from e


def parse_with_remainder(text: str, settings: Optional[MapParserSettings] = None) -> ParseResult:
    """Parse without applying the leftover policy or formatting failures."""
    try:
        pos, game_map = root(text, settings)
    except ParseFailure as e:
        return ParseResult(rest(text, e.position), None, e)
    return ParseResult(rest(text, pos), game_map, None)


def parse(text: Union[str, bytes], settings: Optional[MapParserSettings] = None) -> Map:
    """
    Parse a whole .fomap text into a Map.

    Args:
        text: decoded map text, or raw bytes (decoded as UTF-8 first)
        settings: MapParserSettings; defaults to strict (no opaque objects,
            no trailing text)

    Raises:
        EncodingFailure: bytes that are not UTF-8
        GrammarFailure: any block failed to parse
        LeftoverInput: text remains after the objects block and
            ``allow_tail`` is off
    """
    if isinstance(text, (bytes, bytearray)):
        text = decode_text(bytes(text))
    if settings is None:
        settings = _DEFAULT_SETTINGS
    return _finish(text, parse_with_remainder(text, settings), settings)


def _finish(text, result, settings):
    if result.failure is not None:
        raise GrammarFailure(format_failure(text, result.failure), result.failure)
    if result.remainder and not settings.allow_tail:
        raise LeftoverInput(result.remainder)
    return result.map


# ── File collaborators ────────────────────────────────────────────────

def _read_text(path):
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise IoFailure(path, e) from e
    return decode_text(data)


def read_map_with_remainder(path, settings: Optional[MapParserSettings] = None) -> Tuple[str, ParseResult]:
    """Read and decode ``path``, then parse it with ``parse_with_remainder``.

    Returns the decoded text too, so callers can format the failure or
    inspect the remainder against it.
    """
    text = _read_text(path)
    return text, parse_with_remainder(text, settings)


def read_map_from_path(path, settings: Optional[MapParserSettings] = None) -> Map:
    """
    Read, decode and parse a .fomap file.

    Raises:
        IoFailure, EncodingFailure, GrammarFailure, LeftoverInput
    """
    if settings is None:
        settings = _DEFAULT_SETTINGS
    text, result = read_map_with_remainder(path, settings)
    return _finish(text, result, settings)
