"""Parser for FOnline .fomap text maps."""
from .data_model import (
    Map, Header, Tile, MapObject, MapObjectType, ItemKind, SceneryKind, OpaqueKind,
    Anim, Relations, Light, Positioned, MapParserSettings,
)
from .errors import (
    MapError, IoFailure, EncodingFailure, GrammarFailure, LeftoverInput, format_failure,
)
from .lexer import Span, ParseFailure
from .parser import (
    parse, parse_with_remainder, read_map_from_path, read_map_with_remainder,
    decode_text, ParseResult,
)
