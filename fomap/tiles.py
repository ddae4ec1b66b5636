"""
Tiles block parser.

    [Tiles]
    tile       100  100  art\\tiles\\edg5000.frm
    roof_ol    12   40   -8  4   1   art\\tiles\\rof2.frm

An entry is ``kind hx hy [ox oy] [layer] path`` where the kind suffix says
which optional columns are present: ``_o`` offset, ``_l`` layer, ``_ol`` both.
"""
import re

from fomap.data_model import Tile
from fomap.lexer import (
    ParseFailure, skip_space, space1, line_end, integer, token, section,
)

_TILE_KIND = re.compile(r'(tile|roof)(?:_(ol|o|l))?(?=[ \t])')


def tiles(text, pos):
    """
    Parse the tiles block starting at ``pos``.

    Entries are returned in file order (paint order). A bad entry fails the
    whole block.

    Returns:
        (offset after the last entry, tuple of Tile)
    """
    start = pos
    try:
        pos = section(text, pos, 'Tiles')
    except ParseFailure as e:
        raise e.within(start, 'tiles block')

    entries = []
    while True:
        line = skip_space(text, pos)
        m = _TILE_KIND.match(text, line)
        if not m:
            break
        try:
            pos, tile = _tile(text, m)
        except ParseFailure as e:
            e.within(line, f'tile #{len(entries) + 1}')
            raise e.within(start, 'tiles block')
        entries.append(tile)
    return pos, tuple(entries)


def _tile(text, m):
    suffix = m.group(2) or ''
    pos = space1(text, m.end())
    pos, hex_x = integer(text, pos)
    pos = space1(text, pos)
    pos, hex_y = integer(text, pos)

    offset = None
    if 'o' in suffix:
        pos = space1(text, pos)
        pos, ox = integer(text, pos)
        pos = space1(text, pos)
        pos, oy = integer(text, pos)
        offset = (ox, oy)

    layer = None
    if 'l' in suffix:
        pos = space1(text, pos)
        pos, layer = integer(text, pos)

    pos = space1(text, pos)
    pos, path = token(text, pos)
    pos = line_end(text, pos)
    return pos, Tile(
        path=path,
        hex_x=hex_x,
        hex_y=hex_y,
        is_roof=m.group(1) == 'roof',
        offset=offset,
        layer=layer,
    )
