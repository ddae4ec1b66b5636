"""Shared sample texts and helpers for fomap tests."""
import os


DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')
SAMPLE_MAP = os.path.join(DATA_DIR, 'sample.fomap')

HEADER = (
    "[Header]\n"
    "Version              4\n"
    "MaxHexX              200\n"
    "MaxHexY              200\n"
)

ONE_TILE = "tile       10   20   art\\tiles\\edg5000.frm\n"

ITEM = (
    "MapObjType           1\n"
    "ProtoId              2000\n"
    "MapX                 100\n"
    "MapY                 101\n"
)

SCENERY = (
    "MapObjType           2\n"
    "ProtoId              4012\n"
    "MapX                 33\n"
    "MapY                 90\n"
)


def make_map_text(header=HEADER, tiles=(), objects=(), tail=''):
    """Assemble a map text from block pieces; objects are separated by blank lines."""
    return (header + "\n"
            + "[Tiles]\n" + ''.join(tiles) + "\n"
            + "[Objects]\n" + "\n".join(objects) + "\n"
            + tail)


def read_sample():
    with open(SAMPLE_MAP, encoding='utf-8') as f:
        return f.read()
