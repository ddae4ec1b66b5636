"""
Spatial view of a parsed map.

Works on anything implementing the ``Positioned`` capability, so tiles and
objects can be queried the same way. ``build_grids`` rasterizes a whole Map
into per-layer occupancy counts sized by the header's hex bounds.
"""
import warnings

import numpy as np
import jax.numpy as jnp
import flax.struct

from fomap.data_model import ItemKind, SceneryKind

# Layer order is also paint order for render.render_map (later on top)
LAYERS = ('tile', 'roof', 'scenery', 'item', 'opaque')


@flax.struct.dataclass
class MapGrids:
    counts: jnp.ndarray   # [n_layers, max_hex_y, max_hex_x] int32

    def layer(self, name):
        return self.counts[LAYERS.index(name)]

    @property
    def occupied(self):
        """[n_layers, H, W] bool"""
        return self.counts > 0


def positions(entities):
    """[N, 2] int32 array of (x, y) hex positions, in input order."""
    coords = [e.position() for e in entities]
    if not coords:
        return np.zeros((0, 2), dtype=np.int32)
    return np.asarray(coords, dtype=np.int32)


def select_in_rect(entities, x0, y0, x1, y1):
    """Entities with x0 <= x <= x1 and y0 <= y <= y1, order kept."""
    entities = list(entities)
    pos = positions(entities)
    mask = ((pos[:, 0] >= x0) & (pos[:, 0] <= x1)
            & (pos[:, 1] >= y0) & (pos[:, 1] <= y1))
    return [entities[i] for i in np.flatnonzero(mask)]


def _layer_of_object(obj):
    if isinstance(obj.kind, ItemKind):
        return LAYERS.index('item')
    if isinstance(obj.kind, SceneryKind):
        return LAYERS.index('scenery')
    return LAYERS.index('opaque')


def build_grids(game_map):
    """
    Count tiles/objects per hex, per layer.

    Entities outside [0, MaxHexX) x [0, MaxHexY) are skipped with a warning.

    Returns:
        MapGrids
    """
    width, height = game_map.header.size
    counts = np.zeros((len(LAYERS), height, width), dtype=np.int32)

    layer_idx = [LAYERS.index('roof') if t.is_roof else LAYERS.index('tile')
                 for t in game_map.tiles]
    layer_idx += [_layer_of_object(o) for o in game_map.objects]
    entities = list(game_map.tiles) + list(game_map.objects)
    if not entities:
        return MapGrids(counts=jnp.asarray(counts))

    pos = positions(entities)
    layer_idx = np.asarray(layer_idx, dtype=np.int32)
    inside = ((pos[:, 0] >= 0) & (pos[:, 0] < width)
              & (pos[:, 1] >= 0) & (pos[:, 1] < height))
    n_outside = int((~inside).sum())
    if n_outside:
        warnings.warn(f"{n_outside} entities outside the {width}x{height} hex grid skipped")

    np.add.at(counts, (layer_idx[inside], pos[inside, 1], pos[inside, 0]), 1)
    return MapGrids(counts=jnp.asarray(counts))
