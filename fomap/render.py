"""
Preview raster of a parsed map: one flat color per occupancy layer.
"""
import jax.numpy as jnp

from fomap.grids import LAYERS, build_grids

# RGB per layer, same order as grids.LAYERS
LAYER_COLORS = {
    'tile': (140, 120, 100),    # BROWN
    'roof': (90, 90, 90),       # GRAY
    'scenery': (0, 200, 0),     # GREEN
    'item': (250, 160, 0),      # ORANGE
    'opaque': (200, 0, 0),      # RED
}


def render_rgb(layers, colors, block_size, bg_color=None):
    """
    Convert occupancy layers to an RGB image. Jittable (block_size static).

    Args:
        layers: [n_layers, H, W] bool or count array
        colors: [n_layers, 3] uint8: RGB color per layer
        block_size: int: pixels per hex
        bg_color: optional [3] uint8: empty-hex color (default black)

    Returns:
        [H*block_size, W*block_size, 3] uint8 RGB image
    """
    if bg_color is None:
        bg_color = jnp.array([0, 0, 0], dtype=jnp.uint8)

    n_layers = layers.shape[0]

    # Topmost occupied layer per hex; -1 where empty
    layer_ids = jnp.arange(n_layers)[:, None, None]
    top = jnp.max(jnp.where(layers.astype(jnp.bool_), layer_ids, -1), axis=0)

    palette = jnp.concatenate([colors, bg_color[None]], axis=0)
    canvas = palette[jnp.where(top >= 0, top, n_layers)]

    return jnp.repeat(jnp.repeat(canvas, block_size, axis=0), block_size, axis=1)


def render_map(game_map, block_size=1):
    """Preview image of a Map, hex (x, y) at pixel block (row=y, col=x)."""
    grids = build_grids(game_map)
    colors = jnp.array([LAYER_COLORS[name] for name in LAYERS], dtype=jnp.uint8)
    return render_rgb(grids.counts, colors, block_size)
