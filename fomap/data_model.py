import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional, Protocol, Tuple, Union, runtime_checkable

from fomap.lexer import Span

# Named constants
LEFTOVER_EXCERPT_LIMIT = 120   # max characters of unparsed tail kept in a LeftoverInput
ITEM_VAL_SLOTS = 10            # Item_Val0 .. Item_Val9
SCENERY_PARAM_SLOTS = 5        # Scenery_Param0 .. Scenery_Param4
DAY_COLOR_SLOTS = 4            # DayColor0 .. DayColor3


class MapObjectType(enum.IntEnum):
    """Values of the ``MapObjType`` discriminator used by the format.

    Only ITEM and SCENERY have typed grammars; CRITTER records (and any other
    tag) are accepted only as opaque records.
    """
    CRITTER = 0
    ITEM = 1
    SCENERY = 2


@runtime_checkable
class Positioned(Protocol):
    """Anything placed on the hex grid."""

    def position(self) -> Tuple[int, int]:
        """(hex x, hex y)"""
        ...


@dataclass(frozen=True)
class MapParserSettings:
    allow_any: bool = False    # opaque records for unrecognized object kinds
    allow_tail: bool = False   # ignore unparsed trailing text


# ── Header ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Header:
    max_hex_x: int
    max_hex_y: int
    version: Optional[int] = None
    work_hex_x: Optional[int] = None
    work_hex_y: Optional[int] = None
    script_module: Optional[Span] = None
    script_func: Optional[Span] = None
    no_log_out: bool = False
    time: Optional[int] = None
    day_time: Optional[Tuple[int, int, int, int]] = None
    # One (r, g, b) per day period, None where the DayColorN line is missing
    day_colors: Tuple[Optional[Tuple[int, int, int]], ...] = (None,) * DAY_COLOR_SLOTS

    @property
    def size(self) -> Tuple[int, int]:
        return self.max_hex_x, self.max_hex_y


# ── Tiles ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Tile:
    path: Span                 # sprite file reference, e.g. art\tiles\edg5000.frm
    hex_x: int
    hex_y: int
    is_roof: bool
    offset: Optional[Tuple[int, int]] = None   # pixel offset (x, y), `_o` entries only
    layer: Optional[int] = None                # `_l` entries only

    def position(self) -> Tuple[int, int]:
        return self.hex_x, self.hex_y


# ── Objects ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Relations:
    uid: Optional[int] = None
    container_uid: Optional[int] = None   # uid of the object holding this one


@dataclass(frozen=True)
class Light:
    color: Optional[int] = None
    day: Optional[int] = None
    dir_off: Optional[int] = None
    distance: Optional[int] = None
    intensity: Optional[int] = None


@dataclass(frozen=True)
class Anim:
    offset_x: Optional[int] = None
    offset_y: Optional[int] = None
    anim_stay_begin: Optional[int] = None
    anim_stay_end: Optional[int] = None
    anim_wait: Optional[int] = None


@dataclass(frozen=True)
class ItemKind:
    anim: Anim = field(default_factory=Anim)
    pic_map_name: Optional[Span] = None
    pic_inv_name: Optional[Span] = None
    info_offset: Optional[int] = None
    count: Optional[int] = None
    broken_flags: Optional[int] = None
    broken_count: Optional[int] = None
    deterioration: Optional[int] = None
    item_slot: Optional[int] = None
    ammo_pid: Optional[int] = None
    ammo_count: Optional[int] = None
    locker_door_id: Optional[int] = None
    locker_condition: Optional[int] = None
    locker_complexity: Optional[int] = None
    trap_value: Optional[int] = None
    val: Tuple[Optional[int], ...] = (None,) * ITEM_VAL_SLOTS

    object_type = MapObjectType.ITEM


@dataclass(frozen=True)
class SceneryKind:
    anim: Anim = field(default_factory=Anim)
    pic_map_name: Optional[Span] = None
    pic_inv_name: Optional[Span] = None
    info_offset: Optional[int] = None
    can_use: Optional[bool] = None
    can_talk: Optional[bool] = None
    trigger_num: Optional[int] = None
    params_count: Optional[int] = None
    params: Tuple[Optional[int], ...] = (None,) * SCENERY_PARAM_SLOTS
    to_map_pid: Optional[int] = None
    to_entire: Optional[int] = None
    to_dir: Optional[int] = None
    sprite_cut: Optional[int] = None

    object_type = MapObjectType.SCENERY


@dataclass(frozen=True)
class OpaqueKind:
    """Record whose MapObjType is outside the typed set (allow_any mode).

    Kind-specific lines are kept verbatim, in source order.
    """
    tag: Span
    fields: Tuple[Tuple[Span, Span], ...] = ()

    object_type = None

    def get(self, key: str) -> Optional[Span]:
        for k, v in self.fields:
            if k == key:
                return v
        return None


Kind = Union[ItemKind, SceneryKind, OpaqueKind]


@dataclass(frozen=True)
class MapObject:
    proto_id: int
    map_x: int
    map_y: int
    kind: Kind
    dir: Optional[int] = None
    relations: Relations = field(default_factory=Relations)
    light: Light = field(default_factory=Light)
    script_name: Optional[Span] = None
    func_name: Optional[Span] = None

    def position(self) -> Tuple[int, int]:
        return self.map_x, self.map_y

    @property
    def is_opaque(self) -> bool:
        return isinstance(self.kind, OpaqueKind)


# ── Map ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Map:
    header: Header
    tiles: Tuple[Tile, ...]
    objects: Tuple[MapObject, ...]

    def items(self) -> Iterator[MapObject]:
        return (o for o in self.objects if isinstance(o.kind, ItemKind))

    def scenery(self) -> Iterator[MapObject]:
        return (o for o in self.objects if isinstance(o.kind, SceneryKind))

    def opaque(self) -> Iterator[MapObject]:
        return (o for o in self.objects if o.is_opaque)

    def find_uid(self, uid: int) -> Optional[MapObject]:
        for o in self.objects:
            if o.relations.uid == uid:
                return o
        return None

    def contents_of(self, container_uid: int) -> Tuple[MapObject, ...]:
        """Objects held by the object with the given uid, in file order."""
        return tuple(o for o in self.objects
                     if o.relations.container_uid == container_uid)
