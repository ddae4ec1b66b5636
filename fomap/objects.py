"""
Objects block parser.

Each record opens with a ``MapObjType <tag>`` line and continues with
``Key value`` lines up to the next ``MapObjType``, a ``[Section]`` line or
the end of input. Blank lines and ``#`` comments between fields are
ignored; any other line is a failure. The tag picks the grammar for the
rest of the record:

    1  → ItemKind
    2  → SceneryKind
    *  → OpaqueKind when allow_any, otherwise a failure naming the tag
"""
from fomap.data_model import (
    MapObject, MapObjectType, Relations, Light, Anim,
    ItemKind, SceneryKind, OpaqueKind, ITEM_VAL_SLOTS, SCENERY_PARAM_SLOTS,
)
from fomap.lexer import (
    ParseFailure, skip_space, space1, line_end, integer, flag, token, word,
    identifier, key_value, section, tag, unsigned,
)

DISCRIMINATOR = 'MapObjType'


# ── Key → (field name, value lexer) tables ────────────────────────────

COMMON_FIELDS = {
    'ProtoId': ('proto_id', unsigned),
    'MapX': ('map_x', integer),
    'MapY': ('map_y', integer),
    'Dir': ('dir', integer),
    'UID': ('uid', integer),
    'ContainerUID': ('container_uid', integer),
    'LightColor': ('light_color', integer),
    'LightDay': ('light_day', integer),
    'LightDirOff': ('light_dir_off', integer),
    'LightDistance': ('light_distance', integer),
    'LightIntensity': ('light_intensity', integer),
    'ScriptName': ('script_name', token),
    'FuncName': ('func_name', token),
}

MANDATORY_FIELDS = ('ProtoId', 'MapX', 'MapY')

# Shared by items and scenery
VISUAL_FIELDS = {
    'OffsetX': ('offset_x', integer),
    'OffsetY': ('offset_y', integer),
    'AnimStayBegin': ('anim_stay_begin', integer),
    'AnimStayEnd': ('anim_stay_end', integer),
    'AnimWait': ('anim_wait', integer),
    'PicMapName': ('pic_map_name', token),
    'PicInvName': ('pic_inv_name', token),
    'InfoOffset': ('info_offset', integer),
}

ITEM_FIELDS = {
    'Item_Count': ('count', integer),
    'Item_BrokenFlags': ('broken_flags', integer),
    'Item_BrokenCount': ('broken_count', integer),
    'Item_Deterioration': ('deterioration', integer),
    'Item_ItemSlot': ('item_slot', integer),
    'Item_AmmoPid': ('ammo_pid', integer),
    'Item_AmmoCount': ('ammo_count', integer),
    'Item_LockerDoorId': ('locker_door_id', integer),
    'Item_LockerCondition': ('locker_condition', integer),
    'Item_LockerComplexity': ('locker_complexity', integer),
    'Item_TrapValue': ('trap_value', integer),
}
for _i in range(ITEM_VAL_SLOTS):
    ITEM_FIELDS[f'Item_Val{_i}'] = (f'val{_i}', integer)

SCENERY_FIELDS = {
    'Scenery_CanUse': ('can_use', flag),
    'Scenery_CanTalk': ('can_talk', flag),
    'Scenery_TriggerNum': ('trigger_num', integer),
    'Scenery_ParamsCount': ('params_count', integer),
    'Scenery_ToMapPid': ('to_map_pid', integer),
    'Scenery_ToEntire': ('to_entire', integer),
    'Scenery_ToDir': ('to_dir', integer),
    'Scenery_SpriteCut': ('sprite_cut', integer),
}
for _i in range(SCENERY_PARAM_SLOTS):
    SCENERY_FIELDS[f'Scenery_Param{_i}'] = (f'param{_i}', integer)

ANIM_NAMES = ('offset_x', 'offset_y', 'anim_stay_begin', 'anim_stay_end', 'anim_wait')
VAL_NAMES = tuple(f'val{i}' for i in range(ITEM_VAL_SLOTS))
PARAM_NAMES = tuple(f'param{i}' for i in range(SCENERY_PARAM_SLOTS))

# Keyed by the numeric value of the tag, so 1, 01, +1 and 0x1 all mean an item
KIND_TAGS = {
    int(MapObjectType.ITEM): MapObjectType.ITEM,
    int(MapObjectType.SCENERY): MapObjectType.SCENERY,
}

KIND_FIELDS = {
    MapObjectType.ITEM: {**COMMON_FIELDS, **VISUAL_FIELDS, **ITEM_FIELDS},
    MapObjectType.SCENERY: {**COMMON_FIELDS, **VISUAL_FIELDS, **SCENERY_FIELDS},
}


# ── Block ─────────────────────────────────────────────────────────────

def objects(text, pos, allow_any=False):
    """
    Parse the objects block starting at ``pos``.

    Args:
        allow_any: accept records whose MapObjType is not a typed kind,
            keeping them as OpaqueKind instead of failing.

    Returns:
        (offset after the last record, tuple of MapObject)
    """
    start = pos
    try:
        pos = section(text, pos, 'Objects')
    except ParseFailure as e:
        raise e.within(start, 'objects block')

    records = []
    while True:
        line = skip_space(text, pos)
        if not _at_discriminator(text, line):
            break
        try:
            pos, obj = map_object(text, line, allow_any)
        except ParseFailure as e:
            e.within(line, f'object #{len(records) + 1}')
            raise e.within(start, 'objects block')
        records.append(obj)
    return pos, tuple(records)


def _at_discriminator(text, pos):
    try:
        _, key = identifier(text, pos)
    except ParseFailure:
        return False
    return key == DISCRIMINATOR


def _at_record_end(text, pos):
    return pos == len(text) or text.startswith('[', pos) or _at_discriminator(text, pos)


# ── Record ────────────────────────────────────────────────────────────

def _kind_tag(text, pos):
    """The tag as written, and its integer value when it is numeric."""
    end, raw = word(text, pos)
    try:
        num_end, value = integer(text, pos)
    except ParseFailure:
        return end, raw, None
    return end, raw, (value if num_end == end else None)


def map_object(text, pos, allow_any=False):
    """Parse one record whose ``MapObjType`` line starts at ``pos``.

    Returns:
        (offset after the record's last field line, MapObject)
    """
    pos = space1(text, tag(text, pos, DISCRIMINATOR))
    tag_pos = pos
    pos, kind_tag, kind_value = _kind_tag(text, pos)
    pos = line_end(text, pos)

    object_type = KIND_TAGS.get(kind_value)
    if object_type is None and not allow_any:
        raise ParseFailure(
            tag_pos, 'known object kind (1 = item, 2 = scenery)', str(kind_tag))

    typed = {}
    raw = []
    table = KIND_FIELDS[object_type] if object_type is not None else COMMON_FIELDS
    while True:
        line = skip_space(text, pos)
        if _at_record_end(text, line):
            break
        try:
            after_key, key = identifier(text, line)
        except ParseFailure as e:
            raise ParseFailure(line, 'field line', e.found)
        entry = table.get(key)
        if entry is None:
            if object_type is not None:
                raise ParseFailure(
                    line, f'{object_type.name.lower()} field', str(key))
            # Opaque records keep whatever they carry verbatim
            try:
                value_end, pair = key_value(text, line)
                pos = line_end(text, value_end)
            except ParseFailure as e:
                raise e.within(line, str(key))
            raw.append(pair)
            continue
        name, lex = entry
        if name in typed:
            raise ParseFailure(line, f'single {key} line', f'repeated {key}')
        try:
            value_end, typed[name] = lex(text, space1(text, after_key))
            pos = line_end(text, value_end)
        except ParseFailure as e:
            raise e.within(line, str(key))

    for key in MANDATORY_FIELDS:
        if COMMON_FIELDS[key][0] not in typed:
            raise ParseFailure(pos, f'object field {key}')

    if object_type is MapObjectType.ITEM:
        kind = _item(typed)
    elif object_type is MapObjectType.SCENERY:
        kind = _scenery(typed)
    else:
        kind = OpaqueKind(tag=kind_tag, fields=tuple(raw))
    return pos, _build_object(typed, kind)


def _build_object(typed, kind):
    return MapObject(
        proto_id=typed['proto_id'],
        map_x=typed['map_x'],
        map_y=typed['map_y'],
        kind=kind,
        dir=typed.get('dir'),
        relations=Relations(
            uid=typed.get('uid'),
            container_uid=typed.get('container_uid'),
        ),
        light=Light(
            color=typed.get('light_color'),
            day=typed.get('light_day'),
            dir_off=typed.get('light_dir_off'),
            distance=typed.get('light_distance'),
            intensity=typed.get('light_intensity'),
        ),
        script_name=typed.get('script_name'),
        func_name=typed.get('func_name'),
    )


def _visual(typed):
    return dict(
        anim=Anim(**{name: typed.get(name) for name in ANIM_NAMES}),
        pic_map_name=typed.get('pic_map_name'),
        pic_inv_name=typed.get('pic_inv_name'),
        info_offset=typed.get('info_offset'),
    )


def _item(typed):
    scalars = {name: typed.get(name) for name, _ in ITEM_FIELDS.values()
               if name not in VAL_NAMES}
    val = tuple(typed.get(name) for name in VAL_NAMES)
    return ItemKind(val=val, **_visual(typed), **scalars)


def _scenery(typed):
    scalars = {name: typed.get(name) for name, _ in SCENERY_FIELDS.values()
               if name not in PARAM_NAMES}
    params = tuple(typed.get(name) for name in PARAM_NAMES)
    return SceneryKind(params=params, **_visual(typed), **scalars)
