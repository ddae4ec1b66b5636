"""
Header block parser.

    [Header]
    Version              4
    MaxHexX              200
    ...
"""
from fomap.data_model import Header, DAY_COLOR_SLOTS
from fomap.lexer import (
    ParseFailure, skip_space, space1, line_end, identifier, integer, flag,
    token, int_array, section, unsigned,
)


def _script_name(text, pos):
    pos, value = token(text, pos)
    # '-' is how the format spells "no script"
    return pos, (None if value == '-' else value)


def _day_time(text, pos):
    return int_array(text, pos, 4)


def _color(text, pos):
    return int_array(text, pos, 3)


# ── Key → (Header field, value lexer) ─────────────────────────────────

HEADER_FIELDS = {
    'Version': ('version', integer),
    'MaxHexX': ('max_hex_x', unsigned),
    'MaxHexY': ('max_hex_y', unsigned),
    'WorkHexX': ('work_hex_x', integer),
    'WorkHexY': ('work_hex_y', integer),
    'ScriptModule': ('script_module', _script_name),
    'ScriptFunc': ('script_func', _script_name),
    'NoLogOut': ('no_log_out', flag),
    'Time': ('time', integer),
    'DayTime': ('day_time', _day_time),
}
for _i in range(DAY_COLOR_SLOTS):
    HEADER_FIELDS[f'DayColor{_i}'] = (f'day_color{_i}', _color)

MANDATORY_FIELDS = ('MaxHexX', 'MaxHexY')


def header(text, pos=0):
    """
    Parse the header block starting at ``pos``.

    Returns:
        (offset after the last header line, Header)

    Raises:
        ParseFailure: missing ``[Header]`` line, unknown or repeated key,
            badly typed value, or a mandatory key that never appeared.
    """
    start = pos
    values = {}
    try:
        pos = _fields(text, pos, values)
    except ParseFailure as e:
        raise e.within(start, 'header block')

    for key in MANDATORY_FIELDS:
        name = HEADER_FIELDS[key][0]
        if name not in values:
            raise ParseFailure(pos, f'header field {key}').within(start, 'header block')

    day_colors = tuple(values.pop(f'day_color{i}', None) for i in range(DAY_COLOR_SLOTS))
    return pos, Header(day_colors=day_colors, **values)


def _fields(text, pos, values):
    pos = section(text, pos, 'Header')
    while True:
        line = skip_space(text, pos)
        try:
            after_key, key = identifier(text, line)
        except ParseFailure:
            return pos
        entry = HEADER_FIELDS.get(key)
        if entry is None:
            raise ParseFailure(line, 'header field', str(key))
        name, lex = entry
        if name in values:
            raise ParseFailure(line, f'single {key} line', f'repeated {key}')
        try:
            value_pos = space1(text, after_key)
            pos, values[name] = lex(text, value_pos)
            pos = line_end(text, pos)
        except ParseFailure as e:
            raise e.within(line, str(key))
