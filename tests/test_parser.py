import pytest

from fomap.data_model import MapParserSettings, ItemKind, SceneryKind
from fomap.errors import (
    MapError, IoFailure, EncodingFailure, GrammarFailure, LeftoverInput,
)
from fomap.parser import (
    parse, parse_with_remainder, root, decode_text,
    read_map_from_path, read_map_with_remainder,
)

from conftest import (
    HEADER, ONE_TILE, ITEM, SCENERY, SAMPLE_MAP, make_map_text, read_sample,
)


ALLOW_ANY = MapParserSettings(allow_any=True)
ALLOW_TAIL = MapParserSettings(allow_tail=True)
FOO_RECORD = "MapObjType Foo\nProtoId 1\nMapX 2\nMapY 3\nFoo_Thing 9\n"


def test_scenario_single_tile_no_objects():
    text = make_map_text(tiles=[ONE_TILE], tail="  \n\n")
    game_map = parse(text)
    assert game_map.header.size == (200, 200)
    assert len(game_map.tiles) == 1
    assert game_map.objects == ()


def test_scenario_dimensions_only_header():
    text = make_map_text(header="[Header]\nMaxHexX 200\nMaxHexY 200\n",
                         tiles=[ONE_TILE], tail="  \n")
    game_map = parse(text)
    assert game_map.header.size == (200, 200)
    assert game_map.header.version is None
    assert len(game_map.tiles) == 1
    assert game_map.objects == ()


def test_scenario_trailing_byte():
    text = make_map_text(tiles=[ONE_TILE]) + "x"
    with pytest.raises(LeftoverInput) as exc:
        parse(text)
    assert exc.value.excerpt == "x"
    game_map = parse(text, ALLOW_TAIL)
    assert len(game_map.tiles) == 1


def test_default_settings():
    settings = MapParserSettings()
    assert settings.allow_any is False
    assert settings.allow_tail is False


def test_sample_file():
    game_map = read_map_from_path(SAMPLE_MAP)
    h = game_map.header
    assert h.size == (200, 180)
    assert h.script_module == "map_sample"
    assert h.no_log_out is True
    assert h.day_colors[2] == (103, 95, 86)

    assert len(game_map.tiles) == 5
    assert any(t.is_roof for t in game_map.tiles)
    assert any(not t.is_roof for t in game_map.tiles)
    assert any(t.offset is not None for t in game_map.tiles)
    assert any(t.layer is not None for t in game_map.tiles)

    assert len(game_map.objects) == 3
    assert len(list(game_map.items())) == 2
    assert len(list(game_map.scenery())) == 1
    assert list(game_map.opaque()) == []


def test_sample_relations():
    game_map = read_map_from_path(SAMPLE_MAP)
    holder = game_map.find_uid(7)
    assert holder.proto_id == 2000
    (held,) = game_map.contents_of(7)
    assert held.proto_id == 41
    assert held.kind.anim.anim_stay_begin == 2
    assert game_map.find_uid(99) is None
    assert game_map.contents_of(99) == ()


def test_determinism():
    text = read_sample()
    assert parse(text) == parse(text)
    a = parse_with_remainder(text)
    b = parse_with_remainder(text)
    assert a.map == b.map
    assert a.remainder == b.remainder


def test_totality_of_consumption():
    text = read_sample()
    pos, _ = root(text)
    assert pos == len(text)
    result = parse_with_remainder(text)
    assert result.ok
    assert len(result.remainder) == 0
    assert result.remainder.start == len(text)


def test_leading_whitespace_and_comments():
    text = "\n# map exported by the editor\n" + make_map_text(tiles=[ONE_TILE])
    assert len(parse(text).tiles) == 1


def test_crlf_line_endings():
    text = make_map_text(tiles=[ONE_TILE], objects=[ITEM, SCENERY]).replace("\n", "\r\n")
    game_map = parse(text)
    assert game_map.tiles[0].path == "art\\tiles\\edg5000.frm"
    assert [type(o.kind) for o in game_map.objects] == [ItemKind, SceneryKind]


def test_byte_order_mark_skipped():
    text = "\ufeff" + make_map_text()
    assert parse(text).tiles == ()


def test_permissive_mode_containment():
    text = make_map_text(objects=[ITEM, FOO_RECORD, SCENERY])

    with pytest.raises(GrammarFailure) as exc:
        parse(text)
    assert "Foo" in exc.value.message

    game_map = parse(text, ALLOW_ANY)
    assert len(game_map.objects) == 3
    opaque = game_map.objects[1]
    assert opaque.is_opaque
    assert opaque.kind.tag == "Foo"
    assert opaque.kind.get("Foo_Thing") == "9"


def test_malformed_object_line_is_grammar_failure():
    broken = ITEM + "Item_Count\nItem_Val0 3\n"
    text = make_map_text(objects=[ITEM, broken, ITEM, ITEM])
    for settings in (None, ALLOW_TAIL):
        with pytest.raises(GrammarFailure) as exc:
            parse(text, settings)
        assert "object #2" in exc.value.message


def test_trailing_section_after_objects_is_leftover():
    text = make_map_text(objects=[ITEM, SCENERY]) + "[Extra]\nKey 1\n"
    with pytest.raises(LeftoverInput) as exc:
        parse(text)
    assert exc.value.excerpt == "[Extra]\nKey 1\n"
    assert len(parse(text, ALLOW_TAIL).objects) == 2


def test_bounded_leftover_excerpt():
    tail = "!" * 10_000
    text = make_map_text() + tail
    with pytest.raises(LeftoverInput) as exc:
        parse(text)
    assert len(exc.value.excerpt) <= 120
    assert exc.value.excerpt == "!" * 120


def test_parse_with_remainder_exposes_tail():
    text = make_map_text(tiles=[ONE_TILE]) + "trailing stuff"
    result = parse_with_remainder(text)
    assert result.ok
    assert result.map is not None
    assert result.remainder == "trailing stuff"
    assert result.remainder.source is text


def test_parse_with_remainder_raw_failure():
    text = make_map_text(tiles=["tile 1 x a.frm\n"])
    result = parse_with_remainder(text)
    assert not result.ok
    assert result.map is None
    assert result.failure.expected == 'integer'
    assert result.remainder.start == result.failure.position
    assert str(result.remainder).startswith("x a.frm")


def test_grammar_failure_message():
    text = make_map_text(tiles=[ONE_TILE, "tile 1 x a.frm\n"])
    with pytest.raises(GrammarFailure) as exc:
        parse(text)
    err = exc.value
    assert err.position == text.index("x a.frm")
    assert "expected integer" in err.message
    assert "line 8" in err.message
    assert "tiles block" in err.message
    assert str(err) == err.message


def test_missing_block():
    text = HEADER + "\n[Objects]\n"
    with pytest.raises(GrammarFailure) as exc:
        parse(text)
    assert "'[Tiles]'" in exc.value.message


def test_errors_share_a_base():
    for cls in (IoFailure, EncodingFailure, GrammarFailure, LeftoverInput):
        assert issubclass(cls, MapError)


def test_bytes_input():
    text = make_map_text(tiles=[ONE_TILE])
    assert len(parse(text.encode('utf-8')).tiles) == 1


def test_invalid_utf8():
    data = make_map_text().encode('utf-8') + b"\xff\xfe"
    with pytest.raises(EncodingFailure) as exc:
        parse(data)
    assert isinstance(exc.value.cause, UnicodeDecodeError)
    with pytest.raises(EncodingFailure):
        decode_text(b"[Header]\n\xc3")


def test_read_invalid_utf8_file(tmp_path):
    path = tmp_path / "broken.fomap"
    path.write_bytes(b"[Header]\nVersion \xff\n")
    with pytest.raises(EncodingFailure):
        read_map_from_path(path)


def test_read_missing_file(tmp_path):
    path = tmp_path / "missing.fomap"
    with pytest.raises(IoFailure) as exc:
        read_map_from_path(path)
    assert isinstance(exc.value.cause, FileNotFoundError)
    assert exc.value.path == path


def test_read_map_from_path_leftover(tmp_path):
    path = tmp_path / "tail.fomap"
    path.write_text(make_map_text() + "junk", encoding='utf-8')
    with pytest.raises(LeftoverInput):
        read_map_from_path(path)
    assert read_map_from_path(path, ALLOW_TAIL).objects == ()


def test_read_map_with_remainder(tmp_path):
    path = tmp_path / "tail.fomap"
    path.write_text(make_map_text() + "junk", encoding='utf-8')
    text, result = read_map_with_remainder(path)
    assert result.ok
    assert result.remainder == "junk"
    assert result.remainder.source == text


def test_map_is_immutable():
    game_map = parse(make_map_text(tiles=[ONE_TILE]))
    with pytest.raises(AttributeError):
        game_map.tiles = ()
    with pytest.raises(AttributeError):
        game_map.tiles[0].hex_x = 5
