"""Descriptor round trips and descriptor files."""

from __future__ import annotations

import json
import time

import pytest
import yaml

from conftest import layout
from z64obj.descriptor import (
    dumps_descriptor,
    from_descriptor,
    load_descriptor,
    loads_descriptor,
    save_descriptor,
    to_descriptor,
)
from z64obj.entries import TextureEntry
from z64obj.errors import (
    InvalidNameError,
    OverlapConflictError,
    PaletteReferenceNotFoundError,
    UnknownEntryKindError,
    Z64ObjectError,
)
from z64obj.obj import Z64Object
from z64obj.texture import TexFormat


def _sample() -> Z64Object:
    obj = Z64Object()
    obj.add_dlist(0x20, name="gDL")
    obj.add_vertices(6, name="gVtx")
    obj.add_unknown(0x8)
    pal = obj.add_texture(16, 1, TexFormat.RGBA16, name="gPal")
    obj.add_texture(16, 16, TexFormat.CI4, name="gTex", tlut=pal)
    obj.add_texture(8, 8, TexFormat.IA8, name="gMask")
    return obj


def test_to_descriptor_records() -> None:
    records = to_descriptor(_sample())
    assert records == [
        {"name": "gDL", "entryType": "DList", "size": 0x20},
        {"name": "gVtx", "entryType": "Vertex", "vertexCount": 6},
        {"name": "unk_00000080", "entryType": "Unknown", "size": 0x8},
        {"name": "gPal", "entryType": "Texture", "width": 16, "height": 1, "format": "RGBA16", "tlut": None},
        {"name": "gTex", "entryType": "Texture", "width": 16, "height": 16, "format": "CI4", "tlut": "gPal"},
        {"name": "gMask", "entryType": "Texture", "width": 8, "height": 8, "format": "IA8", "tlut": None},
    ]


def test_descriptor_round_trip_is_lossless() -> None:
    obj = _sample()
    again = from_descriptor(to_descriptor(obj))
    assert to_descriptor(again) == to_descriptor(obj)
    assert layout(again) == layout(obj)
    assert again.find("gTex").tlut is again.find("gPal")


def test_forward_palette_reference_is_resolved() -> None:
    records = [
        {"name": "tex", "entryType": "Texture", "width": 32, "height": 32, "format": "CI8", "tlut": "pal"},
        {"name": "pal", "entryType": "Texture", "width": 16, "height": 16, "format": "RGBA16"},
    ]
    obj = from_descriptor(records)
    tex = obj.find("tex")
    assert isinstance(tex, TextureEntry)
    assert tex.tlut is obj.find("pal")
    assert obj.offset_of(tex.tlut) == 0x400


def test_missing_palette_fails() -> None:
    records = [
        {"name": "tex", "entryType": "Texture", "width": 8, "height": 8, "format": "CI4", "tlut": "nope"},
    ]
    with pytest.raises(PaletteReferenceNotFoundError):
        from_descriptor(records)


def test_palette_must_be_a_texture() -> None:
    records = [
        {"name": "pal", "entryType": "DList", "size": 8},
        {"name": "tex", "entryType": "Texture", "width": 8, "height": 8, "format": "CI4", "tlut": "pal"},
    ]
    with pytest.raises(PaletteReferenceNotFoundError):
        from_descriptor(records)


@pytest.mark.parametrize("kind", ["Matrix", "dlist", None])
def test_unknown_entry_kind_fails(kind) -> None:
    with pytest.raises(UnknownEntryKindError):
        from_descriptor([{"name": "x", "entryType": kind, "size": 8}])


def test_missing_field_fails() -> None:
    with pytest.raises(Z64ObjectError):
        from_descriptor([{"name": "x", "entryType": "Vertex"}])
    with pytest.raises(UnknownEntryKindError):
        from_descriptor([{"name": "x", "size": 8}])


def test_blank_name_fails() -> None:
    with pytest.raises(InvalidNameError):
        from_descriptor([{"name": " ", "entryType": "Unknown", "size": 8}])


def test_missing_name_is_generated() -> None:
    obj = from_descriptor([{"entryType": "Unknown", "size": 8}, {"entryType": "DList", "size": 8}])
    assert [e.name for e in obj] == ["unk_00000000", "dlist_00000008"]


def test_hex_strings_are_accepted() -> None:
    obj = from_descriptor([{"name": "a", "entryType": "DList", "size": "0x40"}])
    assert obj.size() == 0x40


def test_yaml_text_round_trip() -> None:
    obj = _sample()
    text = dumps_descriptor(obj)
    assert yaml.safe_load(text)[0] == {"name": "gDL", "entryType": "DList", "size": 0x20}
    assert to_descriptor(loads_descriptor(text)) == to_descriptor(obj)


def test_yaml_hex_literals() -> None:
    text = """
- name: gDL
  entryType: DList
  size: 0x80
- name: gVtx
  entryType: Vertex
  vertexCount: 4
"""
    obj = loads_descriptor(text)
    assert layout(obj) == [("DList", 0, 0x80), ("Vertex", 0x80, 0xC0)]


def test_mapping_root_with_entries() -> None:
    obj = loads_descriptor(json.dumps({"entries": [{"name": "a", "entryType": "Unknown", "size": 4}]}), "json")
    assert len(obj) == 1


def test_invalid_root_fails() -> None:
    with pytest.raises(ValueError):
        loads_descriptor("just a string")


@pytest.mark.parametrize("filename", ["obj.yaml", "obj.yml", "obj.json"])
def test_descriptor_files(tmp_path, filename: str) -> None:
    obj = _sample()
    path = save_descriptor(obj, tmp_path / "sub" / filename)
    assert path.exists()
    if filename.endswith(".json"):
        assert json.loads(path.read_text(encoding="utf-8")) == to_descriptor(obj)
    again = load_descriptor(path)
    assert to_descriptor(again) == to_descriptor(obj)


def test_fix_names_output_round_trips() -> None:
    obj = _sample()
    obj.fix_names()
    records = to_descriptor(obj)
    assert records[3]["name"] == "tlut_00000088"
    assert records[4]["tlut"] == "tlut_00000088"
    again = from_descriptor(records)
    assert again.find("tex_000000A8").tlut is again.find("tlut_00000088")


def test_replay_appends_in_record_order() -> None:
    obj = Z64Object()
    obj.add_dlist(0x8)
    records = to_descriptor(obj)
    records.append({"name": "dlist_00000000", "entryType": "DList", "size": 8})
    again = from_descriptor(records)
    assert len(again) == 2

    with pytest.raises(OverlapConflictError):
        again.add_dlist(0x10, offset=0)


def test_large_descriptor_replay_is_fast() -> None:
    records = []
    for i in range(1500):
        records.append({"name": f"gVtx{i}", "entryType": "Vertex", "vertexCount": 8})
        records.append({"name": f"gDL{i}", "entryType": "DList", "size": 0x80})
    start = time.perf_counter()
    obj = from_descriptor(records)
    elapsed = time.perf_counter() - start
    assert elapsed < 10.0
    assert len(obj) == 3000
    assert obj.size() == 1500 * 0x100
    assert obj.offset_of(obj.find("gDL1499")) == 1499 * 0x100 + 0x80
    assert obj.build() == bytes(1500 * 0x100)
