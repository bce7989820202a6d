"""Renaming, unknown merging, binary build and load."""

from __future__ import annotations

import random

import pytest

from conftest import assert_tiled, layout
from z64obj.errors import OverlapConflictError, SizeMismatchError, VertexAlignmentError
from z64obj.obj import Z64Object
from z64obj.texture import TexFormat


def _sample() -> Z64Object:
    obj = Z64Object()
    obj.add_dlist(0x18, name="gLinkDL")
    obj.add_vertices(3, name="gLinkVtx")
    pal = obj.add_texture(16, 1, TexFormat.RGBA16, name="gLinkPal")
    obj.add_texture(8, 8, TexFormat.CI4, name="gLinkTex", tlut=pal)
    obj.add_unknown(0x4, name="pad")
    return obj


def test_fix_names_uses_kind_prefix_and_offset() -> None:
    obj = _sample()
    obj.fix_names()
    assert [e.name for e in obj] == [
        "dlist_00000000",
        "vtx_00000018",
        "tlut_00000048",
        "tex_00000068",
        "unk_00000088",
    ]
    assert obj.entries[3].tlut is obj.entries[2]


def test_fix_names_is_stable() -> None:
    obj = _sample()
    obj.fix_names()
    names = [e.name for e in obj]
    obj.fix_names()
    assert [e.name for e in obj] == names


def test_group_unknown_entries_merges_runs() -> None:
    obj = Z64Object()
    obj.add_unknown(0x4, data=b"\x01" * 4)
    obj.add_unknown(0x4, data=b"\x02" * 4)
    obj.add_unknown(0x8, data=b"\x03" * 8)
    obj.add_dlist(0x8)
    obj.add_unknown(0x4)
    obj.add_unknown(0x4)

    assert obj.group_unknown_entries() == 3

    assert layout(obj) == [("Unknown", 0, 0x10), ("DList", 0x10, 0x18), ("Unknown", 0x18, 0x20)]
    assert obj.entries[0].name == "unk_00000000"
    assert obj.entries[0].get_data() == b"\x01" * 4 + b"\x02" * 4 + b"\x03" * 8


def test_group_unknown_entries_is_idempotent() -> None:
    obj = Z64Object()
    obj.add_unknown(0x40)
    obj.add_dlist(0x8, offset=0x10)
    obj.add_dlist(0x8, offset=0x20)
    obj.add_unknown(0x10)
    obj.group_unknown_entries()
    snapshot = [(e, e.size) for e in obj]
    assert obj.group_unknown_entries() == 0
    assert [(e, e.size) for e in obj] == snapshot
    assert_tiled(obj)


def test_carve_then_group_restores_free_space(blob: bytes) -> None:
    obj = Z64Object.from_bytes(blob)
    obj.add_unknown(0x10, offset=0x30)
    obj.add_unknown(0x20, offset=0x80)
    assert len(obj) == 5
    obj.group_unknown_entries()
    assert len(obj) == 1
    assert obj.build() == blob


def test_build_pads_to_sixteen_bytes() -> None:
    obj = Z64Object()
    obj.add_dlist(0x8, data=b"\xAA" * 8)
    obj.add_unknown(0x3, data=b"\xBB" * 3)
    out = obj.build()
    assert len(out) == 0x10
    assert out == b"\xAA" * 8 + b"\xBB" * 3 + bytes(5)
    assert obj.size() == 0xB


def test_build_does_not_mutate() -> None:
    obj = _sample()
    before = [(e.name, e.size) for e in obj]
    obj.build()
    assert [(e.name, e.size) for e in obj] == before


def test_load_round_trip() -> None:
    obj = _sample()
    rng = random.Random(1234)
    data = bytes(rng.randrange(256) for _ in range(obj.size()))

    obj.load(data)

    out = obj.build()
    pad = -obj.size() % 0x10
    assert out[: obj.size()] == data
    assert out[obj.size() :] == bytes(pad)

    obj.load(out[: obj.size()])
    assert obj.build() == out


@pytest.mark.parametrize("delta", [-1, 1, 0x10])
def test_load_requires_exact_size(delta: int) -> None:
    obj = _sample()
    with pytest.raises(SizeMismatchError):
        obj.load(bytes(obj.size() + delta))


def test_random_insertions_keep_tiling() -> None:
    rng = random.Random(64)
    obj = Z64Object.from_bytes(bytes(0x400))
    for _ in range(200):
        off = rng.randrange(0, 0x480, 4)
        kind = rng.choice(["dlist", "unk", "vtx", "tex"])
        try:
            if kind == "dlist":
                obj.add_dlist(rng.choice([8, 0x10, 0x28]), offset=off)
            elif kind == "unk":
                obj.add_unknown(rng.choice([4, 0x10]), offset=off)
            elif kind == "vtx":
                obj.add_vertices(rng.randrange(1, 5), offset=off & ~0xF)
            else:
                obj.add_texture(4, 4, TexFormat.IA8, offset=off)
        except (OverlapConflictError, VertexAlignmentError):
            pass
        assert_tiled(obj)
    assert len(obj.build()) % 0x10 == 0
