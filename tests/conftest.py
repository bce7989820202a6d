from __future__ import annotations

from typing import List, Tuple

import pytest

from z64obj.obj import Z64Object


def layout(obj: Z64Object) -> List[Tuple[str, int, int]]:
    return [(e.kind.value, off, off + e.size) for off, e in obj.iter_entries()]


def assert_tiled(obj: Z64Object) -> None:
    off = 0
    for entry_off, entry in obj.iter_entries():
        assert entry_off == off
        assert entry.size > 0
        off += entry.size
    assert off == obj.size() == sum(e.size for e in obj)


@pytest.fixture
def blob() -> bytes:
    return bytes(range(256)) * 2
