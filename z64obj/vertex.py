"""F3DZEX vertex records (16 bytes, big-endian)."""

from __future__ import annotations

import dataclasses
from typing import List, Sequence

import numpy as np


VTX_SIZE = 0x10

VTX_DTYPE = np.dtype(
    [
        ("x", ">i2"),
        ("y", ">i2"),
        ("z", ">i2"),
        ("flag", ">u2"),
        ("s", ">i2"),
        ("t", ">i2"),
        ("r", "u1"),
        ("g", "u1"),
        ("b", "u1"),
        ("a", "u1"),
    ]
)


@dataclasses.dataclass
class Vtx:
    x: int = 0
    y: int = 0
    z: int = 0
    flag: int = 0
    s: int = 0
    t: int = 0
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0


def decode_vertices(data: bytes) -> List[Vtx]:
    if len(data) % VTX_SIZE != 0:
        raise ValueError(f"Vertex data is not a multiple of 0x{VTX_SIZE:X} bytes (0x{len(data):X})")
    arr = np.frombuffer(bytes(data), dtype=VTX_DTYPE)
    return [Vtx(*rec) for rec in arr.tolist()]


def encode_vertices(verts: Sequence[Vtx]) -> bytes:
    arr = np.array([dataclasses.astuple(v) for v in verts], dtype=VTX_DTYPE)
    return arr.tobytes()
