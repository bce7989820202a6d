"""Typed byte regions making up an object segment."""

from __future__ import annotations

import abc
import enum
from typing import List, Optional, Sequence

from .errors import InvalidNameError, SizeMismatchError
from .texture import TexFormat, tex_size
from .vertex import VTX_SIZE, Vtx, decode_vertices, encode_vertices


class EntryType(enum.Enum):
    DList = "DList"
    Vertex = "Vertex"
    Texture = "Texture"
    Unknown = "Unknown"


NAME_PREFIXES = {
    EntryType.DList: "dlist",
    EntryType.Texture: "tex",
    EntryType.Vertex: "vtx",
    EntryType.Unknown: "unk",
}
TLUT_PREFIX = "tlut"


def default_name(kind: EntryType, off: int) -> str:
    return f"{NAME_PREFIXES[kind]}_{off:08X}"


class Entry(abc.ABC):
    kind: EntryType

    def __init__(self, name: str):
        self.name = name

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise InvalidNameError(f"Invalid entry name: {value!r}")
        self._name = value

    @property
    @abc.abstractmethod
    def size(self) -> int: ...

    @abc.abstractmethod
    def get_data(self) -> bytes: ...

    @abc.abstractmethod
    def set_data(self, data: bytes) -> None: ...

    def __repr__(self) -> str:
        return f"{self.name} ({self.kind.value})"


class DListEntry(Entry):
    kind = EntryType.DList

    def __init__(self, name: str, ucode: bytes):
        super().__init__(name)
        self.ucode = bytes(ucode)

    @property
    def size(self) -> int:
        return len(self.ucode)

    def get_data(self) -> bytes:
        return self.ucode

    def set_data(self, data: bytes) -> None:
        self.ucode = bytes(data)


class UnknownEntry(Entry):
    kind = EntryType.Unknown

    def __init__(self, name: str, data: bytes):
        super().__init__(name)
        self.data = bytes(data)

    @property
    def size(self) -> int:
        return len(self.data)

    def get_data(self) -> bytes:
        return self.data

    def set_data(self, data: bytes) -> None:
        self.data = bytes(data)


class VertexEntry(Entry):
    kind = EntryType.Vertex

    def __init__(self, name: str, vertices: Sequence[Vtx]):
        super().__init__(name)
        self.vertices: List[Vtx] = list(vertices)

    @property
    def size(self) -> int:
        return len(self.vertices) * VTX_SIZE

    def get_data(self) -> bytes:
        return encode_vertices(self.vertices)

    def set_data(self, data: bytes) -> None:
        if len(data) % VTX_SIZE != 0:
            raise SizeMismatchError(f"Invalid size for a vertex buffer (0x{len(data):X})")
        self.vertices = decode_vertices(data)


class TextureEntry(Entry):
    """Raw texels plus the geometry needed to size them.

    ``tlut`` points at the texture entry holding the palette of a CI texture.
    It is a plain reference to a sibling entry; descriptors store it by name.
    """

    kind = EntryType.Texture

    def __init__(
        self,
        name: str,
        width: int,
        height: int,
        fmt: "TexFormat | str",
        data: Optional[bytes] = None,
        tlut: Optional["TextureEntry"] = None,
    ):
        super().__init__(name)
        self.width = int(width)
        self.height = int(height)
        self.format = TexFormat.parse(fmt)
        self.tlut = tlut
        self.texture = b""
        self.set_data(bytes(self.size) if data is None else data)

    @property
    def size(self) -> int:
        return tex_size(self.width, self.height, self.format)

    def get_data(self) -> bytes:
        return self.texture

    def set_data(self, data: bytes) -> None:
        valid = self.size
        if len(data) != valid:
            raise SizeMismatchError(f"Invalid data size (0x{len(data):X} instead of 0x{valid:X})")
        self.texture = bytes(data)
