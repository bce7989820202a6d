"""Ordered, gap-free layout of the entries of an object segment.

A :class:`Z64Object` keeps a list of entries whose sizes, taken in order,
tile ``[0, size())`` exactly.  Entries are only ever added through
:meth:`Z64Object.insert` (or the ``add_*`` helpers), which either append,
fill a gap with unknown bytes, or carve the new entry out of space that is
not claimed yet.

Unknown entries are free space: any entry may be cut out of a single one of
them.  Vertex buffers are the exception to the "one region, one owner" rule,
since display lists commonly load overlapping windows of a shared vertex
pool, so a vertex insertion may be spliced across several vertex/unknown
entries in a row.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence, Tuple, cast

from .entries import (
    TLUT_PREFIX,
    DListEntry,
    Entry,
    EntryType,
    TextureEntry,
    UnknownEntry,
    VertexEntry,
    default_name,
)
from .errors import (
    InvalidOffsetError,
    InvalidSizeError,
    OverlapConflictError,
    SizeMismatchError,
    VertexAlignmentError,
    VertexOverlapConflictError,
)
from .texture import TexFormat, tex_size
from .vertex import VTX_SIZE, Vtx, decode_vertices

logger = logging.getLogger(__name__)

BUILD_ALIGN = 0x10


class Z64Object:
    def __init__(self) -> None:
        self.entries: List[Entry] = []

    @classmethod
    def from_bytes(cls, data: bytes) -> "Z64Object":
        """Seed an object with a single unknown entry spanning ``data``."""
        obj = cls()
        if data:
            obj.add_unknown(len(data), data=data)
        return obj

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def size(self) -> int:
        return sum(e.size for e in self.entries)

    def iter_entries(self) -> Iterator[Tuple[int, Entry]]:
        off = 0
        for entry in self.entries:
            yield off, entry
            off += entry.size

    def offset_of(self, entry: Entry) -> int:
        for off, e in self.iter_entries():
            if e is entry:
                return off
        raise ValueError(f"{entry!r} is not part of this object")

    def entry_at(self, off: int) -> Optional[Entry]:
        for entry_off, entry in self.iter_entries():
            if entry_off <= off < entry_off + entry.size:
                return entry
        return None

    def find(self, name: str, kind: Optional[EntryType] = None) -> Optional[Entry]:
        for entry in self.entries:
            if entry.name == name and (kind is None or entry.kind is kind):
                return entry
        return None

    def is_offset_free(self, off: int) -> bool:
        entry = self.entry_at(off)
        return entry is None or entry.kind is EntryType.Unknown

    # Insertion

    def insert(self, entry: Entry, offset: Optional[int] = None) -> Entry:
        return self._insert(entry, offset, self.size())

    def _insert(self, entry: Entry, offset: Optional[int], total: int) -> Entry:
        if isinstance(entry, VertexEntry):
            return self._insert_vertices(entry, offset, total)

        size = entry.size
        offset = self._check_insert(size, offset, total)
        if offset >= total:
            self._append(entry, offset, total)
            return entry

        entry_off = 0
        for i, existing in enumerate(self.entries):
            end = entry_off + existing.size
            if existing.kind is EntryType.Unknown and entry_off <= offset and offset + size <= end:
                self._split_unknown(i, entry_off, offset, entry)
                return entry
            entry_off = end

        for existing_off, existing in self.iter_entries():
            if existing_off == offset and existing.size == size and existing.kind is entry.kind:
                logger.debug("%s already covers 0x%X-0x%X", existing.name, offset, offset + size)
                return existing

        colliding = self.entry_at(offset)
        raise OverlapConflictError(
            entry.kind.value,
            offset,
            size,
            colliding.kind.value if colliding is not None else None,
        )

    def _check_insert(self, size: int, offset: Optional[int], total: int) -> int:
        if size <= 0:
            raise InvalidSizeError(f"Invalid entry size (0x{size:X})")
        if offset is None:
            return total
        if offset < 0:
            raise InvalidOffsetError(f"Invalid entry offset ({offset})")
        return offset

    def _append(self, entry: Entry, offset: int, total: int) -> None:
        if offset > total:
            filler = UnknownEntry(default_name(EntryType.Unknown, total), bytes(offset - total))
            self.entries.append(filler)
            logger.debug("Filled gap 0x%X-0x%X with %s", total, offset, filler.name)
        self.entries.append(entry)

    def _remainder(self, existing: Entry, entry_off: int, lo: int, hi: int) -> Optional[Entry]:
        # Piece of ``existing`` covering its bytes [lo, hi), same kind.
        if hi <= lo:
            return None
        name = existing.name if lo == 0 else default_name(existing.kind, entry_off + lo)
        if isinstance(existing, VertexEntry):
            return VertexEntry(name, existing.vertices[lo // VTX_SIZE : hi // VTX_SIZE])
        return UnknownEntry(name, existing.get_data()[lo:hi])

    def _split_unknown(self, i: int, entry_off: int, offset: int, entry: Entry) -> None:
        existing = self.entries[i]
        start = offset - entry_off
        stop = start + entry.size
        pieces = [
            p
            for p in (
                self._remainder(existing, entry_off, 0, start),
                entry,
                self._remainder(existing, entry_off, stop, existing.size),
            )
            if p is not None
        ]
        self.entries[i : i + 1] = pieces
        logger.debug("Split %s at 0x%X for %s", existing.name, offset, entry.name)

    def _insert_vertices(self, entry: VertexEntry, offset: Optional[int], total: int) -> VertexEntry:
        size = entry.size
        offset = self._check_insert(size, offset, total)
        if offset >= total:
            self._append(entry, offset, total)
            return entry

        for existing_off, existing in self.iter_entries():
            if existing_off > offset:
                break
            if existing_off == offset and existing.size == size and isinstance(existing, VertexEntry):
                logger.debug("%s already covers 0x%X-0x%X", existing.name, offset, offset + size)
                return existing

        # Plan every splice first; nothing is touched until the whole range checks out.
        plan: List[Tuple[int, List[Entry]]] = []
        remaining: List[Vtx] = list(entry.vertices)
        first: Optional[VertexEntry] = None
        cur = offset
        entry_off = 0
        for i, existing in enumerate(self.entries):
            if not remaining:
                break
            end = entry_off + existing.size
            if not (entry_off <= cur < end):
                entry_off = end
                continue
            if existing.kind not in (EntryType.Vertex, EntryType.Unknown):
                raise VertexOverlapConflictError(
                    EntryType.Vertex.value, cur, len(remaining) * VTX_SIZE, existing.kind.value
                )

            start = cur - entry_off
            covered = min(len(remaining) * VTX_SIZE, end - cur)
            tail = end - cur - covered
            if covered % VTX_SIZE != 0 or (
                existing.kind is EntryType.Vertex and (start % VTX_SIZE != 0 or tail % VTX_SIZE != 0)
            ):
                raise VertexAlignmentError(
                    f"Vertex split of {existing.name} is not 0x{VTX_SIZE:X}-aligned "
                    f"(off=0x{cur:X}, start=0x{start:X}, covered=0x{covered:X})"
                )

            count = covered // VTX_SIZE
            if first is None and count == len(remaining):
                piece = entry
            else:
                name = entry.name if first is None else default_name(EntryType.Vertex, cur)
                piece = VertexEntry(name, remaining[:count])
            if first is None:
                first = piece

            pieces = [
                p
                for p in (
                    self._remainder(existing, entry_off, 0, start),
                    piece,
                    self._remainder(existing, entry_off, start + covered, existing.size),
                )
                if p is not None
            ]
            plan.append((i, pieces))
            remaining = remaining[count:]
            cur += covered
            entry_off = end

        for i, pieces in reversed(plan):
            self.entries[i : i + 1] = pieces
        if remaining:
            name = entry.name if first is None else default_name(EntryType.Vertex, cur)
            tail_entry = VertexEntry(name, remaining)
            self.entries.append(tail_entry)
            if first is None:
                first = tail_entry
        logger.debug(
            "Placed %s at 0x%X across %d entries%s",
            entry.name,
            offset,
            len(plan),
            f" (0x{len(remaining) * VTX_SIZE:X} bytes appended)" if remaining else "",
        )
        return cast(VertexEntry, first)

    def _read(self, off: int, size: int, total: int) -> bytes:
        # Current bytes of [off, off + size), zero past the end.
        if size <= 0:
            return b""
        if off < 0 or off >= total:
            return bytes(size)
        end = off + size
        out = bytearray()
        for entry_off, entry in self.iter_entries():
            entry_end = entry_off + entry.size
            if entry_end <= off:
                continue
            if entry_off >= end:
                break
            out.extend(entry.get_data()[max(off - entry_off, 0) : min(end, entry_end) - entry_off])
        out.extend(bytes(size - len(out)))
        return bytes(out)

    def add_dlist(
        self,
        size: int,
        name: Optional[str] = None,
        offset: Optional[int] = None,
        data: Optional[bytes] = None,
    ) -> Entry:
        total = self.size()
        off = total if offset is None else offset
        if data is None:
            data = self._read(off, size, total)
        elif len(data) != size:
            raise SizeMismatchError(f"Expected 0x{size:X} bytes, got 0x{len(data):X}")
        holder = DListEntry(default_name(EntryType.DList, off) if name is None else name, data)
        return self._insert(holder, off, total)

    def add_unknown(
        self,
        size: int,
        name: Optional[str] = None,
        offset: Optional[int] = None,
        data: Optional[bytes] = None,
    ) -> Entry:
        total = self.size()
        off = total if offset is None else offset
        if data is None:
            data = self._read(off, size, total)
        elif len(data) != size:
            raise SizeMismatchError(f"Expected 0x{size:X} bytes, got 0x{len(data):X}")
        holder = UnknownEntry(default_name(EntryType.Unknown, off) if name is None else name, data)
        return self._insert(holder, off, total)

    def add_texture(
        self,
        width: int,
        height: int,
        fmt: "TexFormat | str",
        name: Optional[str] = None,
        offset: Optional[int] = None,
        data: Optional[bytes] = None,
        tlut: Optional[TextureEntry] = None,
    ) -> Entry:
        size = tex_size(width, height, fmt)
        if size <= 0:
            raise InvalidSizeError(f"Invalid texture size ({width}x{height}, 0x{size:X})")
        total = self.size()
        off = total if offset is None else offset
        if data is None:
            data = self._read(off, size, total)
        holder = TextureEntry(
            default_name(EntryType.Texture, off) if name is None else name,
            width,
            height,
            fmt,
            data,
            tlut=tlut,
        )
        return self._insert(holder, off, total)

    def add_vertices(
        self,
        count: int,
        name: Optional[str] = None,
        offset: Optional[int] = None,
        vertices: Optional[Sequence[Vtx]] = None,
    ) -> VertexEntry:
        total = self.size()
        off = total if offset is None else offset
        if vertices is None:
            vertices = decode_vertices(self._read(off, count * VTX_SIZE, total))
        elif len(vertices) != count:
            raise SizeMismatchError(f"Expected {count} vertices, got {len(vertices)}")
        holder = VertexEntry(default_name(EntryType.Vertex, off) if name is None else name, vertices)
        return self._insert_vertices(holder, off, total)

    # Maintenance

    def fix_names(self) -> None:
        offsets = {}
        for off, entry in self.iter_entries():
            entry.name = default_name(entry.kind, off)
            offsets[id(entry)] = off
        for entry in self.entries:
            if isinstance(entry, TextureEntry) and entry.tlut is not None:
                tlut = entry.tlut
                if id(tlut) in offsets:
                    tlut.name = f"{TLUT_PREFIX}_{offsets[id(tlut)]:08X}"

    def group_unknown_entries(self) -> int:
        """Merge runs of adjacent unknown entries; returns the number of merges."""
        merged = 0
        i = 1
        while i < len(self.entries):
            prev = self.entries[i - 1]
            cur = self.entries[i]
            if prev.kind is EntryType.Unknown and cur.kind is EntryType.Unknown:
                prev.set_data(prev.get_data() + cur.get_data())
                del self.entries[i]
                merged += 1
            else:
                i += 1
        if merged:
            logger.debug("Merged %d unknown entries", merged)
        return merged

    # Binary image

    def build(self) -> bytes:
        out = bytearray()
        for entry in self.entries:
            out.extend(entry.get_data())
        out.extend(bytes(-len(out) % BUILD_ALIGN))
        return bytes(out)

    def load(self, data: bytes) -> None:
        total = self.size()
        if len(data) != total:
            raise SizeMismatchError(f"Invalid data size (0x{len(data):X} instead of 0x{total:X})")
        off = 0
        for entry in self.entries:
            size = entry.size
            entry.set_data(data[off : off + size])
            off += size
