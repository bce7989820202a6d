"""Structural descriptors of an object (entry list without the raw bytes).

A descriptor is an ordered list of records, one per entry::

    - name: dlist_00000000
      entryType: DList
      size: 0x80
    - name: vtx_00000080
      entryType: Vertex
      vertexCount: 12
    - name: tex_00000140
      entryType: Texture
      width: 32
      height: 32
      format: CI4
      tlut: tlut_00000340

Descriptors are replayed through the regular ``add_*`` helpers, so a
descriptor must itself be overlap consistent.  Palettes are stored by name and
resolved once every entry exists, which allows forward references.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, List, Optional, Sequence, Union, cast

import yaml

from .entries import Entry, EntryType, TextureEntry
from .errors import PaletteReferenceNotFoundError, UnknownEntryKindError, Z64ObjectError
from .obj import Z64Object
from .vertex import VTX_SIZE

PathLike = Union[str, pathlib.Path]


def _to_int(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError(f"Expected int-like value, got: {type(v).__name__}")
    if isinstance(v, int):
        return int(v)
    if isinstance(v, str):
        return int(v, 0)
    raise ValueError(f"Expected int-like value, got: {type(v).__name__}")


def _field(rec: Dict[str, Any], key: str, idx: int) -> Any:
    if key not in rec:
        raise Z64ObjectError(f"Descriptor record {idx} ({rec.get('name')!r}) is missing '{key}'")
    return rec[key]


def _entry_kind(rec: Dict[str, Any], idx: int) -> EntryType:
    value = rec.get("entryType")
    try:
        return EntryType(value)
    except ValueError:
        raise UnknownEntryKindError(f"Invalid entry type ({value!r}) in descriptor record {idx}") from None


def to_descriptor(obj: Z64Object) -> List[Dict[str, Any]]:
    records: List[Dict[str, Any]] = []
    for entry in obj:
        rec: Dict[str, Any] = {"name": entry.name, "entryType": entry.kind.value}
        if entry.kind in (EntryType.DList, EntryType.Unknown):
            rec["size"] = entry.size
        elif entry.kind is EntryType.Vertex:
            rec["vertexCount"] = entry.size // VTX_SIZE
        elif entry.kind is EntryType.Texture:
            tex = cast(TextureEntry, entry)
            rec["width"] = tex.width
            rec["height"] = tex.height
            rec["format"] = tex.format.name
            rec["tlut"] = tex.tlut.name if tex.tlut is not None else None
        else:
            raise UnknownEntryKindError(f"Invalid entry type ({entry.kind})")
        records.append(rec)
    return records


def from_descriptor(records: Sequence[Dict[str, Any]]) -> Z64Object:
    obj = Z64Object()
    created: List[Entry] = []
    for idx, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise Z64ObjectError(f"Descriptor record {idx} must be a mapping")
        kind = _entry_kind(rec, idx)
        name: Optional[str] = rec.get("name")
        if kind is EntryType.DList:
            entry = obj.add_dlist(_to_int(_field(rec, "size", idx)), name)
        elif kind is EntryType.Vertex:
            entry = obj.add_vertices(_to_int(_field(rec, "vertexCount", idx)), name)
        elif kind is EntryType.Texture:
            entry = obj.add_texture(
                _to_int(_field(rec, "width", idx)),
                _to_int(_field(rec, "height", idx)),
                _field(rec, "format", idx),
                name,
            )
        elif kind is EntryType.Unknown:
            entry = obj.add_unknown(_to_int(_field(rec, "size", idx)), name)
        else:
            raise UnknownEntryKindError(f"Invalid entry type ({kind})")
        created.append(entry)

    textures: Dict[str, TextureEntry] = {}
    for entry in obj:
        if isinstance(entry, TextureEntry):
            textures.setdefault(entry.name, entry)

    for rec, entry in zip(records, created):
        if not isinstance(entry, TextureEntry):
            continue
        tlut_name = rec.get("tlut")
        if not tlut_name:
            entry.tlut = None
            continue
        if tlut_name not in textures:
            raise PaletteReferenceNotFoundError(f"Palette {tlut_name!r} of {entry.name} not found")
        entry.tlut = textures[tlut_name]
    return obj


def dumps_descriptor(obj: Z64Object, fmt: str = "yaml") -> str:
    records = to_descriptor(obj)
    if fmt == "json":
        return json.dumps(records, indent=2)
    return yaml.safe_dump(records, sort_keys=False)


def loads_descriptor(text: str, fmt: str = "yaml") -> Z64Object:
    if fmt == "json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if isinstance(data, dict):
        data = data.get("entries")
    if not isinstance(data, list):
        raise ValueError("Descriptor root must be a list of entry records")
    return from_descriptor(data)


def _fmt_for(path: pathlib.Path) -> str:
    return "json" if path.suffix.lower() == ".json" else "yaml"


def save_descriptor(obj: Z64Object, path: PathLike) -> pathlib.Path:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_descriptor(obj, _fmt_for(path)), encoding="utf-8")
    return path


def load_descriptor(path: PathLike) -> Z64Object:
    path = pathlib.Path(path)
    return loads_descriptor(path.read_text(encoding="utf-8"), _fmt_for(path))
