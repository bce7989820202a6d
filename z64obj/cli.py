"""Command-line front-end for object descriptors.

Typical flow::

    z64obj init --bin object_link_boy.bin --out link.yaml
    z64obj add --descriptor link.yaml --kind dlist --offset 0x5A0 --size 0x98
    z64obj add --descriptor link.yaml --kind vtx --offset 0x640 --count 24
    z64obj normalize --descriptor link.yaml
    z64obj split --descriptor link.yaml --bin object_link_boy.bin --outdir out/
    z64obj pack --descriptor link.yaml --indir out/ --out rebuilt.bin
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from typing import Any, Dict, List, Optional

from .descriptor import load_descriptor, save_descriptor
from .entries import Entry, EntryType, TextureEntry
from .errors import SizeMismatchError, Z64ObjectError
from .obj import Z64Object
from .texture import TexFormat


def _hex(v: int) -> str:
    return f"0x{v:X}"


def _entry_record(off: int, entry: Entry) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "name": entry.name,
        "type": entry.kind.value,
        "start": _hex(off),
        "end": _hex(off + entry.size),
        "size": entry.size,
    }
    if isinstance(entry, TextureEntry):
        rec["width"] = entry.width
        rec["height"] = entry.height
        rec["format"] = entry.format.name
        rec["tlut"] = entry.tlut.name if entry.tlut is not None else None
    return rec


def _load_object(descriptor: str, bin_path: Optional[str] = None) -> Z64Object:
    obj = load_descriptor(descriptor)
    if bin_path:
        obj.load(pathlib.Path(bin_path).read_bytes())
    return obj


def cmd_init(args: argparse.Namespace) -> int:
    data = pathlib.Path(args.bin).read_bytes()
    obj = Z64Object.from_bytes(data)
    out = save_descriptor(obj, args.out)
    print(json.dumps({"descriptor": str(out), "size": len(data), "entries": len(obj)}, indent=2))
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    obj = _load_object(args.descriptor, args.bin)
    kind = args.kind
    if kind in ("dlist", "unk"):
        if args.size is None:
            raise ValueError(f"--size is required for kind '{kind}'")
        add = obj.add_dlist if kind == "dlist" else obj.add_unknown
        entry = add(args.size, args.name, args.offset)
    elif kind == "vtx":
        if args.count is None:
            raise ValueError("--count is required for kind 'vtx'")
        entry = obj.add_vertices(args.count, args.name, args.offset)
    else:
        if args.width is None or args.height is None or args.format is None:
            raise ValueError("--width, --height and --format are required for kind 'tex'")
        tlut = None
        if args.tlut:
            tlut = obj.find(args.tlut, EntryType.Texture)
            if tlut is None:
                raise ValueError(f"Palette texture not found: {args.tlut}")
        entry = obj.add_texture(args.width, args.height, TexFormat.parse(args.format), args.name, args.offset, tlut=tlut)

    if args.fix_names:
        obj.fix_names()
    out = save_descriptor(obj, args.out or args.descriptor)
    report = _entry_record(obj.offset_of(entry), entry)
    report["descriptor"] = str(out)
    report["entries"] = len(obj)
    print(json.dumps(report, indent=2))
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    obj = load_descriptor(args.descriptor)
    before = len(obj)
    merged = 0 if args.no_group else obj.group_unknown_entries()
    if not args.no_fix_names:
        obj.fix_names()
    out = save_descriptor(obj, args.out or args.descriptor)
    print(json.dumps({"descriptor": str(out), "entries_before": before, "entries": len(obj), "merged": merged}, indent=2))
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    obj = _load_object(args.descriptor, args.bin)
    entries = [_entry_record(off, e) for off, e in obj.iter_entries()]
    counts: Dict[str, int] = {}
    for e in obj:
        counts[e.kind.value] = counts.get(e.kind.value, 0) + 1
    report = {
        "descriptor": args.descriptor,
        "size": obj.size(),
        "free_bytes": sum(e.size for e in obj if e.kind is EntryType.Unknown),
        "counts": counts,
        "entries": entries,
    }
    if args.json:
        pathlib.Path(args.json).write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(json.dumps(report, indent=2))
    return 0


def cmd_split(args: argparse.Namespace) -> int:
    obj = _load_object(args.descriptor, args.bin)
    out_dir = pathlib.Path(args.outdir)
    out_dir.mkdir(parents=True, exist_ok=True)
    recs: List[Dict[str, Any]] = []
    for off, entry in obj.iter_entries():
        if args.skip_unknown and entry.kind is EntryType.Unknown:
            continue
        path = out_dir / f"{entry.name}.bin"
        path.write_bytes(entry.get_data())
        rec = _entry_record(off, entry)
        rec["bin"] = str(path)
        recs.append(rec)
    report = {
        "descriptor": args.descriptor,
        "bin": args.bin,
        "size": obj.size(),
        "count": len(recs),
        "entries": recs,
    }
    out_manifest = out_dir / "manifest.json"
    out_manifest.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(json.dumps({"manifest": str(out_manifest), "entries": len(recs)}, indent=2))
    return 0


def cmd_pack(args: argparse.Namespace) -> int:
    obj = load_descriptor(args.descriptor)
    in_dir = pathlib.Path(args.indir)
    base: Optional[bytes] = pathlib.Path(args.base).read_bytes() if args.base else None
    if base is not None:
        obj.load(base)
    missing: List[str] = []
    for entry in obj:
        path = in_dir / f"{entry.name}.bin"
        if path.exists():
            data = path.read_bytes()
            if len(data) != entry.size:
                raise SizeMismatchError(
                    f"{path.name}: 0x{len(data):X} bytes instead of 0x{entry.size:X}"
                )
            entry.set_data(data)
        elif base is None and entry.kind is not EntryType.Unknown:
            missing.append(entry.name)
    if missing:
        raise FileNotFoundError(f"No input data for: {', '.join(missing)}")
    data = obj.build()
    out = pathlib.Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    print(json.dumps({"out": str(out), "size": len(data), "entries": len(obj)}, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="z64obj", description="N64 object segment layout helper")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    pi = sub.add_parser("init", help="Create a descriptor with one unknown entry spanning a binary")
    pi.add_argument("--bin", required=True, help="Object binary")
    pi.add_argument("--out", required=True, help="Output descriptor (.yaml/.yml/.json)")
    pi.set_defaults(func=cmd_init)

    pa = sub.add_parser("add", help="Insert an entry into a descriptor")
    pa.add_argument("--descriptor", required=True, help="Descriptor file (.yaml/.yml/.json)")
    pa.add_argument("--bin", help="Optional object binary to validate against the layout")
    pa.add_argument("--kind", required=True, choices=["dlist", "vtx", "tex", "unk"], help="Entry kind")
    pa.add_argument("--offset", type=lambda x: int(x, 0), help="Entry offset (hex or int, default: end)")
    pa.add_argument("--name", help="Entry name (default: <kind>_<offset>)")
    pa.add_argument("--size", type=lambda x: int(x, 0), help="Byte size (dlist/unk)")
    pa.add_argument("--count", type=lambda x: int(x, 0), help="Vertex count (vtx)")
    pa.add_argument("--width", type=int, help="Texture width (tex)")
    pa.add_argument("--height", type=int, help="Texture height (tex)")
    pa.add_argument("--format", choices=[f.name.lower() for f in TexFormat], help="Texture format (tex)")
    pa.add_argument("--tlut", help="Name of the palette texture (tex)")
    pa.add_argument("--fix-names", action="store_true", help="Rename every entry after its offset")
    pa.add_argument("--out", help="Output descriptor (default: in-place)")
    pa.set_defaults(func=cmd_add)

    pn = sub.add_parser("normalize", help="Merge adjacent unknown entries and rename entries after their offsets")
    pn.add_argument("--descriptor", required=True, help="Descriptor file")
    pn.add_argument("--no-group", action="store_true", help="Keep adjacent unknown entries separate")
    pn.add_argument("--no-fix-names", action="store_true", help="Keep current entry names")
    pn.add_argument("--out", help="Output descriptor (default: in-place)")
    pn.set_defaults(func=cmd_normalize)

    pf = sub.add_parser("info", help="List entries with offsets")
    pf.add_argument("--descriptor", required=True, help="Descriptor file")
    pf.add_argument("--bin", help="Optional object binary to validate against the layout")
    pf.add_argument("--json", help="Optional output JSON path")
    pf.set_defaults(func=cmd_info)

    ps = sub.add_parser("split", help="Write one .bin per entry plus manifest.json")
    ps.add_argument("--descriptor", required=True, help="Descriptor file")
    ps.add_argument("--bin", required=True, help="Object binary")
    ps.add_argument("--outdir", required=True, help="Output folder")
    ps.add_argument("--skip-unknown", action="store_true", help="Do not write unknown entries")
    ps.set_defaults(func=cmd_split)

    pp = sub.add_parser("pack", help="Rebuild an object binary from per-entry .bin files")
    pp.add_argument("--descriptor", required=True, help="Descriptor file")
    pp.add_argument("--indir", required=True, help="Folder holding <entry name>.bin files")
    pp.add_argument("--base", help="Optional original binary used for entries without a file")
    pp.add_argument("--out", required=True, help="Output binary")
    pp.set_defaults(func=cmd_pack)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return int(args.func(args))
    except Z64ObjectError as e:
        print(json.dumps({"error": type(e).__name__, "message": str(e)}, indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
