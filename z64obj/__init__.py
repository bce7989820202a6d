"""Layout engine for N64 object segments (display lists, vertices, textures)."""

from .descriptor import from_descriptor, load_descriptor, save_descriptor, to_descriptor
from .entries import DListEntry, Entry, EntryType, TextureEntry, UnknownEntry, VertexEntry
from .errors import (
    InvalidNameError,
    InvalidOffsetError,
    InvalidSizeError,
    OverlapConflictError,
    PaletteReferenceNotFoundError,
    SizeMismatchError,
    UnknownEntryKindError,
    VertexAlignmentError,
    VertexOverlapConflictError,
    Z64ObjectError,
)
from .obj import Z64Object
from .texture import TexFormat, tex_size
from .vertex import VTX_SIZE, Vtx

__all__ = [
    "DListEntry",
    "Entry",
    "EntryType",
    "InvalidNameError",
    "InvalidOffsetError",
    "InvalidSizeError",
    "OverlapConflictError",
    "PaletteReferenceNotFoundError",
    "SizeMismatchError",
    "TexFormat",
    "TextureEntry",
    "UnknownEntry",
    "UnknownEntryKindError",
    "VTX_SIZE",
    "VertexAlignmentError",
    "VertexEntry",
    "VertexOverlapConflictError",
    "Vtx",
    "Z64Object",
    "Z64ObjectError",
    "from_descriptor",
    "load_descriptor",
    "save_descriptor",
    "tex_size",
    "to_descriptor",
]
