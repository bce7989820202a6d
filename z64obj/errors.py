"""Errors raised by the object layout engine."""

from __future__ import annotations


class Z64ObjectError(ValueError):
    pass


class InvalidNameError(Z64ObjectError):
    pass


class InvalidSizeError(Z64ObjectError):
    pass


class InvalidOffsetError(Z64ObjectError):
    pass


class OverlapConflictError(Z64ObjectError):
    def __init__(self, kind: object, offset: int, size: int, colliding: object = None):
        self.kind = kind
        self.offset = offset
        self.size = size
        self.colliding = colliding
        msg = f"Overlapping data (type={kind}, off=0x{offset:X}, size=0x{size:X}"
        if colliding is not None:
            msg += f", colliding={colliding}"
        super().__init__(msg + ")")


class VertexOverlapConflictError(OverlapConflictError):
    pass


class VertexAlignmentError(Z64ObjectError):
    pass


class SizeMismatchError(Z64ObjectError):
    pass


class UnknownEntryKindError(Z64ObjectError):
    pass


class PaletteReferenceNotFoundError(Z64ObjectError):
    pass
