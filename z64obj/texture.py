"""N64 texture formats and their byte sizes."""

from __future__ import annotations

import enum
from typing import Dict


# G_IM_FMT_* and G_IM_SIZ_* codes.
_FMT_CODES: Dict[str, int] = {"rgba": 0, "yuv": 1, "ci": 2, "ia": 3, "i": 4}
_SIZ_CODES: Dict[int, int] = {4: 0, 8: 1, 16: 2, 32: 3}


class TexFormat(enum.Enum):
    RGBA32 = ("rgba", 32)
    RGBA16 = ("rgba", 16)
    IA16 = ("ia", 16)
    IA8 = ("ia", 8)
    IA4 = ("ia", 4)
    I8 = ("i", 8)
    I4 = ("i", 4)
    CI8 = ("ci", 8)
    CI4 = ("ci", 4)

    @property
    def bits(self) -> int:
        return self.value[1]

    @property
    def fmt(self) -> int:
        return _FMT_CODES[self.value[0]]

    @property
    def siz(self) -> int:
        return _SIZ_CODES[self.value[1]]

    @classmethod
    def parse(cls, text: "str | TexFormat") -> "TexFormat":
        if isinstance(text, TexFormat):
            return text
        key = str(text).strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown texture format: {text!r}") from None

    @classmethod
    def from_fmt_siz(cls, fmt: "str | int", siz: int) -> "TexFormat":
        if isinstance(fmt, int):
            names = {v: k for k, v in _FMT_CODES.items()}
            if fmt not in names:
                raise ValueError(f"Unknown G_IM_FMT code: {fmt}")
            f = names[fmt]
        else:
            f = fmt.strip().lower()
            if f not in _FMT_CODES:
                raise ValueError("fmt must be one of: rgba,yuv,ci,ia,i")
        # Accept both bit counts (4..32) and G_IM_SIZ codes (0..3).
        if siz in (0, 1, 2, 3):
            siz = 4 << siz
        if siz not in _SIZ_CODES:
            raise ValueError("siz must be one of: 4,8,16,32")
        for member in cls:
            if member.value == (f, siz):
                return member
        raise ValueError(f"Unsupported texture format: {f}{siz}")


def tex_size(width: int, height: int, fmt: "TexFormat | str") -> int:
    """Byte size of a ``width`` x ``height`` texture stored in ``fmt``."""
    f = TexFormat.parse(fmt)
    return (int(width) * int(height) * f.bits) // 8
