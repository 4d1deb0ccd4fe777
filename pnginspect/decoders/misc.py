# pnginspect/decoders/misc.py
# Прочие вспомогательные чанки: pHYs, sPLT, tIME, eXIf, oFFs, sTER, caBX

from __future__ import annotations

from typing import Optional

from pnginspect.binreader import read_i32, read_u8, read_u16, read_u32
from pnginspect.decoders.common import read_keyword, require_length
from pnginspect.errors import InvalidPayload
from pnginspect.model import ImageHeader

PHYS_UNITS = {0: "Unknown unit", 1: "Pixels per metre"}
OFFS_UNITS = {0: "Pixels", 1: "Micrometres"}
STER_MODES = {0: "Cross-fuse", 1: "Diverging-fuse"}

# Размер записи sPLT по глубине выборки: RGBA + частота(2)
SPLT_ENTRY_SIZE = {8: 6, 16: 10}


def summarize_pHYs(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) != 9:
        raise InvalidPayload("Invalid pHYs length")
    ppu_x = read_u32(data, 0)
    ppu_y = read_u32(data, 4)
    unit = read_u8(data, 8)
    if unit not in PHYS_UNITS:
        raise InvalidPayload("Invalid pHYs unit specifier")
    return f"Physical Dimensions: PPU X={ppu_x}, PPU Y={ppu_y}, Unit={unit} ({PHYS_UNITS[unit]})"


def summarize_sPLT(data: bytes, header: Optional[ImageHeader] = None) -> str:
    name, nul = read_keyword(data, "sPLT name")
    if nul + 2 > len(data):
        raise InvalidPayload("Invalid sPLT data (missing depth)")
    depth = read_u8(data, nul + 1)
    if depth not in SPLT_ENTRY_SIZE:
        raise InvalidPayload("Invalid sPLT depth")
    entry_size = SPLT_ENTRY_SIZE[depth]
    palette_len = len(data) - (nul + 2)
    if palette_len % entry_size != 0:
        raise InvalidPayload(f"Invalid sPLT data length for {depth}-bit")
    return f'Suggested Palette: Name="{name}", Depth={depth}, Entries={palette_len // entry_size}'


# Время последнего изменения (UTC), секунда 60 допускает високосную
def summarize_tIME(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) != 7:
        raise InvalidPayload("Invalid tIME length")
    year = read_u16(data, 0)
    month, day, hour, minute, second = (read_u8(data, i) for i in range(2, 7))
    if not (1 <= month <= 12 and 1 <= day <= 31 and hour <= 23 and minute <= 59 and second <= 60):
        raise InvalidPayload("Invalid tIME date/time value")
    return f"Last Modified: {year}-{month:02d}-{day:02d} {hour:02d}:{minute:02d}:{second:02d} UTC"


# Exif хранится как TIFF-структура; определяется только порядок байт
def summarize_eXIf(data: bytes, header: Optional[ImageHeader] = None) -> str:
    prefix = data[:4]
    if prefix == b"II*\x00":
        order = ", Byte Order=II (little-endian)"
    elif prefix == b"MM\x00*":
        order = ", Byte Order=MM (big-endian)"
    else:
        order = ""
    return f"Exif Metadata chunk ({len(data)} bytes{order})"


def summarize_oFFs(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 9, "oFFs")
    x = read_i32(data, 0)
    y = read_i32(data, 4)
    unit = read_u8(data, 8)
    if unit not in OFFS_UNITS:
        raise InvalidPayload("Invalid oFFs unit specifier")
    return f"Image Offset: X={x}, Y={y}, Unit={unit} ({OFFS_UNITS[unit]})"


def summarize_sTER(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 1, "sTER")
    mode = read_u8(data, 0)
    if mode not in STER_MODES:
        raise InvalidPayload("Invalid sTER mode")
    return f"Stereo Image: Mode={mode} ({STER_MODES[mode]})"


# Хранилище манифестов C2PA (JUMBF) - признак происхождения изображения
def summarize_caBX(data: bytes, header: Optional[ImageHeader] = None) -> str:
    return f"C2PA Manifest Store ({len(data)} bytes)"


__all__ = [
    "summarize_pHYs",
    "summarize_sPLT",
    "summarize_tIME",
    "summarize_eXIf",
    "summarize_oFFs",
    "summarize_sTER",
    "summarize_caBX",
]
