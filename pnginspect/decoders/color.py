# pnginspect/decoders/color.py
# Чанки цвета и прозрачности: tRNS, cHRM, gAMA, iCCP, sBIT, sRGB, bKGD, hIST, cICP, cLLI, mDCV

from __future__ import annotations

from typing import Optional

from pnginspect.binreader import read_u8, read_u16, read_u32
from pnginspect.decoders.common import (
    GRAYSCALE,
    GRAYSCALE_ALPHA,
    INDEXED,
    TRUECOLOR,
    TRUECOLOR_ALPHA,
    read_keyword,
    require_length,
)
from pnginspect.errors import InvalidPayload
from pnginspect.model import ImageHeader

# Масштаб чисел с фиксированной точкой в cHRM и gAMA
FIXED_POINT_SCALE = 100000
# Масштабы mDCV/cLLI (PNG 3rd edition)
CHROMA_SCALE_MDCV = 50000
LUMINANCE_SCALE = 10000

SRGB_INTENTS = {
    0: "Perceptual",
    1: "Relative colorimetric",
    2: "Saturation",
    3: "Absolute colorimetric",
}

# Раскладка sBIT по типу цвета: (число байт, имена каналов, метка для ошибки)
SBIT_LAYOUTS = {
    GRAYSCALE: (1, ("Gray",), "grayscale"),
    TRUECOLOR: (3, ("R", "G", "B"), "truecolor"),
    INDEXED: (3, ("R", "G", "B"), "indexed"),
    GRAYSCALE_ALPHA: (2, ("Gray", "Alpha"), "grayscale+alpha"),
    TRUECOLOR_ALPHA: (4, ("R", "G", "B", "A"), "truecolor+alpha"),
}

# Кодовые точки ITU-T H.273 (наиболее распространенные)
CICP_PRIMARIES = {
    1: "BT.709",
    4: "BT.470M",
    5: "BT.470BG",
    6: "BT.601",
    9: "BT.2020",
    11: "DCI-P3",
    12: "Display P3",
}
CICP_TRANSFER = {
    1: "BT.709",
    4: "Gamma 2.2",
    5: "Gamma 2.8",
    8: "Linear",
    13: "sRGB",
    14: "BT.2020 10-bit",
    15: "BT.2020 12-bit",
    16: "PQ (SMPTE ST 2084)",
    18: "HLG",
}


# Без IHDR проверить длину невозможно - показывается только размер
def _no_context(data: bytes) -> str:
    return f"({len(data)} bytes, requires IHDR context)"


def summarize_tRNS(data: bytes, header: Optional[ImageHeader] = None) -> str:
    length = len(data)
    if header is None:
        return f"Transparency Data: {_no_context(data)}"
    ct = header.color_type
    if ct == GRAYSCALE:
        if length != 2:
            raise InvalidPayload("Invalid tRNS length for grayscale (must be 2)")
        details = f"Single Gray Level={read_u16(data, 0)}"
    elif ct == TRUECOLOR:
        if length != 6:
            raise InvalidPayload("Invalid tRNS length for truecolor (must be 6)")
        details = f"Single RGB Color: R={read_u16(data, 0)}, G={read_u16(data, 2)}, B={read_u16(data, 4)}"
    elif ct == INDEXED:
        if length == 0 or length > 256:
            raise InvalidPayload("Invalid tRNS length for indexed (must be 1-256)")
        details = f"{length} alpha entries for palette"
    else:
        raise InvalidPayload("tRNS chunk is invalid for color types with an alpha channel (4 or 6)")
    return f"Transparency Data: {details}"


def summarize_cHRM(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 32, "cHRM")
    v = [read_u32(data, i * 4) / FIXED_POINT_SCALE for i in range(8)]
    return (
        f"Chromaticities: White({v[0]:.4f},{v[1]:.4f}), R({v[2]:.4f},{v[3]:.4f}), "
        f"G({v[4]:.4f},{v[5]:.4f}), B({v[6]:.4f},{v[7]:.4f})"
    )


def summarize_gAMA(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 4, "gAMA")
    gamma = read_u32(data, 0) / FIXED_POINT_SCALE
    return f"Image Gamma={gamma:.5f}"


# Профиль ICC сжат zlib - показывается только размер сжатых данных
def summarize_iCCP(data: bytes, header: Optional[ImageHeader] = None) -> str:
    name, nul = read_keyword(data, "iCCP profile name")
    if nul + 2 > len(data):
        raise InvalidPayload("Invalid iCCP data (missing compression method)")
    method = read_u8(data, nul + 1)
    if method != 0:
        raise InvalidPayload("Invalid iCCP compression method")
    profile_len = len(data) - (nul + 2)
    return f'Embedded ICC Profile: Name="{name}", Compression Method={method}, Compressed Size={profile_len} bytes'


# Значимые биты: каждое значение в диапазоне 1..глубина выборки
def summarize_sBIT(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if header is None:
        return f"Significant Bits: {_no_context(data)}"
    ct = header.color_type
    if ct not in SBIT_LAYOUTS:
        return "Significant Bits: (Invalid color type)"
    expected, names, label = SBIT_LAYOUTS[ct]
    if len(data) != expected:
        raise InvalidPayload(f"Invalid sBIT length for {label}")
    sample_depth = 8 if ct == INDEXED else header.bit_depth
    values = [read_u8(data, i) for i in range(expected)]
    for value in values:
        if value == 0 or value > sample_depth:
            raise InvalidPayload(f"Invalid sBIT value {value} (must be 1-{sample_depth})")
    details = ", ".join(f"{n}={v}" for n, v in zip(names, values))
    if ct == INDEXED:
        details = f"Source Palette: {details}"
    return f"Significant Bits: {details}"


def summarize_sRGB(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 1, "sRGB")
    intent = read_u8(data, 0)
    if intent not in SRGB_INTENTS:
        raise InvalidPayload("Invalid sRGB rendering intent")
    return f"sRGB Rendering Intent: {intent} ({SRGB_INTENTS[intent]})"


def summarize_bKGD(data: bytes, header: Optional[ImageHeader] = None) -> str:
    length = len(data)
    if header is None:
        return f"Background Color: {_no_context(data)}"
    ct = header.color_type
    if ct in (GRAYSCALE, GRAYSCALE_ALPHA):
        if length != 2:
            raise InvalidPayload("Invalid bKGD length for grayscale")
        details = f"Gray Level={read_u16(data, 0)}"
    elif ct in (TRUECOLOR, TRUECOLOR_ALPHA):
        if length != 6:
            raise InvalidPayload("Invalid bKGD length for truecolor")
        details = f"RGB Color: R={read_u16(data, 0)}, G={read_u16(data, 2)}, B={read_u16(data, 4)}"
    elif ct == INDEXED:
        if length != 1:
            raise InvalidPayload("Invalid bKGD length for indexed")
        details = f"Palette Index={read_u8(data, 0)}"
    else:
        details = "(Invalid color type)"
    return f"Background Color: {details}"


def summarize_hIST(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) == 0 or len(data) % 2 != 0:
        raise InvalidPayload("Invalid hIST length")
    return f"Palette Histogram: Entries={len(data) // 2}"


def summarize_cICP(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 4, "cICP")
    primaries, transfer, matrix, full_range = (read_u8(data, i) for i in range(4))
    if matrix != 0:
        raise InvalidPayload("Invalid cICP matrix coefficients (must be 0 for RGB)")
    if full_range not in (0, 1):
        raise InvalidPayload("Invalid cICP video full range flag")
    p_name = CICP_PRIMARIES.get(primaries, "Other")
    t_name = CICP_TRANSFER.get(transfer, "Other")
    return (
        f"Coding-independent Code Points: Primaries={primaries} ({p_name}), "
        f"Transfer={transfer} ({t_name}), Matrix={matrix}, Full Range={full_range}"
    )


def summarize_cLLI(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 8, "cLLI")
    max_cll = read_u32(data, 0) / LUMINANCE_SCALE
    max_fall = read_u32(data, 4) / LUMINANCE_SCALE
    return f"Content Light Level: MaxCLL={max_cll:.4f} cd/m2, MaxFALL={max_fall:.4f} cd/m2"


def summarize_mDCV(data: bytes, header: Optional[ImageHeader] = None) -> str:
    require_length(data, 24, "mDCV")
    c = [read_u16(data, i * 2) / CHROMA_SCALE_MDCV for i in range(8)]
    max_lum = read_u32(data, 16) / LUMINANCE_SCALE
    min_lum = read_u32(data, 20) / LUMINANCE_SCALE
    return (
        f"Mastering Display: R({c[0]:.4f},{c[1]:.4f}), G({c[2]:.4f},{c[3]:.4f}), "
        f"B({c[4]:.4f},{c[5]:.4f}), White({c[6]:.4f},{c[7]:.4f}), "
        f"Luminance={min_lum:.4f}-{max_lum:.4f} cd/m2"
    )


__all__ = [
    "summarize_tRNS",
    "summarize_cHRM",
    "summarize_gAMA",
    "summarize_iCCP",
    "summarize_sBIT",
    "summarize_sRGB",
    "summarize_bKGD",
    "summarize_hIST",
    "summarize_cICP",
    "summarize_cLLI",
    "summarize_mDCV",
]
