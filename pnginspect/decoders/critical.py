# pnginspect/decoders/critical.py
# Критичные чанки: IHDR, PLTE, IDAT, IEND

from __future__ import annotations

from typing import Optional

from pnginspect.binreader import read_u8, read_u32
from pnginspect.decoders.common import COLOR_TYPE_NAMES, is_valid_depth_color
from pnginspect.errors import InvalidPayload
from pnginspect.model import ImageHeader

IHDR_LEN = 13
MAX_PALETTE_ENTRIES = 256


# Полный разбор и проверка IHDR для сводки самого чанка
def parse_image_header(data: bytes) -> ImageHeader:
    if len(data) != IHDR_LEN:
        raise InvalidPayload("Invalid IHDR length for parsing")
    width = read_u32(data, 0)
    height = read_u32(data, 4)
    bit_depth = read_u8(data, 8)
    color_type = read_u8(data, 9)
    compression = read_u8(data, 10)
    filter_method = read_u8(data, 11)
    interlace = read_u8(data, 12)

    if width == 0 or height == 0:
        raise InvalidPayload("Zero width or height")
    if not is_valid_depth_color(bit_depth, color_type):
        raise InvalidPayload("Invalid bit depth/color type combination in IHDR")
    if compression != 0:
        raise InvalidPayload("Invalid IHDR compression method")
    if filter_method != 0:
        raise InvalidPayload("Invalid IHDR filter method")
    if interlace not in (0, 1):
        raise InvalidPayload("Invalid IHDR interlace method")

    return ImageHeader(
        width=width,
        height=height,
        bit_depth=bit_depth,
        color_type=color_type,
        compression=compression,
        filter_method=filter_method,
        interlace=interlace,
    )


# Контекст для tRNS, sBIT, bKGD: нужны только длина и пара глубина/тип цвета
# Нулевые размеры и прочие поля остаются ошибкой самого IHDR
def parse_header_context(data: bytes) -> ImageHeader:
    if len(data) != IHDR_LEN:
        raise InvalidPayload("Invalid IHDR length for parsing")
    bit_depth = read_u8(data, 8)
    color_type = read_u8(data, 9)
    if not is_valid_depth_color(bit_depth, color_type):
        raise InvalidPayload("Invalid bit depth/color type combination in IHDR")
    return ImageHeader(
        width=read_u32(data, 0),
        height=read_u32(data, 4),
        bit_depth=bit_depth,
        color_type=color_type,
        compression=read_u8(data, 10),
        filter_method=read_u8(data, 11),
        interlace=read_u8(data, 12),
    )


def summarize_IHDR(data: bytes, header: Optional[ImageHeader] = None) -> str:
    ihdr = parse_image_header(data)
    color_name = COLOR_TYPE_NAMES.get(ihdr.color_type, "Invalid")
    return (
        f"Dimensions: {ihdr.width} x {ihdr.height}, Bit Depth: {ihdr.bit_depth}, "
        f"Color Type: {ihdr.color_type} ({color_name}), Compression: {ihdr.compression}, "
        f"Filter: {ihdr.filter_method}, Interlace: {ihdr.interlace}"
    )


def summarize_PLTE(data: bytes, header: Optional[ImageHeader] = None) -> str:
    length = len(data)
    if length == 0 or length % 3 != 0 or length > MAX_PALETTE_ENTRIES * 3:
        raise InvalidPayload("Invalid PLTE length")
    return f"Palette entries: {length // 3}"


# Сжатые данные изображения не распаковываются
def summarize_IDAT(data: bytes, header: Optional[ImageHeader] = None) -> str:
    return "Image data stream chunk"


def summarize_IEND(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) != 0:
        raise InvalidPayload("Invalid IEND length (must be 0)")
    return "End of image stream marker"


__all__ = [
    "parse_image_header",
    "parse_header_context",
    "summarize_IHDR",
    "summarize_PLTE",
    "summarize_IDAT",
    "summarize_IEND",
]
