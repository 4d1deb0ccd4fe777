# pnginspect/decoders/common.py

from __future__ import annotations

from typing import Tuple

from pnginspect.binreader import find_nul, read_latin1
from pnginspect.errors import InvalidPayload

# Ограничение длины ключевого слова текстовых чанков, iCCP, sPLT
MAX_KEYWORD_LEN = 79

# Цветовые типы IHDR
GRAYSCALE = 0
TRUECOLOR = 2
INDEXED = 3
GRAYSCALE_ALPHA = 4
TRUECOLOR_ALPHA = 6

COLOR_TYPE_NAMES = {
    GRAYSCALE: "Grayscale",
    TRUECOLOR: "Truecolor (RGB)",
    INDEXED: "Indexed-color",
    GRAYSCALE_ALPHA: "Grayscale + Alpha",
    TRUECOLOR_ALPHA: "Truecolor + Alpha (RGBA)",
}

# Допустимые сочетания цветового типа и глубины
VALID_BIT_DEPTHS = {
    GRAYSCALE: (1, 2, 4, 8, 16),
    TRUECOLOR: (8, 16),
    INDEXED: (1, 2, 4, 8),
    GRAYSCALE_ALPHA: (8, 16),
    TRUECOLOR_ALPHA: (8, 16),
}


def is_valid_depth_color(bit_depth: int, color_type: int) -> bool:
    return bit_depth in VALID_BIT_DEPTHS.get(color_type, ())


# Печатные символы Latin-1: 32-126 и 161-255
def is_printable_latin1(raw: bytes) -> bool:
    return all(32 <= b <= 126 or 161 <= b <= 255 for b in raw)


# Чтение ключевого слова, завершенного нулем: 1..79 печатных байт
# Возвращает (keyword, позиция нулевого байта)
def read_keyword(data: bytes, what: str) -> Tuple[str, int]:
    nul = find_nul(data, 0)
    if nul is None or nul == 0 or nul > MAX_KEYWORD_LEN:
        raise InvalidPayload(f"Invalid {what}")
    if not is_printable_latin1(data[:nul]):
        raise InvalidPayload(f"Invalid {what} (non-printable characters)")
    return read_latin1(data, 0, nul), nul


# Проверка точной длины содержимого
def require_length(data: bytes, expected: int, chunk_type: str) -> None:
    if len(data) != expected:
        raise InvalidPayload(f"Invalid {chunk_type} length (must be {expected})")


__all__ = [
    "MAX_KEYWORD_LEN",
    "GRAYSCALE",
    "TRUECOLOR",
    "INDEXED",
    "GRAYSCALE_ALPHA",
    "TRUECOLOR_ALPHA",
    "COLOR_TYPE_NAMES",
    "VALID_BIT_DEPTHS",
    "is_valid_depth_color",
    "is_printable_latin1",
    "read_keyword",
    "require_length",
]
