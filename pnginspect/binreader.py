# pnginspect/binreader.py

from __future__ import annotations

import struct
from typing import Optional

from pnginspect.errors import InvalidEncoding, OutOfBounds


# Проверка границ до любого обращения к буферу
def _check(buf, what: str, offset: int, size: int) -> None:
    if offset < 0 or size < 0 or offset + size > len(buf):
        raise OutOfBounds(what, offset, size, len(buf))


def read_u8(buf, offset: int) -> int:
    _check(buf, "Uint8", offset, 1)
    return buf[offset]


# Беззнаковые целые в сетевом порядке байт (big-endian)
def read_u16(buf, offset: int) -> int:
    _check(buf, "Uint16", offset, 2)
    return struct.unpack_from(">H", buf, offset)[0]


def read_u32(buf, offset: int) -> int:
    _check(buf, "Uint32", offset, 4)
    return struct.unpack_from(">I", buf, offset)[0]


# Знаковое 32-битное (нужно для oFFs)
def read_i32(buf, offset: int) -> int:
    _check(buf, "Int32", offset, 4)
    return struct.unpack_from(">i", buf, offset)[0]


# Latin-1: байт напрямую отображается в кодовую точку, ошибок декодирования не бывает
# Используется и для 7-битного ASCII (тип чанка, языковой тег)
def read_latin1(buf, offset: int, length: int) -> str:
    _check(buf, "Latin1", offset, length)
    return bytes(buf[offset:offset + length]).decode("latin-1")


# UTF-8 без подстановки символов замены: любая битая последовательность - ошибка
def read_utf8(buf, offset: int, length: int) -> str:
    _check(buf, "UTF8", offset, length)
    try:
        return bytes(buf[offset:offset + length]).decode("utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(offset, length, exc.reason) from exc


# Поиск нулевого разделителя, начиная с позиции start (None, если не найден)
def find_nul(buf, start: int = 0) -> Optional[int]:
    if start < 0 or start > len(buf):
        return None
    idx = bytes(buf).find(b"\x00", start)
    return None if idx == -1 else idx


__all__ = [
    "read_u8",
    "read_u16",
    "read_u32",
    "read_i32",
    "read_latin1",
    "read_utf8",
    "find_nul",
]
