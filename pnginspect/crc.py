# pnginspect/crc.py

from __future__ import annotations

from typing import Tuple

# Отраженный полином CRC-32 (ISO 3309 / ITU-T V.42), как в спецификации PNG
CRC_POLY = 0xEDB88320
CRC_INIT = 0xFFFFFFFF


# Построение таблицы на 256 значений (один раз при импорте модуля, далее только чтение)
def _build_table() -> Tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = (c >> 1) ^ CRC_POLY
            else:
                c >>= 1
        table.append(c)
    return tuple(table)


CRC_TABLE: Tuple[int, ...] = _build_table()


# Прогон байтов через регистр CRC без финальной инверсии
def crc_update(crc: int, data) -> int:
    table = CRC_TABLE
    for b in bytes(data):
        crc = table[(crc ^ b) & 0xFF] ^ (crc >> 8)
    return crc


# CRC чанка считается по типу и данным (длина в расчет не входит)
def crc32(type_bytes, payload=b"") -> int:
    crc = crc_update(CRC_INIT, type_bytes)
    crc = crc_update(crc, payload)
    return crc ^ 0xFFFFFFFF


__all__ = ["CRC_TABLE", "crc_update", "crc32"]
