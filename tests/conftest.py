# tests/conftest.py

from __future__ import annotations

import zlib

import pytest

from pnginspect.model import ChunkRecord, ImageHeader
from pngbuild import minimal_png


# ChunkRecord с верным CRC, собранный без парсера
def record(ctype: str, payload: bytes = b"", offset: int = 8) -> ChunkRecord:
    crc = zlib.crc32(ctype.encode("latin-1") + payload) & 0xFFFFFFFF
    return ChunkRecord(type=ctype, offset=offset, length=len(payload), payload=memoryview(payload), crc=crc, crc_ok=True)


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def png_bytes() -> bytes:
    return minimal_png()


@pytest.fixture
def header_for():
    def _header(color_type: int, bit_depth: int = 8) -> ImageHeader:
        return ImageHeader(width=4, height=4, bit_depth=bit_depth, color_type=color_type)

    return _header
