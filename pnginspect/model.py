# pnginspect/model.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple


# Длина сигнатуры PNG и служебных полей чанка
SIGNATURE_LEN = 8
CHUNK_HEADER_LEN = 8  # длина(4) + тип(4)
CHUNK_CRC_LEN = 4


# Виды некритичных проблем, которые копятся в результате разбора
class WarningKind(Enum):
    TRUNCATED_HEADER = "truncated_header"
    OVERSIZED_LENGTH = "oversized_length"
    INVALID_TYPE = "invalid_type"
    UNSKIPPABLE_TYPE = "unskippable_type"
    TRUNCATED_CHUNK = "truncated_chunk"
    CRC_MISMATCH = "crc_mismatch"
    IHDR_NOT_FIRST = "ihdr_not_first"
    DATA_AFTER_IEND = "data_after_iend"
    TOO_MANY_CHUNKS = "too_many_chunks"
    MISSING_IDAT = "missing_idat"
    MISSING_IEND = "missing_iend"
    HEADER_CONTEXT = "header_context"


@dataclass(frozen=True)
class ParseWarning:
    kind: WarningKind
    message: str
    offset: Optional[int] = None
    chunk_type: Optional[str] = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ChunkRecord:
    type: str
    offset: int
    length: int
    # Представление (memoryview) внутрь исходного буфера, без копирования
    payload: memoryview = field(repr=False)
    crc: int
    crc_ok: bool

    # Биты регистра букв типа (5-й бит каждого байта)
    @property
    def is_critical(self) -> bool:
        return self.type[0].isupper()

    @property
    def is_ancillary(self) -> bool:
        return not self.is_critical

    @property
    def is_public(self) -> bool:
        return self.type[1].isupper()

    @property
    def is_safe_to_copy(self) -> bool:
        return self.type[3].islower()

    @property
    def data(self) -> bytes:
        return bytes(self.payload)

    @property
    def end_offset(self) -> int:
        return self.offset + CHUNK_HEADER_LEN + self.length + CHUNK_CRC_LEN


@dataclass(frozen=True)
class ImageHeader:
    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int = 0
    filter_method: int = 0
    interlace: int = 0


@dataclass(frozen=True)
class ParseResult:
    chunks: Tuple[ChunkRecord, ...] = ()
    warnings: Tuple[ParseWarning, ...] = ()

    def __iter__(self) -> Iterator[ChunkRecord]:
        return iter(self.chunks)

    def __len__(self) -> int:
        return len(self.chunks)

    def messages(self) -> List[str]:
        return [w.message for w in self.warnings]

    def find(self, chunk_type: str) -> Optional[ChunkRecord]:
        for chunk in self.chunks:
            if chunk.type == chunk_type:
                return chunk
        return None

    def find_all(self, chunk_type: str) -> List[ChunkRecord]:
        return [c for c in self.chunks if c.type == chunk_type]

    def type_counts(self) -> dict:
        counts: dict = {}
        for chunk in self.chunks:
            counts[chunk.type] = counts.get(chunk.type, 0) + 1
        return counts


__all__ = [
    "SIGNATURE_LEN",
    "CHUNK_HEADER_LEN",
    "CHUNK_CRC_LEN",
    "WarningKind",
    "ParseWarning",
    "ChunkRecord",
    "ImageHeader",
    "ParseResult",
]
