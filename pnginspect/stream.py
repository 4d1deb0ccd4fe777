# pnginspect/stream.py

from __future__ import annotations

import re
import struct
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pnginspect.crc import crc32
from pnginspect.errors import ChunkStreamError, ErrorKind, MissingHeaderChunk, NotAPngFile
from pnginspect.log import PARSER, get_logger
from pnginspect.model import (
    CHUNK_CRC_LEN,
    CHUNK_HEADER_LEN,
    SIGNATURE_LEN,
    ChunkRecord,
    ParseResult,
    ParseWarning,
    WarningKind,
)

logger = get_logger(__name__)

PNG_SIG = b"\x89PNG\r\n\x1a\n"
MAX_CHUNKS = 100000  # предохранитель от зацикливания/битых данных
MAX_LENGTH = 0x7FFFFFFF  # длина чанка по спецификации < 2^31

# Тип чанка: ровно четыре латинские буквы
CHUNK_TYPE_RE = re.compile(rb"^[A-Za-z]{4}$")

HEADER_TYPE = "IHDR"
DATA_TYPE = "IDAT"
END_TYPE = "IEND"


class ParserState(Enum):
    AWAIT_HEADER = "await_header"
    SCANNING = "scanning"
    DONE = "done"
    FAILED = "failed"


# Проверка сигнатуры (короткий или пустой буфер тоже не PNG)
def has_png_signature(data) -> bool:
    return len(data) >= SIGNATURE_LEN and bytes(data[:SIGNATURE_LEN]) == PNG_SIG


class ChunkScanner:
    # Один проход по буферу; state - текущая стадия разбора

    def __init__(self, data, strict: bool, max_chunks: int) -> None:
        self.buf = memoryview(data).toreadonly()
        self.n = len(self.buf)
        self.strict = strict
        self.max_chunks = max_chunks
        self.state = ParserState.AWAIT_HEADER
        self.chunks: List[ChunkRecord] = []
        self.warnings: List[ParseWarning] = []
        self.seen_ihdr = False
        self.seen_idat = False
        self.seen_iend = False

    # Регистрация проблемы: в строгом режиме - сразу фатальная ошибка
    def warn(self, kind: WarningKind, message: str, offset: Optional[int] = None, chunk_type: Optional[str] = None) -> None:
        warning = ParseWarning(kind=kind, message=message, offset=offset, chunk_type=chunk_type)
        if self.strict:
            self.state = ParserState.FAILED
            err_kind = ErrorKind.CHECKSUM if kind is WarningKind.CRC_MISMATCH else ErrorKind.STRUCTURE
            raise ChunkStreamError(warning, err_kind)
        logger.warning("%s %s", PARSER, message)
        self.warnings.append(warning)

    def run(self) -> ParseResult:
        if not has_png_signature(self.buf):
            self.state = ParserState.FAILED
            raise NotAPngFile()

        pos = SIGNATURE_LEN
        self.state = ParserState.SCANNING
        while pos < self.n:
            if len(self.chunks) >= self.max_chunks:
                self.warn(WarningKind.TOO_MANY_CHUNKS, f"Offset {pos}: Too many chunks (limit {self.max_chunks}). Stopping parse.", pos)
                break

            # 1. Заголовок чанка (длина + тип) должен целиком помещаться в буфер
            if pos + CHUNK_HEADER_LEN > self.n:
                self.warn(WarningKind.TRUNCATED_HEADER, f"Offset {pos}: Unexpected end of file (chunk header truncated)", pos)
                break

            # 2. Длина: значения >= 2^31 недопустимы, но разбор продолжается
            length = struct.unpack_from(">I", self.buf, pos)[0]
            raw_type = bytes(self.buf[pos + 4:pos + 8])
            ctype = raw_type.decode("latin-1")
            if length > MAX_LENGTH:
                self.warn(WarningKind.OVERSIZED_LENGTH, f"Offset {pos}: Chunk type {ctype} has unusually large length: {length}.", pos, ctype)

            next_pos = pos + CHUNK_HEADER_LEN + length + CHUNK_CRC_LEN  # len+type+data+crc

            # 3. Тип: при мусоре пытаемся перепрыгнуть чанк по заявленной длине
            if not CHUNK_TYPE_RE.match(raw_type):
                self.warn(WarningKind.INVALID_TYPE, f'Offset {pos}: Chunk type "{ctype}" has invalid characters. Attempting to skip.', pos, ctype)
                if pos < next_pos <= self.n:
                    pos = next_pos
                    continue
                self.warn(WarningKind.UNSKIPPABLE_TYPE, f'Offset {pos}: Cannot safely skip corrupt chunk type "{ctype}". Stopping parse.', pos, ctype)
                break

            # 4. Данные и CRC должны помещаться в буфер
            if next_pos > self.n:
                self.warn(WarningKind.TRUNCATED_CHUNK, f"Offset {pos}: Unexpected end of file (chunk data or CRC truncated for {ctype})", pos, ctype)
                break

            # 5-6. Данные (без копирования) и проверка CRC
            payload = self.buf[pos + CHUNK_HEADER_LEN:pos + CHUNK_HEADER_LEN + length]
            stored_crc = struct.unpack_from(">I", self.buf, pos + CHUNK_HEADER_LEN + length)[0]
            expected_crc = crc32(raw_type, payload)
            crc_ok = stored_crc == expected_crc
            chunk = ChunkRecord(type=ctype, offset=pos, length=length, payload=payload, crc=stored_crc, crc_ok=crc_ok)
            if not crc_ok:
                self.warn(WarningKind.CRC_MISMATCH, f"Chunk {ctype} (offset {pos}): CRC mismatch! Expected {expected_crc:08X}, Got {stored_crc:08X}", pos, ctype)

            # 7. Учет обязательных чанков
            self.chunks.append(chunk)
            if ctype == HEADER_TYPE:
                if len(self.chunks) > 1:
                    self.warn(WarningKind.IHDR_NOT_FIRST, "IHDR chunk is not the first chunk.", pos, ctype)
                self.seen_ihdr = True
            elif ctype == DATA_TYPE:
                self.seen_idat = True
            elif ctype == END_TYPE:
                self.seen_iend = True
                if next_pos < self.n:
                    self.warn(WarningKind.DATA_AFTER_IEND, f"Data found after IEND chunk (offset {next_pos}).", next_pos, ctype)

            # 8. Переход к следующему чанку
            pos = next_pos

        # Итоговые проверки после обхода
        if not self.seen_ihdr:
            self.state = ParserState.FAILED
            raise MissingHeaderChunk()
        if not self.seen_idat:
            self.warn(WarningKind.MISSING_IDAT, "Warning: Missing IDAT chunk (no image data).")
        if not self.seen_iend and pos >= self.n:
            self.warn(WarningKind.MISSING_IEND, "Warning: Missing IEND chunk (file might be truncated).", pos)

        self.state = ParserState.DONE
        logger.debug("%s parsed %d chunks, %d warnings", PARSER, len(self.chunks), len(self.warnings))
        return ParseResult(chunks=tuple(self.chunks), warnings=tuple(self.warnings))


# Главная функция разбора потока чанков PNG из буфера в памяти
def parse_png(data, *, strict: bool = False, max_chunks: int = MAX_CHUNKS) -> ParseResult:
    return ChunkScanner(data, strict, max_chunks).run()


# Чтение файла целиком и разбор (ввод-вывод вне ядра разбора)
def read_png(path, *, strict: bool = False, max_chunks: int = MAX_CHUNKS) -> ParseResult:
    data = Path(path).read_bytes()
    return parse_png(data, strict=strict, max_chunks=max_chunks)


__all__ = [
    "PNG_SIG",
    "MAX_CHUNKS",
    "ParserState",
    "ChunkScanner",
    "has_png_signature",
    "parse_png",
    "read_png",
]
