# pnginspect/errors.py

from __future__ import annotations

from enum import Enum
from typing import Optional


# Категории ошибок, по которым вызывающий код ветвится (вместо разбора текста сообщения)
class ErrorKind(Enum):
    SIGNATURE = "signature"
    STRUCTURE = "structure"
    CHECKSUM = "checksum"
    PAYLOAD = "payload"
    BOUNDS = "bounds"
    ENCODING = "encoding"


class PngInspectError(Exception):
    kind: ErrorKind = ErrorKind.STRUCTURE

    def __init__(self, message: str, *, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset


# ------ Фатальные ошибки разбора: результата нет вообще ------

class FormatError(PngInspectError):
    pass


class NotAPngFile(FormatError):
    kind = ErrorKind.SIGNATURE

    def __init__(self, message: str = "Not a PNG file (invalid signature)") -> None:
        super().__init__(message, offset=0)


class MissingHeaderChunk(FormatError):
    def __init__(self, message: str = "Critical Error: Missing IHDR chunk.") -> None:
        super().__init__(message)


# Строгий режим: первая же структурная проблема прерывает разбор
class ChunkStreamError(FormatError):
    def __init__(self, warning, kind: ErrorKind = ErrorKind.STRUCTURE) -> None:
        super().__init__(warning.message, offset=warning.offset)
        self.warning = warning
        self.chunk_type = warning.chunk_type
        self.kind = kind


# ------ Ошибки низкоуровневого чтения буфера ------

class ReadError(PngInspectError):
    pass


class OutOfBounds(ReadError):
    kind = ErrorKind.BOUNDS

    def __init__(self, what: str, offset: int, size: int, buf_len: int) -> None:
        super().__init__(f"Read past end ({what} @ {offset}, len={size})", offset=offset)
        self.size = size
        self.buf_len = buf_len


class InvalidEncoding(ReadError):
    kind = ErrorKind.ENCODING

    def __init__(self, offset: int, length: int, reason: str) -> None:
        super().__init__(f"Invalid UTF-8 (offset {offset}, len {length}): {reason}", offset=offset)
        self.length = length
        self.reason = reason


# ------ Ошибка грамматики содержимого одного чанка (локальная для чанка) ------

class InvalidPayload(PngInspectError):
    kind = ErrorKind.PAYLOAD

    def __init__(self, message: str, *, chunk_type: Optional[str] = None, offset: Optional[int] = None) -> None:
        super().__init__(message, offset=offset)
        self.chunk_type = chunk_type


__all__ = [
    "ErrorKind",
    "PngInspectError",
    "FormatError",
    "NotAPngFile",
    "MissingHeaderChunk",
    "ChunkStreamError",
    "ReadError",
    "OutOfBounds",
    "InvalidEncoding",
    "InvalidPayload",
]
