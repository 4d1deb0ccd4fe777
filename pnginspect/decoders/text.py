# pnginspect/decoders/text.py
# Текстовые чанки: tEXt, zTXt, iTXt
# Сжатые тела (zTXt, iTXt с флагом сжатия) только опознаются, не распаковываются

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from pnginspect.binreader import find_nul, read_latin1, read_u8, read_utf8
from pnginspect.decoders.common import read_keyword
from pnginspect.errors import InvalidPayload
from pnginspect.model import ImageHeader

TEXT_TYPES = ("tEXt", "zTXt", "iTXt")


# Текст чанка отдельно от сводки - для отображения и аудита метаданных
@dataclass(frozen=True)
class TextBody:
    chunk_type: str
    keyword: str
    text: Optional[str]
    compressed: bool = False
    language: str = ""
    translated_keyword: str = ""
    compressed_size: int = 0


# Поля iTXt: (keyword, flag, method, language, translated_keyword, начало тела)
def _parse_itxt(data: bytes) -> Tuple[str, int, int, str, str, int]:
    keyword, nul0 = read_keyword(data, "iTXt keyword")
    if nul0 + 3 > len(data):
        raise InvalidPayload("Invalid iTXt data (too short)")
    flag = read_u8(data, nul0 + 1)
    method = read_u8(data, nul0 + 2)
    if flag not in (0, 1):
        raise InvalidPayload("Invalid iTXt compression flag")
    if flag == 1 and method != 0:
        raise InvalidPayload("Invalid iTXt compression method")

    nul1 = find_nul(data, nul0 + 3)
    if nul1 is None:
        raise InvalidPayload("Invalid iTXt data (missing lang tag terminator)")
    language = read_latin1(data, nul0 + 3, nul1 - (nul0 + 3))

    nul2 = find_nul(data, nul1 + 1)
    if nul2 is None:
        raise InvalidPayload("Invalid iTXt data (missing trans key terminator)")
    translated = read_utf8(data, nul1 + 1, nul2 - (nul1 + 1))
    return keyword, flag, method, language, translated, nul2 + 1


def _parse_ztxt(data: bytes) -> Tuple[str, int]:
    keyword, nul = read_keyword(data, "zTXt keyword")
    if nul + 2 > len(data):
        raise InvalidPayload("Invalid zTXt data (missing comp method)")
    method = read_u8(data, nul + 1)
    if method != 0:
        raise InvalidPayload("Invalid zTXt compression method")
    return keyword, nul


def summarize_tEXt(data: bytes, header: Optional[ImageHeader] = None) -> str:
    keyword, _nul = read_keyword(data, "tEXt keyword")
    return f'Textual Data: Key="{keyword}"'


def summarize_zTXt(data: bytes, header: Optional[ImageHeader] = None) -> str:
    keyword, nul = _parse_ztxt(data)
    return f'Compressed Text: Key="{keyword}", Method={data[nul + 1]}'


def summarize_iTXt(data: bytes, header: Optional[ImageHeader] = None) -> str:
    keyword, flag, _method, language, translated, _start = _parse_itxt(data)
    return f'Intl Text: Key="{keyword}", Comp Flag={flag}, Lang="{language}", Trans Key="{translated}"'


# Извлечение тела текстового чанка без перекодирования (None для прочих типов)
def extract_text(chunk_type: str, data: bytes) -> Optional[TextBody]:
    if chunk_type == "tEXt":
        keyword, nul = read_keyword(data, "tEXt keyword")
        text = read_latin1(data, nul + 1, len(data) - (nul + 1))
        return TextBody(chunk_type, keyword, text)

    if chunk_type == "zTXt":
        keyword, nul = _parse_ztxt(data)
        return TextBody(chunk_type, keyword, None, compressed=True, compressed_size=len(data) - (nul + 2))

    if chunk_type == "iTXt":
        keyword, flag, _method, language, translated, start = _parse_itxt(data)
        if flag == 1:
            return TextBody(
                chunk_type,
                keyword,
                None,
                compressed=True,
                language=language,
                translated_keyword=translated,
                compressed_size=len(data) - start,
            )
        text = read_utf8(data, start, len(data) - start)
        return TextBody(chunk_type, keyword, text, language=language, translated_keyword=translated)

    return None


__all__ = [
    "TEXT_TYPES",
    "TextBody",
    "summarize_tEXt",
    "summarize_zTXt",
    "summarize_iTXt",
    "extract_text",
]
