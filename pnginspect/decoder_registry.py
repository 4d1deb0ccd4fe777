#decoder_registry.py

from __future__ import annotations

import importlib
import inspect
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from pnginspect.decoders.critical import parse_header_context
from pnginspect.errors import InvalidPayload, PngInspectError, ReadError
from pnginspect.log import DECODER, get_logger
from pnginspect.model import ChunkRecord, ImageHeader, ParseResult, ParseWarning, WarningKind

logger = get_logger(__name__)

DECODERS_SUBDIR = "decoders"
FUNC_PREFIX = "summarize_"
TYPE_RE = re.compile(r"^[A-Za-z]{4}$")


def iter_decoder_files(subdir: str = DECODERS_SUBDIR) -> List[Path]:
    base = Path(__file__).resolve().parent / subdir
    files: List[Path] = []
    if not base.is_dir():
        return files
    for entry in sorted(base.iterdir()):
        if entry.is_dir():
            continue
        if entry.suffix != ".py":
            continue
        if entry.name.startswith("__"):
            continue
        files.append(entry)
    return files


def load_module_from_path(subdir: str, path: Path):
    mod_name = f"pnginspect.{subdir}.{path.stem}"
    try:
        return importlib.import_module(mod_name)
    except ImportError:
        logger.exception("%s failed to import decoder module %s", DECODER, mod_name)
        return None


# Сбор функций summarize_<TYPE> из модулей папки decoders
# Ключ реестра - тип чанка, например summarize_IHDR -> "IHDR"
def discover_decoders(subdir: str = DECODERS_SUBDIR) -> Dict[str, Callable]:
    registry: Dict[str, Callable] = {}
    for file_path in iter_decoder_files(subdir):
        module = load_module_from_path(subdir, file_path)
        if module is None:
            continue
        for name, fn in inspect.getmembers(module, inspect.isfunction):
            if not name.startswith(FUNC_PREFIX):
                continue
            chunk_type = name[len(FUNC_PREFIX):]
            if not TYPE_RE.match(chunk_type):
                continue
            if chunk_type in registry:
                logger.warning("%s duplicate decoder for %s in %s, ignored", DECODER, chunk_type, module.__name__)
                continue
            registry[chunk_type] = fn
    return registry


DECODERS: Dict[str, Callable] = discover_decoders()


def get_decoder(chunk_type: str) -> Optional[Callable]:
    return DECODERS.get(str(chunk_type))


def available_types() -> List[str]:
    return sorted(DECODERS.keys())


# Сводка для неизвестного типа - по регистру первой буквы
def generic_summary(chunk_type: str) -> str:
    if chunk_type[:1].islower():
        return f'Ancillary chunk ("{chunk_type}")'
    return f'Critical chunk ("{chunk_type}")'


# Сводка по содержимому чанка; при нарушении грамматики - InvalidPayload
def summarize_chunk(chunk: ChunkRecord, header: Optional[ImageHeader] = None) -> str:
    decoder = get_decoder(chunk.type)
    if decoder is None:
        return generic_summary(chunk.type)
    try:
        return decoder(chunk.data, header)
    except InvalidPayload as exc:
        exc.chunk_type = chunk.type
        exc.offset = chunk.offset
        raise
    except ReadError as exc:
        raise InvalidPayload(exc.message, chunk_type=chunk.type, offset=chunk.offset) from exc


# Обертка для вызывающей стороны: ошибка одного чанка не прерывает разбор остальных
# Возвращает (summary, error)
def describe_chunk(chunk: ChunkRecord, header: Optional[ImageHeader] = None) -> Tuple[str, Optional[str]]:
    try:
        return summarize_chunk(chunk, header), None
    except InvalidPayload as exc:
        logger.debug("%s %s at offset %d: %s", DECODER, chunk.type, chunk.offset, exc.message)
        return f"Error: {exc.message}", exc.message


# Контекст IHDR для последующих чанков; при неудаче - предупреждение вместо контекста
def header_context(result: ParseResult) -> Tuple[Optional[ImageHeader], Optional[ParseWarning]]:
    chunk = result.find("IHDR")
    if chunk is None:
        return None, None
    try:
        return parse_header_context(chunk.data), None
    except PngInspectError as exc:
        logger.debug("%s IHDR context unavailable: %s", DECODER, exc.message)
        warning = ParseWarning(
            kind=WarningKind.HEADER_CONTEXT,
            message="Failed to parse IHDR data for context.",
            offset=chunk.offset,
            chunk_type=chunk.type,
        )
        return None, warning


__all__ = [
    "DECODERS",
    "discover_decoders",
    "get_decoder",
    "available_types",
    "generic_summary",
    "summarize_chunk",
    "describe_chunk",
    "header_context",
]
