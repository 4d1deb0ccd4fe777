# report.py

from __future__ import annotations

import argparse
import csv
import io
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pnginspect.audit import Finding, ProvenanceAuditor
from pnginspect.config import cfg_get, load_cfg
from pnginspect.decoder_registry import describe_chunk, header_context
from pnginspect.decoders.text import TEXT_TYPES, TextBody, extract_text
from pnginspect.errors import FormatError, InvalidPayload, ReadError
from pnginspect.log import CLI, REPORT, configure_logging, get_logger
from pnginspect.model import ChunkRecord, ImageHeader, ParseWarning
from pnginspect.stream import MAX_CHUNKS, parse_png

logger = get_logger(__name__)

OUTPUT_FORMATS = ("text", "json", "csv")
DEF_TEXT_PREVIEW = 200

# Колонки CSV-отчета: одна строка на чанк
CSV_COLUMNS = [
    "path",
    "index",
    "type",
    "offset",
    "length",
    "crc",
    "crc_ok",
    "critical",
    "summary",
    "error",
    "keyword",
    "text",
]


@dataclass
class ChunkReport:
    chunk: ChunkRecord
    summary: str
    error: Optional[str] = None
    text: Optional[TextBody] = None
    text_error: Optional[str] = None


@dataclass
class InspectionReport:
    path: Optional[str]
    size_bytes: int
    chunks: List[ChunkReport] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    header: Optional[ImageHeader] = None
    findings: List[Finding] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        if self.error is not None:
            return f"Error: {self.error}"
        if self.warnings:
            return "File parsed with warnings."
        return "File parsed successfully."


# Класс контекста инспекции: хранит конфигурацию и правила аудита для серии файлов
class InspectContext:
    def __init__(self, cfg: dict | None = None, *, strict: Optional[bool] = None):
        self.cfg = cfg or {}
        self.strict = bool(cfg_get(self.cfg, "parser.strict", False)) if strict is None else strict
        self.max_chunks = int(cfg_get(self.cfg, "parser.max_chunks", MAX_CHUNKS))
        self.text_preview = int(cfg_get(self.cfg, "report.text_preview", DEF_TEXT_PREVIEW))
        self.auditor = ProvenanceAuditor(self.cfg)


# Тело текстового чанка (или сообщение, почему его не удалось извлечь)
def _chunk_text(chunk: ChunkRecord):
    if chunk.type not in TEXT_TYPES:
        return None, None
    try:
        return extract_text(chunk.type, chunk.data), None
    except (InvalidPayload, ReadError) as exc:
        return None, f"(Invalid {chunk.type} format: {exc.message})"


# Главная функция инспекции одного буфера
def inspect_bytes(
    data: bytes,
    cfg: dict | None = None,
    *,
    context: Optional[InspectContext] = None,
    path: Optional[str] = None,
) -> InspectionReport:
    ctx = context or InspectContext(cfg)
    report = InspectionReport(path=path, size_bytes=len(data))

    # 1. Разбор потока чанков; фатальная ошибка - отчет без чанков
    try:
        result = parse_png(data, strict=ctx.strict, max_chunks=ctx.max_chunks)
    except FormatError as exc:
        logger.info("%s %s: %s", REPORT, path or "<buffer>", exc.message)
        report.error = exc.message
        report.error_kind = exc.kind.value
        return report
    report.warnings = list(result.warnings)

    # 2. Контекст IHDR для tRNS/sBIT/bKGD
    header, ctx_warning = header_context(result)
    report.header = header
    if ctx_warning is not None:
        report.warnings.append(ctx_warning)

    # 3. Сводка и текст по каждому чанку; ошибка чанка остается внутри его отчета
    for chunk in result.chunks:
        summary, error = describe_chunk(chunk, header)
        text, text_error = _chunk_text(chunk)
        report.chunks.append(ChunkReport(chunk=chunk, summary=summary, error=error, text=text, text_error=text_error))

    # 4. Аудит происхождения
    report.findings = ctx.auditor.audit(result.chunks)
    return report


def inspect_file(path: str, cfg: dict | None = None, *, context: Optional[InspectContext] = None) -> InspectionReport:
    data = Path(path).read_bytes()
    return inspect_bytes(data, cfg, context=context, path=str(path))


# Итератор для рекурсивного обхода файлов в директории
def iter_files(root_dir: str):
    for dirpath, _, filenames in os.walk(root_dir):
        for name in sorted(filenames):
            yield os.path.join(dirpath, name)


# Раскрытие аргументов командной строки: файлы как есть, директории - рекурсивно
def expand_paths(paths: Iterable[str]) -> List[str]:
    out: List[str] = []
    for p in paths:
        if os.path.isdir(p):
            out.extend(iter_files(p))
        else:
            out.append(p)
    return out


# ------ Представление отчета ------

def _text_value(cr: ChunkReport) -> Optional[str]:
    if cr.text_error:
        return cr.text_error
    if cr.text is None:
        return None
    if cr.text.compressed:
        return f"(Compressed {cr.chunk.type} data, {cr.text.compressed_size} bytes)"
    return cr.text.text


def render_text(report: InspectionReport, text_preview: int = DEF_TEXT_PREVIEW) -> str:
    lines: List[str] = []
    lines.append(f"File: {report.path or '<buffer>'} ({report.size_bytes} bytes)")
    lines.append(report.status)
    if report.error is not None:
        return "\n".join(lines)

    for w in report.warnings:
        lines.append(f"  ! {w.message}")

    if report.header is not None:
        h = report.header
        lines.append(f"Image: {h.width} x {h.height}, bit depth {h.bit_depth}, color type {h.color_type}")

    for i, cr in enumerate(report.chunks):
        c = cr.chunk
        lines.append("")
        lines.append(
            f"[{i}] {c.type}  offset={c.offset:,}  length={c.length:,} bytes  "
            f"crc={c.crc:08X} ({'OK' if c.crc_ok else 'ERROR'})"
        )
        lines.append(f"    Summary: {cr.summary}")
        text = _text_value(cr)
        if text is not None:
            if len(text) > text_preview:
                text = text[:text_preview] + "..."
            lines.append(f"    Text: {text}")

    if report.findings:
        lines.append("")
        lines.append("Provenance:")
        for f in report.findings:
            key = f' "{f.keyword}"' if f.keyword else ""
            lines.append(f"  - {f.kind}: {f.chunk_type}{key} @ {f.offset} {f.detail}".rstrip())
    return "\n".join(lines)


def report_to_dict(report: InspectionReport) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "path": report.path,
        "size_bytes": report.size_bytes,
        "ok": report.ok,
        "error": report.error,
        "error_kind": report.error_kind,
        "warnings": [w.message for w in report.warnings],
        "header": None,
        "chunks": [],
        "findings": [],
    }
    if report.header is not None:
        h = report.header
        out["header"] = {
            "width": h.width,
            "height": h.height,
            "bit_depth": h.bit_depth,
            "color_type": h.color_type,
            "compression": h.compression,
            "filter_method": h.filter_method,
            "interlace": h.interlace,
        }
    for cr in report.chunks:
        c = cr.chunk
        item: Dict[str, Any] = {
            "type": c.type,
            "offset": c.offset,
            "length": c.length,
            "crc": f"{c.crc:08X}",
            "crc_ok": c.crc_ok,
            "critical": c.is_critical,
            "summary": cr.summary,
            "error": cr.error,
        }
        if cr.text is not None:
            item["text"] = {
                "keyword": cr.text.keyword,
                "text": cr.text.text,
                "compressed": cr.text.compressed,
                "language": cr.text.language,
                "translated_keyword": cr.text.translated_keyword,
            }
        elif cr.text_error is not None:
            item["text_error"] = cr.text_error
        out["chunks"].append(item)
    for f in report.findings:
        out["findings"].append(
            {"kind": f.kind, "chunk_type": f.chunk_type, "offset": f.offset, "keyword": f.keyword, "detail": f.detail}
        )
    return out


def report_rows(report: InspectionReport) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    if report.error is not None:
        rows.append({"path": report.path, "error": report.error})
        return rows
    for i, cr in enumerate(report.chunks):
        c = cr.chunk
        rows.append({
            "path": report.path,
            "index": i,
            "type": c.type,
            "offset": c.offset,
            "length": c.length,
            "crc": f"{c.crc:08X}",
            "crc_ok": c.crc_ok,
            "critical": c.is_critical,
            "summary": cr.summary,
            "error": cr.error,
            "keyword": cr.text.keyword if cr.text is not None else None,
            "text": _text_value(cr),
        })
    return rows


def render_reports(reports: List[InspectionReport], fmt: str, text_preview: int = DEF_TEXT_PREVIEW) -> str:
    if fmt == "json":
        payload: Any = [report_to_dict(r) for r in reports]
        if len(payload) == 1:
            payload = payload[0]
        return json.dumps(payload, ensure_ascii=False, indent=2)
    if fmt == "csv":
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for r in reports:
            for row in report_rows(r):
                writer.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in CSV_COLUMNS})
        return buf.getvalue()
    return "\n\n".join(render_text(r, text_preview) for r in reports)


# ------ Точка входа для запуска через командную строку ------

def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pnginspect",
        description="Проверка структуры чанков PNG: сигнатура, CRC, разбор содержимого чанков",
    )
    ap.add_argument("paths", nargs="+", help="PNG-файлы или директории (обходятся рекурсивно)")
    ap.add_argument("--cfg", default=None, help="путь к inspector.yaml")
    ap.add_argument("--format", choices=OUTPUT_FORMATS, default=None, help="формат отчета")
    ap.add_argument("--strict", action="store_true", help="прерывать разбор на первой структурной проблеме")
    ap.add_argument("--out", default=None, help="записать отчет в файл вместо stdout")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="подробный лог (-v, -vv)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    level = logging.ERROR
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    configure_logging(level)

    cfg = load_cfg(args.cfg)
    fmt = args.format or str(cfg_get(cfg, "report.format", "text"))
    if fmt not in OUTPUT_FORMATS:
        raise SystemExit(f"Неизвестный формат отчета: {fmt}")

    ctx = InspectContext(cfg, strict=True if args.strict else None)
    reports: List[InspectionReport] = []
    for path in expand_paths(args.paths):
        try:
            reports.append(inspect_file(path, context=ctx))
        except OSError as exc:
            logger.error("%s cannot read %s: %s", CLI, path, exc)
            reports.append(InspectionReport(path=path, size_bytes=0, error=f"File reading error: {exc}", error_kind="io"))

    if not reports:
        raise SystemExit("Не найдено ни одного файла для проверки")

    output = render_reports(reports, fmt, ctx.text_preview)
    if args.out:
        with open(args.out, "w", encoding="utf-8", newline="") as f:
            f.write(output)
        print(f"Записано {len(reports)} отчетов в {args.out}", file=sys.stderr)
    else:
        print(output)

    return 0 if all(r.ok for r in reports) else 1


if __name__ == "__main__":
    raise SystemExit(main())
