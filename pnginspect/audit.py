# audit.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from pnginspect.config import cfg_get
from pnginspect.decoders.text import TEXT_TYPES, TextBody, extract_text
from pnginspect.errors import InvalidPayload, ReadError
from pnginspect.log import AUDIT, get_logger
from pnginspect.model import ChunkRecord

logger = get_logger(__name__)

# Виды находок аудита происхождения
AI_GENERATION = "ai_generation"
AI_SOFTWARE = "ai_software"
XMP_PROVENANCE = "xmp_provenance"
C2PA_MANIFEST = "c2pa_manifest"

# Значения по умолчанию, если секция audit в конфиге отсутствует
DEF_AI_KEYWORDS = (
    "parameters", "prompt", "workflow", "Dream", "sd-metadata", "invokeai_metadata",
    "negative_prompt", "generation_data", "NovelAI", "chara", "ccv3",
)
DEF_SOFTWARE_KEYWORDS = ("Software", "Source", "Comment", "Description", "Author")
DEF_AI_SOFTWARE_HINTS = (
    "Stable Diffusion", "Midjourney", "DALL-E", "NovelAI", "ComfyUI",
    "Automatic1111", "InvokeAI", "Firefly", "Imagen",
)
DEF_XMP_KEYWORDS = ("XML:com.adobe.xmp",)
DEF_XMP_MARKERS = ("c2pa", "trainedAlgorithmicMedia", "compositeWithTrainedAlgorithmicMedia", "algorithmicMedia")
DEF_PROVENANCE_CHUNKS = ("caBX",)

# Сколько символов значения сохранять в находке
DETAIL_PREVIEW = 80


@dataclass(frozen=True)
class Finding:
    kind: str
    chunk_type: str
    offset: int
    keyword: str = ""
    detail: str = ""


def _lowered(items: Iterable[str]) -> List[str]:
    return [str(i).lower() for i in items]


def _preview(text: Optional[str]) -> str:
    if not text:
        return ""
    text = " ".join(text.split())
    return text if len(text) <= DETAIL_PREVIEW else text[:DETAIL_PREVIEW] + "..."


# Набор правил аудита, собранный из конфигурации один раз
class ProvenanceAuditor:
    def __init__(self, cfg: dict | None = None) -> None:
        self.cfg = cfg or {}
        self.ai_keywords = _lowered(cfg_get(self.cfg, "audit.ai_keywords", DEF_AI_KEYWORDS))
        self.software_keywords = _lowered(cfg_get(self.cfg, "audit.software_keywords", DEF_SOFTWARE_KEYWORDS))
        self.software_hints = _lowered(cfg_get(self.cfg, "audit.ai_software_hints", DEF_AI_SOFTWARE_HINTS))
        self.xmp_keywords = _lowered(cfg_get(self.cfg, "audit.xmp_keywords", DEF_XMP_KEYWORDS))
        self.xmp_markers = list(cfg_get(self.cfg, "audit.xmp_markers", DEF_XMP_MARKERS))
        self.provenance_chunks = set(cfg_get(self.cfg, "audit.provenance_chunks", DEF_PROVENANCE_CHUNKS))

    # Проверка одного текстового чанка (тело уже извлечено)
    def check_text(self, chunk: ChunkRecord, body: TextBody) -> List[Finding]:
        out: List[Finding] = []
        key = body.keyword.lower()
        text = body.text or ""

        if key in self.ai_keywords:
            detail = "compressed, not inflated" if body.compressed else _preview(text)
            out.append(Finding(AI_GENERATION, chunk.type, chunk.offset, body.keyword, detail))

        if key in self.software_keywords and text:
            low = text.lower()
            for hint in self.software_hints:
                if hint in low:
                    out.append(Finding(AI_SOFTWARE, chunk.type, chunk.offset, body.keyword, _preview(text)))
                    break

        if key in self.xmp_keywords and text:
            low = text.lower()
            hits = [m for m in self.xmp_markers if m.lower() in low]
            if hits:
                out.append(Finding(XMP_PROVENANCE, chunk.type, chunk.offset, body.keyword, ", ".join(hits)))
        return out

    def audit(self, chunks: Sequence[ChunkRecord]) -> List[Finding]:
        findings: List[Finding] = []
        for chunk in chunks:
            if chunk.type in self.provenance_chunks:
                findings.append(Finding(C2PA_MANIFEST, chunk.type, chunk.offset, detail=f"{chunk.length} bytes"))
                continue
            if chunk.type not in TEXT_TYPES:
                continue
            try:
                body = extract_text(chunk.type, chunk.data)
            except (InvalidPayload, ReadError) as exc:
                # Битый текстовый чанк уже отражен в его сводке
                logger.debug("%s skip %s at offset %d: %s", AUDIT, chunk.type, chunk.offset, exc.message)
                continue
            if body is not None:
                findings.extend(self.check_text(chunk, body))
        if findings:
            logger.info("%s %d provenance finding(s)", AUDIT, len(findings))
        return findings


# Публичная функция аудита
def audit_chunks(chunks: Sequence[ChunkRecord], cfg: dict | None = None) -> List[Finding]:
    return ProvenanceAuditor(cfg).audit(chunks)


__all__ = [
    "AI_GENERATION",
    "AI_SOFTWARE",
    "XMP_PROVENANCE",
    "C2PA_MANIFEST",
    "Finding",
    "ProvenanceAuditor",
    "audit_chunks",
]
