# pnginspect/decoders/apng.py
# Чанки анимации APNG: acTL, fcTL, fdAT (проверяются только поля, без композиции кадров)

from __future__ import annotations

from typing import Optional

from pnginspect.binreader import read_u8, read_u16, read_u32
from pnginspect.errors import InvalidPayload
from pnginspect.model import ImageHeader

DISPOSE_OPS = ("None", "Background", "Previous")
BLEND_OPS = ("Source", "Over")
# Нулевой знаменатель задержки трактуется как 100 (сотые доли секунды)
DEFAULT_DELAY_DEN = 100


def summarize_acTL(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) != 8:
        raise InvalidPayload("Invalid acTL length")
    num_frames = read_u32(data, 0)
    num_plays = read_u32(data, 4)
    plays = "Infinite" if num_plays == 0 else str(num_plays)
    return f"APNG Control: Frames={num_frames}, Plays={plays}"


def summarize_fcTL(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) != 26:
        raise InvalidPayload("Invalid fcTL length")
    seq = read_u32(data, 0)
    width = read_u32(data, 4)
    height = read_u32(data, 8)
    x_off = read_u32(data, 12)
    y_off = read_u32(data, 16)
    delay_num = read_u16(data, 20)
    delay_den = read_u16(data, 22)
    dispose = read_u8(data, 24)
    blend = read_u8(data, 25)

    if width == 0 or height == 0:
        raise InvalidPayload("Invalid fcTL: Zero frame dims")
    if dispose >= len(DISPOSE_OPS):
        raise InvalidPayload("Invalid fcTL dispose op")
    if blend >= len(BLEND_OPS):
        raise InvalidPayload("Invalid fcTL blend op")

    delay = delay_num / (delay_den or DEFAULT_DELAY_DEN)
    return (
        f"APNG Frame Ctrl: Seq={seq}, Dim={width}x{height}, Off=({x_off},{y_off}), "
        f"Delay={delay:.4f}s, Disp={DISPOSE_OPS[dispose]}, Blend={BLEND_OPS[blend]}"
    )


def summarize_fdAT(data: bytes, header: Optional[ImageHeader] = None) -> str:
    if len(data) < 4:
        raise InvalidPayload("Invalid fdAT length")
    return f"APNG Frame Data: Seq={read_u32(data, 0)}"


__all__ = ["summarize_acTL", "summarize_fcTL", "summarize_fdAT"]
