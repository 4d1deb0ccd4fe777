# tests/pngbuild.py
# Сборка PNG-буферов для тестов (CRC считается через zlib, независимо от pnginspect.crc)

import struct
import zlib

PNG_SIG = b"\x89PNG\r\n\x1a\n"


def make_chunk(ctype, payload=b"", crc=None, length=None):
    if isinstance(ctype, str):
        ctype = ctype.encode("latin-1")
    if crc is None:
        crc = zlib.crc32(ctype + payload) & 0xFFFFFFFF
    if length is None:
        length = len(payload)
    return struct.pack(">I", length) + ctype + payload + struct.pack(">I", crc)


def ihdr_payload(width=100, height=50, bit_depth=8, color_type=2, compression=0, filter_method=0, interlace=0):
    return struct.pack(">IIBBBBB", width, height, bit_depth, color_type, compression, filter_method, interlace)


def make_png(*chunks, signature=PNG_SIG):
    return signature + b"".join(chunks)


def minimal_png(**ihdr_kwargs):
    return make_png(
        make_chunk("IHDR", ihdr_payload(**ihdr_kwargs)),
        make_chunk("IDAT", zlib.compress(b"\x00" * 16)),
        make_chunk("IEND"),
    )


def text_payload(keyword, text):
    return keyword.encode("latin-1") + b"\x00" + text.encode("latin-1")


def itxt_payload(keyword, text, *, flag=0, method=0, language="", translated=""):
    return (
        keyword.encode("latin-1") + b"\x00"
        + bytes([flag, method])
        + language.encode("ascii") + b"\x00"
        + translated.encode("utf-8") + b"\x00"
        + (text if isinstance(text, bytes) else text.encode("utf-8"))
    )
