# tests/test_decoders.py
# Сводки критичных и цветовых чанков

import struct

import pytest

from pnginspect.decoder_registry import describe_chunk, summarize_chunk
from pnginspect.decoders.color import SBIT_LAYOUTS
from pnginspect.decoders.critical import parse_header_context, parse_image_header
from pnginspect.errors import InvalidPayload
from pnginspect.model import ImageHeader
from pngbuild import ihdr_payload


# ------ IHDR ------

def test_ihdr_round_trip(make_record):
    summary = summarize_chunk(make_record("IHDR", ihdr_payload(100, 50, 8, 2, 0, 0, 0)))
    assert summary == (
        "Dimensions: 100 x 50, Bit Depth: 8, Color Type: 2 (Truecolor (RGB)), "
        "Compression: 0, Filter: 0, Interlace: 0"
    )


def test_parse_image_header_fields():
    assert parse_image_header(ihdr_payload(640, 480, 16, 6, 0, 0, 1)) == ImageHeader(
        width=640, height=480, bit_depth=16, color_type=6, compression=0, filter_method=0, interlace=1
    )


def test_header_context_ignores_dimensions_and_methods():
    ctx = parse_header_context(ihdr_payload(0, 0, 8, 3, 1, 1, 7))
    assert (ctx.width, ctx.bit_depth, ctx.color_type, ctx.interlace) == (0, 8, 3, 7)
    with pytest.raises(InvalidPayload, match="Invalid bit depth/color type"):
        parse_header_context(ihdr_payload(bit_depth=4, color_type=6))
    with pytest.raises(InvalidPayload, match="Invalid IHDR length for parsing"):
        parse_header_context(ihdr_payload()[:12])


@pytest.mark.parametrize(
    "color_type, depths",
    [(0, (1, 2, 4, 8, 16)), (2, (8, 16)), (3, (1, 2, 4, 8)), (4, (8, 16)), (6, (8, 16))],
)
def test_ihdr_valid_depths(color_type, depths):
    for depth in (1, 2, 4, 8, 16):
        payload = ihdr_payload(bit_depth=depth, color_type=color_type)
        if depth in depths:
            assert parse_image_header(payload).bit_depth == depth
        else:
            with pytest.raises(InvalidPayload, match="Invalid bit depth/color type"):
                parse_image_header(payload)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"width": 0}, "Zero width or height"),
        ({"height": 0}, "Zero width or height"),
        ({"color_type": 5}, "Invalid bit depth/color type combination in IHDR"),
        ({"compression": 1}, "Invalid IHDR compression method"),
        ({"filter_method": 1}, "Invalid IHDR filter method"),
        ({"interlace": 2}, "Invalid IHDR interlace method"),
    ],
)
def test_ihdr_invalid(make_record, kwargs, message):
    with pytest.raises(InvalidPayload) as exc_info:
        summarize_chunk(make_record("IHDR", ihdr_payload(**kwargs), offset=8))
    assert exc_info.value.message == message
    assert exc_info.value.chunk_type == "IHDR"
    assert exc_info.value.offset == 8


def test_ihdr_wrong_length(make_record):
    with pytest.raises(InvalidPayload, match="Invalid IHDR length"):
        summarize_chunk(make_record("IHDR", ihdr_payload()[:12]))


# ------ PLTE / IDAT / IEND ------

def test_plte(make_record):
    assert summarize_chunk(make_record("PLTE", bytes(6))) == "Palette entries: 2"
    assert summarize_chunk(make_record("PLTE", bytes(768))) == "Palette entries: 256"


@pytest.mark.parametrize("length", [0, 4, 771])
def test_plte_invalid(make_record, length):
    with pytest.raises(InvalidPayload, match="Invalid PLTE length"):
        summarize_chunk(make_record("PLTE", bytes(length)))


def test_idat_and_iend(make_record):
    assert summarize_chunk(make_record("IDAT", b"\x78\x9c")) == "Image data stream chunk"
    assert summarize_chunk(make_record("IEND")) == "End of image stream marker"
    with pytest.raises(InvalidPayload, match="must be 0"):
        summarize_chunk(make_record("IEND", b"\x00"))


# ------ Чанки, зависящие от IHDR ------

def test_trns_without_context(make_record):
    assert summarize_chunk(make_record("tRNS", b"\x00\x05")) == "Transparency Data: (2 bytes, requires IHDR context)"


def test_trns_with_context(make_record, header_for):
    assert summarize_chunk(make_record("tRNS", b"\x00\x05"), header_for(0)) == "Transparency Data: Single Gray Level=5"
    rgb = struct.pack(">HHH", 1, 2, 3)
    assert summarize_chunk(make_record("tRNS", rgb), header_for(2)) == "Transparency Data: Single RGB Color: R=1, G=2, B=3"
    assert summarize_chunk(make_record("tRNS", bytes(3)), header_for(3)) == "Transparency Data: 3 alpha entries for palette"


@pytest.mark.parametrize(
    "color_type, payload, message",
    [
        (0, b"\x00", "Invalid tRNS length for grayscale (must be 2)"),
        (2, b"\x00\x00", "Invalid tRNS length for truecolor (must be 6)"),
        (3, bytes(257), "Invalid tRNS length for indexed (must be 1-256)"),
        (4, b"\x00\x00", "tRNS chunk is invalid for color types with an alpha channel (4 or 6)"),
        (6, bytes(6), "tRNS chunk is invalid for color types with an alpha channel (4 or 6)"),
    ],
)
def test_trns_invalid(make_record, header_for, color_type, payload, message):
    with pytest.raises(InvalidPayload) as exc_info:
        summarize_chunk(make_record("tRNS", payload), header_for(color_type))
    assert exc_info.value.message == message


def test_sbit(make_record, header_for):
    assert summarize_chunk(make_record("sBIT", b"\x05\x06\x07"), header_for(2)) == "Significant Bits: R=5, G=6, B=7"
    assert summarize_chunk(make_record("sBIT", b"\x05\x06\x07"), header_for(3, 4)) == (
        "Significant Bits: Source Palette: R=5, G=6, B=7"
    )
    assert summarize_chunk(make_record("sBIT", b"\x0c\x10"), header_for(4, 16)) == "Significant Bits: Gray=12, Alpha=16"
    assert summarize_chunk(make_record("sBIT", b"\x01")) == "Significant Bits: (1 bytes, requires IHDR context)"


@pytest.mark.parametrize(
    "color_type, depth, payload",
    [
        (0, 8, b"\x01\x02"),
        (2, 8, b"\x05\x09\x07"),
        (6, 8, b"\x08\x08\x08\x00"),
    ],
)
def test_sbit_invalid(make_record, header_for, color_type, depth, payload):
    with pytest.raises(InvalidPayload, match="Invalid sBIT"):
        summarize_chunk(make_record("sBIT", payload), header_for(color_type, depth))


def test_bkgd(make_record, header_for):
    assert summarize_chunk(make_record("bKGD", b"\x03"), header_for(3)) == "Background Color: Palette Index=3"
    assert summarize_chunk(make_record("bKGD", b"\x00\xff"), header_for(4)) == "Background Color: Gray Level=255"
    rgb = struct.pack(">HHH", 10, 20, 30)
    assert summarize_chunk(make_record("bKGD", rgb), header_for(6)) == "Background Color: RGB Color: R=10, G=20, B=30"
    with pytest.raises(InvalidPayload, match="Invalid bKGD length for indexed"):
        summarize_chunk(make_record("bKGD", b"\x00\x01"), header_for(3))


# ------ Цветовое пространство ------

def test_chrm(make_record):
    payload = struct.pack(">8I", 31270, 32900, 64000, 33000, 30000, 60000, 15000, 6000)
    assert summarize_chunk(make_record("cHRM", payload)) == (
        "Chromaticities: White(0.3127,0.3290), R(0.6400,0.3300), G(0.3000,0.6000), B(0.1500,0.0600)"
    )
    with pytest.raises(InvalidPayload, match=r"Invalid cHRM length \(must be 32\)"):
        summarize_chunk(make_record("cHRM", payload[:-1]))


def test_gama(make_record):
    assert summarize_chunk(make_record("gAMA", struct.pack(">I", 45455))) == "Image Gamma=0.45455"
    with pytest.raises(InvalidPayload, match="Invalid gAMA length"):
        summarize_chunk(make_record("gAMA", b"\x00"))


def test_srgb(make_record):
    assert summarize_chunk(make_record("sRGB", b"\x00")) == "sRGB Rendering Intent: 0 (Perceptual)"
    assert summarize_chunk(make_record("sRGB", b"\x03")) == "sRGB Rendering Intent: 3 (Absolute colorimetric)"
    with pytest.raises(InvalidPayload, match="Invalid sRGB rendering intent"):
        summarize_chunk(make_record("sRGB", b"\x04"))


def test_iccp(make_record):
    summary = summarize_chunk(make_record("iCCP", b"sRGB IEC61966-2.1\x00\x00" + b"\x78\x9c\x01\x02"))
    assert summary == 'Embedded ICC Profile: Name="sRGB IEC61966-2.1", Compression Method=0, Compressed Size=4 bytes'


@pytest.mark.parametrize(
    "payload, message",
    [
        (b"noterminator", "Invalid iCCP profile name"),
        (b"\x00\x00data", "Invalid iCCP profile name"),
        (b"x" * 80 + b"\x00\x00", "Invalid iCCP profile name"),
        (b"name\x00", "Invalid iCCP data (missing compression method)"),
        (b"name\x00\x01data", "Invalid iCCP compression method"),
    ],
)
def test_iccp_invalid(make_record, payload, message):
    with pytest.raises(InvalidPayload) as exc_info:
        summarize_chunk(make_record("iCCP", payload))
    assert exc_info.value.message == message


def test_hist(make_record):
    assert summarize_chunk(make_record("hIST", bytes(4))) == "Palette Histogram: Entries=2"
    with pytest.raises(InvalidPayload, match="Invalid hIST length"):
        summarize_chunk(make_record("hIST", bytes(3)))


def test_cicp(make_record):
    assert summarize_chunk(make_record("cICP", bytes([9, 16, 0, 1]))) == (
        "Coding-independent Code Points: Primaries=9 (BT.2020), Transfer=16 (PQ (SMPTE ST 2084)), "
        "Matrix=0, Full Range=1"
    )
    with pytest.raises(InvalidPayload, match="matrix coefficients"):
        summarize_chunk(make_record("cICP", bytes([1, 13, 1, 1])))
    with pytest.raises(InvalidPayload, match="full range flag"):
        summarize_chunk(make_record("cICP", bytes([1, 13, 0, 2])))


def test_clli_and_mdcv(make_record):
    clli = struct.pack(">II", 10000000, 4000000)
    assert summarize_chunk(make_record("cLLI", clli)) == "Content Light Level: MaxCLL=1000.0000 cd/m2, MaxFALL=400.0000 cd/m2"
    mdcv = struct.pack(">8HII", 35400, 14600, 8500, 39850, 6550, 2300, 15635, 16450, 10000000, 50)
    summary = summarize_chunk(make_record("mDCV", mdcv))
    assert summary.startswith("Mastering Display: R(0.7080,0.2920), G(0.1700,0.7970)")
    assert summary.endswith("Luminance=0.0050-1000.0000 cd/m2")


# ------ Обертка для вызывающей стороны ------

def test_describe_chunk_keeps_error_inline(make_record):
    summary, error = describe_chunk(make_record("IHDR", ihdr_payload(width=0)))
    assert summary == "Error: Zero width or height"
    assert error == "Zero width or height"

    summary, error = describe_chunk(make_record("IEND"))
    assert summary == "End of image stream marker"
    assert error is None


def test_sbit_layouts_cover_every_color_type(make_record, header_for):
    assert set(SBIT_LAYOUTS) == {0, 2, 3, 4, 6}
    for ct, (size, _names, _label) in SBIT_LAYOUTS.items():
        summary = summarize_chunk(make_record("sBIT", bytes([1]) * size), header_for(ct))
        assert summary.startswith("Significant Bits: ")
        assert "=1" in summary


def test_unknown_color_type_in_context(make_record, header_for):
    # сюда попадает только вручную собранный ImageHeader
    assert summarize_chunk(make_record("sBIT", b"\x08"), header_for(5)) == "Significant Bits: (Invalid color type)"
    assert summarize_chunk(make_record("bKGD", b"\x00"), header_for(5)) == "Background Color: (Invalid color type)"
