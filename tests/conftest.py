"""Shared fixtures: builders for synthetic JPEG/EXIF byte streams."""

import struct

import pytest

BYTE_ORDER_ENDIAN = {b'II': '<', b'MM': '>'}


class ExifBuilder:
    """
    Builds an EXIF APP1 payload ("Exif\\0\\0" + TIFF header + IFD0).

    IFD0 always sits at TIFF offset 8. Values that do not fit inline are
    appended to a data area after the directory, and the entry's value field
    holds their TIFF-relative offset.
    """

    def __init__(self, byte_order=b'II'):
        self.byte_order = byte_order
        self.endian = BYTE_ORDER_ENDIAN.get(byte_order, '<')
        self.entries = []
        self.next_ifd = 0
        self.magic = 42

    def add(self, tag, type_code, count, value):
        """Add an entry with a raw 4-byte value field."""
        self.entries.append((tag, type_code, count, value.ljust(4, b'\x00')[:4], None))
        return self

    def add_short(self, tag, value):
        return self.add(tag, 3, 1, struct.pack(f'{self.endian}H', value))

    def add_long(self, tag, value):
        return self.add(tag, 4, 1, struct.pack(f'{self.endian}I', value))

    def add_ascii(self, tag, text):
        raw = text.encode('latin-1') + b'\x00'
        if len(raw) <= 4:
            return self.add(tag, 2, len(raw), raw)
        self.entries.append((tag, 2, len(raw), None, raw))
        return self

    def add_rational(self, tag, numerator, denominator):
        """Add a rational stored at an offset, as the TIFF format lays it out."""
        blob = struct.pack(f'{self.endian}II', numerator, denominator)
        self.entries.append((tag, 5, 1, None, blob))
        return self

    def build(self):
        data_start = 8 + 2 + 12 * len(self.entries) + 4
        directory = struct.pack(f'{self.endian}H', len(self.entries))
        data = b''
        for tag, type_code, count, value, blob in self.entries:
            if blob is not None:
                value = struct.pack(f'{self.endian}I', data_start + len(data))
                data += blob
            directory += struct.pack(f'{self.endian}HHI', tag, type_code, count) + value
        directory += struct.pack(f'{self.endian}I', self.next_ifd)

        header = self.byte_order + struct.pack(f'{self.endian}HI', self.magic, 8)
        return b'Exif\x00\x00' + header + directory + data


def build_jpeg(exif_payload=None, leading_segments=(), trailer=b'\xff\xd9'):
    """Wrap an EXIF payload in a minimal JPEG: SOI, APP0, [other], APP1, EOI."""
    jfif = b'JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
    out = b'\xff\xd8' + b'\xff\xe0' + struct.pack('>H', len(jfif) + 2) + jfif
    for marker, body in leading_segments:
        out += struct.pack('>HH', marker, len(body) + 2) + body
    if exif_payload is not None:
        out += b'\xff\xe1' + struct.pack('>H', len(exif_payload) + 2) + exif_payload
    return out + trailer


@pytest.fixture
def exif_builder():
    return ExifBuilder


@pytest.fixture
def jpeg_factory():
    return build_jpeg


@pytest.fixture
def camera_jpeg():
    """A JPEG whose IFD0 carries the usual camera fields (rationals at offsets)."""
    builder = ExifBuilder(b'II')
    builder.add_ascii(0x010F, 'Sony')  # longer than 4 bytes with NUL, not decoded
    builder.add_short(0x8827, 400)
    builder.add_rational(0x829A, 1, 200)
    builder.add_rational(0x829D, 4, 1)
    builder.add_rational(0x920A, 35, 1)
    builder.add_short(0xA405, 35)
    builder.add_short(0xA403, 0)
    builder.add_short(0x9207, 5)
    return build_jpeg(builder.build())
