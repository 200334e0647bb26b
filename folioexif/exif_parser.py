# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF metadata parser

This module decodes the TIFF structure embedded in a JPEG APP1 segment.
It reads the TIFF header (byte order, magic number, offset of the first
Image File Directory) and walks the entries of that directory, producing a
mapping of tag name to decoded scalar value.

Only the primary directory (IFD0) is decoded. Sub-IFD pointers such as
ExifOffset and GPSInfo are reported as plain integers and never followed.

Known limitations of the value decoding:
- ASCII values are only decoded when they fit inline (count <= 4). Longer
  strings live at an external offset and produce no value.
- RATIONAL values are read inline, as two 32-bit words starting at the value
  field. The TIFF format stores them at the offset held in that field; pass
  follow_rational_offsets=True to read them from there instead.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterator, Optional, Union

from folioexif.exceptions import MalformedTiffHeaderError, TruncatedDirectoryError
from folioexif.exif_tags import get_tag_name
from folioexif.jpeg_segments import find_exif_segment

logger = logging.getLogger(__name__)

TagValue = Union[str, int, float]
ExifMap = Dict[str, TagValue]

EXIF_IDENTIFIER = b'Exif'
EXIF_HEADER_SIZE = 6  # "Exif\0\0"
IFD_ENTRY_SIZE = 12

BYTE_ORDERS = {
    b'II': '<',  # Intel, little-endian
    b'MM': '>',  # Motorola, big-endian
}


class ExifTagType(IntEnum):
    """EXIF tag data types understood by the decoder."""
    UNSUPPORTED = 0
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5

    @classmethod
    def from_code(cls, type_code: int) -> "ExifTagType":
        """Map a raw type code to a member, folding unknown codes into UNSUPPORTED."""
        try:
            return cls(type_code)
        except ValueError:
            return cls.UNSUPPORTED


@dataclass(frozen=True)
class TiffHeader:
    """Decoded TIFF header of an EXIF payload."""
    byte_order: str  # "II" or "MM"
    endian: str  # struct prefix, '<' or '>'
    ifd_offset: int  # Relative to the start of the TIFF header


@dataclass(frozen=True)
class IfdEntry:
    """A 12-byte Image File Directory entry."""
    tag: int
    type_code: int
    count: int
    value_position: int  # Absolute position of the 4-byte value/offset field

    @property
    def tag_type(self) -> ExifTagType:
        return ExifTagType.from_code(self.type_code)


class ExifParser:
    """
    Parser for the TIFF/IFD structure of an EXIF payload.

    The payload must start at the "Exif\\0\\0" identifier. The TIFF header
    follows immediately, and every offset inside the TIFF block is relative
    to the header's own start, which is tracked as ``tiff_start``.
    """

    def __init__(self, payload: bytes, follow_rational_offsets: bool = False):
        """
        Initialize the EXIF parser.

        Args:
            payload: EXIF payload starting at the "Exif" identifier
            follow_rational_offsets: Read RATIONAL values at the offset held in
                the value field instead of inline
        """
        self.payload = bytes(payload)
        self.follow_rational_offsets = follow_rational_offsets
        self.tiff_start = EXIF_HEADER_SIZE
        self.endian = '<'  # Replaced once the header is parsed

        self._decoders: Dict[ExifTagType, Callable[[IfdEntry], Optional[TagValue]]] = {
            ExifTagType.ASCII: self._decode_ascii,
            ExifTagType.SHORT: self._decode_short,
            ExifTagType.LONG: self._decode_long,
            ExifTagType.RATIONAL: self._decode_rational,
            ExifTagType.UNSUPPORTED: self._decode_unsupported,
        }

    def read(self) -> Optional[ExifMap]:
        """
        Decode the primary directory into a tag name mapping.

        Returns:
            Mapping of tag name to value. None if the payload is not EXIF
            (bad identifier or byte order). A directory that is cut short
            yields the entries decoded before the fault.
        """
        try:
            header = self.parse_header()
        except MalformedTiffHeaderError as e:
            logger.debug("Error parsing EXIF segment: %s", e.message)
            return None

        try:
            return self.read_directory(header)
        except TruncatedDirectoryError as e:
            logger.debug("Error parsing IFD: %s (%d entries kept)", e.message, len(e.partial))
            return e.partial

    def parse_header(self) -> TiffHeader:
        """
        Parse the identifier and TIFF header.

        The magic number (42) is skipped without validation.

        Raises:
            MalformedTiffHeaderError: If the identifier or byte order is wrong
                or the header is truncated
        """
        if self.payload[:4] != EXIF_IDENTIFIER:
            raise MalformedTiffHeaderError("Missing Exif identifier")

        byte_order = self.payload[self.tiff_start:self.tiff_start + 2]
        endian = BYTE_ORDERS.get(byte_order)
        if endian is None:
            raise MalformedTiffHeaderError(f"Unknown byte order {byte_order!r}")
        self.endian = endian

        try:
            ifd_offset = struct.unpack_from(f'{endian}I', self.payload, self.tiff_start + 4)[0]
        except struct.error:
            raise MalformedTiffHeaderError("Truncated TIFF header")

        return TiffHeader(
            byte_order=byte_order.decode('ascii'),
            endian=endian,
            ifd_offset=ifd_offset,
        )

    def iter_entries(self, ifd_start: int) -> Iterator[IfdEntry]:
        """
        Yield the entries of the directory at an absolute position.

        Raises:
            struct.error: If the count or an entry runs past the buffer
        """
        num_entries = struct.unpack_from(f'{self.endian}H', self.payload, ifd_start)[0]
        entry_offset = ifd_start + 2
        for _ in range(num_entries):
            tag, type_code, count = struct.unpack_from(f'{self.endian}HHI', self.payload, entry_offset)
            yield IfdEntry(tag=tag, type_code=type_code, count=count, value_position=entry_offset + 8)
            entry_offset += IFD_ENTRY_SIZE

    def read_directory(self, header: TiffHeader) -> ExifMap:
        """
        Decode every recognized entry of the first directory.

        Entries are decoded in directory order. Unknown tags and entries
        whose value cannot be decoded are skipped.

        Raises:
            TruncatedDirectoryError: If the walk runs past the buffer; the
                exception carries the entries decoded so far
        """
        exif_data: ExifMap = {}
        ifd_start = self.tiff_start + header.ifd_offset
        try:
            for entry in self.iter_entries(ifd_start):
                value = self.read_tag_value(entry)
                if value is None:
                    continue
                tag_name = get_tag_name(entry.tag)
                if tag_name:
                    exif_data[tag_name] = value
        except struct.error as e:
            raise TruncatedDirectoryError(f"Directory at {ifd_start} is truncated: {e}", partial=exif_data)
        return exif_data

    def read_tag_value(self, entry: IfdEntry) -> Optional[TagValue]:
        """
        Decode the value of a directory entry.

        Returns:
            Decoded scalar, or None if the type is unsupported, the value is
            stored out of line, or the read runs past the buffer
        """
        decoder = self._decoders[entry.tag_type]
        try:
            return decoder(entry)
        except struct.error:
            return None

    def _decode_ascii(self, entry: IfdEntry) -> Optional[str]:
        # Inline only; count includes the NUL terminator
        if entry.count > 4:
            return None
        length = max(entry.count - 1, 0)
        start = entry.value_position
        if start + length > len(self.payload):
            raise struct.error("ASCII value runs past end of data")
        return self.payload[start:start + length].decode('latin-1')

    def _decode_short(self, entry: IfdEntry) -> int:
        return struct.unpack_from(f'{self.endian}H', self.payload, entry.value_position)[0]

    def _decode_long(self, entry: IfdEntry) -> int:
        return struct.unpack_from(f'{self.endian}I', self.payload, entry.value_position)[0]

    def _decode_rational(self, entry: IfdEntry) -> float:
        position = entry.value_position
        if self.follow_rational_offsets:
            value_offset = struct.unpack_from(f'{self.endian}I', self.payload, position)[0]
            position = self.tiff_start + value_offset
        numerator, denominator = struct.unpack_from(f'{self.endian}II', self.payload, position)
        if denominator == 0:
            return 0.0
        return numerator / denominator

    def _decode_unsupported(self, entry: IfdEntry) -> None:
        return None


def decode_exif_segment(payload: Optional[bytes], follow_rational_offsets: bool = False) -> Optional[ExifMap]:
    """
    Decode an EXIF payload into a tag name mapping.

    Never raises.

    Args:
        payload: EXIF payload starting at the "Exif" identifier
        follow_rational_offsets: Read RATIONAL values at their TIFF offset

    Returns:
        Tag mapping (possibly partial or empty), or None if the payload is
        missing or is not EXIF
    """
    if payload is None:
        return None
    return ExifParser(payload, follow_rational_offsets=follow_rational_offsets).read()


def read_exif(file_data: Optional[bytes], follow_rational_offsets: bool = False) -> Optional[ExifMap]:
    """
    Extract EXIF metadata from raw JPEG bytes.

    Args:
        file_data: Raw file bytes
        follow_rational_offsets: Read RATIONAL values at their TIFF offset

    Returns:
        Tag mapping, or None if the bytes carry no EXIF metadata
    """
    return decode_exif_segment(find_exif_segment(file_data), follow_rational_offsets=follow_rational_offsets)

