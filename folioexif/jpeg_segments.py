# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG segment locator

This module walks the marker segments of a JPEG byte stream and finds the
APP1 segment that carries EXIF metadata. Segments are visited sequentially
from offset 2 (right after the SOI marker). Each segment is a 2-byte marker
followed by a 2-byte big-endian length that counts itself and the payload but
not the marker.

Segment lengths are not validated against the remaining buffer. A corrupt
length simply moves the scan somewhere else; any read that runs off the end
of the buffer is reported as "no EXIF segment".

Copyright 2025 DNAi inc.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Iterator, Optional

from folioexif.exceptions import NotJpegError, SegmentNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """A JPEG marker segment located in a byte stream."""
    marker: int
    offset: int  # Offset of the marker bytes
    length: int  # Declared length (includes the length field, excludes the marker)

    @property
    def payload_offset(self) -> int:
        """Offset of the first payload byte (after marker and length)."""
        return self.offset + 4


class JPEGSegmentLocator:
    """
    Locates the EXIF APP1 segment in a JPEG byte stream.

    The locator never modifies the buffer it is given.
    """

    # JPEG markers
    SOI = 0xFFD8  # Start of Image
    APP1 = 0xFFE1  # APP1 (EXIF)

    def __init__(self, file_data: bytes):
        """
        Initialize the locator.

        Args:
            file_data: Raw bytes of a file purporting to be a JPEG
        """
        self.file_data = bytes(file_data)

    def is_jpeg(self) -> bool:
        """Check the SOI marker at the start of the stream."""
        return len(self.file_data) >= 2 and struct.unpack('>H', self.file_data[0:2])[0] == self.SOI

    def iter_segments(self) -> Iterator[Segment]:
        """
        Yield segments in file order, starting right after the SOI marker.

        Raises:
            NotJpegError: If the stream does not start with the SOI marker
            struct.error: If a marker or length read runs past the buffer
        """
        if not self.is_jpeg():
            raise NotJpegError("Not a JPEG file: missing SOI marker")

        offset = 2
        while offset < len(self.file_data):
            marker = struct.unpack_from('>H', self.file_data, offset)[0]
            length = struct.unpack_from('>H', self.file_data, offset + 2)[0]
            yield Segment(marker=marker, offset=offset, length=length)
            offset += 2 + length

    def locate(self) -> Segment:
        """
        Find the first APP1 segment.

        Returns:
            The APP1 segment

        Raises:
            NotJpegError: If the stream does not start with the SOI marker
            SegmentNotFoundError: If the scan ends without finding APP1
        """
        try:
            for segment in self.iter_segments():
                if segment.marker == self.APP1:
                    return segment
        except struct.error as e:
            raise SegmentNotFoundError(f"Segment scan ran past end of data: {e}")
        raise SegmentNotFoundError("No APP1 segment found")

    def exif_payload(self) -> bytes:
        """
        Return the bytes following the APP1 marker and length field.

        The returned buffer starts at the "Exif\\0\\0" identifier and runs to
        the end of the file; TIFF offsets inside it may point anywhere in it.

        Raises:
            NotJpegError: If the stream does not start with the SOI marker
            SegmentNotFoundError: If the scan ends without finding APP1
        """
        segment = self.locate()
        return self.file_data[segment.payload_offset:]


def find_exif_segment(file_data: Optional[bytes]) -> Optional[bytes]:
    """
    Locate the raw EXIF payload in a JPEG byte stream.

    Never raises: non-JPEG input, a missing APP1 segment and truncated data
    all produce None.

    Args:
        file_data: Raw file bytes, or None if nothing could be fetched

    Returns:
        The EXIF payload (starting at the "Exif" identifier), or None
    """
    if not file_data:
        logger.debug("No bytes available, cannot extract EXIF")
        return None

    try:
        return JPEGSegmentLocator(file_data).exif_payload()
    except NotJpegError:
        logger.debug("Not a JPEG file, cannot extract EXIF")
    except SegmentNotFoundError as e:
        logger.debug("No EXIF segment: %s", e.message)
    return None
