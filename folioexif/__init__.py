# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
FolioExif - EXIF camera details for photo portfolios

Reads EXIF metadata straight from JPEG bytes (no imaging library) and turns
it into the short list of camera details shown next to a portfolio photo,
falling back to the photographer's configured kit when an image carries no
usable metadata.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from folioexif.cache import ExifCache
from folioexif.config import (
    DEFAULT_FALLBACK_CAMERA,
    GENERIC_FALLBACK_CAMERA,
    FallbackCamera,
    PortfolioSettings,
    load_config,
)
from folioexif.exceptions import (
    ConfigError,
    ExifDecodeError,
    FetchError,
    FolioExifError,
    MalformedTiffHeaderError,
    NotJpegError,
    SegmentNotFoundError,
    TruncatedDirectoryError,
)
from folioexif.exif_parser import ExifMap, ExifParser, ExifTagType, decode_exif_segment, read_exif
from folioexif.exif_tags import EXIF_TAG_NAMES, get_tag_name
from folioexif.extractor import ExifExtractor, ExtractionResult, ExtractionStatus
from folioexif.fetch import fetch_bytes
from folioexif.jpeg_segments import JPEGSegmentLocator, find_exif_segment
from folioexif.value_formatter import format_exif_data, render_json, render_text

__all__ = [
    "ExifCache",
    "DEFAULT_FALLBACK_CAMERA",
    "GENERIC_FALLBACK_CAMERA",
    "FallbackCamera",
    "PortfolioSettings",
    "load_config",
    "ConfigError",
    "ExifDecodeError",
    "FetchError",
    "FolioExifError",
    "MalformedTiffHeaderError",
    "NotJpegError",
    "SegmentNotFoundError",
    "TruncatedDirectoryError",
    "ExifMap",
    "ExifParser",
    "ExifTagType",
    "decode_exif_segment",
    "read_exif",
    "EXIF_TAG_NAMES",
    "get_tag_name",
    "ExifExtractor",
    "ExtractionResult",
    "ExtractionStatus",
    "fetch_bytes",
    "JPEGSegmentLocator",
    "find_exif_segment",
    "format_exif_data",
    "render_json",
    "render_text",
]
