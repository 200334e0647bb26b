# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF extraction pipeline

Combines the pieces used by a gallery: the per-path cache, the byte fetcher,
the JPEG segment locator and the TIFF/IFD parser. Every failure along the way
is absorbed into a status on the result; nothing raises past
ExifExtractor, so a broken or missing image can never break the gallery.

Copyright 2025 DNAi inc.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from folioexif.cache import ExifCache
from folioexif.config import PortfolioSettings
from folioexif.exceptions import NotJpegError, SegmentNotFoundError
from folioexif.exif_parser import ExifMap, ExifParser, TagValue
from folioexif.fetch import DEFAULT_TIMEOUT, fetch_bytes
from folioexif.jpeg_segments import JPEGSegmentLocator
from folioexif.value_formatter import FallbackLike, format_exif_data

logger = logging.getLogger(__name__)

Location = Union[str, Path]


class ExtractionStatus(Enum):
    """Outcome of an extraction attempt."""
    OK = "ok"  # EXIF decoded (the map may still be empty)
    NOT_JPEG = "not_jpeg"
    NO_SEGMENT = "no_segment"
    NOT_EXIF = "not_exif"  # APP1 found but identifier or byte order is wrong
    FETCH_FAILED = "fetch_failed"
    DISABLED = "disabled"


@dataclass(frozen=True)
class ExtractionResult:
    """Result of extracting EXIF metadata from one image."""
    path: str
    status: ExtractionStatus
    entries: Optional[Tuple[Tuple[str, TagValue], ...]] = None
    cached: bool = False

    @property
    def exif_data(self) -> Optional[ExifMap]:
        """A fresh copy of the decoded map, or None if there is none."""
        if self.entries is None:
            return None
        return dict(self.entries)

    @property
    def has_metadata(self) -> bool:
        return bool(self.entries)


class ExifExtractor:
    """
    Extracts EXIF metadata for gallery images, at most once per path.

    Example:
        >>> from folioexif.config import FallbackCamera
        >>> extractor = ExifExtractor()
        >>> fields = extractor.describe('photos/Light-16.jpg', FallbackCamera())
    """

    def __init__(
        self,
        cache: Optional[ExifCache] = None,
        fetcher: Optional[Callable[[str], bytes]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        follow_rational_offsets: bool = False,
        enabled: bool = True
    ):
        """
        Initialize the extractor.

        Args:
            cache: Result cache shared by callers; a private one is created if omitted
            fetcher: Callable returning the bytes for a location; any exception
                it raises is a fetch failure (defaults to fetch_bytes)
            timeout: Fetch timeout in seconds for the default fetcher
            follow_rational_offsets: Read RATIONAL values at their TIFF offset
            enabled: When False, extraction is skipped entirely
        """
        self.cache = cache if cache is not None else ExifCache()
        self.timeout = timeout
        self.fetcher = fetcher if fetcher is not None else self._default_fetch
        self.follow_rational_offsets = follow_rational_offsets
        self.enabled = enabled

    @classmethod
    def from_settings(cls, settings: PortfolioSettings, cache: Optional[ExifCache] = None, **kwargs) -> "ExifExtractor":
        """Build an extractor honoring portfolio settings."""
        return cls(
            cache=cache,
            timeout=settings.fetch_timeout,
            enabled=settings.enable_metadata_extraction,
            **kwargs
        )

    def extract(self, path: Location) -> Optional[ExifMap]:
        """
        Extract the EXIF tag map for an image.

        Returns:
            Tag mapping, or None if the image has no EXIF metadata or could
            not be fetched
        """
        return self.extract_result(path).exif_data

    def extract_result(self, path: Location) -> ExtractionResult:
        """
        Extract EXIF metadata for an image and report how it went.

        The cache is consulted first. Every outcome except a fetch failure is
        cached, including "no metadata".
        """
        key = str(path)
        if not self.enabled:
            return ExtractionResult(path=key, status=ExtractionStatus.DISABLED)

        result, hit = self.cache.get_or_compute(key, lambda: self._compute(key))
        if hit:
            return ExtractionResult(path=key, status=result.status, entries=result.entries, cached=True)
        return result

    def extract_many(
        self,
        paths: Iterable[Location],
        max_workers: Optional[int] = None
    ) -> Dict[str, Optional[ExifMap]]:
        """
        Extract EXIF metadata for a batch of gallery images.

        Args:
            paths: Image locations
            max_workers: Thread pool size; None or 1 extracts sequentially

        Returns:
            Mapping of location (as str) to tag map or None, in input order
        """
        keys = [str(p) for p in paths]
        if not max_workers or max_workers <= 1:
            return {key: self.extract(key) for key in keys}

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            maps = list(pool.map(self.extract, keys))
        return dict(zip(keys, maps))

    def describe(self, path: Location, fallback: FallbackLike = None) -> Dict[str, str]:
        """Extract and format display fields for an image."""
        return format_exif_data(self.extract(path), fallback)

    def decode_bytes(self, file_data: bytes, path: str = "<bytes>") -> ExtractionResult:
        """
        Decode already-fetched bytes without touching the cache.

        Args:
            file_data: Raw file bytes
            path: Label used in the result and log messages
        """
        try:
            payload = JPEGSegmentLocator(file_data).exif_payload()
        except NotJpegError:
            logger.debug("Not a JPEG file, cannot extract EXIF: %s", path)
            return ExtractionResult(path=path, status=ExtractionStatus.NOT_JPEG)
        except SegmentNotFoundError as e:
            logger.debug("No EXIF segment in %s: %s", path, e.message)
            return ExtractionResult(path=path, status=ExtractionStatus.NO_SEGMENT)

        exif_data = ExifParser(payload, follow_rational_offsets=self.follow_rational_offsets).read()
        if exif_data is None:
            return ExtractionResult(path=path, status=ExtractionStatus.NOT_EXIF)
        logger.debug("EXIF extracted for %s: %d tags", path, len(exif_data))
        return ExtractionResult(path=path, status=ExtractionStatus.OK, entries=tuple(exif_data.items()))

    def _compute(self, key: str) -> Tuple[ExtractionResult, bool]:
        try:
            file_data = self.fetcher(key)
        except Exception as e:  # injected fetchers may raise anything
            logger.warning("Could not fetch %s: %s", key, e)
            return ExtractionResult(path=key, status=ExtractionStatus.FETCH_FAILED), False

        if not file_data:
            logger.debug("No bytes available for %s", key)
            return ExtractionResult(path=key, status=ExtractionStatus.NOT_JPEG), True

        return self.decode_bytes(file_data, path=key), True

    def _default_fetch(self, location: str) -> bytes:
        return fetch_bytes(location, timeout=self.timeout)
