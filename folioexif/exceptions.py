# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for FolioExif

Decode errors are raised only by the strict entry points of the segment
locator and the TIFF parser. The lenient public functions absorb them and
return empty or partial results, so metadata problems never break image
display.

Copyright 2025 DNAi inc.
"""


class FolioExifError(Exception):
    """
    Base exception for all FolioExif errors.

    All FolioExif exceptions inherit from this class, allowing
    catch-all error handling for any FolioExif-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class ExifDecodeError(FolioExifError):
    """
    Raised when EXIF metadata cannot be decoded from a byte stream.

    Never propagates past the public decode functions.
    """
    pass


class NotJpegError(ExifDecodeError):
    """Raised when the stream does not start with the JPEG SOI marker."""
    pass


class SegmentNotFoundError(ExifDecodeError):
    """Raised when the segment scan reaches the end without an APP1 marker."""
    pass


class MalformedTiffHeaderError(ExifDecodeError):
    """
    Raised when the EXIF payload header cannot be interpreted.

    This exception is raised when:
    - The payload does not start with the "Exif" identifier
    - The byte order marker is neither "II" nor "MM"
    - The header itself is truncated
    """
    pass


class TruncatedDirectoryError(ExifDecodeError):
    """
    Raised when a read runs past the end of the buffer during a directory walk.

    Carries the entries decoded before the fault so callers can keep them.
    """
    def __init__(self, message: str = "", partial=None):
        super().__init__(message)
        self.partial = partial if partial is not None else {}


class FetchError(FolioExifError):
    """
    Raised when image bytes cannot be obtained.

    This exception is raised when:
    - A local file does not exist or cannot be read
    - An HTTP request fails, times out or returns an error status
    """
    pass


class ConfigError(FolioExifError):
    """Raised when a configuration file is missing or is not valid JSON."""
    pass
