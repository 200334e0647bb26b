# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Value formatter for converting decoded EXIF values to display strings.

The formatter turns an ExifMap into the labelled fields shown next to a photo
(Camera, Lens, Shutter Speed, ...). Fields missing from the EXIF data are
filled from a fallback camera descriptor where one applies, or omitted.

Copyright 2025 DNAi inc.
"""

import json
import math
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from folioexif.config import FallbackCamera

WHITE_BALANCE_MODES = ['Auto', 'Manual']
EXPOSURE_MODES = ['Auto', 'Manual', 'Auto Bracket']
METERING_MODES = ['Unknown', 'Average', 'Center-weighted', 'Spot', 'Multi-spot', 'Multi-segment', 'Partial']

FallbackLike = Union[FallbackCamera, Mapping[str, Any], None]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def format_number(value: Any) -> str:
    """
    Format a numeric tag value the way it is displayed.

    Whole floats lose their trailing ".0" (2.0 -> "2").
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def lookup_mode(modes: Sequence[str], value: Any) -> str:
    """
    Look up an enumerated EXIF value by integer index.

    Args:
        modes: Ordered list of labels
        value: Raw tag value

    Returns:
        The label, or "Unknown" if the value is not a valid index
    """
    if isinstance(value, bool):
        return 'Unknown'
    if isinstance(value, float):
        if not value.is_integer():
            return 'Unknown'
        value = int(value)
    if isinstance(value, int) and 0 <= value < len(modes):
        return modes[value]
    return 'Unknown'


def format_shutter_speed(exposure: float) -> str:
    """Format ExposureTime as "1/Ns" below one second, else "Ns"."""
    if exposure < 1:
        return f"1/{round_half_up(1 / exposure)}s"
    return f"{format_number(exposure)}s"


def format_aperture(f_number: float) -> str:
    return f"f/{f_number:.1f}"


def format_focal_length(focal_length: float) -> str:
    return f"{round_half_up(focal_length)}mm"


def _positive_number(value: Any) -> Optional[float]:
    # Strings can show up when a file declares an unexpected type for a tag
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if value > 0 else None


def _format_fallback_only(fallback: Optional[FallbackCamera]) -> Dict[str, str]:
    formatted: Dict[str, str] = {}
    if fallback is None:
        return formatted
    if fallback.make and fallback.model:
        formatted['Camera'] = f"{fallback.make} {fallback.model}"
    if fallback.lens:
        formatted['Lens'] = fallback.lens
    if fallback.photographer:
        formatted['Photographer'] = fallback.photographer
    return formatted


def format_exif_data(exif_data: Optional[Mapping[str, Any]], fallback: FallbackLike = None) -> Dict[str, str]:
    """
    Convert decoded EXIF data into labelled display fields.

    Each field takes the first rule that matches: values from the EXIF data,
    then values from the fallback descriptor. An empty or missing ExifMap
    yields only the fallback-derived fields (Camera, Lens, Photographer);
    EXIF-only fields are omitted rather than shown blank.

    Numeric fields treat zero (or a non-numeric value) as absent. The
    enumerated fields (White Balance, Exposure Mode, Metering) are shown
    whenever the tag is present.

    Args:
        exif_data: Tag name to value mapping, or None
        fallback: FallbackCamera or mapping with make/model/lens/photographer

    Returns:
        Ordered mapping of label to display string
    """
    camera = FallbackCamera.coerce(fallback)

    if not exif_data:
        return _format_fallback_only(camera)

    formatted: Dict[str, str] = {}

    # Camera
    make = exif_data.get('Make')
    model = exif_data.get('Model')
    if make and model:
        formatted['Camera'] = f"{make} {model}"
    elif camera is not None and camera.make and camera.model:
        formatted['Camera'] = f"{camera.make} {camera.model}"

    # Lens; a LensMake without a LensModel is not enough
    lens_model = exif_data.get('LensModel')
    if lens_model:
        formatted['Lens'] = str(lens_model)
    elif camera is not None and camera.lens:
        formatted['Lens'] = camera.lens

    # Exposure settings
    exposure = _positive_number(exif_data.get('ExposureTime'))
    if exposure:
        formatted['Shutter Speed'] = format_shutter_speed(exposure)

    f_number = _positive_number(exif_data.get('FNumber'))
    if f_number:
        formatted['Aperture'] = format_aperture(f_number)

    iso = exif_data.get('ISO')
    if iso:
        formatted['ISO'] = f"ISO {format_number(iso)}"

    focal_length = _positive_number(exif_data.get('FocalLength'))
    if focal_length:
        formatted['Focal Length'] = format_focal_length(focal_length)

    focal_length_35mm = exif_data.get('FocalLengthIn35mmFilm')
    if focal_length_35mm:
        formatted['35mm Equivalent'] = f"{format_number(focal_length_35mm)}mm"

    # Enumerated camera settings
    if 'WhiteBalance' in exif_data:
        formatted['White Balance'] = lookup_mode(WHITE_BALANCE_MODES, exif_data['WhiteBalance'])

    if 'ExposureMode' in exif_data:
        formatted['Exposure Mode'] = lookup_mode(EXPOSURE_MODES, exif_data['ExposureMode'])

    if 'MeteringMode' in exif_data:
        formatted['Metering'] = lookup_mode(METERING_MODES, exif_data['MeteringMode'])

    date_taken = exif_data.get('DateTimeOriginal')
    if date_taken:
        formatted['Date Taken'] = str(date_taken)

    # Photographer
    if exif_data.get('Artist'):
        formatted['Photographer'] = str(exif_data['Artist'])
    elif exif_data.get('CameraOwnerName'):
        formatted['Photographer'] = str(exif_data['CameraOwnerName'])
    elif camera is not None and camera.photographer:
        formatted['Photographer'] = camera.photographer

    return formatted


def render_text(fields: Mapping[str, Any]) -> str:
    """Render fields as "<label>: <value>" lines in insertion order."""
    return "\n".join(f"{label}: {value}" for label, value in fields.items())


def render_json(fields: Mapping[str, Any]) -> str:
    return json.dumps(dict(fields), indent=2, ensure_ascii=False)


def format_raw_exif(exif_data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Stringify an undecorated ExifMap for display, sorted by tag name.

    Args:
        exif_data: Tag name to value mapping, or None

    Returns:
        Mapping of tag name to display string
    """
    if not exif_data:
        return {}
    return {tag: format_number(value) for tag, value in sorted(exif_data.items())}
