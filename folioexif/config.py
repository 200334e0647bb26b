# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Portfolio configuration

Holds the fallback camera descriptor shown when an image carries no usable
EXIF data, and the few settings that control metadata extraction. Both can
be loaded from a JSON file shaped like::

    {
        "camera": {"make": "Sony", "model": "A7R III",
                   "lens": "Sony 20-70mm f/4 G", "photographer": "Simon Hajduk"},
        "settings": {"enableMetadataExtraction": true, "fetchTimeout": 30}
    }

Copyright 2025 DNAi inc.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from folioexif.exceptions import ConfigError

CONFIG_ENV_VAR = "FOLIOEXIF_CONFIG"


@dataclass(frozen=True)
class FallbackCamera:
    """Camera and photographer details used when EXIF data is missing."""
    make: str = "Sony"
    model: str = "A7R III"
    lens: str = "Sony 20-70mm f/4 G"
    photographer: str = "Simon Hajduk"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FallbackCamera":
        """
        Build a descriptor from a mapping, keeping defaults for missing keys.

        Unknown keys are ignored.
        """
        values = {key: str(data[key]) for key in ("make", "model", "lens", "photographer") if data.get(key) is not None}
        return cls(**values)

    @classmethod
    def coerce(cls, value: Union["FallbackCamera", Mapping[str, Any], None]) -> Optional["FallbackCamera"]:
        """Accept a descriptor, a plain mapping or None."""
        if value is None or isinstance(value, FallbackCamera):
            return value
        # Missing keys in a caller-supplied mapping are blank, not defaulted
        return cls(
            make=str(value.get("make") or ""),
            model=str(value.get("model") or ""),
            lens=str(value.get("lens") or ""),
            photographer=str(value.get("photographer") or ""),
        )


DEFAULT_FALLBACK_CAMERA = FallbackCamera()

# Last-resort descriptor for portfolios whose config has no camera block
GENERIC_FALLBACK_CAMERA = FallbackCamera(
    make="Canon",
    model="EOS R5",
    lens="RF 24-70mm f/2.8L IS USM",
    photographer="Photographer",
)


@dataclass(frozen=True)
class PortfolioSettings:
    """Settings that control metadata extraction for a portfolio."""
    enable_metadata_extraction: bool = True
    fetch_timeout: float = 30.0

    # JSON key -> field name
    KEY_MAP = {
        "enableMetadataExtraction": "enable_metadata_extraction",
        "enable_metadata_extraction": "enable_metadata_extraction",
        "fetchTimeout": "fetch_timeout",
        "fetch_timeout": "fetch_timeout",
    }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PortfolioSettings":
        values: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = cls.KEY_MAP.get(key)
            if field_name is None:
                continue
            if field_name == "fetch_timeout":
                try:
                    values[field_name] = float(value)
                except (TypeError, ValueError):
                    raise ConfigError(f"Invalid fetch timeout: {value!r}")
            else:
                values[field_name] = bool(value)
        return cls(**values)


def load_config(path: Union[str, Path]) -> Tuple[FallbackCamera, PortfolioSettings]:
    """
    Load the fallback camera and settings from a JSON file.

    Args:
        path: Path to the JSON configuration file

    Returns:
        Tuple of (FallbackCamera, PortfolioSettings). Missing blocks use
        defaults; a config without a camera block gets the generic camera.

    Raises:
        ConfigError: If the file is missing or is not a JSON object
    """
    config_path = Path(path)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a JSON object")

    camera_data = data.get("camera")
    if isinstance(camera_data, dict):
        camera = FallbackCamera.from_mapping(camera_data)
    else:
        camera = GENERIC_FALLBACK_CAMERA

    settings_data = data.get("settings")
    settings = PortfolioSettings.from_mapping(settings_data) if isinstance(settings_data, dict) else PortfolioSettings()
    return camera, settings


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Return the explicit path, else the one named by FOLIOEXIF_CONFIG, else None."""
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else None
