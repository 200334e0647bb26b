# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for FolioExif

Prints the display fields a gallery lightbox would show for each image,
one "<label>: <value>" line per field.

Copyright 2025 DNAi inc.
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from folioexif.config import DEFAULT_FALLBACK_CAMERA, PortfolioSettings, load_config, resolve_config_path
from folioexif.exceptions import ConfigError
from folioexif.extractor import ExifExtractor
from folioexif.value_formatter import format_exif_data, format_raw_exif, render_json, render_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folioexif",
        description="FolioExif - Show camera details for portfolio images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show display fields
  folioexif photos/Light-16.jpg

  # Raw tag values as JSON
  folioexif --raw --json photos/Light-16.jpg

  # Use a portfolio config for the fallback camera
  folioexif --config portfolio.json https://example.com/photos/Light-16.jpg
        """
    )
    parser.add_argument('files', nargs='+', help='Image file(s) or URL(s)')
    parser.add_argument('--config', help='Portfolio config JSON (default: $FOLIOEXIF_CONFIG)')
    parser.add_argument('--json', action='store_true', help='Output JSON')
    parser.add_argument('--raw', action='store_true', help='Show decoded tags instead of display fields')
    parser.add_argument('--follow-rational-offsets', action='store_true',
                        help='Read RATIONAL values at their TIFF offset instead of inline')
    parser.add_argument('-j', '--jobs', type=int, default=1, help='Number of parallel fetches')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Returns:
        Exit status: 0 on success, 2 on a configuration error
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    fallback = DEFAULT_FALLBACK_CAMERA
    settings = PortfolioSettings()
    config_path = resolve_config_path(args.config)
    if config_path is not None:
        try:
            fallback, settings = load_config(config_path)
        except ConfigError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 2

    extractor = ExifExtractor.from_settings(settings, follow_rational_offsets=args.follow_rational_offsets)
    exif_maps = extractor.extract_many(args.files, max_workers=args.jobs)

    output: Dict[str, Dict[str, str]] = {}
    for path, exif_data in exif_maps.items():
        if args.raw:
            output[path] = format_raw_exif(exif_data)
        else:
            output[path] = format_exif_data(exif_data, fallback)

    if args.json:
        print(render_json(output))
    else:
        blocks = []
        for path, fields in output.items():
            blocks.append(f"======== {path}\n{render_text(fields)}".rstrip())
        print("\n".join(blocks))
    return 0


if __name__ == "__main__":
    sys.exit(main())
