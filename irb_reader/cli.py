"""
Command-line interface for irb-reader.
"""

import argparse
import csv
import logging
import sys

from .layout import FORMAT_BINARY, FORMAT_TEXT
from .reader import FORMAT_AUTO, IrbReader, detect_format
from .sdk import Irb
from .utilities import UnitConversion

UNITS = ("C", "K", "F")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="irb-reader",
        description="InfraTec thermal file reader (binary .irb and text export)"
    )
    parser.add_argument(
        "--format",
        choices=[FORMAT_AUTO, FORMAT_BINARY, FORMAT_TEXT],
        default=FORMAT_AUTO,
        help="File encoding (default: detect from the magic bytes)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Show file information")
    info.add_argument("file_path", help="Path to the thermal file")
    info.add_argument("--sdk", action="store_true", help="Query the IRBACS library")

    pixel = subparsers.add_parser("pixel", help="Print the value at one pixel")
    pixel.add_argument("file_path", help="Path to the thermal file")
    pixel.add_argument("x", type=int, help="Column")
    pixel.add_argument("y", type=int, help="Row")
    pixel.add_argument("--sdk", action="store_true", help="Read the temperature through the IRBACS library")
    pixel.add_argument(
        "--unit",
        choices=UNITS,
        default="C",
        help="Temperature unit for --sdk values (default: C)"
    )

    stats = subparsers.add_parser("stats", help="Show value statistics")
    stats.add_argument("file_path", help="Path to the thermal file")

    export = subparsers.add_parser("export-csv", help="Export pixel values to CSV")
    export.add_argument("file_path", help="Path to the thermal file")
    export.add_argument("output_path", help="Destination CSV file")

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "info":
            if args.sdk:
                print_sdk_info(args.file_path)
            else:
                print_info(args.file_path, args.format)
        elif args.command == "pixel":
            print_pixel(args)
        elif args.command == "stats":
            print_stats(IrbReader(args.format).read_file(args.file_path))
        elif args.command == "export-csv":
            export_to_csv(IrbReader(args.format).read_file(args.file_path), args.output_path)
            print(f"Data exported to: {args.output_path}")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def print_info(file_path, fmt=FORMAT_AUTO):
    """Print format and header information."""
    if fmt == FORMAT_AUTO:
        fmt = detect_format(file_path)
    header = IrbReader(fmt).read_header(file_path)

    print("\n=== IRB FILE INFORMATION ===")
    print(f"Format: {fmt}")
    if fmt == FORMAT_BINARY:
        print(f"Software version: {header.software_version}")
        print(f"Version: {header.version.major}.{header.version.minor}")
    print("Image dimensions:")
    print(f"  Width: {header.width}")
    print(f"  Height: {header.height}")


def print_sdk_info(file_path):
    """Print what the IRBACS library reports about a file."""
    with Irb(file_path) as irb:
        print("\n=== IRBACS INFORMATION ===")
        print("Image dimensions:")
        print(f"  Width: {irb.image_width()}")
        print(f"  Height: {irb.image_height()}")
        print(f"Frame count: {irb.frame_count()}")
        print(f"Index count: {irb.index_count()}")


def print_pixel(args):
    """Print the value at (x, y); raises IndexError when out of bounds."""
    if args.sdk:
        with Irb(args.file_path) as irb:
            width, height = irb.image_width(), irb.image_height()
            if not (0 <= args.x < width and 0 <= args.y < height):
                raise IndexError(
                    f"Pixel coordinates ({args.x}, {args.y}) out of image bounds {width}x{height}"
                )
            print(f"{convert_kelvin(irb.temperature(args.x, args.y), args.unit):g}")
        return

    image = IrbReader(args.format).read_file(args.file_path)
    print(f"{image[args.x, args.y]:g}")


def convert_kelvin(value, unit):
    if unit == "K":
        return value
    celsius = UnitConversion.k2c(value)
    return UnitConversion.c2f(celsius) if unit == "F" else celsius


def print_stats(image):
    """Print value statistics."""
    value_min, value_max = image.value_range()

    print("\n=== VALUE STATISTICS ===")
    print(f"Minimum: {value_min:.2f}")
    print(f"Maximum: {value_max:.2f}")
    print(f"Average: {image.mean():.2f}")
    print(f"Range: {value_max - value_min:.2f}")


def export_to_csv(image, output_path):
    """Export pixel values to CSV format."""
    data = image.values

    with open(output_path, 'w', newline='') as csvfile:
        writer = csv.writer(csvfile)

        # Header
        writer.writerow(['X', 'Y', 'Value'])

        for y in range(image.height):
            for x in range(image.width):
                writer.writerow([x, y, float(data[y, x])])


if __name__ == "__main__":
    main()
