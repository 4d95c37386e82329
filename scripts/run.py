"""
CLI entry point for building photo sheet PDFs.

Usage:
    python -m scripts.run [-o OUTPUT] [-t TARGET] [-p PAPER] [-d DIMENSIONS]
                          [-m MARGINS] [--timeout MS] [--filter include|exclude]

Any value not given as a flag is asked for interactively.
PAPER and DIMENSIONS accept a preset name or "width,height" in points.
"""
import argparse
import asyncio

from src.config import (
    DEFAULT_MARGIN,
    DEFAULT_OUTPUT,
    DEFAULT_TARGET,
    DEFAULT_TIMEOUT_MS,
    DIMENSIONS,
    EXTENSION_FILTER,
    EXTENSION_FILTER_MODES,
    PAPERS,
)
from src.options import SheetOptions, parse_pair
from src.sheet import create_sheet

CUSTOM = "custom"


def ask(message: str, default: str = "") -> str:
    """Prompt for a value, returning the default on empty input."""
    suffix = f" ({default})" if default else ""
    answer = input(f"? {message}{suffix}: ").strip()
    return answer or default


def choose_size(message: str, presets: dict, label: str) -> str | tuple[float, float]:
    """Prompt for a preset from the table or a custom "w,h" pair."""
    names = list(presets)
    print(f"? {message}")
    for i, name in enumerate(names, start=1):
        width, height = presets[name]
        print(f"  {i}) {name} ({width}x{height})")
    print(f"  {len(names) + 1}) Use custom value")

    answer = ask("Choice", names[0])
    if answer.isdigit() and 1 <= int(answer) <= len(names):
        return names[int(answer) - 1]
    if (answer.isdigit() and int(answer) == len(names) + 1) or answer.lower() == CUSTOM:
        custom = ask("Please specify width and height in comma-separated format. Example: 200,300")
        return parse_pair(custom, label)
    return answer


def collect_options(args) -> SheetOptions:
    """Fill in missing values interactively and build the run options."""
    output = args.output or ask("Please specify path to the pdf file output", DEFAULT_OUTPUT)
    target = args.target or ask("Please specify path to directory containing the images", DEFAULT_TARGET)
    paper = args.paper or choose_size(
        "Please specify paper size using predefined value below or use custom value",
        PAPERS,
        "Custom paper size",
    )
    dimensions = args.dimensions or choose_size(
        "Please specify resized images dimensions target using predefined value below or use custom value",
        DIMENSIONS,
        "Custom image dimensions",
    )
    if args.margins is None:
        margins = ask("Please specify images margins", str(DEFAULT_MARGIN))
        try:
            args.margins = int(margins)
        except ValueError:
            raise ValueError(f"Margins must be a whole number, got {margins!r}") from None

    return SheetOptions(
        output=output,
        target=target,
        paper=paper,
        dimensions=dimensions,
        margin=args.margins,
        timeout_ms=args.timeout,
        extension_filter=args.filter,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resize a folder of images and merge them into a single PDF sheet"
    )
    parser.add_argument("-o", "--output", type=str, help="Path to the PDF file output")
    parser.add_argument("-t", "--target", type=str, help="Directory containing the images")
    parser.add_argument("-p", "--paper", type=str, help=f"Paper size: {', '.join(PAPERS)} or w,h")
    parser.add_argument("-d", "--dimensions", type=str, help=f"Image size: {', '.join(DIMENSIONS)} or w,h")
    parser.add_argument("-m", "--margins", type=int, default=None, help="Image margins in points")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT_MS, help="Timeout in milliseconds")
    parser.add_argument("--filter", choices=EXTENSION_FILTER_MODES, default=EXTENSION_FILTER,
                        help="Keep files with (include) or without (exclude) an image extension")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        options = collect_options(args)
        print("Creating your file...")
        result = asyncio.run(create_sheet(options))
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled")
        raise SystemExit(1)
    except Exception as e:
        print(f"Error: {e}")
        raise SystemExit(1)

    print(f"Your file has been successfully created at {result['output']} "
          f"({result['images']} images, {result['pages']} page(s))")


if __name__ == "__main__":
    main()
