"""Run configuration for a single sheet.

All parsing and validation (comma pairs, preset lookup, fit checks) happens
here, before any file is opened or any image is read.
"""
import math
from dataclasses import dataclass
from typing import BinaryIO

from src.config import (
    DEFAULT_DIMENSIONS,
    DEFAULT_MARGIN,
    DEFAULT_PAPER,
    DEFAULT_TIMEOUT_MS,
    DIMENSIONS,
    EXTENSION_FILTER,
    EXTENSION_FILTER_MODES,
    PAPERS,
)

Size = tuple[float, float]


@dataclass
class SheetOptions:
    output: str | BinaryIO
    target: str
    paper: str | Size = DEFAULT_PAPER
    dimensions: str | Size = DEFAULT_DIMENSIONS
    margin: int = DEFAULT_MARGIN
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    extension_filter: str = EXTENSION_FILTER


def parse_pair(text: str, what: str = "Custom value") -> Size:
    """Parse a "width,height" string into a pair of positive floats."""
    parts = text.split(",")
    if len(parts) != 2:
        raise ValueError(f"{what} must be in comma-separated format. Example: 200,300")
    try:
        width, height = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValueError(f"{what} must contain two numbers, got {text!r}") from None
    return _check_positive((width, height), what)


def _check_positive(pair, what: str) -> Size:
    if len(pair) != 2:
        raise ValueError(f"{what} must have exactly a width and a height")
    width, height = float(pair[0]), float(pair[1])
    if not (math.isfinite(width) and math.isfinite(height)):
        raise ValueError(f"{what} must be finite numbers, got {width}x{height}")
    if width <= 0 or height <= 0:
        raise ValueError(f"{what} must be positive, got {width}x{height}")
    return width, height


def resolve_paper(value: str | Size) -> Size:
    """Resolve a paper preset name, "w,h" string or explicit pair to points."""
    if isinstance(value, str):
        if "," in value:
            return parse_pair(value, "Custom paper size")
        key = value.upper()
        if key not in PAPERS:
            raise ValueError(
                f"Unknown paper size: {value}. Available: {', '.join(PAPERS)}"
            )
        return PAPERS[key]
    return _check_positive(value, "Paper size")


def resolve_dimensions(value: str | Size) -> Size:
    """Resolve an image dimension preset, "w,h" string or explicit pair to points."""
    if isinstance(value, str):
        if "," in value:
            return parse_pair(value, "Custom image dimensions")
        if value not in DIMENSIONS:
            raise ValueError(
                f"Unknown image dimensions: {value}. Available: {', '.join(DIMENSIONS)}"
            )
        return DIMENSIONS[value]
    return _check_positive(value, "Image dimensions")


def validate_options(options: SheetOptions) -> tuple[Size, Size]:
    """Validate options and return resolved (page_size, cell_size).

    Raises:
        ValueError: On malformed or inconsistent values.
    """
    page_size = resolve_paper(options.paper)
    cell_size = resolve_dimensions(options.dimensions)

    if options.margin < 0:
        raise ValueError(f"Margins must not be negative, got {options.margin}")
    if options.timeout_ms <= 0:
        raise ValueError(f"Timeout must be positive, got {options.timeout_ms}")
    if options.extension_filter not in EXTENSION_FILTER_MODES:
        raise ValueError(
            f"Unknown extension filter: {options.extension_filter}. "
            f"Available: {', '.join(EXTENSION_FILTER_MODES)}"
        )

    # A single cell must pass both overflow checks at cursor (0, 0)
    if cell_size[0] + options.margin >= page_size[0] or cell_size[1] + options.margin >= page_size[1]:
        raise ValueError(
            f"Image dimensions {cell_size[0]:g}x{cell_size[1]:g} with margins "
            f"{options.margin} do not fit on paper {page_size[0]:g}x{page_size[1]:g}"
        )

    return page_size, cell_size
