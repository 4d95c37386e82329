"""Find candidate image files in a source directory."""
from pathlib import Path

from src.config import ALLOWED_EXTENSIONS, EXTENSION_FILTER


def has_allowed_extension(path: Path) -> bool:
    """True if the file extension (without dot, any case) is an allowed image type."""
    return path.suffix.lower().lstrip(".") in ALLOWED_EXTENSIONS


def list_images(directory: str | Path, mode: str = EXTENSION_FILTER) -> list[Path]:
    """List files directly inside a directory, sorted by name.

    Args:
        directory: Source directory.
        mode: "include" keeps files with an allowed extension, "exclude"
            keeps every file without one.

    Returns:
        Sorted list of file paths (subdirectories are skipped).

    Raises:
        FileNotFoundError: If the directory doesn't exist.
        NotADirectoryError: If the path is not a directory.
    """
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    keep_allowed = mode == "include"
    return sorted(
        (p for p in directory.iterdir()
         if p.is_file() and has_allowed_extension(p) == keep_allowed),
        key=lambda p: p.name,
    )
