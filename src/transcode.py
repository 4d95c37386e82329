"""Resize a single image into a fixed-size JPEG cell."""
import asyncio
import io
from concurrent.futures import Executor
from pathlib import Path

from PIL import Image, ImageFilter

from src.config import IMAGE_FORMAT, JPEG_QUALITY


class TranscodeError(RuntimeError):
    """An image could not be decoded, resized or encoded."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"Failed to process image {self.path.name}: {reason}")


def transcode_image(image_path: Path, width: float, height: float) -> bytes:
    """Decode, stretch to exactly width x height, sharpen and re-encode as JPEG.

    The aspect ratio of the source is not preserved.

    Raises:
        TranscodeError: If any stage fails.
    """
    size = (max(1, round(width)), max(1, round(height)))
    try:
        with Image.open(image_path) as img:
            resized = img.convert("RGB").resize(size, Image.LANCZOS)
        sharpened = resized.filter(ImageFilter.SHARPEN)
        buf = io.BytesIO()
        sharpened.save(buf, IMAGE_FORMAT, quality=JPEG_QUALITY)
    except Exception as e:
        raise TranscodeError(image_path, str(e)) from e
    return buf.getvalue()


async def transcode_image_async(
    image_path: Path,
    width: float,
    height: float,
    executor: Executor | None = None,
) -> bytes:
    """Run transcode_image in a worker thread (the loop's default pool if no executor)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, transcode_image, image_path, width, height)
