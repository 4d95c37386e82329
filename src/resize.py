"""Async resize pipeline.

Resizes source images with bounded concurrency and hands them on in
fixed-size batches, preserving source order.
"""
import asyncio
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable

from src.config import BATCH_SIZE, RESIZE_CONCURRENCY
from src.transcode import transcode_image_async

Transcoder = Callable[[Path, float, float], Awaitable[bytes]]


def chunk(paths: list[Path], size: int) -> list[list[Path]]:
    """Split paths into consecutive chunks of at most `size`."""
    return [paths[i:i + size] for i in range(0, len(paths), size)]


async def _resize_with_limit(
    semaphore: asyncio.Semaphore,
    transcoder: Transcoder,
    image_path: Path,
    width: float,
    height: float,
) -> bytes:
    """Resize a single image under the shared concurrency limit."""
    async with semaphore:
        return await transcoder(image_path, width, height)


async def _gather_batch(tasks: list[asyncio.Task]) -> list[bytes]:
    """Wait for every task in a batch; on the first failure cancel the rest."""
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def resize_batches(
    paths: list[Path],
    width: float,
    height: float,
    batch_size: int = BATCH_SIZE,
    semaphore: asyncio.Semaphore | None = None,
    transcoder: Transcoder = transcode_image_async,
) -> AsyncIterator[list[bytes]]:
    """Yield resized images in batches of up to `batch_size`.

    Each batch is yielded only once all of its images are done, and batches
    come out in source order. The generator finishing is the end-of-images
    signal. A failed image aborts the whole pipeline: the error propagates
    and no further batches are yielded.

    Args:
        paths: Source images in output order.
        width: Target cell width.
        height: Target cell height.
        batch_size: Maximum images per batch.
        semaphore: Limiter shared by every resize of the run.
        transcoder: Coroutine function (path, width, height) -> encoded bytes.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(RESIZE_CONCURRENCY)

    batches = chunk(list(paths), batch_size)
    for number, batch in enumerate(batches, start=1):
        tasks = [
            asyncio.create_task(
                _resize_with_limit(semaphore, transcoder, image_path, width, height)
            )
            for image_path in batch
        ]
        images = await _gather_batch(tasks)
        print(f"  [resize] batch {number}/{len(batches)} done ({len(images)} images)")
        yield images
