"""Build a photo sheet PDF from a directory of images.

Runs the resize pipeline and the page assembler side by side, connected by a
small bounded queue, so pages are laid out while later images are still
being resized.
"""
import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from pathlib import Path

from src.assembler import DONE, PageAssembler
from src.config import QUEUE_SIZE, RESIZE_CONCURRENCY
from src.files import list_images
from src.layout import GridLayout, grid_capacity
from src.options import SheetOptions, validate_options
from src.resize import resize_batches
from src.transcode import transcode_image_async
from src.writer import PdfSheetWriter


async def _produce(queue: asyncio.Queue, paths: list[Path], cell_size, executor: Executor) -> None:
    """Feed resized batches into the queue, then the DONE marker."""
    semaphore = asyncio.Semaphore(RESIZE_CONCURRENCY)
    transcoder = partial(transcode_image_async, executor=executor)
    async for batch in resize_batches(
        paths, cell_size[0], cell_size[1], semaphore=semaphore, transcoder=transcoder
    ):
        await queue.put(batch)
    await queue.put(DONE)


async def _run(assembler: PageAssembler, paths: list[Path], cell_size, executor: Executor) -> None:
    queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)
    producer = asyncio.create_task(_produce(queue, paths, cell_size, executor))
    consumer = asyncio.create_task(assembler.consume(queue))
    tasks = {producer, consumer}

    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in done:
            task.result()
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def create_sheet(options: SheetOptions) -> dict:
    """Resize all images in options.target and lay them out into one PDF.

    Returns:
        Dict with output, images (count placed) and pages.

    Raises:
        ValueError: If the options are invalid.
        FileNotFoundError: If the directory doesn't exist or has no images.
        TranscodeError: If any image fails to resize. The PDF is not finalized.
        TimeoutError: If the run exceeds options.timeout_ms.
    """
    page_size, cell_size = validate_options(options)

    paths = list_images(options.target, options.extension_filter)
    if not paths:
        raise FileNotFoundError(f"No images found in {options.target}")

    columns, rows = grid_capacity(page_size, cell_size, options.margin)
    print(f"[sheet] {len(paths)} images, {columns}x{rows} per page "
          f"({cell_size[0]:g}x{cell_size[1]:g} on {page_size[0]:g}x{page_size[1]:g})")

    writer = PdfSheetWriter(options.output, page_size)
    assembler = PageAssembler(writer, GridLayout(page_size, cell_size, options.margin))

    # Per-run pool so a timed-out run doesn't hold up the loop's default executor
    executor = ThreadPoolExecutor(max_workers=RESIZE_CONCURRENCY, thread_name_prefix="resize")
    try:
        await asyncio.wait_for(
            _run(assembler, paths, cell_size, executor),
            timeout=options.timeout_ms / 1000,
        )
    except asyncio.TimeoutError:
        if hasattr(options.output, "close"):
            options.output.close()
        raise TimeoutError(
            "Failed to create your file in time, try increasing the timeout"
        ) from None
    finally:
        # Resizes already running are abandoned; queued ones are dropped
        executor.shutdown(wait=False, cancel_futures=True)

    output = options.output if isinstance(options.output, (str, Path)) else "<stream>"
    print(f"[sheet] Built {output}: {assembler.placed} images on {assembler.pages} page(s)")
    return {
        "output": str(output),
        "images": assembler.placed,
        "pages": assembler.pages,
    }


def start_sheet(options: SheetOptions) -> asyncio.Task:
    """Schedule create_sheet on the running loop and return immediately."""
    return asyncio.create_task(create_sheet(options))
