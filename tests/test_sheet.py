import asyncio
import io
import threading
import time

import pytest
from pathlib import Path
from unittest.mock import patch

from PIL import Image
from pypdf import PdfReader

from src.options import SheetOptions
from src.sheet import create_sheet, start_sheet
from src.transcode import TranscodeError


def _create_test_images(images_dir: Path, count: int) -> None:
    """Create distinct test images."""
    images_dir.mkdir(parents=True, exist_ok=True)
    for i in range(1, count + 1):
        img = Image.new("RGB", (120, 160), color=(i * 30 % 256, 100, 255 - i * 20 % 256))
        img.save(images_dir / f"photo_{i:03d}.jpg", "JPEG")
        img.close()


@pytest.mark.asyncio
async def test_create_sheet_single_page(tmp_path):
    """7 images plus 2 non-image files give a one-page A4 PDF with 7 images."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=5)
    for i in (6, 7):
        Image.new("RGB", (80, 80), color=(i * 10, i * 5, 0)).save(images_dir / f"photo_{i:03d}.png")
    (images_dir / "notes.txt").write_text("not an image")
    (images_dir / "list.csv").write_text("a,b")

    output_pdf = tmp_path / "sheet.pdf"
    result = await create_sheet(SheetOptions(
        output=str(output_pdf),
        target=str(images_dir),
        paper="A4",
        dimensions=(79, 108),
        margin=10,
    ))

    assert result == {"output": str(output_pdf), "images": 7, "pages": 1}
    reader = PdfReader(str(output_pdf))
    assert len(reader.pages) == 1
    page = reader.pages[0]
    assert float(page.mediabox.width) == pytest.approx(595.28)
    assert float(page.mediabox.height) == pytest.approx(841.89)
    assert len(page.images) == 7


@pytest.mark.asyncio
async def test_create_sheet_positions(tmp_path):
    """Images are handed to the writer at the grid offsets."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=7)

    placed = []

    def record(self, data, x, y, width, height):
        placed.append((x, y, width, height))

    with patch("src.sheet.PdfSheetWriter.place_image", record):
        await create_sheet(SheetOptions(
            output=io.BytesIO(),
            target=str(images_dir),
            paper="A4",
            dimensions="3x4",
        ))

    assert len(placed) == 7
    assert placed[0] == (10, 10, 79, 108)
    assert placed[5] == (5 * 79 + 60, 10, 79, 108)
    assert placed[-1] == (10, 108 + 20, 79, 108)


@pytest.mark.asyncio
async def test_create_sheet_multiple_pages_to_stream(tmp_path):
    """Images overflow onto further pages; a stream sink receives the PDF."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=25)

    sink = io.BytesIO()
    result = await create_sheet(SheetOptions(
        output=sink,
        target=str(images_dir),
        paper="A5",
        dimensions="4x6",
        margin=10,
    ))

    # A5 with 4x6 cells holds 3 x 3
    assert result["images"] == 25
    assert result["pages"] == 3
    reader = PdfReader(io.BytesIO(sink.getvalue()))
    assert len(reader.pages) == 3


@pytest.mark.asyncio
async def test_create_sheet_corrupt_image(tmp_path):
    """One corrupt image fails the run and the PDF is never written."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=5)
    (images_dir / "photo_003b.jpg").write_bytes(b"\xff\xd8 garbage")

    output_pdf = tmp_path / "sheet.pdf"
    with patch("src.sheet.PdfSheetWriter.close") as mock_close:
        with pytest.raises(TranscodeError, match="photo_003b.jpg"):
            await create_sheet(SheetOptions(
                output=str(output_pdf),
                target=str(images_dir),
                dimensions="3x4",
            ))

    mock_close.assert_not_called()
    assert not output_pdf.exists()


@pytest.mark.asyncio
async def test_create_sheet_empty_dir(tmp_path):
    """A directory with no images raises FileNotFoundError."""
    images_dir = tmp_path / "photos"
    images_dir.mkdir()
    (images_dir / "notes.txt").write_text("nothing here")

    with pytest.raises(FileNotFoundError):
        await create_sheet(SheetOptions(output=str(tmp_path / "out.pdf"), target=str(images_dir)))


@pytest.mark.asyncio
async def test_create_sheet_missing_dir(tmp_path):
    """A non-existent directory raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        await create_sheet(SheetOptions(
            output=str(tmp_path / "out.pdf"),
            target=str(tmp_path / "nonexistent"),
        ))


@pytest.mark.asyncio
async def test_create_sheet_invalid_options_before_io(tmp_path):
    """Malformed sizes are rejected before the directory is read."""
    with patch("src.sheet.list_images") as mock_list:
        with pytest.raises(ValueError):
            await create_sheet(SheetOptions(
                output=str(tmp_path / "out.pdf"),
                target=str(tmp_path),
                paper="200",
            ))
    mock_list.assert_not_called()


@pytest.mark.asyncio
async def test_create_sheet_timeout_closes_stream(tmp_path):
    """Exceeding the timeout fails the run and closes the output stream."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=3)

    async def stalled(paths, width, height, **kwargs):
        await asyncio.sleep(10)
        yield []

    sink = io.BytesIO()
    with patch("src.sheet.resize_batches", stalled):
        with pytest.raises(TimeoutError, match="in time"):
            await create_sheet(SheetOptions(
                output=sink,
                target=str(images_dir),
                timeout_ms=50,
            ))

    assert sink.closed


@pytest.mark.asyncio
async def test_start_sheet_returns_task(tmp_path):
    """start_sheet schedules the run and returns before it completes."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=2)

    task = start_sheet(SheetOptions(output=str(tmp_path / "out.pdf"), target=str(images_dir)))

    assert isinstance(task, asyncio.Task)
    assert not task.done()
    result = await task
    assert result["images"] == 2
    assert (tmp_path / "out.pdf").exists()


@pytest.mark.asyncio
async def test_create_sheet_places_while_resizing(tmp_path):
    """The first batch is laid out while the second is still resizing."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=15)

    release = asyncio.Event()
    placed = []

    async def gated(image_path, width, height, executor=None):
        if int(image_path.stem.split("_")[1]) > 10:
            await release.wait()
        return image_path.name.encode()

    def record(self, data, x, y, width, height):
        placed.append(data)

    with patch("src.sheet.transcode_image_async", gated), \
            patch("src.sheet.PdfSheetWriter.place_image", record):
        task = asyncio.create_task(create_sheet(SheetOptions(
            output=io.BytesIO(),
            target=str(images_dir),
        )))
        for _ in range(200):
            if len(placed) == 10:
                break
            await asyncio.sleep(0.01)

        assert len(placed) == 10
        assert not task.done()

        release.set()
        result = await task

    assert result["images"] == 15
    assert placed == [f"photo_{i:03d}.jpg".encode() for i in range(1, 16)]


def test_create_sheet_timeout_abandons_running_resizes(tmp_path):
    """A timed-out run returns without waiting for resizes still in progress."""
    images_dir = tmp_path / "photos"
    _create_test_images(images_dir, count=3)
    release = threading.Event()

    def blocking(image_path, width, height):
        release.wait(timeout=10)
        return b""

    started = time.monotonic()
    try:
        with patch("src.transcode.transcode_image", blocking):
            with pytest.raises(TimeoutError, match="in time"):
                asyncio.run(create_sheet(SheetOptions(
                    output=io.BytesIO(),
                    target=str(images_dir),
                    timeout_ms=100,
                )))
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 5
