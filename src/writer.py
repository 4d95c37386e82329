"""PDF output for photo sheets, backed by reportlab."""
import io
from pathlib import Path
from typing import BinaryIO

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas


class PdfSheetWriter:
    """Write images onto fixed-size PDF pages.

    A first page is open as soon as the writer is created. Coordinates passed
    to place_image() are measured from the top-left corner of the page.

    reportlab keeps every page and embedded JPEG in memory; nothing reaches the
    sink until close(), which writes the whole document in one go. A run that
    fails or times out before close() leaves the sink untouched.
    """

    def __init__(self, sink: str | Path | BinaryIO, page_size):
        if isinstance(sink, Path):
            sink = str(sink)
        self.page_width, self.page_height = page_size
        self._canvas = canvas.Canvas(sink, pagesize=(self.page_width, self.page_height))
        self.page_count = 1
        self.closed = False

    def new_page(self) -> None:
        self._canvas.showPage()
        self.page_count += 1

    def place_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        """Draw an encoded image into the rectangle at (x, y) from the top-left."""
        # PDF origin is bottom-left
        bottom = self.page_height - y - height
        self._canvas.drawImage(ImageReader(io.BytesIO(data)), x, bottom, width=width, height=height)

    def close(self) -> None:
        """Finish the last page and write the document to the sink."""
        if self.closed:
            return
        self._canvas.save()
        self.closed = True
