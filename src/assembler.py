"""Place resized images onto PDF pages in arrival order."""
import asyncio

from src.layout import GridLayout

# End-of-images marker on the batch queue
DONE = None


class PageAssembler:
    """Drive the grid layout and the document writer, one image at a time.

    All cursor and document mutation happens here, on a single task.
    """

    def __init__(self, writer, layout: GridLayout):
        self.writer = writer
        self.layout = layout
        self.placed = 0

    @property
    def pages(self) -> int:
        return self.layout.page + 1

    def add_batch(self, images: list[bytes]) -> None:
        for image in images:
            placement = self.layout.place()
            if placement.new_page:
                self.writer.new_page()
            self.writer.place_image(
                image,
                placement.x,
                placement.y,
                placement.width,
                placement.height,
            )
            self.placed += 1

    def finish(self) -> None:
        self.writer.close()

    async def consume(self, queue: asyncio.Queue) -> None:
        """Place batches from the queue until DONE, then finalize the document."""
        while True:
            batch = await queue.get()
            if batch is DONE:
                self.finish()
                return
            self.add_batch(batch)
