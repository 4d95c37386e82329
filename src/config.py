import os
from dotenv import load_dotenv

load_dotenv()

# Paper sizes in points (width, height)
PAPERS = {
    "A3": (841.89, 1190.55),
    "A4": (595.28, 841.89),
    "A5": (419.53, 595.28),
    "B5": (498.9, 708.66),
    "EXECUTIVE": (521.86, 756.0),
    "FOLIO": (612.0, 936.0),
    "LEGAL": (612.0, 1008.0),
    "LETTER": (612.0, 792.0),
    "TABLOID": (792.0, 1224.0),
}

# Photo cell sizes in points (width, height)
DIMENSIONS = {
    "2x3": (61, 79),
    "3x4": (79, 108),
    "4x6": (108, 158),
}

ALLOWED_EXTENSIONS = ("jpg", "jpeg", "png")

# "include" keeps ALLOWED_EXTENSIONS, "exclude" keeps everything else
EXTENSION_FILTER = os.getenv("SHEET_EXTENSION_FILTER", "include")
EXTENSION_FILTER_MODES = ("include", "exclude")

# Run defaults
DEFAULT_OUTPUT = "./file.pdf"
DEFAULT_TARGET = "./"
DEFAULT_PAPER = "A4"
DEFAULT_DIMENSIONS = "3x4"
DEFAULT_MARGIN = 10
DEFAULT_TIMEOUT_MS = 300_000

# Resize settings
BATCH_SIZE = 10
RESIZE_CONCURRENCY = int(os.getenv("SHEET_RESIZE_CONCURRENCY", "10"))
if RESIZE_CONCURRENCY < 1:
    raise ValueError(f"SHEET_RESIZE_CONCURRENCY must be at least 1, got {RESIZE_CONCURRENCY}")
IMAGE_FORMAT = "JPEG"
JPEG_QUALITY = 100  # JPEG quality (1-100)

# Batches buffered between the resize stage and the page assembler
QUEUE_SIZE = 2
