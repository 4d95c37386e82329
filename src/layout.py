"""Grid layout for fixed-size image cells.

Cells flow left to right, top to bottom. Before each cell is placed:

1. If the cell at the current column would overflow the page width, the
   cursor wraps to column 0 of the next row.
2. If the (possibly new) row would overflow the page height, a new page is
   started and the cursor resets to (0, 0).

The overflow checks use ``>=``, so a row or column that would end exactly on
the page edge is pushed to the next row/page. Placement output must stay
identical to previously generated sheets; do not "optimise" the arithmetic.

Offsets are measured from the top-left corner of the page.
"""
from dataclasses import dataclass


@dataclass
class Cursor:
    column: int = 0
    row: int = 0


@dataclass(frozen=True)
class Placement:
    page: int
    column: int
    row: int
    x: float
    y: float
    width: float
    height: float
    new_page: bool = False


def _extent(index: int, cell: float, margin: float) -> float:
    """Far edge of cell `index` plus the margin convention of the overflow check."""
    return (index + 1) * cell + (margin if index == 0 else (index + 1) * margin)


def column_overflows(column: int, cell_width: float, margin: float, page_width: float) -> bool:
    return _extent(column, cell_width, margin) >= page_width


def row_overflows(row: int, cell_height: float, margin: float, page_height: float) -> bool:
    return _extent(row, cell_height, margin) >= page_height


def cell_offset(index: int, cell: float, margin: float) -> float:
    """Offset of the near edge of cell `index` along one axis."""
    if index == 0:
        return margin
    return index * cell + (index + 1) * margin


class GridLayout:
    """Stateful cursor over a sequence of equally sized cells."""

    def __init__(self, page_size, cell_size, margin: float):
        self.page_width, self.page_height = page_size
        self.cell_width, self.cell_height = cell_size
        self.margin = margin
        self.cursor = Cursor()
        self.page = 0

    def place(self) -> Placement:
        """Place the next cell, breaking rows/pages as needed."""
        cursor = self.cursor
        new_page = False

        if column_overflows(cursor.column, self.cell_width, self.margin, self.page_width):
            cursor.column = 0
            cursor.row += 1

        if row_overflows(cursor.row, self.cell_height, self.margin, self.page_height):
            self.page += 1
            cursor.column = 0
            cursor.row = 0
            new_page = True

        placement = Placement(
            page=self.page,
            column=cursor.column,
            row=cursor.row,
            x=cell_offset(cursor.column, self.cell_width, self.margin),
            y=cell_offset(cursor.row, self.cell_height, self.margin),
            width=self.cell_width,
            height=self.cell_height,
            new_page=new_page,
        )
        cursor.column += 1
        return placement


def plan_layout(count: int, page_size, cell_size, margin: float) -> list[Placement]:
    """Placements for `count` cells on a fresh document."""
    layout = GridLayout(page_size, cell_size, margin)
    return [layout.place() for _ in range(count)]


def grid_capacity(page_size, cell_size, margin: float) -> tuple[int, int]:
    """Return (columns, rows) of cells that fit on one page."""
    page_width, page_height = page_size
    cell_width, cell_height = cell_size

    columns = 0
    while not column_overflows(columns, cell_width, margin, page_width):
        columns += 1

    rows = 0
    while not row_overflows(rows, cell_height, margin, page_height):
        rows += 1

    return columns, rows
