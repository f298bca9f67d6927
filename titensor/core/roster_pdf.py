"""Printable roster PDF generator.

Renders a letter-size table of entries in the order given:
- Bold centered title with print date
- Column headers with a rule underneath
- One row per entry, light banding on alternate rows
- New page when the page fills, headers repeated
- Page number footer
"""

import datetime

import fitz  # PyMuPDF

from .models import ROSTER_COLUMNS
from .serializer import clean_field

# --- Page layout constants (letter: 612 x 792 pt) ---
PAGE_W = 612
PAGE_H = 792
LEFT_MARGIN = 36
RIGHT_MARGIN = PAGE_W - 36

# Left x of each roster column, matching ROSTER_COLUMNS order
COL_X = [36, 90, 170, 262, 312, 358, 446, 530]

TITLE_Y = 48
SUBTITLE_Y = 66
HEADERS_Y = 96
ROWS_START_Y = 114
ROWS_BOTTOM_Y = PAGE_H - 48
FOOTER_Y = PAGE_H - 24

TITLE_SIZE = 16
SUBTITLE_SIZE = 9
HEADER_SIZE = 9
ROW_SIZE = 9
FOOTER_SIZE = 7
ROW_HEIGHT = 16

FONT_REGULAR = 'helv'
FONT_BOLD = 'hebo'

BLACK = (0, 0, 0)
GRAY = (0.4, 0.4, 0.4)
BAND = (0.93, 0.93, 0.93)


def generate_roster_pdf(entries, output_path: str, title: str = 'Roster'):
    """Write a roster PDF for ``entries`` to ``output_path``.

    Args:
        entries: Entries already sorted in print order.
        output_path: Where to save the PDF.
        title: Heading printed at the top of every page.
    """
    entries = list(entries)
    rows_per_page = int((ROWS_BOTTOM_Y - ROWS_START_Y) // ROW_HEIGHT)
    printed_on = datetime.date.today().isoformat()

    chunks = [entries[i:i + rows_per_page]
              for i in range(0, len(entries), rows_per_page)] or [[]]

    doc = fitz.open()
    for page_no, chunk in enumerate(chunks, start=1):
        page = doc.new_page(width=PAGE_W, height=PAGE_H)
        _draw_centered(page, TITLE_Y, title, FONT_BOLD, TITLE_SIZE, BLACK)
        _draw_centered(page, SUBTITLE_Y,
                       f'{len(entries)} athletes - printed {printed_on}',
                       FONT_REGULAR, SUBTITLE_SIZE, GRAY)
        _draw_headers(page)

        y = ROWS_START_Y
        for idx, entry in enumerate(chunk):
            if idx % 2 == 1:
                band = fitz.Rect(LEFT_MARGIN, y - ROW_SIZE - 3,
                                 RIGHT_MARGIN, y + 5)
                page.draw_rect(band, color=None, fill=BAND)
            _draw_row(page, y, entry)
            y += ROW_HEIGHT

        _draw_centered(page, FOOTER_Y, f'Page {page_no} of {len(chunks)}',
                       FONT_REGULAR, FOOTER_SIZE, GRAY)

    doc.save(output_path)
    doc.close()


# --- Drawing functions ---

def _draw_centered(page, y, text, fontname, fontsize, color):
    tw = fitz.get_text_length(text, fontname=fontname, fontsize=fontsize)
    page.insert_text(fitz.Point(PAGE_W / 2 - tw / 2, y), text,
                     fontname=fontname, fontsize=fontsize, color=color)


def _draw_headers(page):
    for x, (header, _) in zip(COL_X, ROSTER_COLUMNS):
        page.insert_text(fitz.Point(x, HEADERS_Y), header,
                         fontname=FONT_BOLD, fontsize=HEADER_SIZE, color=BLACK)
    page.draw_line(fitz.Point(LEFT_MARGIN, HEADERS_Y + 5),
                   fitz.Point(RIGHT_MARGIN, HEADERS_Y + 5),
                   color=BLACK, width=0.75)


def _draw_row(page, y, entry):
    for i, (x, (_, attr)) in enumerate(zip(COL_X, ROSTER_COLUMNS)):
        right = COL_X[i + 1] - 4 if i + 1 < len(COL_X) else RIGHT_MARGIN
        text = _fit_text(clean_field(getattr(entry, attr)), right - x)
        page.insert_text(fitz.Point(x, y), text,
                         fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=BLACK)


def _fit_text(text, max_width):
    """Truncate text with a trailing '...' so it fits in max_width points."""
    if fitz.get_text_length(text, fontname=FONT_REGULAR, fontsize=ROW_SIZE) <= max_width:
        return text
    while text and fitz.get_text_length(text + '...', fontname=FONT_REGULAR,
                                        fontsize=ROW_SIZE) > max_width:
        text = text[:-1]
    return text + '...'
