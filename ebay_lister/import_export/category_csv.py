"""
eBay Category CSV Import
========================
Reads the category exports eBay offers for download and flattens them into
full category paths such as "Cameras & Photo > Lenses & Filters > Lenses".

Two export layouts are recognized:

- L1..L6 columns: one category per row, one hierarchy level per column.
- "Category Name" tree: one category per row, indented by leading columns
  that are empty or hold a "-" placeholder.

Files in any other layout contribute no categories.
"""

import csv
import logging
from typing import List, Optional, Sequence, Union

from ..exceptions import InputError

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " > "
MAX_DEPTH = 6
MAX_CATEGORY_FILES = 2

LAYOUT_LEVEL_COLUMNS = "level_columns"
LAYOUT_CATEGORY_TREE = "category_tree"

LEVEL_HEADER = ["L1", "L2", "L3"]
TREE_HEADER = "Category Name"
DEPTH_PLACEHOLDER = "-"

CategoryFile = Union[str, bytes]


def _decode(content: CategoryFile) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8-sig", errors="replace")
    return content.lstrip("\ufeff")


def _split_row(line: str) -> List[str]:
    """Split one CSV line into unquoted, trimmed cells"""
    row = next(csv.reader([line]), [])
    return [cell.replace('"', "").strip() for cell in row]


def _is_level_header(cells: List[str]) -> bool:
    return cells[:len(LEVEL_HEADER)] == LEVEL_HEADER


def detect_layout(text: str) -> Optional[str]:
    """Return which export layout the text is in, or None if unrecognized"""
    lines = text.splitlines()
    if any(_is_level_header(_split_row(line)) for line in lines if line.strip()):
        return LAYOUT_LEVEL_COLUMNS
    if any(_split_row(line)[:1] == [TREE_HEADER] for line in lines if line.strip()):
        return LAYOUT_CATEGORY_TREE
    return None


def parse_level_columns(text: str) -> List[str]:
    """
    Parse the L1..L6 layout.

    Everything up to and including the L1,L2,L3 header row is skipped. Each
    remaining row's first six non-empty cells form the path.
    """
    lines = text.splitlines()
    start = 0
    for index, line in enumerate(lines):
        if line.strip() and _is_level_header(_split_row(line)):
            start = index + 1
            break

    categories = []
    for line in lines[start:]:
        if not line.strip():
            continue
        cells = _split_row(line)
        path = PATH_SEPARATOR.join(cell for cell in cells[:MAX_DEPTH] if cell)
        if path:
            categories.append(path)
    return categories


def parse_category_tree(text: str) -> List[str]:
    """
    Parse the indented "Category Name" layout.

    The column holding a row's name is its depth. A running path is cut
    back to that depth before the name is appended, so a shallower row
    closes every deeper branch opened before it. Each row yields the full
    path down to itself.
    """
    lines = text.splitlines()
    header_index = next(
        (i for i, line in enumerate(lines) if _split_row(line)[:1] == [TREE_HEADER]),
        None,
    )
    if header_index is None:
        return []

    categories = []
    current_path: List[str] = []
    for line in lines[header_index + 1:]:
        if not line.strip() or line.startswith(","):
            continue

        cells = _split_row(line)
        depth = next(
            (i for i, cell in enumerate(cells[:MAX_DEPTH]) if cell and cell != DEPTH_PLACEHOLDER),
            None,
        )
        if depth is None:
            continue

        current_path = current_path[:depth]
        current_path.append(cells[depth])
        categories.append(PATH_SEPARATOR.join(current_path))
    return categories


def parse_ebay_categories(contents: Sequence[CategoryFile]) -> List[str]:
    """
    Flatten category exports into unique category paths.

    Each file is parsed on its own according to its detected layout. The
    result is de-duplicated, keeping the first occurrence of each path.
    """
    all_categories: List[str] = []
    for index, content in enumerate(contents):
        text = _decode(content)
        layout = detect_layout(text)
        if layout == LAYOUT_LEVEL_COLUMNS:
            found = parse_level_columns(text)
        elif layout == LAYOUT_CATEGORY_TREE:
            found = parse_category_tree(text)
        else:
            logger.warning("Category file %d is not a recognized eBay export, skipping", index + 1)
            continue
        logger.debug("Category file %d (%s): %d paths", index + 1, layout, len(found))
        all_categories.extend(found)

    return list(dict.fromkeys(all_categories))


def load_category_vocabulary(contents: Sequence[CategoryFile]) -> List[str]:
    """
    Build the category vocabulary from one upload batch.

    Raises:
        InputError: if no files or more than two files are supplied
    """
    if len(contents) == 0 or len(contents) > MAX_CATEGORY_FILES:
        raise InputError("Please upload 1 or 2 eBay category CSV files.")
    categories = parse_ebay_categories(contents)
    logger.info("Loaded %d categories from %d file(s)", len(categories), len(contents))
    return categories
