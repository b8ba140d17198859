"""Category file import"""

from .category_csv import (
    detect_layout,
    load_category_vocabulary,
    parse_category_tree,
    parse_ebay_categories,
    parse_level_columns,
)

__all__ = [
    "detect_layout",
    "load_category_vocabulary",
    "parse_category_tree",
    "parse_ebay_categories",
    "parse_level_columns",
]
