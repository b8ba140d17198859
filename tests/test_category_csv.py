import pytest

from ebay_lister.exceptions import InputError
from ebay_lister.import_export.category_csv import (
    LAYOUT_CATEGORY_TREE,
    LAYOUT_LEVEL_COLUMNS,
    detect_layout,
    load_category_vocabulary,
    parse_ebay_categories,
)

TREE_CSV = (
    "eBay US Category Tree\n"
    '"Category Name","","","","",""\n'
    '"Electronics","","","","",""\n'
    '"-","Cameras","","","",""\n'
    '"-","-","Lenses","","",""\n'
    '"-","Phones","","","",""\n'
    '"Appliances","","","","",""\n'
    ',"orphan row",,,,\n'
    "\n"
)


def test_level_columns_layout():
    assert parse_ebay_categories(["L1,L2,L3\nShoes,Running,Trail\n"]) == ["Shoes > Running > Trail"]


def test_level_columns_quoted_with_empty_levels():
    text = (
        '"L1","L2","L3","L4","L5","L6"\n'
        '"Home & Garden","Kitchen","","","",""\n'
        '\n'
        '"Toys","Games","Board","Strategy","Vintage","Pre-1970","extra"\n'
    )
    assert parse_ebay_categories([text]) == [
        "Home & Garden > Kitchen",
        "Toys > Games > Board > Strategy > Vintage > Pre-1970",
    ]


def test_category_tree_depth_changes():
    text = '"Category Name"\nElectronics\n-,Cameras\nAppliances\n'
    assert parse_ebay_categories([text]) == ["Electronics", "Electronics > Cameras", "Appliances"]


def test_category_tree_truncates_deeper_branches():
    assert parse_ebay_categories([TREE_CSV]) == [
        "Electronics",
        "Electronics > Cameras",
        "Electronics > Cameras > Lenses",
        "Electronics > Phones",
        "Appliances",
    ]


def test_detect_layout():
    assert detect_layout("L1,L2,L3\n") == LAYOUT_LEVEL_COLUMNS
    assert detect_layout(TREE_CSV) == LAYOUT_CATEGORY_TREE
    assert detect_layout("sku,price\n1,2\n") is None


def test_unrecognized_file_contributes_nothing():
    assert parse_ebay_categories(["sku,price\nA1,9.99\n"]) == []
    assert parse_ebay_categories(["sku,price\n", "L1,L2,L3\nShoes,Running,Trail\n"]) == [
        "Shoes > Running > Trail"
    ]


def test_two_files_are_deduplicated():
    first = "L1,L2,L3\nElectronics,Cameras\nElectronics\n"
    second = '"Category Name"\nElectronics\n-,Cameras\n'
    categories = parse_ebay_categories([first, second])
    assert sorted(categories) == ["Electronics", "Electronics > Cameras"]


def test_bytes_with_bom_are_decoded():
    content = "\ufeffL1,L2,L3\nShoes,Running,Trail\n".encode("utf-8")
    assert parse_ebay_categories([content]) == ["Shoes > Running > Trail"]


@pytest.mark.parametrize("count", [0, 3])
def test_file_count_policy(count):
    with pytest.raises(InputError):
        load_category_vocabulary(["L1,L2,L3\nShoes\n"] * count)


def test_load_vocabulary_one_or_two_files():
    assert load_category_vocabulary(["L1,L2,L3\nShoes,Running\n"]) == ["Shoes > Running"]
    assert len(load_category_vocabulary(["L1,L2,L3\nShoes\n", "L1,L2,L3\nHats\n"])) == 2
