import dataclasses

import pytest

from tocspotter.item import Item, ItemType


def test_with_data_addition_returns_tagged_copy():
    item = Item(page=2, data={"str": "Chapter 1", "height": 10})

    tagged = item.with_data_addition({"types": [ItemType.TOC]})

    assert tagged is not item
    assert tagged.uuid == item.uuid
    assert tagged.types == ("TOC",)
    assert tagged.has_type(ItemType.TOC)
    assert item.types == ()
    assert "types" not in item.data


def test_with_data_addition_extends_existing_types():
    item = Item(page=1, data={"types": ("HEADLINE",)})

    tagged = item.with_data_addition({"types": [ItemType.TOC]}).with_data_addition({"types": [ItemType.TOC]})

    assert tagged.types == ("HEADLINE", "TOC")


def test_with_data_addition_overwrites_other_columns():
    item = Item(page=1, data={"str": "old", "x": 1})
    assert item.with_data_addition({"str": "new"}).data == {"str": "new", "x": 1}


def test_items_are_frozen():
    item = Item(page=1, data={})
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.page = 2  # type: ignore[misc]


def test_missing_or_odd_columns_read_as_empty():
    item = Item(page=1, data={"str": None, "height": "tall"})
    assert item.text == ""
    assert item.height is None
    assert item.line is None


def test_single_string_type_is_one_tag():
    item = Item(page=1, data={"types": "HEADLINE"})

    assert item.types == ("HEADLINE",)
    assert item.with_data_addition({"types": [ItemType.TOC]}).types == ("HEADLINE", "TOC")
