import json
from types import SimpleNamespace

import pytest

from tocspotter.item import Item, ItemType
from tocspotter.item_io import ItemLoadError, items_from_json, items_from_page, items_from_pdf, items_to_json


class FakePage:
    def __init__(self, words):
        self.words = words

    def extract_words(self):
        return list(self.words)


def _word(text, x0, top, height=10.0):
    return {"text": text, "x0": x0, "x1": x0 + 30, "top": top, "bottom": top + height}


def test_items_to_json_and_back_keep_uuid_and_types():
    item = Item(page=2, data={"x": 1.0, "y": 2.0, "str": "Intro 1", "line": 1}).with_data_addition({"types": [ItemType.TOC]})

    payload = json.loads(json.dumps(items_to_json([item])))
    assert payload == [{"uuid": item.uuid, "page": 2, "data": {"x": 1.0, "y": 2.0, "str": "Intro 1", "line": 1, "types": ["TOC"]}}]

    loaded = items_from_json(payload)
    assert loaded == [item]


def test_items_from_json_accepts_wrapped_text_and_creates_uuids():
    items = items_from_json('{"items": [{"page": 1, "data": {"str": "a"}}, {"page": 1, "data": {"str": "b"}}]}')
    assert [item.text for item in items] == ["a", "b"]
    assert items[0].uuid != items[1].uuid


@pytest.mark.parametrize(
    "payload",
    ["not json", {"items": "nope"}, [{"page": 1}], [{"page": "1", "data": {}}], [{"page": True, "data": {}}], 7, [{"page": 1, "data": {"types": "TOC"}}]],
)
def test_items_from_json_rejects_malformed_payloads(payload):
    with pytest.raises(ItemLoadError):
        items_from_json(payload)


def test_items_from_page_groups_words_into_lines():
    page = FakePage([_word("12", 400, 101), _word("Chapter", 50, 100), _word("One", 90, 102), _word("Preface", 50, 130, height=14.0)])

    items = items_from_page(page, 3)

    assert [(item.page, item.line, item.text) for item in items] == [(3, 1, "Chapter "), (3, 1, "One "), (3, 1, "12"), (3, 2, "Preface")]
    assert items[0].data["x"] == 50
    assert items[0].data["y"] == 100
    assert items[3].height == 14.0


def test_items_from_pdf_numbers_pages_from_one():
    pdf = SimpleNamespace(pages=[FakePage([_word("Title", 50, 100)]), FakePage([]), FakePage([_word("Body", 50, 100)])])

    items = items_from_pdf(pdf)

    assert [(item.page, item.text) for item in items] == [(1, "Title"), (3, "Body")]
