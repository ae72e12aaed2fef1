"""Reading and writing item streams.

Items travel as JSON lists of ``{"uuid", "page", "data"}`` objects. For
convenience a PDF can be turned into items with pdfplumber: words are grouped
into lines by their vertical position, which is enough for TOC detection but
is no layout analysis.
"""

import json
import logging
from collections.abc import Iterable
from typing import Any

from pdfplumber.page import Page
from pdfplumber.pdf import PDF

from tocspotter.item import Item

logger = logging.getLogger(__name__)

# Words whose tops are closer than this (in PDF points) share a line
LINE_MERGE_THRESHOLD = 5


class ItemLoadError(Exception):
    def __init__(self, reason: str, index: int | None = None) -> None:
        where = f"item {index}: " if index is not None else ""
        super().__init__(f"Could not load items ({where}{reason})")


def item_to_json(item: Item) -> dict[str, Any]:
    data = dict(item.data)
    if "types" in data:
        data["types"] = list(item.types)
    return {"uuid": item.uuid, "page": item.page, "data": data}


def items_to_json(items: Iterable[Item]) -> list[dict[str, Any]]:
    return [item_to_json(item) for item in items]


def items_from_json(payload: Any) -> list[Item]:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ItemLoadError(f"invalid JSON: {e}") from e
    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        raise ItemLoadError("expected a list of items")

    items = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict) or not isinstance(raw.get("data"), dict):
            raise ItemLoadError("expected an object with a 'data' object", index)
        page = raw.get("page")
        if isinstance(page, bool) or not isinstance(page, int):
            raise ItemLoadError(f"page must be an integer, got {page!r}", index)
        data = dict(raw["data"])
        if "types" in data:
            types = data["types"]
            if types is not None and not isinstance(types, (list, tuple)):
                raise ItemLoadError(f"types must be a list, got {types!r}", index)
            data["types"] = tuple(types or ())
        items.append(Item(page=page, data=data, uuid=str(raw["uuid"])) if raw.get("uuid") else Item(page=page, data=data))
    return items


def _group_words_into_lines(words: list[dict[str, Any]]) -> list[list[dict[str, Any]]]:
    words = sorted(words, key=lambda w: w["top"])
    lines: list[list[dict[str, Any]]] = []
    if words:
        current_line = [words[0]]
        current_line_y = words[0]["top"]
        for word in words[1:]:
            if abs(word["top"] - current_line_y) < LINE_MERGE_THRESHOLD:
                current_line.append(word)
            else:
                lines.append(current_line)
                current_line = [word]
                current_line_y = word["top"]
        lines.append(current_line)
    return [sorted(line_words, key=lambda w: w["x0"]) for line_words in lines]


def items_from_page(page: Page, page_number: int) -> list[Item]:
    items = []
    for line_number, line_words in enumerate(_group_words_into_lines(page.extract_words()), 1):
        for index, word in enumerate(line_words):
            text = word["text"] if index == len(line_words) - 1 else f"{word['text']} "
            data = {
                "x": word["x0"],
                "y": word["top"],
                "str": text,
                "line": line_number,
                "height": word["bottom"] - word["top"],
            }
            items.append(Item(page=page_number, data=data))
    return items


def items_from_pdf(pdf: PDF) -> list[Item]:
    """Turn every word of the PDF into an item; pages are numbered from 1."""
    items: list[Item] = []
    for page_number, page in enumerate(pdf.pages, 1):
        page_items = items_from_page(page, page_number)
        logger.debug(f"Page {page_number}: {len(page_items)} items")
        items.extend(page_items)
    return items
