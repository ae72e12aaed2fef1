"""Helpers for building item streams the way the extraction stage emits them."""

import pytest

from tocspotter.item import Item
from tocspotter.transformer import PAGE_MAPPING, PageMapping, TransformContext


def _make_line(page: int, line: int, *texts: str, height: float | None = 10.0) -> list[Item]:
    items = []
    for index, text in enumerate(texts):
        data = {"x": 50.0 + 200 * index, "y": 40.0 + 14 * line, "str": text, "line": line}
        if height is not None:
            data["height"] = height
        items.append(Item(page=page, data=data))
    return items


def _make_page(page: int, lines: list) -> list[Item]:
    """`lines` holds strings, or (text, height) tuples for lines with a custom height."""
    items: list[Item] = []
    for line_number, line in enumerate(lines, 1):
        text, height = line if isinstance(line, tuple) else (line, 10.0)
        items.extend(_make_line(page, line_number, text, height=height))
    return items


@pytest.fixture
def make_line():
    return _make_line


@pytest.fixture
def make_page():
    return _make_page


@pytest.fixture
def make_context():
    def _make_context(page_count: int = 20, page_factor: int = 0) -> TransformContext:
        return TransformContext(page_count, {PAGE_MAPPING: PageMapping(page_factor=page_factor)})

    return _make_context


@pytest.fixture
def body_pages():
    """Pages 3..20 of running text without trailing numbers."""

    def _body_pages(first: int = 3, last: int = 20) -> list[Item]:
        items: list[Item] = []
        for page in range(first, last + 1):
            items.extend(_make_page(page, [f"Running text on page {page} continues here", "and goes on without a reference"]))
        return items

    return _body_pages
