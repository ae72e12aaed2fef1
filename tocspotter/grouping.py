from collections.abc import Callable, Hashable, Iterable, Sequence
from itertools import groupby
from typing import TypeVar

from tocspotter.item import Item

T = TypeVar("T", bound=Hashable)


def group_by_page(items: Iterable[Item]) -> list[list[Item]]:
    """Split items into runs that share a page, keeping stream order."""
    return [list(page_items) for _, page_items in groupby(items, key=lambda item: item.page)]


def group_by_line(items: Iterable[Item]) -> list[list[Item]]:
    """Split items into runs that share page and line, keeping stream order."""
    return [list(line_items) for _, line_items in groupby(items, key=lambda item: (item.page, item.line))]


def transform_grouped_by_page(items: Iterable[Item], transform: Callable[[int, list[Item]], list[Item]]) -> list[Item]:
    transformed: list[Item] = []
    for page_items in group_by_page(items):
        transformed.extend(transform(page_items[0].page, page_items))
    return transformed


def only_uniques(values: Iterable[T]) -> list[T]:
    seen: set[T] = set()
    uniques = []
    for value in values:
        if value not in seen:
            seen.add(value)
            uniques.append(value)
    return uniques


def numbers_are_consecutive(numbers: Sequence[int]) -> bool:
    return all(current == previous + 1 for previous, current in zip(numbers, numbers[1:]))
