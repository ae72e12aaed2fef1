import logging
from collections.abc import Sequence
from logging import Logger
from typing import NamedTuple

from tocspotter.detect_config import DetectTocConfig
from tocspotter.grouping import group_by_line, group_by_page, numbers_are_consecutive, only_uniques, transform_grouped_by_page
from tocspotter.item import Item, ItemType
from tocspotter.text_utils import extract_ending_number, line_text
from tocspotter.transformer import PAGE_MAPPING, ItemResult, ItemTransformer, PageMapping, TransformContext

NO_TOC_MESSAGE = "No Table of Contents found!"

module_logger = logging.getLogger(__name__)


class LineWithNumber(NamedTuple):
    """A line which ends with a number."""

    page: int
    start_item_uuid: str
    number: int


class TocArea(NamedTuple):
    """Pointer to the pages and lines classified as TOC."""

    pages: list[int]
    lines_with_numbers: list[LineWithNumber]

    @property
    def numbers_by_start_uuid(self) -> dict[str, int]:
        return {line.start_item_uuid: line.number for line in self.lines_with_numbers}


def find_ending_number(line_items: Sequence[Item]) -> int | None:
    return extract_ending_number(line_text(line_items))


def line_height(line_items: Sequence[Item]) -> float | None:
    heights = [item.height for item in line_items if item.height is not None]
    return max(heights) if heights else None


def collect_lines_with_number(
    items: Sequence[Item], page_count: int, page_mapping: PageMapping, config: DetectTocConfig, logger: Logger = module_logger
) -> list[LineWithNumber]:
    """Find lines on the first pages that end in a number which could be a page reference."""
    max_page_to_evaluate = min(page_count / 2, config.base_pages_to_evaluate + abs(page_mapping.page_factor))
    max_page_to_be_linked_to = page_count + page_mapping.page_factor - 1
    logger.debug(f"Evaluating pages up to {max_page_to_evaluate}, accepting numbers up to {max_page_to_be_linked_to}")

    lines_with_number: list[LineWithNumber] = []
    for page_items in group_by_page(item for item in items if item.page <= max_page_to_evaluate):
        for line_items in group_by_line(page_items):
            number = find_ending_number(line_items)
            if number and 0 < number <= max_page_to_be_linked_to and len(line_text(line_items)) > config.link_min_length:
                lines_with_number.append(LineWithNumber(line_items[0].page, line_items[0].uuid, number))

    logger.debug(f"Found {len(lines_with_number)} lines ending with a number")
    return lines_with_number


def cluster_ascending_runs(lines_with_number: Sequence[LineWithNumber]) -> list[list[LineWithNumber]]:
    """Greedy left-to-right split into maximal runs of non-decreasing numbers."""
    clusters: list[list[LineWithNumber]] = []
    for line in lines_with_number:
        if clusters and line.number >= clusters[-1][-1].number:
            clusters[-1].append(line)
        else:
            clusters.append([line])
    return clusters


def find_toc_area(lines_with_number: Sequence[LineWithNumber], config: DetectTocConfig, logger: Logger = module_logger) -> TocArea | None:
    if not lines_with_number:
        logger.debug("No candidate lines, no TOC")
        return None

    # max() keeps the first of equally long runs
    selected_lines = max(cluster_ascending_runs(lines_with_number), key=len)
    if len(selected_lines) < config.min_toc_entries:
        logger.debug(f"Longest ascending run has only {len(selected_lines)} entries")
        return None

    pages = only_uniques(line.page for line in selected_lines)
    if not numbers_are_consecutive(pages):
        logger.debug(f"Pages of the longest run are not consecutive: {pages}")
        return None
    if len(pages) > len(selected_lines) / config.entries_per_page:
        logger.debug(f"Longest run too sparse: {len(selected_lines)} entries over {len(pages)} pages")
        return None

    return TocArea(pages, selected_lines)


class TocLineAnnotator:
    """Tags the lines of the TOC pages.

    Lines without a number are held back until the next numbered line shows
    up. Then each held line is tagged unless it is taller than any numbered
    line or further away from the numbered line than any gap seen in the TOC
    area. Lines after the last numbered line of a page stay untagged.
    """

    def __init__(self, numbers_by_start_uuid: dict[str, int], max_height_of_numbered_lines: float | None, max_lines_between_lines_with_numbers: int):
        self.numbers_by_start_uuid = numbers_by_start_uuid
        self.max_height_of_numbered_lines = max_height_of_numbered_lines
        self.max_lines_between_lines_with_numbers = max_lines_between_lines_with_numbers
        self.toc_lines = 0
        self.pending_lines: list[list[Item]] = []

    @classmethod
    def for_area(cls, toc_area: TocArea, items: Sequence[Item]) -> "TocLineAnnotator":
        """Measure heights and gaps over the whole TOC area once, before any page is tagged."""
        numbers_by_start_uuid = toc_area.numbers_by_start_uuid
        numbered_line_heights: list[float] = []
        # Lines following each numbered line up to the next one. Lines before
        # the first numbered line of the area open no gap.
        gaps: list[int] = []
        for line_items in group_by_line(item for item in items if item.page in toc_area.pages):
            if line_items[0].uuid not in numbers_by_start_uuid:
                if gaps:
                    gaps[-1] += 1
                continue
            height = line_height(line_items)
            if height is not None:
                numbered_line_heights.append(height)
            gaps.append(0)

        heights = only_uniques(numbered_line_heights)
        return cls(numbers_by_start_uuid, max(heights) if heights else None, max(only_uniques(gaps), default=0))

    def is_numbered(self, line_items: Sequence[Item]) -> bool:
        return line_items[0].uuid in self.numbers_by_start_uuid

    def is_toc_line(self, line_items: Sequence[Item], distance: int) -> bool:
        height = line_height(line_items)
        much_larger = height is not None and self.max_height_of_numbered_lines is not None and height > self.max_height_of_numbered_lines
        return not much_larger and distance <= self.max_lines_between_lines_with_numbers

    def feed(self, line_items: list[Item]) -> list[Item]:
        """Consume one line, returning the items that can be emitted now."""
        if not self.is_numbered(line_items):
            self.pending_lines.append(line_items)
            return []

        emitted: list[Item] = []
        for index, pending_line in enumerate(self.pending_lines):
            if self.is_toc_line(pending_line, len(self.pending_lines) - index):
                emitted.extend(tag_as_toc(pending_line))
                self.toc_lines += 1
            else:
                emitted.extend(pending_line)
        self.pending_lines = []

        emitted.extend(tag_as_toc(line_items))
        self.toc_lines += 1
        return emitted

    def finish_page(self) -> list[Item]:
        remaining = [item for line_items in self.pending_lines for item in line_items]
        self.pending_lines = []
        return remaining

    def annotate_page(self, page_items: list[Item]) -> list[Item]:
        emitted: list[Item] = []
        for line_items in group_by_line(page_items):
            emitted.extend(self.feed(line_items))
        emitted.extend(self.finish_page())
        return emitted


def tag_as_toc(line_items: Sequence[Item]) -> list[Item]:
    return [item.with_data_addition({"types": [ItemType.TOC]}) for item in line_items]


def _insert_types_column(incoming_schema: list[str]) -> list[str]:
    schema: list[str] = []
    for column in incoming_schema:
        if column == "x" and "types" not in incoming_schema:
            schema.append("types")
        schema.append(column)
    return schema


class DetectToc(ItemTransformer):
    """Detect the table of contents and tag its items with ItemType.TOC."""

    REQUIRED_COLUMNS = ["x", "y", "str", "line"]

    logger: Logger

    def __init__(self, config: DetectTocConfig | None = None, logger: Logger | None = None):
        super().__init__("Detect TOC", "Detect table of contents.", self.REQUIRED_COLUMNS, _insert_types_column)
        self.config = config if config else DetectTocConfig()
        self.logger = logger if logger else module_logger

    def find_toc_area(self, context: TransformContext, items: Sequence[Item]) -> TocArea | None:
        page_mapping: PageMapping = context.get_global(PAGE_MAPPING)
        lines_with_number = collect_lines_with_number(items, context.page_count, page_mapping, self.config, self.logger)
        return find_toc_area(lines_with_number, self.config, self.logger)

    def transform(self, context: TransformContext, items: list[Item]) -> ItemResult:
        toc_area = self.find_toc_area(context, items)
        if not toc_area:
            self.logger.info(NO_TOC_MESSAGE)
            return ItemResult(items, [NO_TOC_MESSAGE])

        annotator = TocLineAnnotator.for_area(toc_area, items)
        self.logger.info(
            f"TOC area on pages {toc_area.pages}: {len(toc_area.lines_with_numbers)} numbered lines, "
            f"max height {annotator.max_height_of_numbered_lines}, max gap {annotator.max_lines_between_lines_with_numbers}"
        )

        def _annotate(page: int, page_items: list[Item]) -> list[Item]:
            if page not in toc_area.pages:
                return page_items
            return annotator.annotate_page(page_items)

        tagged_items = transform_grouped_by_page(items, _annotate)
        message = f"Detected {annotator.toc_lines} TOC lines"
        self.logger.info(message)
        return ItemResult(tagged_items, [message])
