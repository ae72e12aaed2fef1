import re

ENDING_NUMBER_PATTERN = re.compile(r"([0-9]+)$")


def extract_ending_number(text: str) -> int | None:
    """Return the integer the (trimmed) text ends with, or None.

    No separator is required: "Intro12" gives 12.
    """
    match = ENDING_NUMBER_PATTERN.search(text.strip())
    if not match:
        return None
    return int(match.group(1))


def line_text(line_items) -> str:
    return "".join(item.text for item in line_items)
