import pytest

from tocspotter.item import Item
from tocspotter.text_utils import extract_ending_number, line_text


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Introduction .......... 1", 1),
        ("Chapter Two ..... 123", 123),
        ("Intro12", 12),
        ("Appendix 7   \n", 7),
        ("42", 42),
        ("Chapter 3 Summary", None),
        ("", None),
        ("   ", None),
        ("Page 12a", None),
    ],
)
def test_extract_ending_number(text, expected):
    assert extract_ending_number(text) == expected


def test_extract_ending_number_takes_the_whole_digit_run():
    assert extract_ending_number("Section 2.10") == 10
    assert extract_ending_number("Year 2024") == 2024


def test_line_text_concatenates_without_separator():
    items = [Item(page=1, data={"str": "Introduction ...."}), Item(page=1, data={"str": "12"}), Item(page=1, data={})]
    assert line_text(items) == "Introduction ....12"
