import pytest

from tocspotter.detect_config import DetectTocConfig, DetectTocConfigParams


def test_defaults():
    config = DetectTocConfig()
    assert config.link_min_length == 5
    assert config.min_toc_entries == 3
    assert config.base_pages_to_evaluate == 5
    assert config.entries_per_page == 5


def test_explicit_values_win_including_zero():
    config = DetectTocConfig(DetectTocConfigParams(link_min_length=0, min_toc_entries=4))
    assert config.link_min_length == 0
    assert config.min_toc_entries == 4
    assert config.base_pages_to_evaluate == 5


def test_from_env():
    config = DetectTocConfig.from_env({"TOCSPOTTER_LINK_MIN_LENGTH": "8", "TOCSPOTTER_ENTRIES_PER_PAGE": "", "UNRELATED": "1"})
    assert config.link_min_length == 8
    assert config.entries_per_page == 5


@pytest.mark.parametrize("entries_per_page", [0, -1])
def test_entries_per_page_must_be_positive(entries_per_page):
    with pytest.raises(ValueError, match="entries_per_page"):
        DetectTocConfig(DetectTocConfigParams(entries_per_page=entries_per_page))
