import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import NamedTuple

ENV_PREFIX = "TOCSPOTTER_"


class DetectTocConfigParams(NamedTuple):
    # How many characters a line with an ending number needs minimally to be a valid link
    link_min_length: int | None = None
    # A run of ascending numbers shorter than this is not a TOC
    min_toc_entries: int | None = None
    # Pages scanned on top of |page_factor| when looking for candidates
    base_pages_to_evaluate: int | None = None
    # A TOC must hold at least this many entries per page it spans
    entries_per_page: int | None = None


@dataclass(init=False)
class DetectTocConfig:
    def __init__(self, detect_toc_config_params: DetectTocConfigParams | None = None):
        (
            link_min_length,
            min_toc_entries,
            base_pages_to_evaluate,
            entries_per_page,
        ) = detect_toc_config_params or DetectTocConfigParams()

        self.link_min_length = link_min_length if link_min_length is not None else 5
        self.min_toc_entries = min_toc_entries if min_toc_entries is not None else 3
        self.base_pages_to_evaluate = base_pages_to_evaluate if base_pages_to_evaluate is not None else 5
        self.entries_per_page = entries_per_page if entries_per_page is not None else 5
        if self.entries_per_page < 1:
            raise ValueError(f"entries_per_page must be at least 1, got {self.entries_per_page}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DetectTocConfig":
        """Build a config from TOCSPOTTER_* variables, e.g. TOCSPOTTER_LINK_MIN_LENGTH=8."""
        environ = os.environ if environ is None else environ

        def _int_or_none(name: str) -> int | None:
            value = environ.get(f"{ENV_PREFIX}{name.upper()}")
            return int(value) if value not in (None, "") else None

        return cls(DetectTocConfigParams(*(_int_or_none(name) for name in DetectTocConfigParams._fields)))
