from collections.abc import Callable, Iterable, Sequence
from typing import Any, NamedTuple

from tocspotter.item import Item

PAGE_MAPPING = "pageMapping"


class PageMapping(NamedTuple):
    """Offset between physical page index and the document's printed page numbers."""

    page_factor: int = 0


class ItemResult(NamedTuple):
    items: list[Item]
    messages: list[str]


class MissingColumnsError(Exception):
    def __init__(self, transformer_name: str, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"{transformer_name}: input items are missing required columns {self.missing}")


class MissingGlobalError(Exception):
    def __init__(self, key: str) -> None:
        super().__init__(f"No global registered under '{key}'")


class TransformContext:
    """What a transformer knows about the document besides its items."""

    def __init__(self, page_count: int, globals_: dict[str, Any] | None = None):
        self.page_count = page_count
        self._globals = dict(globals_ or {})

    def get_global(self, key: str) -> Any:
        try:
            return self._globals[key]
        except KeyError:
            raise MissingGlobalError(key) from None


class ItemTransformer:
    """Base class for one pipeline stage working on a flat item stream.

    Subclasses implement `transform`. `execute` checks the declared
    `require_columns` first so `transform` can rely on them.
    """

    def __init__(
        self,
        name: str,
        description: str,
        require_columns: Sequence[str] = (),
        schema_change: Callable[[list[str]], list[str]] | None = None,
    ):
        self.name = name
        self.description = description
        self.require_columns = list(require_columns)
        self._schema_change = schema_change

    def schema(self, incoming_schema: Iterable[str]) -> list[str]:
        incoming = list(incoming_schema)
        return self._schema_change(incoming) if self._schema_change else incoming

    def missing_columns(self, items: Iterable[Item]) -> list[str]:
        missing: list[str] = []
        for item in items:
            for column in self.require_columns:
                if column not in item.data and column not in missing:
                    missing.append(column)
        return missing

    def execute(self, context: TransformContext, items: list[Item]) -> ItemResult:
        missing = self.missing_columns(items)
        if missing:
            raise MissingColumnsError(self.name, missing)
        return self.transform(context, items)

    def transform(self, context: TransformContext, items: list[Item]) -> ItemResult:
        raise NotImplementedError
