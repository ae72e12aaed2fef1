import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ItemType(str, Enum):
    """Structural roles an item can be tagged with."""

    TOC = "TOC"


def _merge_types(existing, addition) -> tuple[str, ...]:
    merged: list[str] = []
    for tag in [*(existing or ()), *(addition or ())]:
        name = tag.value if isinstance(tag, ItemType) else str(tag)
        if name not in merged:
            merged.append(name)
    return tuple(merged)


@dataclass(frozen=True)
class Item:
    """One positioned text fragment.

    `data` holds the columns produced by earlier pipeline stages
    (x, y, str, line, height, types, ...). Items are never changed in place,
    tagging returns a copy.
    """

    page: int
    data: dict[str, Any]
    uuid: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def text(self) -> str:
        value = self.data.get("str")
        return value if isinstance(value, str) else ""

    @property
    def line(self) -> Any:
        return self.data.get("line")

    @property
    def height(self) -> float | None:
        value = self.data.get("height")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value

    @property
    def types(self) -> tuple[str, ...]:
        value = self.data.get("types") or ()
        # a bare string is one tag, not a sequence of characters
        return (value,) if isinstance(value, str) else tuple(value)

    def with_data(self, data: dict[str, Any]) -> "Item":
        return Item(page=self.page, data=data, uuid=self.uuid)

    def with_data_addition(self, addition: dict[str, Any]) -> "Item":
        """Copy of this item with `addition` merged into its data.

        `types` is extended rather than replaced, every other key is overwritten.
        """
        data = {**self.data, **addition}
        if "types" in addition:
            data["types"] = _merge_types(self.types, addition["types"])
        return self.with_data(data)

    def has_type(self, item_type: ItemType) -> bool:
        return item_type.value in self.types
