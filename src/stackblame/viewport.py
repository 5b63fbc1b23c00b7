from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

NO_ITEM = -1


def bound(i: int, items: Sequence) -> int:
    if not items:
        return NO_ITEM
    return min(max(i, 0), len(items) - 1)


@dataclass(frozen=True)
class VisibleRow(Generic[T]):
    index: int
    item: T
    selected: bool


class Viewport(Generic[T]):
    """
    Selection cursor over a sequence of items, shown in a window of fixed height.

    Whenever an item is selected, the window scrolls so that the selection stays
    visible: scrolling up keeps one item of context above the selection, scrolling
    down keeps two rows below it, so the selection never lands on the last row while
    there are more items. The viewport only marks the selected row, highlighting is
    left to the renderer.
    """

    def __init__(self, height: int = 0) -> None:
        self.items: list[T] = []
        self.current_item: int = NO_ITEM
        self.scroll: int = 0
        self.height: int = max(height, 0)
        self.visible: list[VisibleRow[T]] = []

    def set_items(self, items: Sequence[T]) -> None:
        self.items = list(items)
        self.current_item = NO_ITEM
        self.scroll = 0
        self._set_visible()

    def select(self, item: int) -> None:
        if item == self.current_item:
            return

        count = len(self.items)
        if 0 <= item < count:
            # Scroll up
            if item <= self.scroll and item != 0:
                self.scroll = item - 1
            # Scroll down
            if item >= self.scroll + self.height - 2 and item != count - 1:
                self.scroll = item - self.height + 2
            self.scroll = self._clamp_scroll(self.scroll, item)

        self.current_item = item
        self._set_visible()

    def select_next(self) -> None:
        self.select(bound(self.current_item + 1, self.items))

    def select_previous(self) -> None:
        self.select(bound(self.current_item - 1, self.items))

    def set_height(self, height: int) -> None:
        self.height = max(height, 0)
        self.scroll = self._clamp_scroll(self.scroll, self.current_item)
        self._set_visible()

    def selected(self) -> T | None:
        if 0 <= self.current_item < len(self.items):
            return self.items[self.current_item]
        return None

    # Keep the selection inside the window, for jumps and for windows of less than
    # three rows, and do not scroll the window past the end of the items.
    def _clamp_scroll(self, scroll: int, item: int) -> int:
        if self.height > 0 and 0 <= item < len(self.items):
            scroll = min(scroll, item)
            scroll = max(scroll, item - self.height + 1)
        scroll = min(scroll, len(self.items) - self.height)
        return max(scroll, 0)

    def _set_visible(self) -> None:
        last_item = min(self.scroll + self.height, len(self.items))
        self.visible = [
            VisibleRow(i, self.items[i], i == self.current_item)
            for i in range(self.scroll, last_item)
        ]
