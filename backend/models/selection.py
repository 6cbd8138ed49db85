"""Selection state: which page indices the user has chosen."""
from typing import Iterable, List, Set


class PageSelection:
    """Set of selected page indices.

    Mutations are not checked against document bounds; the extractor rejects
    bad indices at export time.
    """

    def __init__(self, indices: Iterable[int] = ()):
        self._indices: Set[int] = set(indices)

    def toggle(self, index: int) -> bool:
        """Add the index if absent, remove it if present. Returns new membership."""
        if index in self._indices:
            self._indices.remove(index)
            return False
        self._indices.add(index)
        return True

    def select_all(self, total: int) -> None:
        """Select every page, or deselect all if every page is already selected."""
        everything = set(range(total))
        if self._indices == everything:
            self._indices = set()
        else:
            self._indices = everything

    def clear(self) -> None:
        self._indices = set()

    def replace(self, indices: Iterable[int]) -> None:
        self._indices = set(indices)

    def contains(self, index: int) -> bool:
        return index in self._indices

    def sorted_indices(self) -> List[int]:
        return sorted(self._indices)

    def __contains__(self, index: int) -> bool:
        return self.contains(index)

    def __len__(self) -> int:
        return len(self._indices)

    def __repr__(self) -> str:
        return f"PageSelection({self.sorted_indices()})"
