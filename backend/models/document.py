"""Document data models."""
from dataclasses import dataclass, field
from typing import List

@dataclass(frozen=True)
class Page:
    """Represents a single rendered page from a document."""
    index: int  # 0-based, matches physical page order
    thumbnail: str  # data URI, e.g. "data:image/jpeg;base64,..."
    text_content: str

@dataclass
class Document:
    """Represents a loaded PDF document."""
    name: str
    size_bytes: int
    raw_bytes: bytes = field(repr=False)
    pages: List[Page] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return len(self.pages)
