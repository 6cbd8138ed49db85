"""API request and response models."""
from typing import List, Optional
from pydantic import BaseModel, Field


class ToggleRequest(BaseModel):
    index: int


class ReplaceSelectionRequest(BaseModel):
    indices: List[int] = Field(default_factory=list)


class SearchRequest(BaseModel):
    query: str


class PagePreview(BaseModel):
    index: int
    thumbnail: str
    text_content: str


class DocumentSummary(BaseModel):
    name: str
    size_bytes: int
    total_pages: int


class DocumentResponse(BaseModel):
    document: DocumentSummary
    pages: List[PagePreview]


class SelectionResponse(BaseModel):
    selected: List[int]  # ascending
    count: int
    total_pages: int


class SearchResponse(BaseModel):
    query: str
    indices: List[int]
    selection: SelectionResponse
    error: Optional[str] = None


class SessionResponse(BaseModel):
    session_id: str
    status: str
    document: Optional[DocumentSummary] = None
    selected: List[int] = Field(default_factory=list)
    last_query: str = ""
    search_in_progress: bool = False
    error: Optional[str] = None
