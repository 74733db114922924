from pydantic import BaseModel
from typing import List, Optional


class SearchResult(BaseModel):
    title: str
    url: Optional[str] = None
    snippet: Optional[str] = None


class SearchResponse(BaseModel):
    query: str
    results: List[SearchResult]
