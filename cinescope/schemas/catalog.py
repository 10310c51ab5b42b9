"""
Response models for catalog endpoints.

Items are passed through from TMDB untouched, so results are not validated item by item.
"""
from pydantic import BaseModel, Field
from typing import Any, List


class ListingPage(BaseModel):
    results: List[Any] = []
    page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_results: int = Field(..., ge=0)


class ListingPageEnvelope(BaseModel):
    success: bool = True
    data: ListingPage


class Genre(BaseModel):
    id: int
    name: str


class GenreListEnvelope(BaseModel):
    success: bool = True
    data: List[Genre]


class GenreList(BaseModel):
    genres: List[Genre]
