"""
Pydantic schemas for places-search results.
"""

from pydantic import BaseModel


class PlaceCategory(BaseModel):
    name: str


class PlaceResult(BaseModel):
    name: str
    formatted_address: str = ""
    categories: list[PlaceCategory] = []


class PlaceSearchResponse(BaseModel):
    results: list[PlaceResult]
