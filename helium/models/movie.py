"""Movie document model."""

from typing import Any, List, Optional

from pydantic import Field, field_validator

from helium.models.base import SearchableDocument, check_identifier, check_text


class Movie(SearchableDocument):
    """A movie record. `textSearch` must equal `title.lower()`."""

    resource_type = "Movie"
    primary_field = "title"
    id_field = "movieId"

    id: str
    movieId: str
    title: str
    textSearch: str
    type: str
    key: Optional[str] = Field(default=None, description="Partition key value")
    year: Optional[int] = Field(default=None, ge=0)
    runtime: Optional[int] = Field(default=None, ge=0)
    rating: Optional[float] = None
    votes: Optional[int] = Field(default=None, ge=0)
    genres: Optional[List[str]] = None
    roles: Optional[List[Any]] = None

    @field_validator("id", "movieId")
    @classmethod
    def validate_ids(cls, v: str, info) -> str:
        return check_identifier(v, info.field_name)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return check_text(v, "title")
