"""Actor document model."""

from typing import Any, List, Optional

from pydantic import Field, field_validator

from helium.models.base import SearchableDocument, check_identifier, check_text


class Actor(SearchableDocument):
    """
    An actor record. `textSearch` must equal `name.lower()`.

    Field order matters: `name` is validated before `textSearch` so the
    textSearch check can see it.
    """

    resource_type = "Actor"
    primary_field = "name"
    id_field = "actorId"

    id: str
    actorId: str
    name: str
    textSearch: str
    type: str
    key: Optional[str] = Field(default=None, description="Partition key value")
    birthYear: Optional[int] = Field(default=None, ge=0)
    deathYear: Optional[int] = Field(default=None, ge=0)
    profession: Optional[List[str]] = None
    movies: Optional[List[Any]] = None

    @field_validator("id", "actorId")
    @classmethod
    def validate_ids(cls, v: str, info) -> str:
        return check_identifier(v, info.field_name)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_text(v, "name")
