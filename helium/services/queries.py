"""
Helium — Query Specification Builder
======================================

What:  Builds the parameterized Cosmos SQL queries every resource service issues.
Why:   All list / filter / lookup queries share one shape: restrict to a single
       resource discriminator, then optionally filter. Keeping the shape in one
       place guarantees user input is only ever bound as a parameter.
How:   Pure functions returning a QuerySpec (query text + parameter list), the
       form the Cosmos SDK's query_items() accepts.

Query shapes:
    list:    SELECT <fields> FROM root WHERE root.type = 'Movie'
    filter:  ... AND CONTAINS(root.textSearch, @textSearch)   (@textSearch lowercased)
    lookup:  ... AND root.movieId = @id

The discriminator is a constant from code, never from the request, so it is
inlined; everything that comes from the request is a parameter.
"""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

ACTOR_FIELDS = (
    "id",
    "actorId",
    "type",
    "name",
    "textSearch",
    "birthYear",
    "deathYear",
    "profession",
    "movies",
)

MOVIE_FIELDS = (
    "id",
    "movieId",
    "type",
    "title",
    "textSearch",
    "year",
    "runtime",
    "rating",
    "votes",
    "genres",
    "roles",
)


class QuerySpec(BaseModel):
    """A query and its parameter bindings, as passed to query_items()."""

    query: str
    parameters: List[Dict[str, Any]] = Field(default_factory=list)

    def parameter(self, name: str) -> Any:
        """Value bound to `name` (e.g. "@id"), or None."""
        for param in self.parameters:
            if param["name"] == name:
                return param["value"]
        return None


def _projection(fields: Optional[Sequence[str]]) -> str:
    if not fields:
        return "*"
    return ", ".join(f"root.{field}" for field in fields)


def _base(resource_type: str, fields: Optional[Sequence[str]]) -> str:
    return f"SELECT {_projection(fields)} FROM root WHERE root.type = '{resource_type}'"


def normalize_filter(text: Optional[str]) -> Optional[str]:
    """Empty or whitespace-only filters mean "no filter"."""
    if text is None:
        return None
    text = text.strip()
    return text.lower() if text else None


def build_list_query(
    resource_type: str,
    fields: Optional[Sequence[str]] = None,
    text_filter: Optional[str] = None,
) -> QuerySpec:
    """
    Query every document of one resource type, optionally filtered by textSearch.

    Args:
        resource_type: The `type` discriminator ("Actor", "Movie", "Genre").
        fields: Projected fields; None selects whole documents.
        text_filter: Free text from ?q=; matched case-insensitively.
    """
    query = _base(resource_type, fields)
    parameters: List[Dict[str, Any]] = []

    search = normalize_filter(text_filter)
    if search is not None:
        query += " AND CONTAINS(root.textSearch, @textSearch)"
        parameters.append({"name": "@textSearch", "value": search})

    return QuerySpec(query=query, parameters=parameters)


def build_lookup_query(
    resource_type: str,
    id_field: str,
    resource_id: str,
    fields: Optional[Sequence[str]] = None,
) -> QuerySpec:
    """Query documents of one resource type by a secondary id field (e.g. movieId)."""
    query = _base(resource_type, fields) + f" AND root.{id_field} = @id"
    return QuerySpec(query=query, parameters=[{"name": "@id", "value": resource_id}])
