"""
Helium — Document Model Base
==============================

What:  Shared validation for the searchable resource documents (Actor, Movie).
Why:   Both resources follow the same rules: alphanumeric ids, a fixed `type`
       discriminator, and a `textSearch` field that must be the lowercased copy
       of the primary text field (name / title).
How:   Pydantic v2 field validators declared once here with check_fields=False;
       subclasses declare the fields in validation order (primary text field
       before textSearch) and name their discriminator and primary field.

Error reporting:
    Pydantic collects every failed constraint in one pass. `from_payload()`
    turns them into one human-readable message per failure and raises the
    application ValidationError (→ 400).
"""

from typing import Any, ClassVar, Dict, List

from pydantic import BaseModel, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from helium.exceptions import ValidationError


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """
    One message per failed constraint, from pydantic's error list.

    Missing fields read `"name" is required`; custom validator failures carry
    their own message; anything else is prefixed with the field name.
    """
    messages: List[str] = []
    for err in errors:
        field = _field_name(tuple(err.get("loc", ())))
        if err["type"] == "missing":
            messages.append(f'"{field}" is required')
        elif err["type"] == "value_error" and "error" in err.get("ctx", {}):
            messages.append(str(err["ctx"]["error"]))
        else:
            messages.append(f'"{field}" {err["msg"]}')
    return messages


def check_identifier(value: str, field: str) -> str:
    if not value:
        raise ValueError(f'"{field}" must not be empty')
    if not (value.isascii() and value.isalnum()):
        raise ValueError(f'"{field}" must only contain alphanumeric characters (A-Z, a-z, 0-9)')
    return value


def check_text(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValueError(f'"{field}" must not be empty')
    return value


class SearchableDocument(BaseModel):
    """
    Base for documents carrying a `textSearch` copy of a primary text field.

    Subclasses set:
        resource_type: value required in `type` ("Actor", "Movie")
        primary_field: field whose lowercase textSearch must equal ("name", "title")
        id_field:      secondary id used for lookups ("actorId", "movieId")
    """

    resource_type: ClassVar[str]
    primary_field: ClassVar[str]
    id_field: ClassVar[str]

    # Unknown keys are accepted and stored unchanged
    model_config = {"extra": "allow"}

    @field_validator("textSearch", check_fields=False)
    @classmethod
    def validate_text_search(cls, v: str, info: ValidationInfo) -> str:
        primary = info.data.get(cls.primary_field)
        if isinstance(primary, str) and primary.strip():
            expected = primary.lower()
            if v != expected:
                raise ValueError(f'"textSearch" must be equal to "{expected}"')
        elif v != v.lower():
            raise ValueError('"textSearch" must be lowercase')
        return v

    @field_validator("type", check_fields=False)
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v != cls.resource_type:
            raise ValueError(f'"type" must be equal to "{cls.resource_type}"')
        return v

    @classmethod
    def from_payload(cls, payload: Any) -> "SearchableDocument":
        """
        Validate a decoded JSON request body.

        Raises:
            ValidationError: with every failed constraint when the body is invalid.
        """
        if not isinstance(payload, dict):
            raise ValidationError(["Request body must be a JSON object"])
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(
                format_validation_errors(e.errors()),
                context={"resource": cls.resource_type},
            ) from e

    @property
    def resource_id(self) -> str:
        return getattr(self, self.id_field)

    def to_document(self) -> Dict[str, Any]:
        """The document as stored: declared and extra fields, unset optionals dropped."""
        return self.model_dump(exclude_none=True)
