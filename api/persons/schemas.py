"""
Person API schemas (request/response models).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, StringConstraints, model_validator

GENDERS = ("male", "female", "other")

# Writable columns, in the order SET clauses are assembled.
WRITABLE_FIELDS = ("name", "surname", "patronymic", "age", "gender", "nationality")

# Recognized list filters, in the order WHERE clauses are assembled.
FILTER_FIELDS = ("name", "surname", "age", "gender", "nationality")

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
CountryCode = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[A-Za-z]{2}$", to_upper=True)]
Age = Annotated[int, Field(ge=0, le=150)]
Gender = Literal["male", "female", "other"]


class PersonFields(BaseModel):
    """
    A person as stored, minus the generated id.
    """

    name: str
    surname: str
    patronymic: str | None = None
    age: int | None = None
    gender: str | None = None
    nationality: str | None = None


class Person(PersonFields):
    id: int


class PersonCreateRequest(BaseModel):
    name: RequiredText
    surname: RequiredText
    patronymic: OptionalText | None = None


class PersonUpdateRequest(BaseModel):
    """
    Full replacement: omitted optional fields are written as NULL.
    """

    name: RequiredText
    surname: RequiredText
    patronymic: OptionalText | None = None
    age: Age | None = None
    gender: Gender | None = None
    nationality: CountryCode | None = None

    def to_person(self, person_id: int) -> Person:
        return Person(id=person_id, **self.model_dump())


class PersonPatchRequest(BaseModel):
    """
    Partial update. Only keys present in the JSON body are written; an explicit
    null clears a nullable column.
    """

    name: RequiredText | None = None
    surname: RequiredText | None = None
    patronymic: OptionalText | None = None
    age: Age | None = None
    gender: Gender | None = None
    nationality: CountryCode | None = None

    @model_validator(mode="after")
    def _required_columns_not_null(self) -> "PersonPatchRequest":
        for field in ("name", "surname"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in WRITABLE_FIELDS if field in self.model_fields_set}


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
