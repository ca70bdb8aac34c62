#region imports

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from Helper.ValidationHelper import ReviewValidationError, ValidationHelper

#endregion imports

#region Model def: start

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookReviewForm(CamelModel):
    """Scalar fields of the multipart write shape, validated with the shared rules."""
    title: str
    author: str
    rating: int
    read_date: date
    review: str

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, value):
        return _checked(value, ValidationHelper.validate_title(value))

    @field_validator("author", mode="before")
    @classmethod
    def check_author(cls, value):
        return _checked(value, ValidationHelper.validate_author(value))

    @field_validator("rating", mode="before")
    @classmethod
    def check_rating(cls, value):
        _checked(value, ValidationHelper.validate_rating(value))
        return int(value)

    @field_validator("read_date", mode="before")
    @classmethod
    def check_read_date(cls, value):
        _checked(value, ValidationHelper.validate_read_date(value))
        return value.strip() if isinstance(value, str) else value

    @field_validator("review", mode="before")
    @classmethod
    def check_review(cls, value):
        return _checked(value, ValidationHelper.validate_review(value))

    @classmethod
    def from_form_fields(cls, fields: dict) -> "BookReviewForm":
        """Builds the form from raw multipart values keyed by wire name.

        Raises:
            ReviewValidationError: With every failing field and its messages.
        """
        try:
            return cls.model_validate(fields)
        except ValidationError as e:
            raise ReviewValidationError(ValidationHelper.errors_from_pydantic(e)) from e


class BookReviewCreated(CamelModel):
    """Body of a 201 Created response: the submitted scalars plus the assigned id."""
    id: int
    title: str
    author: str
    rating: int
    read_date: date
    review: str


class BookReviewViewModel(CamelModel):
    id: int
    title: str
    author: str
    rating: int
    read_date: date
    review: str
    image_base64: Optional[str] = Field(None, description="Standard base64 of the stored image")
    image_mime_type: Optional[str] = Field(None, description="MIME type of the stored image")

#endregion Model def: End


def _checked(value, message: str):
    if message:
        raise ValueError(message)
    return value
