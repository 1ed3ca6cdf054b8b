from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# integer columns are 32-bit on Postgres
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


class Book(BaseModel):
    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int


class CreateBook(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    isbn: str = Field(min_length=1, pattern=r"^[^/]+$")
    amazon_url: str
    author: str
    language: str
    pages: int = Field(ge=0, le=INT_MAX)
    publisher: str
    title: str
    year: int = Field(ge=INT_MIN, le=INT_MAX)


class UpdateBook(BaseModel):
    """Partial update; ``isbn`` is not part of the mutable field set."""

    model_config = ConfigDict(extra="forbid", strict=True)

    amazon_url: str | None = None
    author: str | None = None
    language: str | None = None
    pages: int | None = Field(default=None, ge=0, le=INT_MAX)
    publisher: str | None = None
    title: str | None = None
    year: int | None = Field(default=None, ge=INT_MIN, le=INT_MAX)

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field may not be null")
        return value


class BookEnvelope(BaseModel):
    book: Book


class BookList(BaseModel):
    books: list[Book]


class Message(BaseModel):
    message: str
