"""Pydantic schemas for API request/response validation.

Field names are exposed in camelCase on the wire, which is what the admin
console and storefront send and expect.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Schema for a plain message response."""

    message: str


# Category schemas
class CategoryCreate(CamelModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)


class CategoryUpdate(CategoryCreate):
    """Schema for replacing a category; `id` must match the route if given."""

    id: int | None = None


class CategoryResponse(CamelModel):
    """Schema for category response."""

    id: int
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime | None = None


# Author schemas
class AuthorCreate(CamelModel):
    """Schema for creating an author."""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    biography: str | None = Field(None, max_length=1000)
    nationality: str | None = Field(None, max_length=100)
    date_of_birth: date | None = None


class AuthorUpdate(AuthorCreate):
    """Schema for replacing an author; `id` must match the route if given."""

    id: int | None = None


class AuthorResponse(CamelModel):
    """Schema for author response."""

    id: int
    first_name: str
    last_name: str
    full_name: str
    biography: str | None
    nationality: str | None
    date_of_birth: date | None
    created_at: datetime
    updated_at: datetime | None = None


# Book schemas
class BookCategoryLink(CamelModel):
    """A book's link to one category."""

    book_id: int
    category_id: int
    category_name: str


class BookAuthorLink(CamelModel):
    """A book's link to one author."""

    book_id: int
    author_id: int
    author_name: str


class BookResponse(CamelModel):
    """Schema for book response, including its current links."""

    id: int
    title: str
    isbn: str | None
    description: str | None
    price: float
    stock_quantity: int
    published_date: date | None
    cover_image_path: str | None
    publisher: str | None
    number_of_pages: int
    language: str | None
    is_active: bool
    is_in_stock: bool
    display_price: str
    created_at: datetime
    updated_at: datetime | None = None
    category_ids: list[int] = []
    author_ids: list[int] = []
    book_categories: list[BookCategoryLink] = []
    book_authors: list[BookAuthorLink] = []


# Auth and user schemas
class RegisterRequest(CamelModel):
    """Schema for user registration."""

    email: str = Field(..., min_length=3, max_length=256, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    username: str | None = Field(None, min_length=1, max_length=256)
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)


class LoginRequest(CamelModel):
    """Schema for user login."""

    username_or_email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Schema for user profile response."""

    id: str
    email: str
    username: str
    first_name: str | None
    last_name: str | None
    full_name: str
    role: str
    is_active: bool
    created_at: datetime


class AuthResponse(CamelModel):
    """Schema for a successful register/login response."""

    message: str
    token: str
    user: UserResponse


class UpdateUserRequest(CamelModel):
    """Schema for updating a user profile."""

    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)


# File upload schemas
class FileUploadResponse(CamelModel):
    """Schema for a stored image upload."""

    url: str
    file_name: str
    original_name: str
    size: int
