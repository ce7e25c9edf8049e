"""Book model and its junction tables."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from bookstore.core.database import Base


class Book(Base):
    """Model representing a book in the catalog.

    Author and category links live in the junction tables and are read and
    written through the relationship services, never as ORM collections.
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    published_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    cover_image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    publisher: Mapped[str | None] = mapped_column(String(100), nullable=True)
    number_of_pages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    language: Mapped[str | None] = mapped_column(
        String(20), default="English", server_default="English", nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def display_price(self) -> str:
        return f"${self.price:.2f}"

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}')>"


class BookCategory(Base):
    """Link between a book and one of its categories."""

    __tablename__ = "book_categories"

    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    )

    def __repr__(self) -> str:
        return f"<BookCategory(book_id={self.book_id}, category_id={self.category_id})>"


class BookAuthor(Base):
    """Link between a book and one of its authors."""

    __tablename__ = "book_authors"

    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    author_id: Mapped[int] = mapped_column(
        ForeignKey("authors.id", ondelete="CASCADE"), primary_key=True
    )

    def __repr__(self) -> str:
        return f"<BookAuthor(book_id={self.book_id}, author_id={self.author_id})>"
