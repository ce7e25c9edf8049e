"""Book listing filters and the collection range header."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import Select, or_, select

from bookstore.models.book import Book, BookAuthor, BookCategory


@dataclass
class BookFilters:
    """Optional listing filters, combined with AND."""

    category_id: int | None = None
    author_id: int | None = None
    price_gte: Decimal | None = None
    price_lte: Decimal | None = None
    stock_quantity_lte: int | None = None
    q: str | None = None

    def apply(self, query: Select) -> Select:
        """Add the active filters to a query over Book."""
        if self.category_id is not None:
            query = query.where(
                select(BookCategory.book_id)
                .where(
                    BookCategory.book_id == Book.id,
                    BookCategory.category_id == self.category_id,
                )
                .exists()
            )

        if self.author_id is not None:
            query = query.where(
                select(BookAuthor.book_id)
                .where(
                    BookAuthor.book_id == Book.id,
                    BookAuthor.author_id == self.author_id,
                )
                .exists()
            )

        if self.price_gte is not None:
            query = query.where(Book.price >= self.price_gte)

        if self.price_lte is not None:
            query = query.where(Book.price <= self.price_lte)

        if self.stock_quantity_lte is not None:
            query = query.where(Book.stock_quantity <= self.stock_quantity_lte)

        if self.q:
            query = query.where(
                or_(
                    Book.title.icontains(self.q, autoescape=True),
                    Book.description.icontains(self.q, autoescape=True),
                )
            )

        return query


def book_list_query(filters: BookFilters) -> Select:
    """Build the filtered book listing, always ordered by title."""
    return filters.apply(select(Book)).order_by(Book.title.asc(), Book.id.asc())


def content_range(resource: str, total: int) -> str:
    """Format the Content-Range value for a collection response.

    Listings are not paginated server-side, so the range always spans the
    whole result: ``"books 0-9/10"``. An empty result yields ``"books 0--1/0"``.
    """
    return f"{resource} 0-{total - 1}/{total}"
