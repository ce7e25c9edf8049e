"""Book to author / category link synchronization.

Every book write carries the complete list of category and author ids. On
create the links are inserted; on update all existing links of the book are
removed and the supplied lists are inserted in their place. The supplied
lists are authoritative: there is no diffing or partial update.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.author import Author
from bookstore.models.book import Book, BookAuthor, BookCategory
from bookstore.models.category import Category


class MissingReferenceError(Exception):
    """Raised when a supplied author or category id does not exist."""

    def __init__(self, kind: str, missing_ids: list[int]) -> None:
        self.kind = kind
        self.missing_ids = missing_ids
        ids = ", ".join(str(i) for i in missing_ids)
        super().__init__(f"Unknown {kind} id(s): {ids}")


@dataclass
class LinkedEntity:
    """A category or author linked to a book."""

    id: int
    name: str


@dataclass
class BookLinks:
    """Current categories and authors of a single book."""

    categories: list[LinkedEntity] = field(default_factory=list)
    authors: list[LinkedEntity] = field(default_factory=list)

    @property
    def category_ids(self) -> list[int]:
        return [c.id for c in self.categories]

    @property
    def author_ids(self) -> list[int]:
        return [a.id for a in self.authors]


def unique_ids(ids: Iterable[int]) -> list[int]:
    """Drop duplicate ids, keeping the first occurrence order."""
    return list(dict.fromkeys(ids))


async def _ensure_exist(
    session: AsyncSession,
    model: type[Author] | type[Category],
    ids: list[int],
    kind: str,
) -> None:
    if not ids:
        return
    result = await session.execute(select(model.id).where(model.id.in_(ids)))
    found = set(result.scalars().all())
    missing = [i for i in ids if i not in found]
    if missing:
        raise MissingReferenceError(kind, missing)


async def _insert_links(
    session: AsyncSession,
    book_id: int,
    category_ids: list[int],
    author_ids: list[int],
) -> None:
    session.add_all([BookCategory(book_id=book_id, category_id=cid) for cid in category_ids])
    session.add_all([BookAuthor(book_id=book_id, author_id=aid) for aid in author_ids])
    await session.flush()


async def link_book(
    session: AsyncSession,
    book: Book,
    category_ids: Iterable[int],
    author_ids: Iterable[int],
) -> None:
    """Insert the category and author links of a newly created book.

    The book must already be flushed so that its id is known.

    Raises:
        MissingReferenceError: If any id does not reference an existing row.
            Nothing is written for the links in that case.
    """
    categories = unique_ids(category_ids)
    authors = unique_ids(author_ids)
    await _ensure_exist(session, Category, categories, "category")
    await _ensure_exist(session, Author, authors, "author")

    await _insert_links(session, book.id, categories, authors)


async def replace_book_links(
    session: AsyncSession,
    book: Book,
    category_ids: Iterable[int],
    author_ids: Iterable[int],
) -> None:
    """Replace every category and author link of an existing book.

    Raises:
        MissingReferenceError: If any id does not reference an existing row.
            The existing links are left untouched in that case.
    """
    categories = unique_ids(category_ids)
    authors = unique_ids(author_ids)
    await _ensure_exist(session, Category, categories, "category")
    await _ensure_exist(session, Author, authors, "author")

    await remove_book_links(session, book.id)
    await _insert_links(session, book.id, categories, authors)


async def remove_book_links(session: AsyncSession, book_id: int) -> None:
    """Delete all junction rows of a book."""
    await session.execute(delete(BookCategory).where(BookCategory.book_id == book_id))
    await session.execute(delete(BookAuthor).where(BookAuthor.book_id == book_id))


async def get_book_links(session: AsyncSession, book_ids: list[int]) -> dict[int, BookLinks]:
    """Read the current links for the given books straight from the junction tables."""
    links: dict[int, BookLinks] = {book_id: BookLinks() for book_id in book_ids}
    if not book_ids:
        return links

    category_rows = await session.execute(
        select(BookCategory.book_id, Category.id, Category.name)
        .join(Category, Category.id == BookCategory.category_id)
        .where(BookCategory.book_id.in_(book_ids))
        .order_by(Category.name, Category.id)
    )
    for book_id, category_id, name in category_rows.all():
        links[book_id].categories.append(LinkedEntity(id=category_id, name=name))

    author_rows = await session.execute(
        select(BookAuthor.book_id, Author.id, Author.first_name, Author.last_name)
        .join(Author, Author.id == BookAuthor.author_id)
        .where(BookAuthor.book_id.in_(book_ids))
        .order_by(Author.first_name, Author.last_name, Author.id)
    )
    for book_id, author_id, first_name, last_name in author_rows.all():
        links[book_id].authors.append(LinkedEntity(id=author_id, name=f"{first_name} {last_name}"))

    return links
