"""Unit tests for category deletion and its effect on linked books."""

import pytest
from sqlalchemy import func, select

from bookstore.models.author import Author
from bookstore.models.book import Book, BookAuthor, BookCategory
from bookstore.models.category import Category
from bookstore.services.category_cascade import delete_category
from bookstore.services.relationships import get_book_links


async def _book_ids(session) -> list[int]:
    result = await session.execute(select(Book.id).order_by(Book.id))
    return list(result.scalars().all())


async def _count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


class TestDeleteCategory:
    """Tests for the category cascade policy."""

    async def test_missing_category_returns_none(self, test_session, sample_book):
        """Test deleting an unknown category changes nothing."""
        assert await delete_category(test_session, 9999) is None
        assert await _book_ids(test_session) == [sample_book.id]
        assert await _count(test_session, BookCategory) == 1

    async def test_category_without_books(self, test_session, make_category):
        """Test an unused category is simply removed."""
        category = await make_category("Unused")

        result = await delete_category(test_session, category.id)

        assert result.deleted_book_ids == []
        assert result.detached_book_ids == []
        assert await _count(test_session, Category) == 0

    async def test_sole_category_deletes_the_book(self, test_session, sample_book, sample_category):
        """Test a book whose only category is removed is deleted with its author links."""
        result = await delete_category(test_session, sample_category.id)

        assert result.deleted_book_ids == [sample_book.id]
        assert await _book_ids(test_session) == []
        assert await _count(test_session, BookAuthor) == 0
        # The author itself is untouched
        assert await _count(test_session, Author) == 1

    async def test_shared_book_survives_with_remaining_category(
        self, test_session, make_category, make_book
    ):
        """Test a book with another category only loses the link."""
        fiction = await make_category("Fiction")
        classics = await make_category("Classics")
        book = await make_book(categories=[fiction, classics])

        result = await delete_category(test_session, fiction.id)

        assert result.deleted_book_ids == []
        assert result.detached_book_ids == [book.id]
        links = await get_book_links(test_session, [book.id])
        assert links[book.id].category_ids == [classics.id]

    async def test_every_linked_book_is_resolved(
        self, test_session, make_category, make_author, make_book
    ):
        """Test all linked books are handled, not just the first."""
        doomed = await make_category("Doomed")
        other = await make_category("Other")
        author = await make_author()
        first = await make_book("First", categories=[doomed], authors=[author])
        second = await make_book("Second", categories=[doomed])
        survivor = await make_book("Survivor", categories=[doomed, other], authors=[author])

        result = await delete_category(test_session, doomed.id)

        assert result.deleted_book_ids == [first.id, second.id]
        assert result.detached_book_ids == [survivor.id]
        assert await _book_ids(test_session) == [survivor.id]
        assert await test_session.get(Category, doomed.id, populate_existing=True) is None

        links = await get_book_links(test_session, [survivor.id])
        assert links[survivor.id].category_ids == [other.id]
        assert links[survivor.id].author_ids == [author.id]

    async def test_failure_midway_rolls_back_everything(
        self, test_session, make_category, make_book, monkeypatch
    ):
        """Test a failure during the cascade leaves books, links and category intact."""
        category = await make_category("Fragile")
        first = await make_book("First", categories=[category])
        second = await make_book("Second", categories=[category])
        # Rollback expires loaded instances, so keep plain ids
        category_id, book_ids = category.id, [first.id, second.id]

        original_delete = test_session.delete
        calls = []

        async def failing_delete(instance):
            calls.append(instance)
            if len(calls) == 2:
                raise RuntimeError("storage went away")
            await original_delete(instance)

        monkeypatch.setattr(test_session, "delete", failing_delete)

        with pytest.raises(RuntimeError, match="storage went away"):
            await delete_category(test_session, category_id)

        monkeypatch.undo()
        assert await _book_ids(test_session) == book_ids
        assert await _count(test_session, BookCategory) == 2
        assert await test_session.get(Category, category_id, populate_existing=True) is not None
