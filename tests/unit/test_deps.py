"""Unit tests for shared API dependencies."""

import pytest
from fastapi import Response
from sqlalchemy import delete, update
from sqlalchemy.orm.exc import StaleDataError

from bookstore.api.deps import set_content_range, stale_write_error
from bookstore.models.book import Book


def test_set_content_range():
    response = Response()
    set_content_range(response, "categories", 3)
    assert response.headers["Content-Range"] == "categories 0-2/3"


class TestStaleWriteError:
    """Tests for translating optimistic-concurrency failures."""

    async def test_concurrent_update_is_a_conflict(self, test_session, sample_book):
        """Test a write against an outdated version maps to 409."""
        book_id = sample_book.id
        await test_session.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(version=Book.version + 1)
            .execution_options(synchronize_session=False)
        )
        await test_session.commit()

        sample_book.title = "Edited elsewhere"
        with pytest.raises(StaleDataError):
            await test_session.flush()
        await test_session.rollback()

        error = await stale_write_error(test_session, Book, book_id, "Book")
        assert error.status_code == 409
        assert error.detail == "Book was modified by another request"

    async def test_concurrent_delete_is_not_found(self, test_session, sample_book):
        """Test a write against a row deleted underneath it maps to 404."""
        book_id = sample_book.id
        await test_session.execute(
            delete(Book).where(Book.id == book_id).execution_options(synchronize_session=False)
        )
        await test_session.commit()

        sample_book.title = "Edited after delete"
        with pytest.raises(StaleDataError):
            await test_session.flush()
        await test_session.rollback()

        error = await stale_write_error(test_session, Book, book_id, "Book")
        assert error.status_code == 404
        assert error.detail == "Book not found"
