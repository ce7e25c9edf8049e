"""Unit tests for database models."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from bookstore.models.author import Author
from bookstore.models.book import Book, BookAuthor, BookCategory
from bookstore.models.category import Category
from bookstore.models.user import User


class TestBookModel:
    """Tests for the Book model."""

    async def test_create_book_defaults(self, test_session):
        """Test creating a book applies column defaults."""
        book = Book(
            title="A Wizard of Earthsea",
            price=Decimal("9.99"),
            created_at=datetime.now(tz=timezone.utc),
        )
        test_session.add(book)
        await test_session.flush()

        assert book.id is not None
        assert book.language == "English"
        assert book.is_active is True
        assert book.stock_quantity == 0
        assert book.number_of_pages == 0
        assert book.version == 1
        assert book.cover_image_path is None

    async def test_computed_properties(self):
        """Test stock and price display helpers."""
        book = Book(title="Lathe of Heaven", price=Decimal("7.5"), stock_quantity=0)
        assert book.is_in_stock is False
        assert book.display_price == "$7.50"

        book.stock_quantity = 2
        assert book.is_in_stock is True

    async def test_version_increments_on_update(self, sample_book, test_session):
        """Test the optimistic-concurrency counter moves on every update."""
        assert sample_book.version == 1
        sample_book.title = "The Dispossessed (Reissue)"
        await test_session.flush()
        assert sample_book.version == 2

    async def test_book_repr(self, sample_book):
        """Test book string representation."""
        assert "The Dispossessed" in repr(sample_book)


class TestJunctionTables:
    """Tests for the BookAuthor / BookCategory junction rows."""

    async def test_links_cascade_when_book_row_is_deleted(self, test_session, sample_book):
        """Junction rows never outlive their book."""
        await test_session.execute(delete(Book).where(Book.id == sample_book.id))

        categories = await test_session.scalar(select(func.count()).select_from(BookCategory))
        authors = await test_session.scalar(select(func.count()).select_from(BookAuthor))
        assert categories == 0
        assert authors == 0

    async def test_links_cascade_when_category_row_is_deleted(
        self, test_session, sample_book, sample_category
    ):
        """Junction rows never outlive their category; the book row stays."""
        await test_session.execute(delete(Category).where(Category.id == sample_category.id))

        links = await test_session.scalar(select(func.count()).select_from(BookCategory))
        books = await test_session.scalar(select(func.count()).select_from(Book))
        assert links == 0
        assert books == 1

    async def test_link_to_unknown_category_violates_foreign_key(self, test_session, sample_book):
        """Foreign keys are enforced by the store."""
        test_session.add(BookCategory(book_id=sample_book.id, category_id=9999))
        with pytest.raises(IntegrityError):
            await test_session.flush()


class TestAuthorModel:
    """Tests for the Author model."""

    async def test_full_name(self, sample_author):
        """Test author full name."""
        assert sample_author.full_name == "Ursula Le Guin"
        assert "Ursula Le Guin" in repr(sample_author)

    async def test_create_author_minimal(self, test_session):
        """Test creating an author with only names."""
        author = Author(first_name="Octavia", last_name="Butler")
        test_session.add(author)
        await test_session.flush()

        assert author.id is not None
        assert author.biography is None
        assert author.date_of_birth is None


class TestUserModel:
    """Tests for the User model."""

    async def test_create_user_defaults(self, test_session):
        """Test a new user gets an id, role and active flag."""
        user = User(email="reader@example.com", username="reader", password_hash="x")
        test_session.add(user)
        await test_session.flush()

        assert len(user.id) == 36
        assert user.role == "User"
        assert user.is_active is True

    async def test_full_name_strips_missing_parts(self):
        """Test full name with missing first or last name."""
        assert User(first_name="Ada", last_name=None).full_name == "Ada"
        assert User(first_name=None, last_name=None).full_name == ""
        assert User(first_name="Ada", last_name="Lovelace").full_name == "Ada Lovelace"
