"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import bookstore.models  # noqa: F401
from bookstore.core.database import Base, get_db
from bookstore.main import app
from bookstore.models.author import Author
from bookstore.models.book import Book, BookAuthor, BookCategory
from bookstore.models.category import Category
from bookstore.services.file_storage import FileStorageService, get_file_storage_service

# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest.fixture
async def override_get_db(test_session: AsyncSession):
    """Override the get_db dependency for testing."""

    async def _override_get_db():
        yield test_session

    return _override_get_db


@pytest.fixture
def file_storage(tmp_path) -> FileStorageService:
    """File storage rooted in a temporary directory."""
    return FileStorageService(root=tmp_path / "uploads")


@pytest.fixture
async def client(override_get_db, file_storage) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage_service] = lambda: file_storage

    # Unhandled errors must come back as 500 responses, not test exceptions
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


@pytest.fixture
def make_category(test_session: AsyncSession):
    """Factory that commits a category."""

    async def _make(name: str = "Fiction", description: str | None = None) -> Category:
        category = Category(name=name, description=description, created_at=_now())
        test_session.add(category)
        await test_session.commit()
        return category

    return _make


@pytest.fixture
def make_author(test_session: AsyncSession):
    """Factory that commits an author."""

    async def _make(first_name: str = "Ursula", last_name: str = "Le Guin") -> Author:
        author = Author(first_name=first_name, last_name=last_name, created_at=_now())
        test_session.add(author)
        await test_session.commit()
        return author

    return _make


@pytest.fixture
def make_book(test_session: AsyncSession):
    """Factory that commits a book linked to the given categories and authors."""

    async def _make(
        title: str = "Test Book",
        price: str = "15.00",
        categories: list[Category] | None = None,
        authors: list[Author] | None = None,
        stock_quantity: int = 3,
        description: str | None = None,
    ) -> Book:
        book = Book(
            title=title,
            price=Decimal(price),
            stock_quantity=stock_quantity,
            description=description,
            created_at=_now(),
        )
        test_session.add(book)
        await test_session.flush()
        for category in categories or []:
            test_session.add(BookCategory(book_id=book.id, category_id=category.id))
        for author in authors or []:
            test_session.add(BookAuthor(book_id=book.id, author_id=author.id))
        await test_session.commit()
        return book

    return _make


@pytest.fixture
async def sample_category(make_category) -> Category:
    """Create a sample category for testing."""
    return await make_category("Science Fiction", "Speculative stories")


@pytest.fixture
async def sample_author(make_author) -> Author:
    """Create a sample author for testing."""
    return await make_author("Ursula", "Le Guin")


@pytest.fixture
async def sample_book(make_book, sample_category, sample_author) -> Book:
    """Create a sample book linked to one category and one author."""
    return await make_book(
        title="The Dispossessed",
        price="12.50",
        categories=[sample_category],
        authors=[sample_author],
        description="An ambiguous utopia",
    )
