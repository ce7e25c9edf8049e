"""Book API routes."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bookstore.api.deps import set_content_range, stale_write_error
from bookstore.api.schemas import BookAuthorLink, BookCategoryLink, BookResponse
from bookstore.core.database import atomic, get_db
from bookstore.models.book import Book
from bookstore.services.book_filters import BookFilters, book_list_query
from bookstore.services.file_storage import FileStorageService, get_file_storage_service
from bookstore.services.relationships import (
    BookLinks,
    get_book_links,
    link_book,
    remove_book_links,
    replace_book_links,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


@dataclass
class CoverUpload:
    """A cover image read from the request."""

    filename: str
    content_type: str | None
    data: bytes


@dataclass
class BookForm:
    """Scalar fields and link ids submitted for a book write."""

    title: str
    price: Decimal
    category_ids: list[int]
    author_ids: list[int]
    isbn: str | None
    description: str | None
    stock_quantity: int
    published_date: date | None
    publisher: str | None
    number_of_pages: int
    language: str | None
    is_active: bool
    cover_image: UploadFile | None

    def apply_to(self, book: Book) -> None:
        book.title = self.title
        book.isbn = self.isbn
        book.description = self.description
        book.price = self.price
        book.stock_quantity = self.stock_quantity
        book.published_date = self.published_date
        book.publisher = self.publisher
        book.number_of_pages = self.number_of_pages
        book.language = self.language
        book.is_active = self.is_active


def book_form(
    title: str = Form(..., min_length=1, max_length=200),
    price: Decimal = Form(..., gt=0, max_digits=10, decimal_places=2),
    category_ids: list[int] = Form(..., alias="categoryIds"),
    author_ids: list[int] = Form(..., alias="authorIds"),
    isbn: str | None = Form(None, max_length=20),
    description: str | None = Form(None, max_length=2000),
    stock_quantity: int = Form(0, ge=0, alias="stockQuantity"),
    published_date: date | None = Form(None, alias="publishedDate"),
    publisher: str | None = Form(None, max_length=100),
    number_of_pages: int = Form(0, ge=0, alias="numberOfPages"),
    language: str | None = Form("English", max_length=20),
    is_active: bool = Form(True, alias="isActive"),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
) -> BookForm:
    """Collect a multipart or urlencoded book form."""
    return BookForm(
        title=title,
        price=price,
        category_ids=category_ids,
        author_ids=author_ids,
        isbn=isbn,
        description=description,
        stock_quantity=stock_quantity,
        published_date=published_date,
        publisher=publisher,
        number_of_pages=number_of_pages,
        language=language,
        is_active=is_active,
        cover_image=cover_image,
    )


async def _read_cover(form: BookForm, storage: FileStorageService) -> CoverUpload | None:
    """Read and validate the cover before anything is written."""
    if form.cover_image is None:
        return None
    data = await form.cover_image.read()
    filename = form.cover_image.filename or "cover.jpg"
    storage.validate(filename, form.cover_image.content_type, data)
    return CoverUpload(filename=filename, content_type=form.cover_image.content_type, data=data)


def _book_response(book: Book, links: BookLinks) -> BookResponse:
    return BookResponse(
        id=book.id,
        title=book.title,
        isbn=book.isbn,
        description=book.description,
        price=book.price,
        stock_quantity=book.stock_quantity,
        published_date=book.published_date,
        cover_image_path=book.cover_image_path,
        publisher=book.publisher,
        number_of_pages=book.number_of_pages,
        language=book.language,
        is_active=book.is_active,
        is_in_stock=book.is_in_stock,
        display_price=book.display_price,
        created_at=book.created_at,
        updated_at=book.updated_at,
        category_ids=links.category_ids,
        author_ids=links.author_ids,
        book_categories=[
            BookCategoryLink(book_id=book.id, category_id=c.id, category_name=c.name)
            for c in links.categories
        ],
        book_authors=[
            BookAuthorLink(book_id=book.id, author_id=a.id, author_name=a.name)
            for a in links.authors
        ],
    )


async def _load_book(db: AsyncSession, book_id: int) -> Book:
    book = await db.get(Book, book_id, populate_existing=True)
    if not book:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found",
        )
    return book


async def _respond_with(db: AsyncSession, book: Book) -> BookResponse:
    links = await get_book_links(db, [book.id])
    return _book_response(book, links[book.id])


@router.get("", response_model=list[BookResponse])
async def list_books(
    response: Response,
    category_id: int | None = Query(None, alias="categoryId"),
    author_id: int | None = Query(None, alias="authorId"),
    price_gte: Decimal | None = None,
    price_lte: Decimal | None = None,
    stock_quantity_lte: int | None = Query(None, alias="stockQuantity_lte"),
    q: str | None = None,
    db: AsyncSession = Depends(get_db),
) -> list[BookResponse]:
    """List books matching every supplied filter, ordered by title.

    The full filtered set is returned; Content-Range always spans all of it.
    """
    filters = BookFilters(
        category_id=category_id,
        author_id=author_id,
        price_gte=price_gte,
        price_lte=price_lte,
        stock_quantity_lte=stock_quantity_lte,
        q=q,
    )
    result = await db.execute(
        book_list_query(filters).execution_options(populate_existing=True)
    )
    books = list(result.scalars().all())
    links = await get_book_links(db, [book.id for book in books])

    set_content_range(response, "books", len(books))
    return [_book_response(book, links[book.id]) for book in books]


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: int,
    db: AsyncSession = Depends(get_db),
) -> BookResponse:
    """Get a specific book by ID."""
    book = await _load_book(db, book_id)
    return await _respond_with(db, book)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    form: BookForm = Depends(book_form),
    db: AsyncSession = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage_service),
) -> BookResponse:
    """Create a book together with its category and author links."""
    cover = await _read_cover(form, storage)
    cover_url: str | None = None

    try:
        async with atomic(db):
            book = Book(created_at=datetime.now(tz=timezone.utc))
            form.apply_to(book)
            db.add(book)
            await db.flush()

            await link_book(db, book, form.category_ids, form.author_ids)

            if cover is not None:
                stored = storage.save_book_cover(
                    book.id, cover.filename, cover.content_type, cover.data
                )
                cover_url = stored.url
                book.cover_image_path = cover_url
                await db.flush()
    except Exception:
        storage.delete_by_url(cover_url)
        raise

    return await _respond_with(db, book)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    form: BookForm = Depends(book_form),
    db: AsyncSession = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage_service),
) -> BookResponse:
    """Update a book and replace all of its category and author links."""
    book = await _load_book(db, book_id)
    cover = await _read_cover(form, storage)
    previous_cover = book.cover_image_path
    cover_url: str | None = None

    try:
        async with atomic(db):
            form.apply_to(book)
            book.updated_at = datetime.now(tz=timezone.utc)

            if cover is not None:
                stored = storage.save_book_cover(
                    book.id, cover.filename, cover.content_type, cover.data
                )
                cover_url = stored.url
                book.cover_image_path = cover_url

            await db.flush()
            await replace_book_links(db, book, form.category_ids, form.author_ids)
    except StaleDataError:
        storage.delete_by_url(cover_url)
        error = await stale_write_error(db, Book, book_id, "Book")
        raise error from None
    except Exception:
        storage.delete_by_url(cover_url)
        raise

    if cover_url is not None and previous_cover and previous_cover != cover_url:
        if not storage.delete_by_url(previous_cover):
            logger.info(f"Previous cover of book {book_id} was not removed: {previous_cover}")

    return await _respond_with(db, book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    db: AsyncSession = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage_service),
) -> None:
    """Delete a book, its links and its cover image."""
    book = await _load_book(db, book_id)
    cover = book.cover_image_path

    async with atomic(db):
        await remove_book_links(db, book.id)
        await db.delete(book)
        await db.flush()

    storage.delete_by_url(cover)
