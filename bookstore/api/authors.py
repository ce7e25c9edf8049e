"""Author API routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bookstore.api.deps import set_content_range, stale_write_error
from bookstore.api.schemas import AuthorCreate, AuthorResponse, AuthorUpdate
from bookstore.core.database import atomic, get_db
from bookstore.models.author import Author
from bookstore.models.book import BookAuthor

router = APIRouter(prefix="/api/authors", tags=["authors"])


async def _load_author(db: AsyncSession, author_id: int) -> Author:
    author = await db.get(Author, author_id, populate_existing=True)
    if not author:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Author not found",
        )
    return author


@router.get("", response_model=list[AuthorResponse])
async def list_authors(
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> list[Author]:
    """List all authors ordered by first name, then last name."""
    result = await db.execute(
        select(Author)
        .order_by(Author.first_name, Author.last_name, Author.id)
        .execution_options(populate_existing=True)
    )
    authors = list(result.scalars().all())

    set_content_range(response, "authors", len(authors))
    return authors


@router.get("/{author_id}", response_model=AuthorResponse)
async def get_author(
    author_id: int,
    db: AsyncSession = Depends(get_db),
) -> Author:
    """Get a specific author by ID."""
    return await _load_author(db, author_id)


@router.post("", response_model=AuthorResponse, status_code=status.HTTP_201_CREATED)
async def create_author(
    author_data: AuthorCreate,
    db: AsyncSession = Depends(get_db),
) -> Author:
    """Create a new author."""
    author = Author(
        **author_data.model_dump(),
        created_at=datetime.now(tz=timezone.utc),
    )
    async with atomic(db):
        db.add(author)
        await db.flush()
    return author


@router.put("/{author_id}", response_model=AuthorResponse)
async def update_author(
    author_id: int,
    author_data: AuthorUpdate,
    db: AsyncSession = Depends(get_db),
) -> Author:
    """Replace an author's fields."""
    if author_data.id is not None and author_data.id != author_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Author id in body does not match the route",
        )

    author = await _load_author(db, author_id)
    try:
        async with atomic(db):
            for field, value in author_data.model_dump(exclude={"id"}).items():
                setattr(author, field, value)
            author.updated_at = datetime.now(tz=timezone.utc)
            await db.flush()
    except StaleDataError:
        error = await stale_write_error(db, Author, author_id, "Author")
        raise error from None

    return author


@router.delete("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_author(
    author_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete an author. Books keep existing; only their link to the author goes."""
    author = await _load_author(db, author_id)

    async with atomic(db):
        await db.execute(delete(BookAuthor).where(BookAuthor.author_id == author_id))
        await db.delete(author)
        await db.flush()
