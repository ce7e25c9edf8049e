"""Category API routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bookstore.api.deps import set_content_range, stale_write_error
from bookstore.api.schemas import CategoryCreate, CategoryResponse, CategoryUpdate
from bookstore.core.database import atomic, get_db
from bookstore.models.category import Category
from bookstore.services.category_cascade import delete_category as delete_category_cascade

router = APIRouter(prefix="/api/categories", tags=["categories"])


async def _load_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id, populate_existing=True)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )
    return category


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> list[Category]:
    """List all categories ordered by name."""
    result = await db.execute(
        select(Category)
        .order_by(Category.name, Category.id)
        .execution_options(populate_existing=True)
    )
    categories = list(result.scalars().all())

    set_content_range(response, "categories", len(categories))
    return categories


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> Category:
    """Get a specific category by ID."""
    return await _load_category(db, category_id)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> Category:
    """Create a new category."""
    category = Category(
        name=category_data.name,
        description=category_data.description,
        created_at=datetime.now(tz=timezone.utc),
    )
    async with atomic(db):
        db.add(category)
        await db.flush()
    return category


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> Category:
    """Replace a category's fields."""
    if category_data.id is not None and category_data.id != category_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category id in body does not match the route",
        )

    category = await _load_category(db, category_id)
    try:
        async with atomic(db):
            category.name = category_data.name
            category.description = category_data.description
            category.updated_at = datetime.now(tz=timezone.utc)
            await db.flush()
    except StaleDataError:
        error = await stale_write_error(db, Category, category_id, "Category")
        raise error from None

    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a category.

    Books whose only category this is are deleted with it; books with other
    categories just lose this one.
    """
    result = await delete_category_cascade(db, category_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )
