"""Category deletion with its book cascade policy.

A book must never be left without categories. When a category is deleted,
every book that has it as its only category is deleted as well; books with
other categories only lose the link to the deleted one. The whole sequence
is one unit of work.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.database import atomic
from bookstore.core.tracing import get_tracer
from bookstore.models.book import Book, BookCategory
from bookstore.models.category import Category
from bookstore.services.relationships import remove_book_links

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


@dataclass
class CascadeResult:
    """Outcome of a category deletion."""

    category_id: int
    deleted_book_ids: list[int] = field(default_factory=list)
    detached_book_ids: list[int] = field(default_factory=list)


async def delete_category(session: AsyncSession, category_id: int) -> CascadeResult | None:
    """Delete a category and resolve the fate of every book linked to it.

    Returns:
        The cascade outcome, or None if the category does not exist (nothing
        is changed in that case).
    """
    category = await session.get(Category, category_id)
    if category is None:
        return None

    result = CascadeResult(category_id=category_id)

    with tracer.start_as_current_span("category.delete_cascade") as span:
        span.set_attribute("category.id", category_id)

        async with atomic(session):
            linked = await session.execute(
                select(BookCategory.book_id)
                .where(BookCategory.category_id == category_id)
                .distinct()
                .order_by(BookCategory.book_id)
            )
            for book_id in linked.scalars().all():
                # Count the book's full category set, not only this category
                count_result = await session.execute(
                    select(func.count())
                    .select_from(BookCategory)
                    .where(BookCategory.book_id == book_id)
                )
                category_count = count_result.scalar_one()

                if category_count == 1:
                    book = await session.get(Book, book_id)
                    if book is None:
                        continue
                    await remove_book_links(session, book_id)
                    await session.delete(book)
                    result.deleted_book_ids.append(book_id)
                else:
                    await session.execute(
                        delete(BookCategory).where(
                            BookCategory.book_id == book_id,
                            BookCategory.category_id == category_id,
                        )
                    )
                    result.detached_book_ids.append(book_id)
                await session.flush()

            await session.delete(category)
            await session.flush()

        span.set_attribute("books.deleted", len(result.deleted_book_ids))
        span.set_attribute("books.detached", len(result.detached_book_ids))

    logger.info(
        f"Deleted category {category_id}: removed {len(result.deleted_book_ids)} book(s), "
        f"detached {len(result.detached_book_ids)} book(s)"
    )
    return result
