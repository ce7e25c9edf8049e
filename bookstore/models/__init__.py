"""Database models."""

from bookstore.models.author import Author
from bookstore.models.book import Book, BookAuthor, BookCategory
from bookstore.models.category import Category
from bookstore.models.user import User

__all__ = ["Author", "Book", "BookAuthor", "BookCategory", "Category", "User"]
