"""Catalogue service: adding titles and managing the shelf quantity."""

import structlog
from protean.utils.globals import current_domain

from bookshop.catalogue.book import Book
from bookshop.catalogue.stocking import AddBook, RestockBook
from bookshop.errors import BookNotFound
from bookshop.utils.locks import book_key, locked
from bookshop.utils.operations import operation
from bookshop.views import BookView

logger = structlog.get_logger(__name__)


class CatalogueService:
    @property
    def books(self):
        return current_domain.repository_for(Book)

    @operation("get_book")
    def get_book(self, book_id) -> BookView:
        book = self.books.find_by_id(book_id)
        if book is None:
            raise BookNotFound(book_id)
        return BookView.from_aggregate(book)

    @operation("get_all_books")
    def get_all_books(self) -> list[BookView]:
        return [BookView.from_aggregate(book) for book in self.books.find_all()]

    @operation("add_book")
    def add_book(self, title, author=None, genre=None, quantity=0) -> BookView:
        book_id = current_domain.process(
            AddBook(title=title, author=author, genre=genre, quantity=quantity),
            asynchronous=False,
        )
        logger.info("Book added", book_id=book_id, title=title, quantity=quantity)
        return self.get_book(book_id)

    @operation("restock_book")
    def restock_book(self, book_id, quantity) -> BookView:
        with locked(book_key(book_id)):
            current_domain.process(RestockBook(book_id=book_id, quantity=quantity), asynchronous=False)
            return self.get_book(book_id)
