"""Commands for adding new titles and restocking existing ones."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from bookshop.catalogue.book import Book
from bookshop.domain import bookshop
from bookshop.errors import BookNotFound


@bookshop.command(part_of="Book")
class AddBook:
    """Add a new title to the catalogue with its initial shelf quantity."""

    title = String(required=True, max_length=255)
    author = String(max_length=255)
    genre = String(max_length=100)
    quantity = Integer(default=0)


@bookshop.command(part_of="Book")
class RestockBook:
    """Put more copies of an existing title on the shelf."""

    book_id = Identifier(required=True)
    quantity = Integer(required=True)


@bookshop.command_handler(part_of=Book)
class StockingHandler:
    @handle(AddBook)
    def add_book(self, command):
        book = Book.create(
            title=command.title,
            author=command.author,
            genre=command.genre,
            quantity=command.quantity or 0,
        )
        current_domain.repository_for(Book).add(book)
        return str(book.id)

    @handle(RestockBook)
    def restock_book(self, command):
        repo = current_domain.repository_for(Book)
        book = repo.find_by_id(command.book_id)
        if book is None:
            raise BookNotFound(command.book_id)
        book.restock(command.quantity)
        repo.add(book)
