"""Book aggregate — a catalogue title and the number of copies on the shelf.

The shelf quantity is the inventory ledger for checkouts: it only goes down
through ``withdraw`` (called at checkout) and never below zero.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Integer, String

from bookshop.catalogue.events import BookAdded, StockReplenished, StockWithdrawn
from bookshop.domain import bookshop
from bookshop.errors import InsufficientStock, InvalidQuantity


@bookshop.aggregate
class Book:
    title = String(required=True, max_length=255)
    author = String(max_length=255)
    genre = String(max_length=100)
    quantity = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, title, author=None, genre=None, quantity=0):
        if quantity < 0:
            raise InvalidQuantity(quantity, "Initial quantity cannot be negative")

        now = datetime.now(UTC)
        book = cls(
            title=title,
            author=author,
            genre=genre,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        book.raise_(
            BookAdded(
                book_id=str(book.id),
                title=title,
                genre=genre,
                quantity=quantity,
                added_at=now,
            )
        )
        return book

    def withdraw(self, quantity):
        """Take copies off the shelf; fails without changes when not enough remain."""
        if quantity < 1:
            raise InvalidQuantity(quantity)
        if quantity > self.quantity:
            raise InsufficientStock(str(self.id), requested=quantity, available=self.quantity)

        previous = self.quantity
        self.quantity = previous - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockWithdrawn(
                book_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
            )
        )

    def restock(self, quantity):
        if quantity < 1:
            raise InvalidQuantity(quantity)

        previous = self.quantity
        self.quantity = previous + quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReplenished(
                book_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
            )
        )


@bookshop.repository(part_of=Book)
class BookRepository:
    def find_by_id(self, book_id) -> Book | None:
        try:
            return self.get(book_id)
        except ObjectNotFoundError:
            return None

    def find_all(self) -> list[Book]:
        return self._dao.query.limit(None).all().items
