"""Domain events for the Book aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from bookshop.domain import bookshop


@bookshop.event(part_of="Book")
class BookAdded:
    """A new title was added to the catalogue."""

    __version__ = 1

    book_id = Identifier(required=True)
    title = String(required=True)
    genre = String()
    quantity = Integer(required=True)
    added_at = DateTime(required=True)


@bookshop.event(part_of="Book")
class StockWithdrawn:
    """Copies of a book left the shelf at checkout."""

    __version__ = 1

    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@bookshop.event(part_of="Book")
class StockReplenished:
    """Copies of a book were returned to the shelf or restocked."""

    __version__ = 1

    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
