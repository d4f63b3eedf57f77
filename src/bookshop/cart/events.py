"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from bookshop.domain import bookshop


@bookshop.event(part_of="Cart")
class CartCreated:
    """A user's cart was opened on their first add-to-cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    created_at = DateTime(required=True)


@bookshop.event(part_of="Cart")
class CartItemAdded:
    """Copies of a book were put in the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@bookshop.event(part_of="Cart")
class CartItemQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    mode = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@bookshop.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    book_id = Identifier(required=True)


@bookshop.event(part_of="Cart")
class CartCleared:
    """Every item was taken out of the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@bookshop.event(part_of="Cart")
class CartCheckedOut:
    """The cart's items became a loan and the cart was emptied."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    loan_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {book_id, quantity}
