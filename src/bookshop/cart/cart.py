"""Cart aggregate — a user's selection of books waiting for checkout.

Each user has at most one cart. It is opened lazily on the first add-to-cart,
holds one item per book, and is emptied (not destroyed) when checked out so the
same cart serves the user's next purchase.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from bookshop.cart.events import (
    CartCheckedOut,
    CartCleared,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from bookshop.domain import bookshop
from bookshop.errors import CartItemNotFound, CartNotFound, EmptyCart, InvalidQuantity


class CartStatus(Enum):
    EMPTY = "Empty"
    ACTIVE = "Active"


class QuantityMode(Enum):
    RELATIVE = "Relative"  # add the given delta to the current quantity
    ABSOLUTE = "Absolute"  # replace the current quantity


@bookshop.entity(part_of="Cart")
class CartItem:
    book_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@bookshop.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    status = String(choices=CartStatus, default=CartStatus.EMPTY.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_item_per_book(self):
        book_ids = [str(item.book_id) for item in self.items]
        if len(book_ids) != len(set(book_ids)):
            raise ValidationError({"items": ["A book can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        cart = cls(
            user_id=user_id,
            status=CartStatus.EMPTY.value,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(CartCreated(cart_id=str(cart.id), user_id=str(user_id), created_at=now))
        return cart

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def find_item_for_book(self, book_id):
        return next((i for i in self.items if str(i.book_id) == str(book_id)), None)

    def add_item(self, book_id, quantity):
        """Add copies of a book, merging with the existing line for that book."""
        if quantity < 1:
            raise InvalidQuantity(quantity)

        now = datetime.now(UTC)
        existing = self.find_item_for_book(book_id)
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(book_id=book_id, quantity=quantity, added_at=now)
            self.add_items(item)

        self._touch(now)
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                book_id=str(book_id),
                quantity=quantity,
                new_quantity=item.quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity, mode=QuantityMode.RELATIVE):
        item = self.find_item(item_id)
        if item is None:
            raise CartItemNotFound(item_id)

        mode = QuantityMode(mode)
        previous = item.quantity
        new_quantity = previous + quantity if mode == QuantityMode.RELATIVE else quantity
        if new_quantity < 1:
            raise InvalidQuantity(new_quantity, f"Resulting quantity must be at least 1, got {new_quantity}")

        item.quantity = new_quantity
        self._touch()
        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                mode=mode.value,
                previous_quantity=previous,
                new_quantity=new_quantity,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        if item is None:
            raise CartItemNotFound(item_id)

        self.remove_items(item)
        self._touch()
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                book_id=str(item.book_id),
            )
        )

    def clear(self):
        """Remove every item. An already empty cart is left untouched."""
        items = list(self.items)
        if not items:
            return 0

        for item in items:
            self.remove_items(item)
        self._touch()
        self.raise_(CartCleared(cart_id=str(self.id), items_removed=len(items)))
        return len(items)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def snapshot(self):
        return [{"book_id": str(item.book_id), "quantity": item.quantity} for item in self.items]

    def check_out(self, loan_id):
        """Empty the cart after its items were turned into ``loan_id``."""
        if not self.items:
            raise EmptyCart(str(self.id))

        items_snapshot = self.snapshot()
        for item in list(self.items):
            self.remove_items(item)
        self._touch()

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                loan_id=str(loan_id),
                items=json.dumps(items_snapshot),
            )
        )
        return items_snapshot

    def _touch(self, now=None):
        self.status = CartStatus.ACTIVE.value if self.items else CartStatus.EMPTY.value
        self.updated_at = now or datetime.now(UTC)


@bookshop.repository(part_of=Cart)
class CartRepository:
    def find_by_id(self, cart_id) -> Cart | None:
        try:
            return self.get(cart_id)
        except ObjectNotFoundError:
            return None

    def find_by_user_id(self, user_id) -> Cart | None:
        carts = self._dao.query.filter(user_id=str(user_id)).limit(None).all().items
        return carts[0] if carts else None

    def find_by_user_email(self, email) -> Cart | None:
        from bookshop.identity.user import User

        user = current_domain.repository_for(User).find_by_email(email)
        if user is None:
            return None
        return self.find_by_user_id(str(user.id))

    def find_by_cart_item_id(self, item_id) -> Cart | None:
        items = current_domain.repository_for(CartItem)._dao.query.filter(id=str(item_id)).all().items
        return self.find_by_id(items[0].cart_id) if items else None

    def find_all(self) -> list[Cart]:
        return self._dao.query.limit(None).all().items

    def remove(self, cart):
        # Items go first so no orphan rows survive the cart
        if cart.clear():
            self.add(cart)
        self._dao.delete(cart)

    def remove_all(self) -> int:
        carts = self.find_all()
        for cart in carts:
            self.remove(cart)
        return len(carts)


def load_cart(cart_id) -> Cart:
    cart = current_domain.repository_for(Cart).find_by_id(cart_id)
    if cart is None:
        raise CartNotFound(cart_id=cart_id)
    return cart
