"""Cart service — the entry point the HTTP layer uses for carts and checkout.

Mutations are dispatched as commands and run under the owning user's lock, so
the lazy find-or-create of a cart and every later write to it happen one at a
time per user. Checkout additionally holds the lock of every book in the cart
while it checks and withdraws stock.
"""

from contextlib import ExitStack

import structlog
from protean.utils.globals import current_domain

from bookshop.cart.cart import Cart, QuantityMode, load_cart
from bookshop.cart.checkout import CheckoutCart
from bookshop.cart.items import AddItemToCart, RemoveItemFromCart, UpdateCartItemQuantity
from bookshop.cart.management import ClearCart, DeleteAllCarts, DeleteCart
from bookshop.errors import CartItemNotFound, CartNotFound, NoCartsFound, UserNotFound
from bookshop.identity.user import User
from bookshop.loan.loan import load_loan
from bookshop.utils.locks import book_key, locked, user_key
from bookshop.utils.operations import operation
from bookshop.views import CartView, LoanView

logger = structlog.get_logger(__name__)


class CartService:
    @property
    def carts(self):
        return current_domain.repository_for(Cart)

    def _view(self, cart_id) -> CartView:
        return CartView.from_aggregate(load_cart(cart_id))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @operation("get_cart_for_user")
    def get_cart_for_user(self, email) -> CartView:
        if not current_domain.repository_for(User).exists_by_email(email):
            raise UserNotFound(email=email)

        cart = self.carts.find_by_user_email(email)
        if cart is None:
            raise CartNotFound(email=email)
        return CartView.from_aggregate(cart)

    @operation("get_all_carts")
    def get_all_carts(self) -> list[CartView]:
        carts = self.carts.find_all()
        if not carts:
            raise NoCartsFound()
        return [CartView.from_aggregate(cart) for cart in carts]

    @operation("get_cart_by_id")
    def get_cart_by_id(self, cart_id) -> CartView:
        return self._view(cart_id)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    @operation("add_item_to_cart")
    def add_item_to_cart(self, user_id, book_id, quantity) -> CartView:
        with locked(user_key(user_id)):
            cart_id = current_domain.process(
                AddItemToCart(user_id=user_id, book_id=book_id, quantity=quantity),
                asynchronous=False,
            )
            return self._view(cart_id)

    @operation("remove_item_from_cart")
    def remove_item_from_cart(self, user_id, cart_item_id) -> CartView:
        with locked(user_key(user_id)):
            cart_id = current_domain.process(
                RemoveItemFromCart(user_id=user_id, cart_item_id=cart_item_id),
                asynchronous=False,
            )
            return self._view(cart_id)

    @operation("update_cart_item_quantity")
    def update_cart_item_quantity(
        self,
        cart_item_id,
        quantity,
        mode=QuantityMode.RELATIVE,
        user_id=None,
    ) -> CartView:
        """Change an item's quantity and return the whole cart.

        In RELATIVE mode ``quantity`` is a delta added to the current value; in
        ABSOLUTE mode it replaces it.
        """
        owner_id = user_id
        if owner_id is None:
            cart = self.carts.find_by_cart_item_id(cart_item_id)
            if cart is None:
                raise CartItemNotFound(cart_item_id)
            owner_id = str(cart.user_id)

        with locked(user_key(owner_id)):
            cart_id = current_domain.process(
                UpdateCartItemQuantity(
                    cart_item_id=cart_item_id,
                    quantity=quantity,
                    mode=QuantityMode(mode).value,
                    user_id=user_id,
                ),
                asynchronous=False,
            )
            return self._view(cart_id)

    @operation("clear_cart")
    def clear_cart(self, user_id) -> bool:
        with locked(user_key(user_id)):
            removed = current_domain.process(ClearCart(user_id=user_id), asynchronous=False)

        logger.info("Cart cleared", user_id=str(user_id), items_removed=removed)
        return True

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    @operation("move_cart_to_loan")
    def move_cart_to_loan(self, cart_id) -> LoanView:
        # A cart never changes owner, so reading it before taking the lock is safe
        owner_id = str(load_cart(cart_id).user_id)

        with ExitStack() as stack:
            stack.enter_context(locked(user_key(owner_id)))

            # The cart cannot change while its owner's lock is held
            book_ids = [str(item.book_id) for item in load_cart(cart_id).items]
            stack.enter_context(locked(*(book_key(book_id) for book_id in book_ids)))

            loan_id = current_domain.process(CheckoutCart(cart_id=cart_id), asynchronous=False)

        return LoanView.from_aggregate(load_loan(loan_id))

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    @operation("delete_cart_by_id")
    def delete_cart_by_id(self, cart_id) -> bool:
        # Owner is fixed at creation; see move_cart_to_loan
        owner_id = str(load_cart(cart_id).user_id)
        with locked(user_key(owner_id)):
            current_domain.process(DeleteCart(cart_id=cart_id), asynchronous=False)
        return True

    @operation("delete_all_carts")
    def delete_all_carts(self) -> bool:
        current_domain.process(DeleteAllCarts(), asynchronous=False)
        return True
