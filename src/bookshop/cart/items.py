"""Item-level cart commands: add, remove and change quantity."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from bookshop.cart.cart import Cart, QuantityMode
from bookshop.catalogue.book import Book
from bookshop.domain import bookshop
from bookshop.errors import BookNotFound, CartItemNotFound
from bookshop.identity.user import load_user

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="Cart")
class AddItemToCart:
    """Put copies of a book in the user's cart, opening the cart if needed."""

    user_id = Identifier(required=True)
    book_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@bookshop.command(part_of="Cart")
class RemoveItemFromCart:
    user_id = Identifier(required=True)
    cart_item_id = Identifier(required=True)


@bookshop.command(part_of="Cart")
class UpdateCartItemQuantity:
    cart_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    mode = String(choices=QuantityMode, default=QuantityMode.RELATIVE.value)
    user_id = Identifier()  # Optional: verifies ownership when given


def _cart_owning_item(cart_item_id, user_id=None) -> Cart:
    cart = current_domain.repository_for(Cart).find_by_cart_item_id(cart_item_id)
    if cart is None:
        raise CartItemNotFound(cart_item_id)
    if user_id is not None and str(cart.user_id) != str(user_id):
        # Another user's item is reported exactly like a missing one
        logger.warning(
            "Cart item does not belong to user",
            cart_item_id=str(cart_item_id),
            user_id=str(user_id),
            owner_id=str(cart.user_id),
        )
        raise CartItemNotFound(cart_item_id)
    return cart


@bookshop.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddItemToCart)
    def add_item_to_cart(self, command):
        if current_domain.repository_for(Book).find_by_id(command.book_id) is None:
            raise BookNotFound(command.book_id)
        load_user(command.user_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user_id(command.user_id)
        if cart is None:
            cart = Cart.create(user_id=command.user_id)
            logger.info("Opened cart", cart_id=str(cart.id), user_id=str(command.user_id))

        cart.add_item(book_id=command.book_id, quantity=command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveItemFromCart)
    def remove_item_from_cart(self, command):
        cart = _cart_owning_item(command.cart_item_id, command.user_id)
        cart.remove_item(command.cart_item_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        cart = _cart_owning_item(command.cart_item_id, command.user_id)
        cart.update_item_quantity(
            item_id=command.cart_item_id,
            quantity=command.quantity,
            mode=command.mode or QuantityMode.RELATIVE.value,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)
