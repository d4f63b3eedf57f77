"""Clearing carts and removing them administratively."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bookshop.cart.cart import Cart, load_cart
from bookshop.domain import bookshop
from bookshop.errors import CartNotFound, NoCartsFound
from bookshop.identity.user import load_user

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="Cart")
class ClearCart:
    """Empty the user's cart. Clearing an empty cart is a no-op."""

    user_id = Identifier(required=True)


@bookshop.command(part_of="Cart")
class DeleteCart:
    cart_id = Identifier(required=True)


@bookshop.command(part_of="Cart")
class DeleteAllCarts:
    pass


@bookshop.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        load_user(command.user_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user_id(command.user_id)
        if cart is None:
            raise CartNotFound(user_id=command.user_id)

        removed = cart.clear()
        if removed:
            repo.add(cart)
        return removed

    @handle(DeleteCart)
    def delete_cart(self, command):
        cart = load_cart(command.cart_id)
        current_domain.repository_for(Cart).remove(cart)
        logger.info("Cart deleted", cart_id=str(cart.id), user_id=str(cart.user_id))

    @handle(DeleteAllCarts)
    def delete_all_carts(self, command):
        repo = current_domain.repository_for(Cart)
        if not repo.find_all():
            raise NoCartsFound()

        count = repo.remove_all()
        logger.info("All carts deleted", count=count)
        return count
