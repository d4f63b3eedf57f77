"""Cart checkout — converts a cart into a loan and takes the copies off the shelf.

The handler runs inside a single unit of work: the loan with its details, the
stock withdrawals and the emptied cart are committed together or not at all.
Stock is verified for every line before anything is mutated.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bookshop.cart.cart import Cart, load_cart
from bookshop.catalogue.book import Book
from bookshop.domain import bookshop
from bookshop.errors import BookNotFound, EmptyCart, InsufficientStock
from bookshop.loan.loan import Loan

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="Cart")
class CheckoutCart:
    cart_id = Identifier(required=True)


@bookshop.command_handler(part_of=Cart)
class CheckoutCartHandler:
    @handle(CheckoutCart)
    def checkout_cart(self, command):
        cart = load_cart(command.cart_id)
        if not cart.items:
            raise EmptyCart(str(cart.id))

        book_repo = current_domain.repository_for(Book)
        lines = []
        for item in cart.items:
            book = book_repo.find_by_id(item.book_id)
            if book is None:
                raise BookNotFound(str(item.book_id))
            if book.quantity < item.quantity:
                logger.info(
                    "Checkout rejected",
                    cart_id=str(cart.id),
                    book_id=str(book.id),
                    requested=item.quantity,
                    available=book.quantity,
                )
                raise InsufficientStock(str(book.id), requested=item.quantity, available=book.quantity)
            lines.append((book, item.quantity))

        loan = Loan.open(user_id=cart.user_id, lines=lines, cart_id=str(cart.id))
        current_domain.repository_for(Loan).add(loan)

        for book, quantity in lines:
            book.withdraw(quantity)
            book_repo.add(book)

        cart.check_out(loan_id=loan.id)
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Cart checked out",
            cart_id=str(cart.id),
            user_id=str(cart.user_id),
            loan_id=str(loan.id),
            books=len(lines),
        )
        return str(loan.id)
