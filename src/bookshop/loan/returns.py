"""Putting loaned copies back on the shelf."""

import structlog
from protean import handle
from protean.fields import Date, Identifier
from protean.utils.globals import current_domain

from bookshop.catalogue.book import Book
from bookshop.domain import bookshop
from bookshop.errors import BookNotFound
from bookshop.loan.loan import Loan, load_loan

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="Loan")
class ReturnLoan:
    loan_id = Identifier(required=True)
    return_date = Date()  # Optional: defaults to today


@bookshop.command_handler(part_of=Loan)
class ReturnLoanHandler:
    @handle(ReturnLoan)
    def return_loan(self, command):
        loan = load_loan(command.loan_id)
        loan.mark_returned(command.return_date)

        book_repo = current_domain.repository_for(Book)
        for detail in loan.details:
            book = book_repo.find_by_id(detail.book_id)
            if book is None:
                raise BookNotFound(str(detail.book_id))
            book.restock(detail.quantity)
            book_repo.add(book)

        current_domain.repository_for(Loan).add(loan)
        logger.info("Loan returned", loan_id=str(loan.id), user_id=str(loan.user_id))
