"""Domain events for the Loan aggregate."""

from protean.fields import Date, Identifier, Integer, Text

from bookshop.domain import bookshop


@bookshop.event(part_of="Loan")
class LoanCreated:
    """Books left the shop on a new loan."""

    __version__ = 1

    loan_id = Identifier(required=True)
    user_id = Identifier(required=True)
    loan_date = Date(required=True)
    due_date = Date(required=True)
    details = Text(required=True)  # JSON: list of {book_id, quantity}
    total_copies = Integer(required=True)


@bookshop.event(part_of="Loan")
class LoanReturned:
    __version__ = 1

    loan_id = Identifier(required=True)
    user_id = Identifier(required=True)
    return_date = Date(required=True)


@bookshop.event(part_of="Loan")
class LoanMarkedOverdue:
    __version__ = 1

    loan_id = Identifier(required=True)
    user_id = Identifier(required=True)
    due_date = Date(required=True)
    detected_on = Date(required=True)
