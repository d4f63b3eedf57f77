"""Loan aggregate — the record of books a user checked out.

A loan is created once, at checkout, together with one LoanDetail per book.
The details are snapshots and never change afterwards; only the status and
the return date move (ACTIVE -> OVERDUE -> RETURNED, or ACTIVE -> RETURNED).
"""

import json
from datetime import date, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Date, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from bookshop import settings
from bookshop.domain import bookshop
from bookshop.errors import LoanAlreadyReturned, LoanNotFound
from bookshop.loan.events import LoanCreated, LoanMarkedOverdue, LoanReturned


class LoanStatus(Enum):
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"


@bookshop.entity(part_of="Loan")
class LoanDetail:
    book_id = Identifier(required=True)
    title = String(max_length=255)
    genre = String(max_length=100)
    quantity = Integer(required=True, min_value=1)


@bookshop.aggregate
class Loan:
    user_id = Identifier(required=True)
    cart_id = Identifier()
    loan_date = Date(required=True)
    due_date = Date(required=True)
    return_date = Date()
    status = String(choices=LoanStatus, default=LoanStatus.ACTIVE.value)
    details = HasMany(LoanDetail)

    @invariant.post
    def due_date_cannot_precede_loan_date(self):
        if self.due_date and self.loan_date and self.due_date < self.loan_date:
            raise ValidationError({"due_date": ["Due date cannot be before the loan date"]})

    @invariant.post
    def return_date_only_on_returned_loans(self):
        returned = self.status == LoanStatus.RETURNED.value
        if returned != (self.return_date is not None):
            raise ValidationError({"return_date": ["Return date is set exactly when the loan is returned"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, user_id, lines, cart_id=None, loan_date=None):
        """Create an ACTIVE loan from ``(book, quantity)`` lines, due after the loan period."""
        if not lines:
            raise ValidationError({"details": ["A loan needs at least one book"]})

        loan_date = loan_date or date.today()
        loan = cls(
            user_id=user_id,
            cart_id=cart_id,
            loan_date=loan_date,
            due_date=loan_date + timedelta(days=settings.LOAN_PERIOD_DAYS),
            status=LoanStatus.ACTIVE.value,
        )
        for book, quantity in lines:
            loan.add_details(
                LoanDetail(
                    book_id=str(book.id),
                    title=book.title,
                    genre=book.genre,
                    quantity=quantity,
                )
            )

        loan.raise_(
            LoanCreated(
                loan_id=str(loan.id),
                user_id=str(user_id),
                loan_date=loan.loan_date,
                due_date=loan.due_date,
                details=json.dumps([{"book_id": str(d.book_id), "quantity": d.quantity} for d in loan.details]),
                total_copies=loan.total_copies,
            )
        )
        return loan

    @property
    def total_copies(self) -> int:
        return sum(detail.quantity for detail in self.details)

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def is_overdue(self, as_of=None) -> bool:
        as_of = as_of or date.today()
        if self.status == LoanStatus.OVERDUE.value:
            return True
        return self.status == LoanStatus.ACTIVE.value and self.due_date < as_of

    def mark_overdue(self, as_of=None):
        as_of = as_of or date.today()
        if self.status != LoanStatus.ACTIVE.value:
            raise ValidationError({"status": ["Only active loans can become overdue"]})
        if self.due_date >= as_of:
            raise ValidationError({"due_date": [f"Loan is not due until {self.due_date.isoformat()}"]})

        self.status = LoanStatus.OVERDUE.value
        self.raise_(
            LoanMarkedOverdue(
                loan_id=str(self.id),
                user_id=str(self.user_id),
                due_date=self.due_date,
                detected_on=as_of,
            )
        )

    def mark_returned(self, return_date=None):
        if self.status == LoanStatus.RETURNED.value:
            raise LoanAlreadyReturned(str(self.id))

        with atomic_change(self):
            self.status = LoanStatus.RETURNED.value
            self.return_date = return_date or date.today()

        self.raise_(
            LoanReturned(
                loan_id=str(self.id),
                user_id=str(self.user_id),
                return_date=self.return_date,
            )
        )


@bookshop.repository(part_of=Loan)
class LoanRepository:
    def find_by_id(self, loan_id) -> Loan | None:
        try:
            return self.get(loan_id)
        except ObjectNotFoundError:
            return None

    def find_by_user(self, user_id) -> list[Loan]:
        """Loans of a user, oldest first."""
        loans = self._dao.query.filter(user_id=str(user_id)).limit(None).all().items
        return sorted(loans, key=lambda loan: loan.loan_date)

    def find_by_status(self, status) -> list[Loan]:
        status = status.value if isinstance(status, LoanStatus) else status
        return self._dao.query.filter(status=status).limit(None).all().items

    def find_all(self) -> list[Loan]:
        return self._dao.query.limit(None).all().items


def load_loan(loan_id) -> Loan:
    loan = current_domain.repository_for(Loan).find_by_id(loan_id)
    if loan is None:
        raise LoanNotFound(loan_id)
    return loan
