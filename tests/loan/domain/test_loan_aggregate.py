"""Tests for the Loan aggregate."""

from datetime import date, timedelta

import pytest
from bookshop.catalogue.book import Book
from bookshop.errors import LoanAlreadyReturned
from bookshop.loan.events import LoanCreated, LoanMarkedOverdue, LoanReturned
from bookshop.loan.loan import Loan, LoanStatus
from protean.exceptions import ValidationError

LOAN_DATE = date(2024, 3, 1)


def _book(title="Dune", genre="Science Fiction"):
    return Book.create(title=title, genre=genre, quantity=5)


def _make_loan():
    return Loan.open(user_id="user-001", lines=[(_book(), 2), (_book("Emma", "Classic"), 1)], loan_date=LOAN_DATE)


class TestOpen:
    def test_open(self):
        loan = _make_loan()

        assert loan.status == LoanStatus.ACTIVE.value
        assert loan.due_date == LOAN_DATE + timedelta(days=14)
        assert loan.return_date is None
        assert loan.total_copies == 3
        assert {(d.title, d.quantity) for d in loan.details} == {("Dune", 2), ("Emma", 1)}

    def test_open_raises_event(self):
        event = next(e for e in _make_loan()._events if isinstance(e, LoanCreated))
        assert event.total_copies == 3

    def test_needs_at_least_one_line(self):
        with pytest.raises(ValidationError):
            Loan.open(user_id="user-001", lines=[])


class TestOverdue:
    def test_not_overdue_on_due_date(self):
        loan = _make_loan()
        assert loan.is_overdue(loan.due_date) is False

    def test_overdue_after_due_date(self):
        loan = _make_loan()
        assert loan.is_overdue(loan.due_date + timedelta(days=1)) is True

    def test_mark_overdue(self):
        loan = _make_loan()
        loan.mark_overdue(loan.due_date + timedelta(days=1))

        assert loan.status == LoanStatus.OVERDUE.value
        assert any(isinstance(e, LoanMarkedOverdue) for e in loan._events)

    def test_cannot_mark_before_due_date(self):
        loan = _make_loan()
        with pytest.raises(ValidationError):
            loan.mark_overdue(loan.due_date)


class TestReturn:
    def test_return(self):
        loan = _make_loan()
        loan.mark_returned(LOAN_DATE + timedelta(days=3))

        assert loan.status == LoanStatus.RETURNED.value
        assert loan.return_date == LOAN_DATE + timedelta(days=3)
        assert any(isinstance(e, LoanReturned) for e in loan._events)

    def test_overdue_loan_can_be_returned(self):
        loan = _make_loan()
        loan.mark_overdue(loan.due_date + timedelta(days=1))
        loan.mark_returned(loan.due_date + timedelta(days=2))
        assert loan.status == LoanStatus.RETURNED.value

    def test_cannot_return_twice(self):
        loan = _make_loan()
        loan.mark_returned()
        with pytest.raises(LoanAlreadyReturned):
            loan.mark_returned()

    def test_returned_loan_is_not_overdue(self):
        loan = _make_loan()
        loan.mark_returned()
        assert loan.is_overdue(loan.due_date + timedelta(days=30)) is False
