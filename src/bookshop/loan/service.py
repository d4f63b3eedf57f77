"""Reading loans, returning them and overdue detection."""

from datetime import date

from protean.utils.globals import current_domain

from bookshop.loan.loan import Loan, load_loan
from bookshop.loan.overdue import FlagOverdueLoans
from bookshop.loan.returns import ReturnLoan
from bookshop.utils.locks import book_key, locked
from bookshop.utils.operations import operation
from bookshop.views import LoanView


class LoanService:
    @property
    def loans(self):
        return current_domain.repository_for(Loan)

    @operation("get_loan")
    def get_loan(self, loan_id) -> LoanView:
        return LoanView.from_aggregate(load_loan(loan_id))

    @operation("return_loan")
    def return_loan(self, loan_id, return_date: date | None = None) -> LoanView:
        loan = load_loan(loan_id)
        with locked(*(book_key(detail.book_id) for detail in loan.details)):
            current_domain.process(ReturnLoan(loan_id=loan_id, return_date=return_date), asynchronous=False)
            return LoanView.from_aggregate(load_loan(loan_id))

    @operation("flag_overdue_loans")
    def flag_overdue_loans(self, as_of: date | None = None) -> int:
        """Mark every active loan past its due date as overdue; returns how many changed."""
        return current_domain.process(FlagOverdueLoans(as_of=as_of), asynchronous=False)
