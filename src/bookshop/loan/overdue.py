"""Overdue detection — command and handler flagging loans past their due date.

Meant to be triggered periodically by an external scheduler through the
maintenance endpoint.
"""

from datetime import date

import structlog
from protean import handle
from protean.fields import Date
from protean.utils.globals import current_domain

from bookshop.domain import bookshop
from bookshop.loan.loan import Loan, LoanStatus

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="Loan")
class FlagOverdueLoans:
    as_of = Date()  # Optional: defaults to today


@bookshop.command_handler(part_of=Loan)
class FlagOverdueLoansHandler:
    @handle(FlagOverdueLoans)
    def flag_overdue_loans(self, command):
        as_of = command.as_of or date.today()
        repo = current_domain.repository_for(Loan)

        overdue = [loan for loan in repo.find_by_status(LoanStatus.ACTIVE) if loan.due_date < as_of]
        if not overdue:
            logger.info("No overdue loans found", as_of=as_of.isoformat())
            return 0

        for loan in overdue:
            loan.mark_overdue(as_of)
            repo.add(loan)
            logger.info(
                "Marked loan as overdue",
                loan_id=str(loan.id),
                user_id=str(loan.user_id),
                due_date=loan.due_date.isoformat(),
            )

        logger.info("Overdue detection complete", overdue_count=len(overdue))
        return len(overdue)
