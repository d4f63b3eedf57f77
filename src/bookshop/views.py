"""Read records handed to the presentation layer.

They are plain immutable snapshots of aggregates; nothing in them is tracked by
the domain, so callers can serialize or keep them freely.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


class BookView(_View):
    id: str
    title: str
    author: str | None = None
    genre: str | None = None
    quantity: int

    @classmethod
    def from_aggregate(cls, book) -> "BookView":
        return cls(
            id=str(book.id),
            title=book.title,
            author=book.author,
            genre=book.genre,
            quantity=book.quantity,
        )


class CartItemView(_View):
    id: str
    book_id: str
    quantity: int


class CartView(_View):
    id: str
    user_id: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[CartItemView] = []

    @classmethod
    def from_aggregate(cls, cart) -> "CartView":
        return cls(
            id=str(cart.id),
            user_id=str(cart.user_id),
            status=cart.status,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
            items=[
                CartItemView(id=str(item.id), book_id=str(item.book_id), quantity=item.quantity)
                for item in cart.items
            ],
        )


class LoanDetailView(_View):
    id: str
    book_id: str
    title: str | None = None
    genre: str | None = None
    quantity: int


class LoanView(_View):
    id: str
    user_id: str
    loan_date: date
    due_date: date
    return_date: date | None = None
    status: str
    details: list[LoanDetailView] = []

    @classmethod
    def from_aggregate(cls, loan) -> "LoanView":
        return cls(
            id=str(loan.id),
            user_id=str(loan.user_id),
            loan_date=loan.loan_date,
            due_date=loan.due_date,
            return_date=loan.return_date,
            status=loan.status,
            details=[
                LoanDetailView(
                    id=str(detail.id),
                    book_id=str(detail.book_id),
                    title=detail.title,
                    genre=detail.genre,
                    quantity=detail.quantity,
                )
                for detail in loan.details
            ],
        )


class UserView(_View):
    id: str
    email: str
    name: str | None = None
    surname: str | None = None
    active: bool
    roles: list[str] = []
    registered_at: datetime | None = None

    @classmethod
    def from_aggregate(cls, user) -> "UserView":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            surname=user.surname,
            active=bool(user.active),
            roles=user.role_codes,
            registered_at=user.registered_at,
        )
