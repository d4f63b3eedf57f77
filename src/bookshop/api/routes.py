"""FastAPI routes for the bookshop — users, carts, books and loans.

Routes stay thin: they translate request bodies into service calls and return
the read records the services hand back.
"""

from fastapi import APIRouter

from bookshop.api.schemas import (
    AddBookRequest,
    AddToCartRequest,
    ChangeEmailRequest,
    ChangePasswordRequest,
    CountResponse,
    FlagOverdueRequest,
    LoginRequest,
    PasswordResetResponse,
    RegisterRoleRequest,
    RegisterUserRequest,
    RegisterUsersRequest,
    RestockRequest,
    ReturnLoanRequest,
    StatusResponse,
    UpdateItemQuantityRequest,
    UpdateProfileRequest,
    UpdateRolesRequest,
)
from bookshop.cart.service import CartService
from bookshop.catalogue.service import CatalogueService
from bookshop.identity.service import UserService
from bookshop.loan.service import LoanService
from bookshop.views import BookView, CartView, LoanView, UserView

users = UserService()
carts = CartService()
catalogue = CatalogueService()
loans = LoanService()

# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserView)
def add_new_user(body: RegisterUserRequest) -> UserView:
    return users.add_new_user(**body.model_dump())


@user_router.post("/batch", status_code=201, response_model=list[UserView])
def add_new_users(body: RegisterUsersRequest) -> list[UserView]:
    return users.add_new_users([user.model_dump() for user in body.users])


@user_router.get("", response_model=list[UserView])
def get_all_users() -> list[UserView]:
    return users.get_all_users()


@user_router.get("/count", response_model=CountResponse)
def get_total_user_count() -> CountResponse:
    return CountResponse(count=users.get_total_user_count())


@user_router.get("/most-active", response_model=list[UserView])
def get_most_active_users(limit: int = 10) -> list[UserView]:
    return users.get_most_active_users(limit)


@user_router.get("/overdue", response_model=list[UserView])
def get_users_with_overdue_loans() -> list[UserView]:
    return users.get_users_with_overdue_loans()


@user_router.get("/by-email/{email}", response_model=UserView)
def get_user_by_email(email: str) -> UserView:
    return users.get_user_by_email(email)


@user_router.post("/login", response_model=UserView)
def login(body: LoginRequest) -> UserView:
    return users.verify_credentials(body.email, body.password)


@user_router.post("/roles", status_code=201, response_model=StatusResponse)
def register_role(body: RegisterRoleRequest) -> StatusResponse:
    users.register_role(body.code, body.description)
    return StatusResponse()


@user_router.delete("", response_model=StatusResponse)
def delete_all_users() -> StatusResponse:
    users.delete_all_users()
    return StatusResponse()


@user_router.get("/{user_id}", response_model=UserView)
def get_user_by_id(user_id: str) -> UserView:
    return users.get_user_by_id(user_id)


@user_router.put("/{user_id}/profile", response_model=UserView)
def update_user_profile(user_id: str, body: UpdateProfileRequest) -> UserView:
    return users.update_user_profile(user_id, body.name, body.surname)


@user_router.put("/{user_id}/email", response_model=StatusResponse)
def change_email(user_id: str, body: ChangeEmailRequest) -> StatusResponse:
    users.change_email(user_id, body.password, body.new_email)
    return StatusResponse()


@user_router.put("/{user_id}/password", response_model=StatusResponse)
def change_user_password(user_id: str, body: ChangePasswordRequest) -> StatusResponse:
    users.change_user_password(user_id, body.old_password, body.new_password, body.confirm_new_password)
    return StatusResponse()


@user_router.post("/{user_id}/password-reset", response_model=PasswordResetResponse)
def reset_user_password(user_id: str) -> PasswordResetResponse:
    return PasswordResetResponse(password=users.reset_user_password(user_id))


@user_router.put("/{user_id}/roles", response_model=UserView)
def update_user_role(user_id: str, body: UpdateRolesRequest) -> UserView:
    return users.update_user_role(user_id, body.role_codes)


@user_router.put("/{user_id}/deactivate", response_model=StatusResponse)
def deactivate_user(user_id: str) -> StatusResponse:
    users.deactivate_user(user_id)
    return StatusResponse()


@user_router.put("/{user_id}/reactivate", response_model=StatusResponse)
def reactivate_user(user_id: str) -> StatusResponse:
    users.reactivate_user(user_id)
    return StatusResponse()


@user_router.get("/{user_id}/loans", response_model=list[LoanView])
def get_user_loan_history(user_id: str) -> list[LoanView]:
    return users.get_user_loan_history(user_id)


@user_router.get("/{user_id}/cart", response_model=CartView)
def get_user_cart(user_id: str) -> CartView:
    return users.get_user_cart(user_id)


@user_router.delete("/{user_id}", response_model=StatusResponse)
def delete_user(user_id: str) -> StatusResponse:
    users.delete_user(user_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("", response_model=list[CartView])
def get_all_carts() -> list[CartView]:
    return carts.get_all_carts()


@cart_router.get("/by-email/{email}", response_model=CartView)
def get_cart_for_user(email: str) -> CartView:
    return carts.get_cart_for_user(email)


@cart_router.post("/items", status_code=201, response_model=CartView)
def add_item_to_cart(body: AddToCartRequest) -> CartView:
    return carts.add_item_to_cart(body.user_id, body.book_id, body.quantity)


@cart_router.put("/items/{cart_item_id}", response_model=CartView)
def update_cart_item_quantity(cart_item_id: str, body: UpdateItemQuantityRequest) -> CartView:
    return carts.update_cart_item_quantity(cart_item_id, body.quantity, body.mode, body.user_id)


@cart_router.delete("/users/{user_id}/items/{cart_item_id}", response_model=CartView)
def remove_item_from_cart(user_id: str, cart_item_id: str) -> CartView:
    return carts.remove_item_from_cart(user_id, cart_item_id)


@cart_router.delete("/users/{user_id}/items", response_model=StatusResponse)
def clear_cart(user_id: str) -> StatusResponse:
    carts.clear_cart(user_id)
    return StatusResponse()


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=LoanView)
def move_cart_to_loan(cart_id: str) -> LoanView:
    return carts.move_cart_to_loan(cart_id)


@cart_router.get("/{cart_id}", response_model=CartView)
def get_cart_by_id(cart_id: str) -> CartView:
    return carts.get_cart_by_id(cart_id)


@cart_router.delete("/{cart_id}", response_model=StatusResponse)
def delete_cart_by_id(cart_id: str) -> StatusResponse:
    carts.delete_cart_by_id(cart_id)
    return StatusResponse()


@cart_router.delete("", response_model=StatusResponse)
def delete_all_carts() -> StatusResponse:
    carts.delete_all_carts()
    return StatusResponse()


# ---------------------------------------------------------------------------
# Book Router
# ---------------------------------------------------------------------------
book_router = APIRouter(prefix="/books", tags=["books"])


@book_router.post("", status_code=201, response_model=BookView)
def add_book(body: AddBookRequest) -> BookView:
    return catalogue.add_book(body.title, body.author, body.genre, body.quantity)


@book_router.get("", response_model=list[BookView])
def get_all_books() -> list[BookView]:
    return catalogue.get_all_books()


@book_router.get("/{book_id}", response_model=BookView)
def get_book(book_id: str) -> BookView:
    return catalogue.get_book(book_id)


@book_router.post("/{book_id}/restock", response_model=BookView)
def restock_book(book_id: str, body: RestockRequest) -> BookView:
    return catalogue.restock_book(book_id, body.quantity)


# ---------------------------------------------------------------------------
# Loan Router
# ---------------------------------------------------------------------------
loan_router = APIRouter(prefix="/loans", tags=["loans"])


@loan_router.post("/overdue", response_model=CountResponse)
def flag_overdue_loans(body: FlagOverdueRequest) -> CountResponse:
    """Maintenance endpoint: meant to be called periodically by a scheduler."""
    return CountResponse(count=loans.flag_overdue_loans(body.as_of))


@loan_router.get("/{loan_id}", response_model=LoanView)
def get_loan(loan_id: str) -> LoanView:
    return loans.get_loan(loan_id)


@loan_router.post("/{loan_id}/return", response_model=LoanView)
def return_loan(loan_id: str, body: ReturnLoanRequest | None = None) -> LoanView:
    return loans.return_loan(loan_id, body.return_date if body else None)
