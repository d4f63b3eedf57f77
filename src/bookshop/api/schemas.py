"""Pydantic request/response schemas for the bookshop API.

These are the external contracts; responses reuse the read records from
``bookshop.views``.
"""

from datetime import date

from pydantic import BaseModel, Field

from bookshop.cart.cart import QuantityMode


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=72)
    name: str | None = None
    surname: str | None = None
    active: bool = True
    role_codes: list[str] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "reader@example.com",
                    "password": "s3cret",
                    "name": "Ada",
                    "surname": "Reader",
                    "role_codes": ["USER"],
                }
            ]
        }
    }


class RegisterUsersRequest(BaseModel):
    users: list[RegisterUserRequest]


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    surname: str | None = None


class ChangeEmailRequest(BaseModel):
    password: str
    new_email: str = Field(min_length=3, max_length=254)


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(min_length=1, max_length=72)
    confirm_new_password: str


class UpdateRolesRequest(BaseModel):
    role_codes: list[str]


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRoleRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None


class PasswordResetResponse(BaseModel):
    password: str


class CountResponse(BaseModel):
    count: int


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Carts
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    user_id: str
    book_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateItemQuantityRequest(BaseModel):
    quantity: int
    mode: QuantityMode = QuantityMode.RELATIVE
    user_id: str | None = None


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class AddBookRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str | None = None
    genre: str | None = None
    quantity: int = Field(ge=0, default=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------
class ReturnLoanRequest(BaseModel):
    return_date: date | None = None


class FlagOverdueRequest(BaseModel):
    as_of: date | None = None
