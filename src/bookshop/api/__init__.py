"""Bookshop HTTP API package."""

from bookshop.api.errors import register_error_handlers
from bookshop.api.routes import book_router, cart_router, loan_router, user_router

__all__ = [
    "book_router",
    "cart_router",
    "loan_router",
    "register_error_handlers",
    "user_router",
]
