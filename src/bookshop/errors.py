"""Typed domain errors raised by the bookshop services and aggregates.

Every error keeps protean's ``messages`` convention (a dict of field name to a
list of messages) so that handlers and API clients read them uniformly. The
``BookshopError`` mixin lets the HTTP layer install a single exception handler.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class BookshopError(Exception):
    """Marker for all errors originating in the bookshop domain."""

    kind = "Error"


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------
class NotFound(BookshopError, ObjectNotFoundError):
    kind = "NotFound"
    field = "entity"

    def __init__(self, identifier, message):
        self.identifier = identifier
        super().__init__({self.field: [message]})


class UserNotFound(NotFound):
    field = "user"

    def __init__(self, user_id=None, email=None):
        self.user_id = user_id
        self.email = email
        if email is not None:
            super().__init__(email, f"User not found with email {email}")
        else:
            super().__init__(user_id, f"User not found with id {user_id}")


class BookNotFound(NotFound):
    field = "book"

    def __init__(self, book_id):
        self.book_id = book_id
        super().__init__(book_id, f"Book not found with id {book_id}")


class CartNotFound(NotFound):
    field = "cart"

    def __init__(self, cart_id=None, user_id=None, email=None, cart_item_id=None):
        self.cart_id = cart_id
        self.user_id = user_id
        self.email = email
        self.cart_item_id = cart_item_id
        if email is not None:
            super().__init__(email, f"Cart not found for user with email {email}")
        elif user_id is not None:
            super().__init__(user_id, f"Cart not found for user with id {user_id}")
        elif cart_item_id is not None:
            super().__init__(cart_item_id, f"Cart not found for cart item with id {cart_item_id}")
        else:
            super().__init__(cart_id, f"Cart not found with id {cart_id}")


class CartItemNotFound(NotFound):
    field = "cart_item"

    def __init__(self, cart_item_id):
        self.cart_item_id = cart_item_id
        super().__init__(cart_item_id, f"Cart item not found with id {cart_item_id}")


class LoanNotFound(NotFound):
    field = "loan"

    def __init__(self, loan_id):
        self.loan_id = loan_id
        super().__init__(loan_id, f"Loan not found with id {loan_id}")


class RoleNotFound(NotFound):
    field = "role"

    def __init__(self, code):
        self.code = code
        super().__init__(code, f"Role not found: {code}")


class NoCartsFound(NotFound):
    field = "cart"

    def __init__(self):
        super().__init__(None, "No carts in the system")


class NoUsersFound(NotFound):
    field = "user"

    def __init__(self):
        super().__init__(None, "No user found")


# ---------------------------------------------------------------------------
# AlreadyExists
# ---------------------------------------------------------------------------
class EmailAlreadyExists(BookshopError, ValidationError):
    kind = "AlreadyExists"

    def __init__(self, email):
        self.email = email
        super().__init__({"email": [f"Email already in use: {email}"]})


class RoleAlreadyExists(BookshopError, ValidationError):
    kind = "AlreadyExists"

    def __init__(self, code):
        self.code = code
        super().__init__({"role": [f"Role already exists: {code}"]})


# ---------------------------------------------------------------------------
# InvalidCredential
# ---------------------------------------------------------------------------
class InvalidPassword(BookshopError, ValidationError):
    kind = "InvalidCredential"

    def __init__(self, message="Invalid password"):
        super().__init__({"password": [message]})


# ---------------------------------------------------------------------------
# ValidationFailed
# ---------------------------------------------------------------------------
class ValidationFailed(BookshopError, ValidationError):
    kind = "ValidationFailed"


class PasswordMismatch(ValidationFailed):
    def __init__(self):
        super().__init__({"confirm_new_password": ["New passwords do not match"]})


class EmptyInput(ValidationFailed):
    def __init__(self, field, message):
        self.field = field
        super().__init__({field: [message]})


class EmptyCart(ValidationFailed):
    def __init__(self, cart_id):
        self.cart_id = cart_id
        super().__init__({"cart": [f"Cart {cart_id} has no items to check out"]})


class InvalidQuantity(ValidationFailed):
    def __init__(self, quantity, message=None):
        self.quantity = quantity
        super().__init__({"quantity": [message or f"Quantity must be at least 1, got {quantity}"]})


# ---------------------------------------------------------------------------
# InsufficientStock
# ---------------------------------------------------------------------------
class InsufficientStock(BookshopError, ValidationError):
    kind = "InsufficientStock"

    def __init__(self, book_id, requested, available):
        self.book_id = book_id
        self.requested = requested
        self.available = available
        super().__init__(
            {"quantity": [f"Insufficient stock for book {book_id}: {available} available, {requested} requested"]}
        )


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------
class LoanAlreadyReturned(BookshopError, InvalidOperationError):
    kind = "InvalidState"

    def __init__(self, loan_id):
        self.loan_id = loan_id
        super().__init__({"loan": [f"Loan {loan_id} has already been returned"]})


# ---------------------------------------------------------------------------
# InternalError
# ---------------------------------------------------------------------------
class InternalError(BookshopError):
    """An unexpected failure in the persistence layer or infrastructure."""

    kind = "InternalError"

    def __init__(self, operation, message="Unexpected internal error", **context):
        self.operation = operation
        self.context = context
        self.messages = {"_internal": [f"{message} during {operation}"]}
        super().__init__(self.messages["_internal"][0])


class LockTimeout(InternalError):
    def __init__(self, keys, timeout):
        super().__init__(
            "lock",
            message=f"Timed out after {timeout}s waiting for {', '.join(keys)}",
            keys=list(keys),
        )
