"""Bookshop bounded context — users, catalogue, carts and loans.

Handles user accounts and credentials, the book inventory, per-user shopping
carts, and the checkout that turns a cart into a loan.
"""

from protean.domain import Domain

from bookshop.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
bookshop = Domain(name="bookshop")
