"""Boundary guard for service operations.

While an operation runs, its name and the ids it was called with are bound to
the logging context, so every record emitted underneath carries them. Domain
errors pass through untouched. Anything else is an unexpected failure of the
store or the framework: it is logged and re-raised as ``InternalError``.
"""

import functools
import inspect

import structlog
from protean.exceptions import ProteanException

from bookshop.errors import BookshopError, InternalError
from bookshop.utils.logging import log_context

logger = structlog.get_logger(__name__)

CONTEXT_IDS = ("user_id", "cart_id", "cart_item_id", "book_id", "loan_id", "email")


def _loggable_arguments(signature, args, kwargs) -> dict[str, str]:
    bound = signature.bind_partial(*args, **kwargs)
    return {
        name: str(value)
        for name, value in bound.arguments.items()
        if name != "self" and "password" not in name
    }


def operation(name):
    def decorator(fn):
        signature = inspect.signature(fn)

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            context = _loggable_arguments(signature, args, kwargs)
            ids = {key: value for key, value in context.items() if key in CONTEXT_IDS}

            with log_context(operation=name, **ids):
                try:
                    return fn(*args, **kwargs)
                except (BookshopError, ProteanException):
                    raise
                except Exception as exc:
                    logger.exception("Operation failed", **context)
                    raise InternalError(name, **context) from exc

        return wrapper

    return decorator
