"""Activation, deactivation and removal of user accounts."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bookshop.domain import bookshop
from bookshop.errors import NoUsersFound
from bookshop.identity.user import User, load_user

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="User")
class DeactivateUser:
    user_id: Identifier(required=True)


@bookshop.command(part_of="User")
class ReactivateUser:
    user_id: Identifier(required=True)


@bookshop.command(part_of="User")
class DeleteUser:
    """Remove a user together with the cart they own. Loan records are kept."""

    user_id: Identifier(required=True)


@bookshop.command(part_of="User")
class DeleteAllUsers:
    pass


def _remove_user(user):
    from bookshop.cart.cart import Cart

    cart_repo = current_domain.repository_for(Cart)
    cart = cart_repo.find_by_user_id(str(user.id))
    if cart is not None:
        cart_repo.remove(cart)

    current_domain.repository_for(User).remove(user)


@bookshop.command_handler(part_of=User)
class ManageAccountHandler:
    @handle(DeactivateUser)
    def deactivate_user(self, command):
        user = load_user(command.user_id)
        user.deactivate()
        current_domain.repository_for(User).add(user)

    @handle(ReactivateUser)
    def reactivate_user(self, command):
        user = load_user(command.user_id)
        user.reactivate()
        current_domain.repository_for(User).add(user)

    @handle(DeleteUser)
    def delete_user(self, command):
        user = load_user(command.user_id)
        _remove_user(user)
        logger.info("User deleted", user_id=str(user.id))

    @handle(DeleteAllUsers)
    def delete_all_users(self, command):
        users = current_domain.repository_for(User).find_all()
        if not users:
            raise NoUsersFound()

        for user in users:
            _remove_user(user)
        logger.info("All users deleted", count=len(users))
        return len(users)
