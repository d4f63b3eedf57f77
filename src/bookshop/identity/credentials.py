"""Commands for changing a user's email or password, and for resetting it."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from bookshop.domain import bookshop
from bookshop.errors import EmailAlreadyExists
from bookshop.identity.passwords import generate_password
from bookshop.identity.user import User, load_user

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="User")
class ChangeEmail:
    user_id: Identifier(required=True)
    password: String(required=True, max_length=72)
    new_email: String(required=True, max_length=254)


@bookshop.command(part_of="User")
class ChangePassword:
    user_id: Identifier(required=True)
    old_password: String(required=True, max_length=72)
    new_password: String(required=True, max_length=72)
    confirm_new_password: String(required=True, max_length=72)


@bookshop.command(part_of="User")
class ResetPassword:
    """Replace the password with a generated one, returned once in clear."""

    user_id: Identifier(required=True)


@bookshop.command_handler(part_of=User)
class CredentialsHandler:
    @handle(ChangeEmail)
    def change_email(self, command):
        repo = current_domain.repository_for(User)
        user = load_user(command.user_id)

        # Password is verified before the address is looked up
        user.authenticate(command.password)
        if repo.exists_by_email(command.new_email):
            raise EmailAlreadyExists(command.new_email)

        user.change_email(command.password, command.new_email)
        repo.add(user)

    @handle(ChangePassword)
    def change_password(self, command):
        user = load_user(command.user_id)
        user.change_password(
            old_password=command.old_password,
            new_password=command.new_password,
            confirm_new_password=command.confirm_new_password,
        )
        current_domain.repository_for(User).add(user)

    @handle(ResetPassword)
    def reset_password(self, command):
        user = load_user(command.user_id)
        new_password = generate_password()
        user.reset_password(new_password)
        current_domain.repository_for(User).add(user)

        logger.info("Password reset", user_id=str(user.id))
        return new_password
