"""Profile and role updates for existing users."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from bookshop.domain import bookshop
from bookshop.errors import EmptyInput
from bookshop.identity.role import resolve_role_codes
from bookshop.identity.user import User, load_user


@bookshop.command(part_of="User")
class UpdateProfile:
    user_id: Identifier(required=True)
    name: String(max_length=100)
    surname: String(max_length=100)


@bookshop.command(part_of="User")
class UpdateUserRoles:
    """Replace every role of a user with the requested set."""

    user_id: Identifier(required=True)
    role_codes: Text(required=True)  # JSON array of role codes


@bookshop.command_handler(part_of=User)
class ProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        user = load_user(command.user_id)
        user.update_profile(name=command.name, surname=command.surname)
        current_domain.repository_for(User).add(user)

    @handle(UpdateUserRoles)
    def update_user_roles(self, command):
        user = load_user(command.user_id)

        codes = json.loads(command.role_codes) if command.role_codes else []
        if not codes:
            raise EmptyInput("role_codes", "At least one role code is required")

        user.replace_roles(resolve_role_codes(codes))
        current_domain.repository_for(User).add(user)
