"""Domain events for the User and Role aggregates."""

from protean.fields import DateTime, Identifier, String, Text

from bookshop.domain import bookshop


@bookshop.event(part_of="User")
class UserRegistered:
    """A new user account was created."""

    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True)
    name: String()
    surname: String()
    roles: Text()
    registered_at: DateTime(required=True)


@bookshop.event(part_of="User")
class ProfileUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    name: String()
    surname: String()


@bookshop.event(part_of="User")
class EmailChanged:
    """A user moved their account to a new email address."""

    __version__ = 1

    user_id: Identifier(required=True)
    previous_email: String(required=True)
    new_email: String(required=True)


@bookshop.event(part_of="User")
class PasswordChanged:
    __version__ = 1

    user_id: Identifier(required=True)
    changed_at: DateTime(required=True)


@bookshop.event(part_of="User")
class PasswordReset:
    """A generated password replaced the user's credential."""

    __version__ = 1

    user_id: Identifier(required=True)
    reset_at: DateTime(required=True)


@bookshop.event(part_of="User")
class RolesUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    previous_roles: Text()
    new_roles: Text(required=True)


@bookshop.event(part_of="User")
class UserDeactivated:
    __version__ = 1

    user_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)


@bookshop.event(part_of="User")
class UserReactivated:
    __version__ = 1

    user_id: Identifier(required=True)
    reactivated_at: DateTime(required=True)


@bookshop.event(part_of="Role")
class RoleRegistered:
    __version__ = 1

    role_id: Identifier(required=True)
    code: String(required=True)
