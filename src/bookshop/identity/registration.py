"""Registration of users and roles."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, String, Text
from protean.utils.globals import current_domain

from bookshop import settings
from bookshop.domain import bookshop
from bookshop.errors import EmailAlreadyExists, EmptyInput, RoleAlreadyExists
from bookshop.identity.role import Role, RoleCode, resolve_role_codes
from bookshop.identity.user import User

logger = structlog.get_logger(__name__)


@bookshop.command(part_of="User")
class RegisterUser:
    """Create a user account; the password arrives in clear and is hashed on the way in."""

    email: String(required=True, max_length=254)
    password: String(required=True, max_length=72)
    name: String(max_length=100)
    surname: String(max_length=100)
    active: Boolean(default=True)
    role_codes: Text()  # JSON array of role codes


@bookshop.command(part_of="User")
class RegisterUsers:
    """Create several accounts at once; nothing is persisted if any of them fails."""

    users: Text(required=True)  # JSON: list of RegisterUser payloads


@bookshop.command(part_of="Role")
class RegisterRole:
    code: String(required=True, max_length=50)
    description: String(max_length=255)


@bookshop.command(part_of="Role")
class SeedDefaultRoles:
    pass


def _register(email, password, name=None, surname=None, active=True, role_codes=None):
    repo = current_domain.repository_for(User)
    if repo.exists_by_email(email):
        raise EmailAlreadyExists(email)

    codes = resolve_role_codes(role_codes or [settings.DEFAULT_ROLE])
    user = User.register(
        email=email,
        password=password,
        name=name,
        surname=surname,
        role_codes=codes,
        active=True if active is None else active,
    )
    repo.add(user)
    logger.info("User registered", user_id=str(user.id), roles=codes)
    return str(user.id)


@bookshop.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        return _register(
            email=command.email,
            password=command.password,
            name=command.name,
            surname=command.surname,
            active=command.active,
            role_codes=json.loads(command.role_codes) if command.role_codes else None,
        )

    @handle(RegisterUsers)
    def register_users(self, command):
        payloads = json.loads(command.users) if isinstance(command.users, str) else command.users
        if not payloads:
            raise EmptyInput("users", "No user provided to add")

        seen = set()
        for payload in payloads:
            if payload["email"] in seen:
                raise EmailAlreadyExists(payload["email"])
            seen.add(payload["email"])

        return [_register(**payload) for payload in payloads]


@bookshop.command_handler(part_of=Role)
class RegisterRoleHandler:
    @handle(RegisterRole)
    def register_role(self, command):
        repo = current_domain.repository_for(Role)
        if repo.find_by_code(command.code) is not None:
            raise RoleAlreadyExists(command.code.upper())

        role = Role.register(code=command.code, description=command.description)
        repo.add(role)
        return str(role.id)

    @handle(SeedDefaultRoles)
    def seed_default_roles(self, command):
        repo = current_domain.repository_for(Role)
        created = []
        for code in RoleCode:
            if repo.find_by_code(code) is None:
                repo.add(Role.register(code=code.value, description=f"Default {code.value.lower()} role"))
                created.append(code.value)

        if created:
            logger.info("Seeded default roles", roles=created)
        return created
