"""Role aggregate: a named capability that can be granted to users."""

from enum import Enum

from protean.fields import String
from protean.utils.globals import current_domain

from bookshop.domain import bookshop
from bookshop.errors import RoleNotFound
from bookshop.identity.events import RoleRegistered


class RoleCode(Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@bookshop.aggregate
class Role:
    code: String(required=True, max_length=50, unique=True)
    description: String(max_length=255)

    @classmethod
    def register(cls, code, description=None):
        role = cls(code=code.upper(), description=description)
        role.raise_(RoleRegistered(role_id=str(role.id), code=role.code))
        return role


@bookshop.repository(part_of=Role)
class RoleRepository:
    def find_by_code(self, code) -> Role | None:
        code = code.value if isinstance(code, RoleCode) else str(code).upper()
        roles = self._dao.query.filter(code=code).limit(None).all().items
        return roles[0] if roles else None


def resolve_role_codes(codes) -> list[str]:
    """Map requested codes onto registered roles, failing on the first unknown one."""
    repo = current_domain.repository_for(Role)
    resolved = []
    for code in codes:
        role = repo.find_by_code(code)
        if role is None:
            raise RoleNotFound(code)
        resolved.append(role.code)
    return resolved
