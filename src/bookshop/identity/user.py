"""User aggregate — account identity, credentials, activation state and roles.

A user owns at most one cart and an ordered history of loans; both live in
their own aggregates and point back to the user through ``user_id``.
"""

import json
from collections import Counter
from datetime import UTC, date, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, String, Text
from protean.utils.globals import current_domain

from bookshop.domain import bookshop
from bookshop.errors import InvalidPassword, PasswordMismatch, UserNotFound
from bookshop.identity.events import (
    EmailChanged,
    PasswordChanged,
    PasswordReset,
    ProfileUpdated,
    RolesUpdated,
    UserDeactivated,
    UserReactivated,
    UserRegistered,
)
from bookshop.identity.passwords import hash_password, verify_password


@bookshop.aggregate
class User:
    """A registered customer or staff member of the bookshop."""

    email: String(required=True, max_length=254, unique=True)
    password_hash: String(required=True, max_length=255)
    name: String(max_length=100)
    surname: String(max_length=100)
    active: Boolean(default=True)
    roles: Text()  # JSON array of role codes
    registered_at: DateTime()

    @classmethod
    def register(cls, email, password, name=None, surname=None, role_codes=None, active=True):
        role_codes = sorted(set(role_codes or []))
        now = datetime.now(UTC)
        user = cls(
            email=email,
            password_hash=hash_password(password),
            name=name,
            surname=surname,
            active=active,
            roles=json.dumps(role_codes),
            registered_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=email,
                name=name,
                surname=surname,
                roles=user.roles,
                registered_at=now,
            )
        )
        return user

    @property
    def role_codes(self) -> list[str]:
        return json.loads(self.roles) if self.roles else []

    # -------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------
    def check_password(self, password) -> bool:
        return verify_password(password, self.password_hash)

    def authenticate(self, password, message="Invalid password"):
        if not self.check_password(password):
            raise InvalidPassword(message)

    def change_email(self, password, new_email):
        """Move the account to ``new_email``; uniqueness is checked by the caller."""
        self.authenticate(password)

        previous = self.email
        self.email = new_email
        self.raise_(
            EmailChanged(
                user_id=str(self.id),
                previous_email=previous,
                new_email=new_email,
            )
        )

    def change_password(self, old_password, new_password, confirm_new_password):
        self.authenticate(old_password, "Invalid old password")
        if new_password != confirm_new_password:
            raise PasswordMismatch()

        self.password_hash = hash_password(new_password)
        self.raise_(PasswordChanged(user_id=str(self.id), changed_at=datetime.now(UTC)))

    def reset_password(self, new_password):
        self.password_hash = hash_password(new_password)
        self.raise_(PasswordReset(user_id=str(self.id), reset_at=datetime.now(UTC)))

    # -------------------------------------------------------------------
    # Profile, roles and activation
    # -------------------------------------------------------------------
    def update_profile(self, name, surname):
        self.name = name
        self.surname = surname
        self.raise_(ProfileUpdated(user_id=str(self.id), name=name, surname=surname))

    def replace_roles(self, role_codes):
        previous = self.roles
        self.roles = json.dumps(sorted(set(role_codes)))
        self.raise_(
            RolesUpdated(
                user_id=str(self.id),
                previous_roles=previous,
                new_roles=self.roles,
            )
        )

    def deactivate(self):
        self.active = False
        self.raise_(UserDeactivated(user_id=str(self.id), deactivated_at=datetime.now(UTC)))

    def reactivate(self):
        self.active = True
        self.raise_(UserReactivated(user_id=str(self.id), reactivated_at=datetime.now(UTC)))


@bookshop.repository(part_of=User)
class UserRepository:
    def find_by_id(self, user_id) -> User | None:
        try:
            return self.get(user_id)
        except ObjectNotFoundError:
            return None

    def find_by_email(self, email) -> User | None:
        users = self._dao.query.filter(email=email).limit(None).all().items
        return users[0] if users else None

    def exists_by_email(self, email) -> bool:
        return self.find_by_email(email) is not None

    def find_all(self) -> list[User]:
        return self._dao.query.limit(None).all().items

    def find_most_active(self, limit) -> list[User]:
        """Users ordered by the number of loans they have taken, busiest first."""
        from bookshop.loan.loan import Loan

        loans = current_domain.repository_for(Loan).find_all()
        counts = Counter(str(loan.user_id) for loan in loans)

        users = [user for user in self.find_all() if counts[str(user.id)] > 0]
        users.sort(key=lambda user: counts[str(user.id)], reverse=True)
        return users[:limit]

    def find_with_overdue_loans(self, as_of: date | None = None) -> list[User]:
        from bookshop.loan.loan import Loan

        as_of = as_of or date.today()
        loans = current_domain.repository_for(Loan).find_all()
        overdue_user_ids = {str(loan.user_id) for loan in loans if loan.is_overdue(as_of)}
        return [user for user in self.find_all() if str(user.id) in overdue_user_ids]

    def remove(self, user):
        self._dao.delete(user)


def load_user(user_id) -> User:
    user = current_domain.repository_for(User).find_by_id(user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user
