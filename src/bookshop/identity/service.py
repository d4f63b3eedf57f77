"""User service — profile, credential and role management plus loan history."""

import json

from protean.utils.globals import current_domain

from bookshop.cart.cart import Cart
from bookshop.errors import CartNotFound, InvalidPassword, NoUsersFound, UserNotFound
from bookshop.identity.account import DeactivateUser, DeleteAllUsers, DeleteUser, ReactivateUser
from bookshop.identity.credentials import ChangeEmail, ChangePassword, ResetPassword
from bookshop.identity.profile import UpdateProfile, UpdateUserRoles
from bookshop.identity.registration import RegisterRole, RegisterUser, RegisterUsers, SeedDefaultRoles
from bookshop.identity.user import User, load_user
from bookshop.loan.loan import Loan
from bookshop.utils.locks import locked, user_key
from bookshop.utils.operations import operation
from bookshop.views import CartView, LoanView, UserView


def _codes(role_codes) -> list[str]:
    return [getattr(code, "value", code) for code in role_codes]


class UserService:
    @property
    def users(self):
        return current_domain.repository_for(User)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @operation("get_user_by_id")
    def get_user_by_id(self, user_id) -> UserView:
        return UserView.from_aggregate(load_user(user_id))

    @operation("get_user_by_email")
    def get_user_by_email(self, email) -> UserView:
        user = self.users.find_by_email(email)
        if user is None:
            raise UserNotFound(email=email)
        return UserView.from_aggregate(user)

    @operation("get_all_users")
    def get_all_users(self) -> list[UserView]:
        users = self.users.find_all()
        if not users:
            raise NoUsersFound()
        return [UserView.from_aggregate(user) for user in users]

    @operation("get_total_user_count")
    def get_total_user_count(self) -> int:
        users = self.users.find_all()
        if not users:
            raise NoUsersFound()
        return len(users)

    @operation("get_most_active_users")
    def get_most_active_users(self, limit) -> list[UserView]:
        return [UserView.from_aggregate(user) for user in self.users.find_most_active(limit)]

    @operation("get_users_with_overdue_loans")
    def get_users_with_overdue_loans(self, as_of=None) -> list[UserView]:
        return [UserView.from_aggregate(user) for user in self.users.find_with_overdue_loans(as_of)]

    @operation("get_user_loan_history")
    def get_user_loan_history(self, user_id) -> list[LoanView]:
        user = load_user(user_id)
        loans = current_domain.repository_for(Loan).find_by_user(str(user.id))
        return [LoanView.from_aggregate(loan) for loan in loans]

    @operation("get_user_cart")
    def get_user_cart(self, user_id) -> CartView:
        user = load_user(user_id)
        cart = current_domain.repository_for(Cart).find_by_user_id(str(user.id))
        if cart is None:
            raise CartNotFound(user_id=user_id)
        return CartView.from_aggregate(cart)

    @operation("verify_credentials")
    def verify_credentials(self, email, password) -> UserView:
        """Check a login attempt. Unknown emails and inactive accounts fail like a wrong password."""
        user = self.users.find_by_email(email)
        if user is None or not user.active or not user.check_password(password):
            raise InvalidPassword("Invalid email or password")
        return UserView.from_aggregate(user)

    # -------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------
    @operation("add_new_user")
    def add_new_user(self, email, password, name=None, surname=None, active=True, role_codes=None) -> UserView:
        user_id = current_domain.process(
            RegisterUser(
                email=email,
                password=password,
                name=name,
                surname=surname,
                active=active,
                role_codes=json.dumps(_codes(role_codes)) if role_codes else None,
            ),
            asynchronous=False,
        )
        return UserView.from_aggregate(load_user(user_id))

    @operation("add_new_users")
    def add_new_users(self, requests) -> list[UserView]:
        """Register several users; ``requests`` are dicts with the ``add_new_user`` arguments."""
        payloads = [
            {
                "email": request["email"],
                "password": request["password"],
                "name": request.get("name"),
                "surname": request.get("surname"),
                "active": request.get("active", True),
                "role_codes": _codes(request.get("role_codes") or []),
            }
            for request in requests
        ]
        user_ids = current_domain.process(RegisterUsers(users=json.dumps(payloads)), asynchronous=False)
        return [UserView.from_aggregate(load_user(user_id)) for user_id in user_ids]

    @operation("register_role")
    def register_role(self, code, description=None) -> str:
        return current_domain.process(RegisterRole(code=code, description=description), asynchronous=False)

    @operation("seed_default_roles")
    def seed_default_roles(self) -> list[str]:
        return current_domain.process(SeedDefaultRoles(), asynchronous=False)

    # -------------------------------------------------------------------
    # Profile and credentials
    # -------------------------------------------------------------------
    @operation("update_user_profile")
    def update_user_profile(self, user_id, name, surname) -> UserView:
        with locked(user_key(user_id)):
            current_domain.process(UpdateProfile(user_id=user_id, name=name, surname=surname), asynchronous=False)
            return UserView.from_aggregate(load_user(user_id))

    @operation("change_email")
    def change_email(self, user_id, password, new_email) -> bool:
        with locked(user_key(user_id)):
            current_domain.process(
                ChangeEmail(user_id=user_id, password=password, new_email=new_email),
                asynchronous=False,
            )
        return True

    @operation("change_user_password")
    def change_user_password(self, user_id, old_password, new_password, confirm_new_password) -> bool:
        with locked(user_key(user_id)):
            current_domain.process(
                ChangePassword(
                    user_id=user_id,
                    old_password=old_password,
                    new_password=new_password,
                    confirm_new_password=confirm_new_password,
                ),
                asynchronous=False,
            )
        return True

    @operation("reset_user_password")
    def reset_user_password(self, user_id) -> str:
        with locked(user_key(user_id)):
            return current_domain.process(ResetPassword(user_id=user_id), asynchronous=False)

    @operation("update_user_role")
    def update_user_role(self, user_id, role_codes) -> UserView:
        codes = _codes(role_codes)
        with locked(user_key(user_id)):
            current_domain.process(
                UpdateUserRoles(user_id=user_id, role_codes=json.dumps(codes)),
                asynchronous=False,
            )
            return UserView.from_aggregate(load_user(user_id))

    # -------------------------------------------------------------------
    # Account lifecycle
    # -------------------------------------------------------------------
    @operation("deactivate_user")
    def deactivate_user(self, user_id) -> bool:
        with locked(user_key(user_id)):
            current_domain.process(DeactivateUser(user_id=user_id), asynchronous=False)
        return True

    @operation("reactivate_user")
    def reactivate_user(self, user_id) -> bool:
        with locked(user_key(user_id)):
            current_domain.process(ReactivateUser(user_id=user_id), asynchronous=False)
        return True

    @operation("delete_user")
    def delete_user(self, user_id) -> bool:
        with locked(user_key(user_id)):
            current_domain.process(DeleteUser(user_id=user_id), asynchronous=False)
        return True

    @operation("delete_all_users")
    def delete_all_users(self) -> bool:
        current_domain.process(DeleteAllUsers(), asynchronous=False)
        return True
