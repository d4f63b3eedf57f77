"""Application tests for account lifecycle and reporting queries."""

from datetime import date, timedelta

import pytest
from bookshop.cart.cart import Cart
from bookshop.cart.service import CartService
from bookshop.errors import CartNotFound, NoUsersFound, UserNotFound
from bookshop.identity.service import UserService
from bookshop.loan.loan import Loan
from protean import current_domain


@pytest.fixture()
def service():
    return UserService()


@pytest.fixture()
def carts():
    return CartService()


def _borrow(carts, user, book, quantity=1):
    cart = carts.add_item_to_cart(user.id, book.id, quantity)
    return carts.move_cart_to_loan(cart.id)


class TestActivation:
    def test_deactivate(self, service, make_user):
        user = make_user()
        assert service.deactivate_user(user.id) is True
        assert service.get_user_by_id(user.id).active is False

    def test_reactivate(self, service, make_user):
        user = make_user(active=False)
        service.reactivate_user(user.id)
        assert service.get_user_by_id(user.id).active is True

    def test_unknown_user(self, service, roles):
        with pytest.raises(UserNotFound):
            service.deactivate_user("no-such-user")


class TestDeletion:
    def test_delete_user_removes_cart(self, service, carts, make_user, make_book):
        user = make_user()
        cart = carts.add_item_to_cart(user.id, make_book().id, 1)

        assert service.delete_user(user.id) is True

        with pytest.raises(UserNotFound):
            service.get_user_by_id(user.id)
        assert current_domain.repository_for(Cart).find_by_id(cart.id) is None

    def test_delete_user_keeps_loans(self, service, carts, make_user, make_book):
        user = make_user()
        loan = _borrow(carts, user, make_book())

        service.delete_user(user.id)

        assert current_domain.repository_for(Loan).find_by_id(loan.id) is not None

    def test_delete_all_users(self, service, make_user):
        make_user(email="a@example.com")
        make_user(email="b@example.com")

        assert service.delete_all_users() is True
        with pytest.raises(NoUsersFound):
            service.get_all_users()

    def test_delete_all_without_users(self, service, roles):
        with pytest.raises(NoUsersFound):
            service.delete_all_users()


class TestQueries:
    def test_all_users_and_count(self, service, make_user):
        make_user(email="a@example.com")
        make_user(email="b@example.com")

        assert {u.email for u in service.get_all_users()} == {"a@example.com", "b@example.com"}
        assert service.get_total_user_count() == 2

    def test_count_without_users(self, service, roles):
        with pytest.raises(NoUsersFound):
            service.get_total_user_count()

    def test_user_cart(self, service, carts, make_user, make_book):
        user = make_user()
        created = carts.add_item_to_cart(user.id, make_book().id, 1)
        assert service.get_user_cart(user.id).id == created.id

    def test_user_without_cart(self, service, make_user):
        user = make_user()
        with pytest.raises(CartNotFound):
            service.get_user_cart(user.id)

    def test_loan_history_of_unknown_user(self, service, roles):
        with pytest.raises(UserNotFound):
            service.get_user_loan_history("no-such-user")

    def test_most_active_users(self, service, carts, make_user, make_book):
        busy = make_user(email="busy@example.com")
        casual = make_user(email="casual@example.com")
        make_user(email="idle@example.com")
        book = make_book(quantity=10)

        for _ in range(3):
            _borrow(carts, busy, book)
        _borrow(carts, casual, book)

        ranking = service.get_most_active_users(5)
        assert [u.email for u in ranking] == ["busy@example.com", "casual@example.com"]
        assert [u.email for u in service.get_most_active_users(1)] == ["busy@example.com"]

    def test_users_with_overdue_loans(self, service, carts, make_user, make_book):
        late = make_user(email="late@example.com")
        make_user(email="punctual@example.com")
        loan = _borrow(carts, late, make_book())

        assert service.get_users_with_overdue_loans() == []

        after_due = loan.due_date + timedelta(days=1)
        assert [u.email for u in service.get_users_with_overdue_loans(after_due)] == ["late@example.com"]
        assert loan.loan_date == date.today()
