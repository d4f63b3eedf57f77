"""Application tests for cart item commands and the cart service."""

import threading

import pytest
from bookshop.cart.cart import Cart, QuantityMode
from bookshop.cart.items import AddItemToCart
from bookshop.cart.service import CartService
from bookshop.domain import bookshop
from bookshop.errors import BookNotFound, CartItemNotFound, InvalidQuantity, UserNotFound
from bookshop.views import CartView
from protean import current_domain
from protean.exceptions import InvalidDataError, ValidationError


@pytest.fixture()
def service():
    return CartService()


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def books(make_book):
    return make_book("Dune", 5), make_book("Emma", 1, author="Jane Austen", genre="Classic")


def _cart_of(user_id):
    return current_domain.repository_for(Cart).find_by_user_id(user_id)


class TestAddItemToCart:
    def test_first_add_opens_the_cart(self, service, user, books):
        assert _cart_of(user.id) is None

        view = service.add_item_to_cart(user.id, books[0].id, 2)

        assert isinstance(view, CartView)
        assert view.user_id == user.id
        assert [(i.book_id, i.quantity) for i in view.items] == [(books[0].id, 2)]
        assert _cart_of(user.id).id == view.id

    def test_adding_the_same_book_merges(self, service, user, books):
        service.add_item_to_cart(user.id, books[0].id, 2)
        view = service.add_item_to_cart(user.id, books[0].id, 3)

        assert len(view.items) == 1
        assert view.items[0].quantity == 5

    def test_second_book_reuses_the_cart(self, service, user, books):
        first = service.add_item_to_cart(user.id, books[0].id, 1)
        second = service.add_item_to_cart(user.id, books[1].id, 1)

        assert first.id == second.id
        assert len(second.items) == 2

    def test_unknown_book(self, service, user):
        with pytest.raises(BookNotFound):
            service.add_item_to_cart(user.id, "no-such-book", 1)
        assert _cart_of(user.id) is None

    def test_unknown_user(self, service, books):
        with pytest.raises(UserNotFound):
            service.add_item_to_cart("no-such-user", books[0].id, 1)

    def test_zero_quantity_is_rejected(self, service, user, books):
        with pytest.raises((ValidationError, InvalidDataError)):
            service.add_item_to_cart(user.id, books[0].id, 0)

    def test_command_can_be_processed_directly(self, user, books):
        cart_id = current_domain.process(
            AddItemToCart(user_id=user.id, book_id=books[0].id, quantity=1),
            asynchronous=False,
        )
        cart = current_domain.repository_for(Cart).get(cart_id)
        assert cart.items[0].quantity == 1

    def test_concurrent_first_adds_share_one_cart(self, service, user, books):
        errors = []

        def add():
            try:
                with bookshop.domain_context():
                    service.add_item_to_cart(user.id, books[0].id, 1)
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=add) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        carts = [c for c in current_domain.repository_for(Cart).find_all() if c.user_id == user.id]
        assert len(carts) == 1
        assert carts[0].items[0].quantity == 8


class TestRemoveItemFromCart:
    def test_remove_item(self, service, user, books):
        view = service.add_item_to_cart(user.id, books[0].id, 1)
        view = service.add_item_to_cart(user.id, books[1].id, 1)
        item_id = view.items[0].id

        view = service.remove_item_from_cart(user.id, item_id)

        assert item_id not in [i.id for i in view.items]
        assert len(view.items) == 1

    def test_unknown_item(self, service, user, books):
        service.add_item_to_cart(user.id, books[0].id, 1)
        with pytest.raises(CartItemNotFound):
            service.remove_item_from_cart(user.id, "no-such-item")

    def test_item_of_another_user_is_not_found(self, service, user, books, make_user):
        other = make_user(email="other@example.com")
        view = service.add_item_to_cart(other.id, books[0].id, 1)

        with pytest.raises(CartItemNotFound):
            service.remove_item_from_cart(user.id, view.items[0].id)

        assert len(_cart_of(other.id).items) == 1


class TestUpdateCartItemQuantity:
    def test_relative_by_default(self, service, user, books):
        view = service.add_item_to_cart(user.id, books[0].id, 2)
        view = service.update_cart_item_quantity(view.items[0].id, 3)
        assert view.items[0].quantity == 5

    def test_absolute(self, service, user, books):
        view = service.add_item_to_cart(user.id, books[0].id, 2)
        view = service.update_cart_item_quantity(view.items[0].id, 1, QuantityMode.ABSOLUTE)
        assert view.items[0].quantity == 1

    def test_returns_the_whole_cart(self, service, user, books):
        service.add_item_to_cart(user.id, books[0].id, 2)
        view = service.add_item_to_cart(user.id, books[1].id, 1)
        item_id = next(i.id for i in view.items if i.book_id == books[1].id)

        view = service.update_cart_item_quantity(item_id, 1)

        assert len(view.items) == 2

    def test_resulting_quantity_below_one(self, service, user, books):
        view = service.add_item_to_cart(user.id, books[0].id, 2)
        with pytest.raises(InvalidQuantity):
            service.update_cart_item_quantity(view.items[0].id, -5)
        assert _cart_of(user.id).items[0].quantity == 2

    def test_ownership_is_checked_when_user_given(self, service, user, books, make_user):
        other = make_user(email="other@example.com")
        view = service.add_item_to_cart(other.id, books[0].id, 2)

        with pytest.raises(CartItemNotFound):
            service.update_cart_item_quantity(view.items[0].id, 1, user_id=user.id)

    def test_unknown_item(self, service):
        with pytest.raises(CartItemNotFound):
            service.update_cart_item_quantity("no-such-item", 1)
