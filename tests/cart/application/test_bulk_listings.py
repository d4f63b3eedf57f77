"""Application tests for listings and lookups past the repository's default page size."""

import pytest
from bookshop.cart.cart import QuantityMode
from bookshop.cart.service import CartService
from bookshop.catalogue.service import CatalogueService
from bookshop.identity.service import UserService

MANY = 120


@pytest.fixture()
def users(roles):
    service = UserService()
    return service.add_new_users(
        [{"email": f"reader{n}@example.com", "password": "secret-pw"} for n in range(MANY)]
    )


@pytest.fixture()
def book(make_book):
    return make_book(quantity=MANY * 2)


class TestManyUsers:
    def test_count_includes_every_user(self, users):
        assert UserService().get_total_user_count() == MANY

    def test_listing_includes_every_user(self, users):
        assert len(UserService().get_all_users()) == MANY

    def test_delete_all_leaves_none(self, users):
        service = UserService()
        service.delete_all_users()
        assert all(not service.users.exists_by_email(user.email) for user in users)


class TestManyCarts:
    def test_every_owner_can_update_their_item(self, users, book):
        carts = CartService()
        created = [carts.add_item_to_cart(user.id, book.id, 1) for user in users]

        for user, cart in zip(users, created):
            updated = carts.update_cart_item_quantity(cart.items[0].id, 1, user_id=user.id)
            assert updated.items[0].quantity == 2

    def test_item_lookup_without_owner(self, users, book):
        carts = CartService()
        last = [carts.add_item_to_cart(user.id, book.id, 1) for user in users][-1]

        updated = carts.update_cart_item_quantity(last.items[0].id, 3, mode=QuantityMode.ABSOLUTE)
        assert updated.id == last.id
        assert updated.items[0].quantity == 3

    def test_listing_includes_every_cart(self, users, book):
        carts = CartService()
        for user in users:
            carts.add_item_to_cart(user.id, book.id, 1)

        assert len(carts.get_all_carts()) == MANY


def test_catalogue_lists_every_book(roles):
    catalogue = CatalogueService()
    for n in range(MANY):
        catalogue.add_book(f"Volume {n}", "Anon", "Reference", 1)

    assert len(catalogue.get_all_books()) == MANY
