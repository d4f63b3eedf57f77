import os
import tempfile
from pathlib import Path

import pytest

# Must be set before any bookshop module is imported
os.environ.setdefault("BOOKSHOP_BCRYPT_ROUNDS", "4")
os.environ.setdefault("BOOKSHOP_LOG_DIR", str(Path(tempfile.gettempdir()) / "bookshop-test-logs"))


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _bookshop_domain(request):
    """Initialize the bookshop domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from bookshop.domain import bookshop

    bookshop.init()
    return bookshop


@pytest.fixture(scope="session", autouse=True)
def setup_db(_bookshop_domain):
    from bookshop.utils.db import drop_db, setup_db

    setup_db(_bookshop_domain)

    yield

    drop_db(_bookshop_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_bookshop_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _bookshop_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def roles(_bookshop_domain):
    """Register the USER and ADMIN roles every new account is resolved against."""
    from bookshop.identity.service import UserService

    return UserService().seed_default_roles()


@pytest.fixture()
def make_user(roles):
    from bookshop.identity.service import UserService

    def _make(email="reader@example.com", password="secret-pw", **kwargs):
        return UserService().add_new_user(email=email, password=password, **kwargs)

    return _make


@pytest.fixture()
def make_book():
    from bookshop.catalogue.service import CatalogueService

    def _make(title="Dune", quantity=5, author="Frank Herbert", genre="Science Fiction"):
        return CatalogueService().add_book(title, author, genre, quantity)

    return _make
