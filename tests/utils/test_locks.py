"""Tests for the named lock registry."""

import threading

import pytest
from bookshop.errors import InternalError, LockTimeout
from bookshop.utils import locks
from bookshop.utils.locks import book_key, locked, user_key


def test_keys_are_namespaced():
    assert user_key("42") == "user:42"
    assert book_key("42") == "book:42"


def test_locks_are_reentrant():
    with locked(user_key("u1")):
        with locked(user_key("u1"), book_key("b1")):
            pass


def test_no_keys_is_a_no_op():
    with locked():
        pass


def test_wait_times_out_while_another_thread_holds_the_lock():
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locked(book_key("contended")):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(LockTimeout) as exc_info:
            with locked(book_key("contended"), timeout=0.05):
                pass
    finally:
        release.set()
        thread.join()

    assert isinstance(exc_info.value, InternalError)
    assert exc_info.value.context["keys"] == ["book:contended"]


def test_partially_acquired_locks_are_released_on_timeout():
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locked(user_key("busy")):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        # "book:free" sorts first and is taken before the wait on "user:busy" fails
        with pytest.raises(LockTimeout):
            with locked(book_key("free"), user_key("busy"), timeout=0.05):
                pass
    finally:
        release.set()
        thread.join()

    acquired = []

    def other():
        with locked(book_key("free"), timeout=0.5):
            acquired.append(True)

    follower = threading.Thread(target=other)
    follower.start()
    follower.join()
    assert acquired == [True]
    assert locks._registry == {}


class TestRegistryEviction:
    def test_registry_is_empty_after_exit(self):
        with locked(user_key("u-evict"), book_key("b-evict")):
            assert set(locks._registry) == {"user:u-evict", "book:b-evict"}
        assert locks._registry == {}

    def test_nested_hold_keeps_the_entry_until_outer_exit(self):
        with locked(user_key("u-nested")):
            with locked(user_key("u-nested")):
                pass
            assert "user:u-nested" in locks._registry
        assert locks._registry == {}

    def test_registry_is_empty_after_an_error_in_the_block(self):
        with pytest.raises(RuntimeError):
            with locked(book_key("b-error")):
                raise RuntimeError("boom")
        assert locks._registry == {}

    def test_many_distinct_keys_do_not_accumulate(self):
        for n in range(500):
            with locked(book_key(f"b-{n}")):
                pass
        assert locks._registry == {}

    def test_waiter_shares_the_holder_lock(self):
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locked(book_key("shared")):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(5)
        try:
            with pytest.raises(LockTimeout):
                with locked(book_key("shared"), timeout=0.05):
                    pass
            # The holder still owns its entry after the waiter gave up
            assert "book:shared" in locks._registry
        finally:
            release.set()
            thread.join()

        assert locks._registry == {}
